import io

from bufcore.analysis import (
    Annotation,
    annotations_to_user_error,
    new_annotation,
    new_annotation_no_location,
    normalize_annotations,
    print_annotations,
    sort_annotations,
)
from bufcore.errs import UserError

PACKAGE_MESSAGE = (
    'Files with package "other" must be within a directory "other" '
    'relative to root but were in directory "buf".'
)


def _package_annotation():
    return Annotation(
        filename="buf/buf.proto",
        start_line=3,
        start_column=1,
        end_line=3,
        end_column=15,
        type="PACKAGE_DIRECTORY_MATCH",
        message=PACKAGE_MESSAGE,
    )


def test_str_of_full_annotation():
    assert str(_package_annotation()) == "buf/buf.proto:3:1:" + PACKAGE_MESSAGE


def test_str_defaults():
    assert str(Annotation()) == "<input>:1:1:failure"


def test_str_falls_back_to_type():
    text = str(Annotation(filename="a.proto", start_line=2, type="FIELD_LOWER_SNAKE_CASE"))
    assert text.split(":") == ["a.proto", "2", "1", "FIELD_LOWER_SNAKE_CASE"]


def test_print_annotations_json_matches_expected_line():
    buffer = io.StringIO()
    print_annotations(buffer, [_package_annotation()], True)
    expected = (
        '{"filename":"buf/buf.proto","start_line":3,"start_column":1,"end_line":3,'
        '"end_column":15,"type":"PACKAGE_DIRECTORY_MATCH","message":"Files with package '
        '\\"other\\" must be within a directory \\"other\\" relative to root but were in '
        'directory \\"buf\\"."}\n'
    )
    assert buffer.getvalue() == expected


def test_print_annotations_text_one_line_each():
    first = _package_annotation()
    second = Annotation(filename="buf/buf.proto", start_line=6, start_column=9, message="m")
    buffer = io.StringIO()
    print_annotations(buffer, [first, second], False)
    assert buffer.getvalue().splitlines() == [str(first), str(second)]


def test_print_annotations_empty_writes_nothing():
    buffer = io.StringIO()
    print_annotations(buffer, [], True)
    assert buffer.getvalue() == ""


def test_json_escapes_html_characters():
    buffer = io.StringIO()
    print_annotations(buffer, [Annotation(message="<a>")], True)
    assert "\\u003c" in buffer.getvalue()
    assert "<" not in buffer.getvalue()


def test_to_dict_omits_empty_fields():
    assert Annotation(filename="x.proto", type="T").to_dict() == {"filename": "x.proto", "type": "T"}


def test_sort_orders_by_keys_and_puts_none_first():
    a = Annotation(filename="b.proto", start_line=1)
    b = Annotation(filename="a.proto", start_line=5)
    c = Annotation(filename="a.proto", start_line=2, start_column=3)
    d = Annotation(filename="a.proto", start_line=2, start_column=1, type="Z")
    e = Annotation(filename="a.proto", start_line=2, start_column=1, type="A")
    annotations = [a, None, b, c, d, e]
    sort_annotations(annotations)
    assert annotations == [None, e, d, c, b, a]


def test_sort_is_stable_for_equal_keys():
    first = Annotation(filename="a.proto")
    second = Annotation(filename="a.proto")
    annotations = [first, second]
    sort_annotations(annotations)
    assert annotations[0] is first
    assert annotations[1] is second


def test_sort_uses_end_line_last():
    low = Annotation(filename="a", end_line=1, end_column=9)
    high = Annotation(filename="a", end_line=2, end_column=0)
    annotations = [high, low]
    sort_annotations(annotations)
    assert annotations == [low, high]


def test_annotations_to_user_error_none_when_empty():
    assert annotations_to_user_error([], False) is None


def test_annotations_to_user_error_holds_lines():
    first = _package_annotation()
    second = Annotation(filename="buf/buf.proto", start_line=6, start_column=9, message="m")
    err = annotations_to_user_error([first, second], False)
    assert isinstance(err, UserError)
    assert str(err) == str(first) + "\n" + str(second)


def test_new_annotation_sets_location():
    annotation = new_annotation("f.proto", 1, 2, 3, 4, "T")
    assert annotation == Annotation("f.proto", 1, 2, 3, 4, "T", "")


def test_new_annotation_no_location():
    annotation = new_annotation_no_location("f.proto", "T")
    assert annotation == Annotation(filename="f.proto", type="T")


def test_normalize_annotations_drops_message():
    normalized = normalize_annotations([_package_annotation()])
    expected = _package_annotation()
    expected.message = ""
    assert normalized == [expected]


def test_normalize_annotations_none():
    assert normalize_annotations(None) is None