import io

from google.protobuf.compiler import plugin_pb2

from bufcore.cli import RunEnv
from bufcore.errs import UserError
from bufcore.plugin import run


class _Group(Exception):
    def __init__(self, exceptions):
        super().__init__("group")
        self.exceptions = exceptions


def _run(handler, data):
    stdin = io.BytesIO(data)
    stdout = io.BytesIO()
    stderr = io.StringIO()
    code = run(handler, RunEnv(stdin=stdin, stdout=stdout, stderr=stderr))
    return code, stdout.getvalue(), stderr.getvalue()


def _request(parameter="", files=()):
    request = plugin_pb2.CodeGeneratorRequest(parameter=parameter)
    request.file_to_generate.extend(files)
    return request.SerializeToString()


def test_files_are_written_to_response():
    def handler(stderr, request):
        return [plugin_pb2.CodeGeneratorResponse.File(name=f + ".out", content="x")
                for f in request.file_to_generate]

    code, out, err = _run(handler, _request(files=["a.proto"]))
    assert code == 0
    response = plugin_pb2.CodeGeneratorResponse.FromString(out)
    assert [f.name for f in response.file] == ["a.proto.out"]
    assert not response.HasField("error")
    assert err == ""


def test_request_is_passed_to_handler():
    seen = []

    def handler(stderr, request):
        seen.append(request.parameter)
        return None

    code, out, _ = _run(handler, _request(parameter="a=b"))
    assert code == 0
    assert seen == ["a=b"]
    assert plugin_pb2.CodeGeneratorResponse.FromString(out).file == []


def test_user_error_goes_into_response():
    def handler(stderr, request):
        raise UserError("  bad lint  ")

    code, out, err = _run(handler, _request())
    assert code == 0
    assert plugin_pb2.CodeGeneratorResponse.FromString(out).error == "bad lint"
    assert err == ""


def test_blank_user_error_leaves_error_unset():
    def handler(stderr, request):
        raise UserError("   ")

    code, out, _ = _run(handler, _request())
    assert code == 0
    assert not plugin_pb2.CodeGeneratorResponse.FromString(out).HasField("error")


def test_multiple_user_errors_are_joined():
    def handler(stderr, request):
        raise _Group([UserError("one "), UserError(""), UserError("two")])

    code, out, _ = _run(handler, _request())
    assert code == 0
    assert plugin_pb2.CodeGeneratorResponse.FromString(out).error == "one\ntwo"


def test_system_error_exits_one():
    def handler(stderr, request):
        raise ValueError("boom")

    code, out, err = _run(handler, _request())
    assert code == 1
    assert out == b""
    assert err == "boom\n"


def test_mixed_errors_are_system_errors():
    def handler(stderr, request):
        raise _Group([UserError("user"), RuntimeError("sys")])

    code, out, err = _run(handler, _request())
    assert code == 1
    assert out == b""
    assert err == "group\n"


def test_invalid_request_exits_one_without_calling_handler():
    calls = []

    def handler(stderr, request):
        calls.append(request)
        return []

    code, out, err = _run(handler, b"\x0a\x05ab")
    assert code == 1
    assert calls == []
    assert out == b""


def test_handler_can_write_to_stderr():
    def handler(stderr, request):
        stderr.write("note\n")
        return []

    code, _, err = _run(handler, _request())
    assert code == 0
    assert err == "note\n"