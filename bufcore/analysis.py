"""Annotations that point at locations within files."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import IO, Iterable, Sequence

from bufcore.errs import UserError

_FIELD_ORDER = (
    "filename",
    "start_line",
    "start_column",
    "end_line",
    "end_column",
    "type",
    "message",
)

_JSON_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


@dataclass
class Annotation:
    """An annotation referencing a location within a file.

    Unknown lines and columns are 0; an unknown filename is empty.
    """

    filename: str = ""
    start_line: int = 0
    start_column: int = 0
    end_line: int = 0
    end_column: int = 0
    type: str = ""
    message: str = ""

    def to_dict(self) -> dict:
        """Return the set fields, in declaration order, omitting empty ones."""
        return {name: getattr(self, name) for name in _FIELD_ORDER if getattr(self, name)}

    def __str__(self) -> str:
        filename = self.filename or "<input>"
        line = self.start_line or 1
        column = self.start_column or 1
        message = self.message or self.type or "failure"
        return f"{filename}:{line}:{column}:{message}"


def _to_json(annotation: Annotation) -> str:
    text = json.dumps(annotation.to_dict(), ensure_ascii=False, separators=(",", ":"))
    for char, escape in _JSON_ESCAPES.items():
        text = text.replace(char, escape)
    return text


def _sort_key(annotation: Annotation | None) -> tuple:
    if annotation is None:
        return (0,)
    return (
        1,
        annotation.filename,
        annotation.start_line,
        annotation.start_column,
        annotation.type,
        annotation.message,
        annotation.end_line,
        annotation.end_column,
    )


def sort_annotations(annotations: list) -> None:
    """Stably sort annotations in place.

    Order: filename, start line, start column, type, message, end line,
    end column. None entries come first.
    """
    annotations.sort(key=_sort_key)


def print_annotations(writer: IO[str], annotations: Iterable[Annotation], as_json: bool) -> None:
    """Write one line per annotation, as JSON if as_json is set."""
    for annotation in annotations:
        line = _to_json(annotation) if as_json else str(annotation)
        writer.write(line + "\n")


def annotations_to_user_error(
    annotations: Sequence[Annotation], as_json: bool
) -> UserError | None:
    """Return a UserError holding the printed annotations, or None if there are none."""
    if not annotations:
        return None
    lines = [(_to_json(a) if as_json else str(a)) for a in annotations]
    return UserError("\n".join(lines).strip())


def new_annotation_no_location(filename: str, type_: str) -> Annotation:
    """Return an annotation with only a filename and type."""
    return Annotation(filename=filename, type=type_)


def new_annotation(
    filename: str,
    start_line: int,
    start_column: int,
    end_line: int,
    end_column: int,
    type_: str,
) -> Annotation:
    """Return an annotation with a location and type but no message."""
    return Annotation(
        filename=filename,
        start_line=start_line,
        start_column=start_column,
        end_line=end_line,
        end_column=end_column,
        type=type_,
    )


def normalize_annotations(annotations: Sequence[Annotation] | None) -> list | None:
    """Return copies of the annotations with the message removed, for comparison."""
    if annotations is None:
        return None
    return [
        Annotation(
            filename=a.filename,
            start_line=a.start_line,
            start_column=a.start_column,
            end_line=a.end_line,
            end_column=a.end_column,
            type=a.type,
        )
        for a in annotations
    ]