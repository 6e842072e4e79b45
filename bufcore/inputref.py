"""Input reference parsing: a path plus options selecting a source or image format."""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from enum import Enum

from bufcore.errs import UserError
from bufcore.osutil import dev_null

_MAX_UINT32 = 0xFFFFFFFF
_DIGITS = re.compile(r"[0-9]+")


class Format(Enum):
    """The format of an input."""

    DIR = 1
    TAR = 2
    TAR_GZ = 3
    GIT = 4
    BIN = 5
    BIN_GZ = 6
    JSON = 7
    JSON_GZ = 8

    def __str__(self) -> str:
        return self.name.lower().replace("_", "")

    def is_source(self) -> bool:
        """Return True if this is a source format."""
        return self in _SOURCE_FORMATS

    def is_image(self) -> bool:
        """Return True if this is an image format. Images are always files."""
        return self in _IMAGE_FORMATS

    def is_file(self) -> bool:
        """Return True if this format is read from or written to a single file."""
        return self in _FILE_FORMATS


_SOURCE_FORMATS = frozenset({Format.DIR, Format.TAR, Format.TAR_GZ, Format.GIT})
_IMAGE_FORMATS = frozenset({Format.BIN, Format.BIN_GZ, Format.JSON, Format.JSON_GZ})
_FILE_FORMATS = frozenset(
    {Format.TAR, Format.TAR_GZ, Format.BIN, Format.BIN_GZ, Format.JSON, Format.JSON_GZ}
)
_STRING_TO_FORMAT = {str(fmt): fmt for fmt in Format}


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def _formats_to_string(formats) -> str:
    values = sorted(str(fmt) for fmt in formats)
    if not values:
        return ""
    return "[" + ",".join(values) + "]"


def all_formats_to_string() -> str:
    """Return all format names, sorted, as "[a,b,...]"."""
    return _formats_to_string(Format)


def source_formats_to_string() -> str:
    """Return the source format names, sorted, as "[a,b,...]"."""
    return _formats_to_string(_SOURCE_FORMATS)


def image_formats_to_string() -> str:
    """Return the image format names, sorted, as "[a,b,...]"."""
    return _formats_to_string(_IMAGE_FORMATS)


def _file_formats_to_string() -> str:
    return _formats_to_string(_FILE_FORMATS)


def parse_format_override(value_flag_name: str, format_override: str) -> Format:
    """Parse a format name, case-insensitively; raise UserError if unknown."""
    fmt = _STRING_TO_FORMAT.get(format_override.strip().lower())
    if fmt is None:
        raise UserError(f"{value_flag_name}: unknown format: {_quote(format_override)}")
    return fmt


def _ext(path: str) -> str:
    base = path
    for sep in {"/", os.sep}:
        base = base.rsplit(sep, 1)[-1]
    index = base.rfind(".")
    return base[index:] if index >= 0 else ""


@dataclass
class InputRef:
    """A parsed input reference.

    path "-" means stdin or stdout and only goes with file formats.
    git_branch is only set for GIT; strip_components only for TAR and TAR_GZ.
    """

    format: Format
    path: str
    git_branch: str = ""
    strip_components: int = 0


class InputRefParser:
    """Parses input references of the form path#key=value,key=value."""

    def __init__(self, value_flag_name: str) -> None:
        self.value_flag_name = value_flag_name

    def parse_input_ref(self, value: str, only_sources: bool, only_images: bool) -> InputRef:
        """Parse value into an InputRef.

        Raises ValueError if only_sources and only_images are both set, and
        UserError for any invalid value.
        """
        flag = self.value_flag_name
        if only_sources and only_images:
            raise ValueError("onlySources and onlyImages both set")
        value = value.strip()
        if not value:
            raise UserError(f"{flag} is required")

        split_value = value.split("#")
        options = ""
        if len(split_value) == 1:
            path = value
        elif len(split_value) == 2:
            path = split_value[0].strip()
            options = split_value[1].strip()
            if not path:
                raise UserError(f"{flag}: {_quote(value)} starts with # which is invalid")
            if not options:
                raise UserError(f"{flag}: {_quote(value)} ends with # which is invalid")
        else:
            raise UserError(f"{flag}: {_quote(value)} has multiple #s which is invalid")

        fmt, git_branch, strip_components = self._apply_options(path, options)
        if fmt is None:
            fmt = self._parse_format_from_path(path)

        if fmt is Format.GIT and not git_branch:
            raise UserError(
                f'{flag}: must specify git branch (example: "{value}#branch=master")'
            )
        if fmt is not Format.GIT and git_branch:
            raise self._options_invalid_for_format(fmt, options)
        if fmt not in (Format.TAR, Format.TAR_GZ) and strip_components > 0:
            raise self._options_invalid_for_format(fmt, options)

        if only_sources and not fmt.is_source():
            raise UserError(
                f"format was {_quote(str(fmt))} but must be a source format "
                f"(allowed formats are {source_formats_to_string()})"
            )
        if only_images and not fmt.is_image():
            raise UserError(
                f"format was {_quote(str(fmt))} but must be a image format "
                f"(allowed formats are {image_formats_to_string()})"
            )
        if path == "-" and not fmt.is_file():
            raise UserError(
                f'{flag}: path was "-" but format was {_quote(str(fmt))} which is not a '
                f"file format (allowed formats are {_file_formats_to_string()})"
            )
        return InputRef(
            format=fmt,
            path=path,
            git_branch=git_branch,
            strip_components=strip_components,
        )

    def _options_invalid_for_format(self, fmt: Format, options: str) -> UserError:
        return UserError(
            f"{self.value_flag_name}: invalid options for format "
            f"{_quote(str(fmt))}: {_quote(options)}"
        )

    def _parse_format_from_path(self, path: str) -> Format:
        if path in ("-", dev_null()):
            return Format.BIN
        ext = _ext(path)
        if ext == ".gz":
            inner = _ext(path[: -len(ext)])
            gz_formats = {".bin": Format.BIN_GZ, ".json": Format.JSON_GZ, ".tar": Format.TAR_GZ}
            if inner not in gz_formats:
                raise UserError(
                    f"{self.value_flag_name}: path {_quote(path)} had .gz extension "
                    "with unknown format"
                )
            return gz_formats[inner]
        return {
            ".bin": Format.BIN,
            ".json": Format.JSON,
            ".tar": Format.TAR,
            ".tgz": Format.TAR_GZ,
            ".git": Format.GIT,
        }.get(ext, Format.DIR)

    def _apply_options(self, path: str, options: str) -> tuple[Format | None, str, int]:
        flag = self.value_flag_name
        fmt: Format | None = None
        git_branch = ""
        strip_components = 0
        if not options:
            return fmt, git_branch, strip_components
        for pair in options.split(","):
            split = pair.split("=")
            if len(split) != 2:
                raise UserError(f"{flag}: invalid options: {_quote(options)}")
            key = split[0].strip()
            option_value = split[1].strip()
            if not key or not option_value:
                raise UserError(f"{flag}: invalid options: {_quote(options)}")
            if key == "format":
                null_path = dev_null()
                if path == null_path:
                    raise UserError(f"{flag}: not allowed if path is {null_path}")
                fmt = parse_format_override(flag, option_value)
            elif key == "branch":
                git_branch = option_value
            elif key == "strip_components":
                if not _DIGITS.fullmatch(option_value) or int(option_value) > _MAX_UINT32:
                    raise UserError(
                        f"{flag}: could not parse strip_components value {_quote(option_value)}"
                    )
                strip_components = int(option_value)
            else:
                raise UserError(f"{flag}: invalid options key: {_quote(key)}")
        return fmt, git_branch, strip_components