"""Logger construction and timing helpers."""

from __future__ import annotations

import itertools
import json
import logging
import time
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import IO, Any, Iterator

from bufcore.errs import UserError

_ROOT_NAME = "bufcore.log"
_counter = itertools.count()

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "": logging.INFO,
}

_FORMATS = {"text", "color", "json", ""}

_LEVEL_NAMES = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "FATAL",
}

_LEVEL_COLORS = {
    logging.DEBUG: 35,
    logging.INFO: 34,
    logging.WARNING: 33,
    logging.ERROR: 31,
    logging.CRITICAL: 31,
}


def _format_time(created: float) -> str:
    moment = datetime.fromtimestamp(created).astimezone()
    millis = moment.microsecond // 1000
    return f"{moment.strftime('%Y-%m-%dT%H:%M:%S')}.{millis:03d}{moment.strftime('%z')}"


def _format_duration(duration: timedelta) -> str:
    nanos = round(duration.total_seconds() * 1e9)
    magnitude = abs(nanos)
    if nanos == 0:
        return "0s"
    if magnitude < 1_000:
        return f"{nanos}ns"
    if magnitude < 1_000_000:
        return f"{nanos / 1e3:g}µs"
    if magnitude < 1_000_000_000:
        return f"{nanos / 1e6:g}ms"
    return f"{nanos / 1e9:g}s"


class _Formatter(logging.Formatter):
    def __init__(self, mode: str, root_name: str) -> None:
        super().__init__()
        self._mode = mode
        self._root_name = root_name

    def _display_name(self, name: str) -> str:
        if name == self._root_name:
            return ""
        prefix = self._root_name + "."
        if name.startswith(prefix):
            return name[len(prefix):]
        return name

    def _fields(self, record: logging.LogRecord) -> dict:
        fields = getattr(record, "fields", None) or {}
        as_json = self._mode == "json"
        converted = {}
        for key, value in fields.items():
            if isinstance(value, timedelta):
                value = value.total_seconds() if as_json else _format_duration(value)
            converted[key] = value
        return converted

    def format(self, record: logging.LogRecord) -> str:
        timestamp = _format_time(record.created)
        level = _LEVEL_NAMES.get(record.levelno, record.levelname)
        name = self._display_name(record.name)
        message = record.getMessage()
        fields = self._fields(record)
        if self._mode == "json":
            obj: dict[str, Any] = {"level": level.lower(), "time": timestamp}
            if name:
                obj["logger"] = name
            obj["message"] = message
            obj.update(fields)
            text = json.dumps(obj, default=str)
        else:
            if self._mode == "color":
                color = _LEVEL_COLORS.get(record.levelno, 0)
                level = f"\x1b[{color}m{level}\x1b[0m"
            parts = [timestamp, level]
            if name:
                parts.append(name)
            parts.append(message)
            if fields:
                parts.append(json.dumps(fields, default=str))
            text = "\t".join(parts)
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text


def new_logger(stderr: IO[str], level: str, log_format: str) -> logging.Logger:
    """Return a logger writing to stderr.

    level is one of debug, info, warn, error (default info); log_format is
    one of text, color, json (default color). Raises UserError otherwise.
    """
    level = (level or "").strip().lower()
    log_format = (log_format or "").strip().lower()
    if level not in _LEVELS:
        raise UserError(f'unknown log level [debug,info,warn,error]: "{level}"')
    if log_format not in _FORMATS:
        raise UserError(f'unknown log format [text,color,json]: "{log_format}"')
    mode = log_format or "color"

    name = f"{_ROOT_NAME}.{next(_counter)}"
    logger = logging.getLogger(name)
    logger.handlers.clear()
    logger.setLevel(_LEVELS[level])
    logger.propagate = False
    handler = logging.StreamHandler(stderr)
    handler.setFormatter(_Formatter(mode, name))
    logger.addHandler(handler)
    return logger


@contextmanager
def timed(logger: logging.Logger, name: str, **kwargs: Any) -> Iterator[None]:
    """Log name at debug level with the elapsed duration when the block ends.

    If the block raises, the error is logged as well and re-raised.
    """
    start = time.monotonic()
    try:
        yield
    except BaseException as err:
        fields = dict(kwargs)
        fields["duration"] = timedelta(seconds=time.monotonic() - start)
        fields["error"] = str(err)
        logger.debug(name, extra={"fields": fields})
        raise
    fields = dict(kwargs)
    fields["duration"] = timedelta(seconds=time.monotonic() - start)
    logger.debug(name, extra={"fields": fields})