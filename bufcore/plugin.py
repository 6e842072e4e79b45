"""Running code generator plugins: read a request from stdin, write a response to stdout."""

from __future__ import annotations

import sys
from typing import IO, Any, Callable, Iterable, Iterator, Optional

from google.protobuf.compiler import plugin_pb2

from bufcore.cli import RunEnv, new_os_run_env, set_run_env_defaults
from bufcore.errs import is_user_error

Handler = Callable[
    [IO[str], plugin_pb2.CodeGeneratorRequest],
    Optional[Iterable[plugin_pb2.CodeGeneratorResponse.File]],
]


def _flatten(err: BaseException) -> Iterator[BaseException]:
    """Yield the leaf errors of err, descending into anything with an exceptions list."""
    inner = getattr(err, "exceptions", None)
    if isinstance(inner, (list, tuple)):
        for child in inner:
            yield from _flatten(child)
    else:
        yield err


def _binary(stream: Any) -> Any:
    return getattr(stream, "buffer", stream)


def _read_all(stream: Any) -> bytes:
    data = _binary(stream).read()
    if isinstance(data, str):
        data = data.encode("utf-8")
    return bytes(data)


def _run_handler(handler: Handler, run_env: RunEnv) -> None:
    """Run the handler; anything raised from here is a system error."""
    request = plugin_pb2.CodeGeneratorRequest.FromString(_read_all(run_env.stdin))
    response = plugin_pb2.CodeGeneratorResponse()
    try:
        files = handler(run_env.stderr, request)
    except Exception as err:
        errors = list(_flatten(err))
        if any(not is_user_error(e) for e in errors):
            raise
        messages = [str(e).strip() for e in errors]
        messages = [message for message in messages if message]
        if messages:
            response.error = "\n".join(messages)
    else:
        response.file.extend(files or [])
    _binary(run_env.stdout).write(response.SerializeToString())


def run(handler: Handler, run_env: RunEnv) -> int:
    """Run the plugin handler and return the exit code.

    User errors raised by the handler go into the response's error field;
    any other error is printed to stderr and gives exit code 1. Unset
    fields of run_env are filled with defaults.
    """
    set_run_env_defaults(run_env)
    try:
        _run_handler(handler, run_env)
    except Exception as err:
        message = str(err)
        if message:
            run_env.stderr.write(message + "\n")
        return 1
    return 0


def main(handler: Handler) -> None:
    """Run the handler against this process's streams and exit with its code."""
    sys.exit(run(handler, new_os_run_env()))