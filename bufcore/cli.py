"""Runtime and execution environments for command-line programs."""

from __future__ import annotations

import io
import os
import sys
import time
from dataclasses import dataclass, field
from typing import IO, Any

from bufcore.errs import UserError
from bufcore.osutil import _DiscardWriter


@dataclass
class RunEnv:
    """The runtime environment: arguments without the program name, streams, environ."""

    args: list[str] | None = None
    stdin: IO | None = None
    stdout: IO | None = None
    stderr: IO | None = None
    environ: list[str] | None = None


@dataclass
class ExecEnv:
    """The environment handed to a command.

    args exclude the program and command names; env maps KEY to value, with
    "" for variables given as KEY=; start is the start time in epoch seconds.
    """

    args: list[str] = field(default_factory=list)
    stdin: Any = None
    stdout: Any = None
    stderr: Any = None
    env: dict[str, str] = field(default_factory=dict)
    start: float = field(default_factory=time.time)


def set_run_env_defaults(run_env: RunEnv) -> RunEnv:
    """Fill unset fields with empty arguments, an empty stdin and discarding outputs."""
    if run_env.args is None:
        run_env.args = []
    if run_env.stdin is None:
        run_env.stdin = io.BytesIO(b"")
    if run_env.stdout is None:
        run_env.stdout = _DiscardWriter()
    if run_env.stderr is None:
        run_env.stderr = _DiscardWriter()
    if run_env.environ is None:
        run_env.environ = []
    return run_env


def new_os_run_env() -> RunEnv:
    """Return the RunEnv of this process; stdin is binary, stdout and stderr are text."""
    return RunEnv(
        args=sys.argv[1:],
        stdin=getattr(sys.stdin, "buffer", sys.stdin),
        stdout=sys.stdout,
        stderr=sys.stderr,
        environ=[f"{key}={value}" for key, value in os.environ.items()],
    )


def environ_to_env(environ: list[str]) -> dict[str, str]:
    """Turn KEY=VALUE entries into a dict; raises ValueError for entries without "="."""
    env: dict[str, str] = {}
    for elem in environ:
        if "=" not in elem:
            raise ValueError("environment variable does not contain =")
        key, value = elem.split("=", 1)
        env[key] = value
    return env


def new_exec_env(
    args: list[str],
    stdin: Any,
    stdout: Any,
    stderr: Any,
    environ: list[str],
    start: float,
) -> ExecEnv:
    """Return an ExecEnv; args should not include the program name."""
    return ExecEnv(
        args=list(args),
        stdin=stdin,
        stdout=stdout,
        stderr=stderr,
        env=environ_to_env(environ),
        start=start,
    )


def is_format_json(flag_name: str, value: str) -> bool:
    """Return True for "json", False for "text" or "", else raise UserError."""
    s = (value or "").lower().strip()
    if s in ("text", ""):
        return False
    if s == "json":
        return True
    raise UserError(f'--{flag_name}: unknown format: "{s}"')