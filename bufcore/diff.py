"""Unified diffs of two byte strings using the system diff tool."""

from __future__ import annotations

import os
import subprocess
import tempfile


def _write_temp_file(data: bytes) -> str:
    fd, path = tempfile.mkstemp()
    try:
        with os.fdopen(fd, "wb") as file:
            file.write(data)
    except BaseException:
        os.remove(path)
        raise
    return path


def diff(b1: bytes, b2: bytes, filename: str) -> bytes:
    """Return the unified diff of b1 and b2 labelled with filename.

    Returns b"" if the inputs are equal.
    """
    f1 = _write_temp_file(b1)
    try:
        f2 = _write_temp_file(b2)
        try:
            result = subprocess.run(
                ["diff", "-u", f1, f2],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                check=False,
            )
        finally:
            os.remove(f2)
    finally:
        os.remove(f1)
    if result.stdout:
        # diff exits non-zero when the files differ; output is what matters.
        return replace_temp_filename(result.stdout, filename)
    if result.returncode != 0:
        raise subprocess.CalledProcessError(result.returncode, result.args, result.stdout)
    return b""


def replace_temp_filename(diff_data: bytes, filename: str) -> bytes:
    """Replace the temporary file names in the diff header, keeping timestamps."""
    parts = diff_data.split(b"\n", 2)
    if len(parts) < 3:
        raise ValueError(f"got unexpected diff for {filename}")
    t0 = b""
    t1 = b""
    index = parts[0].rfind(b"\t")
    if index != -1:
        t0 = parts[0][index:]
    index = parts[1].rfind(b"\t")
    if index != -1:
        t1 = parts[1][index:]
    name = filename.replace(os.sep, "/").encode()
    parts[0] = b"--- " + name + b".orig" + t0
    parts[1] = b"+++ " + name + t1
    return b"\n".join(parts)