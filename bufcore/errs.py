"""Errors that should be shown to the user rather than reported as system failures."""

from __future__ import annotations


class UserError(Exception):
    """An error caused by user input or configuration, not by a system fault."""

    def __init__(self, value: str = "") -> None:
        super().__init__(value)
        self.value = value

    def __str__(self) -> str:
        return self.value


def is_user_error(err: BaseException | None) -> bool:
    """Return True if err is a user error."""
    if err is None:
        return False
    return isinstance(err, UserError)