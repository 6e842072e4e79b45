"""Parsing of config overrides given as a file path or inline data."""

from __future__ import annotations

from typing import Any, Protocol

from bufcore.errs import UserError


class ConfigProvider(Protocol):
    """Something that builds a config from raw JSON or YAML data."""

    def get_config_for_data(self, data: bytes) -> Any:
        ...


def _ext(path: str) -> str:
    base = path.replace("\\", "/").rsplit("/", 1)[-1]
    index = base.rfind(".")
    return base[index:] if index >= 0 else ""


class ConfigOverrideParser:
    """Turns a config override value into a config via a provider."""

    def __init__(self, config_provider: ConfigProvider, config_override_flag_name: str) -> None:
        self.config_provider = config_provider
        self.config_override_flag_name = config_override_flag_name

    def parse_config_override(self, value: str) -> Any:
        """Return the config for value.

        Values ending in .json or .yaml are read as files; anything else is
        taken as the data itself. Raises ValueError if value is blank and
        UserError if the file cannot be read or the data cannot be parsed.
        """
        flag = self.config_override_flag_name
        value = value.strip()
        if not value:
            raise ValueError("config override value is empty")
        if _ext(value) in (".json", ".yaml"):
            try:
                with open(value, "rb") as file:
                    data = file.read()
            except OSError as err:
                raise UserError(f"{flag}: could not read file: {err}") from err
        else:
            data = value.encode("utf-8")
        try:
            return self.config_provider.get_config_for_data(data)
        except Exception as err:
            raise UserError(f"{flag}: {err}") from err