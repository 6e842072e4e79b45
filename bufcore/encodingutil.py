"""Strict JSON and YAML decoding into a known set of fields."""

from __future__ import annotations

import json
from typing import Any, Collection

import yaml

from bufcore.errs import UserError


def _check_fields(value: Any, fields: Collection[str], kind: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{kind}: cannot unmarshal {type(value).__name__} into an object")
    for key in value:
        if key not in fields:
            raise ValueError(f'{kind}: unknown field "{key}"')
    return dict(value)


def _to_text(data: bytes | str) -> str:
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("utf-8")
    return data


def unmarshal_json_strict(data: bytes | str, fields: Collection[str]) -> dict:
    """Decode the first JSON value in data as an object with only the given keys.

    Returns an empty dict if data is empty. Raises UserError on failure.
    """
    if not data:
        return {}
    try:
        text = _to_text(data)
        value, _ = json.JSONDecoder().raw_decode(text.lstrip())
        return _check_fields(value, fields, "json")
    except (ValueError, UnicodeDecodeError) as err:
        raise UserError(f"could not unmarshal as JSON: {err}") from err


def unmarshal_yaml_strict(data: bytes | str, fields: Collection[str]) -> dict:
    """Decode the first YAML document in data as a mapping with only the given keys.

    Returns an empty dict if data is empty. Raises UserError on failure.
    """
    if not data:
        return {}
    try:
        documents = yaml.safe_load_all(_to_text(data))
        try:
            value = next(documents)
        except StopIteration:
            raise ValueError("EOF") from None
        return _check_fields(value, fields, "yaml")
    except (yaml.YAMLError, ValueError, UnicodeDecodeError) as err:
        raise UserError(f"could not unmarshal as YAML: {err}") from err


def unmarshal_json_or_yaml_strict(data: bytes | str, fields: Collection[str]) -> dict:
    """Decode data as JSON, falling back to YAML.

    Raises a UserError holding both messages if neither works.
    """
    if not data:
        return {}
    try:
        return unmarshal_json_strict(data, fields)
    except UserError as json_err:
        try:
            return unmarshal_yaml_strict(data, fields)
        except UserError as yaml_err:
            raise UserError(f"{json_err}\n{yaml_err}") from yaml_err


def get_json_string_or_string_value(raw: Any) -> str:
    """Return a config value as a string.

    Bytes are taken as raw JSON text: a JSON string yields its contents and
    anything else the text itself. A str is returned as is, None as "", and
    any other decoded value as compact JSON.
    """
    if raw is None:
        return ""
    if isinstance(raw, (bytes, bytearray)):
        if not raw:
            return ""
        text = bytes(raw).decode("utf-8", errors="replace")
        try:
            value = json.loads(text)
        except ValueError:
            return text
        return value if isinstance(value, str) else text
    if isinstance(raw, str):
        return raw
    return json.dumps(raw, separators=(",", ":"))