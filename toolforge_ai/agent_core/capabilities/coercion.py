"""Coercion of raw (usually textual) context input into typed values.

Raw values arrive as strings from ``name=value`` assignments or as already
structured JSON values. ``coerce`` runs a generic pass over text (JSON,
literals, numbers) and then casts by the declared context data type.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional

_NUMERIC = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")

_FALSE_STRINGS = {"", "0"}


def parse_scalar(raw: str) -> Any:
    """Generic pass for one textual value.

    JSON first, then ``true``/``false``/``null`` (any case), then numbers
    (integer unless a decimal point is present), otherwise the trimmed text.
    """
    trimmed = raw.strip()
    try:
        return json.loads(trimmed)
    except ValueError:
        pass

    lower = trimmed.lower()
    if lower == "true":
        return True
    if lower == "false":
        return False
    if lower == "null":
        return None
    if _NUMERIC.match(trimmed):
        if "." in trimmed or "e" in lower:
            return float(trimmed)
        return int(trimmed)
    return trimmed


def _to_bool(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def _to_int(value: Any) -> Any:
    if isinstance(value, (list, dict)) or value is None:
        return value
    try:
        if isinstance(value, str):
            return int(float(value)) if "." in value else int(value)
        return int(value)
    except (TypeError, ValueError):
        return value


def _to_float(value: Any) -> Any:
    if isinstance(value, (list, dict)) or value is None:
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return value


def _to_list(value: Any) -> Any:
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


def cast_by_data_type(value: Any, data_type: str, *, raw_text: Optional[str] = None) -> Any:
    """Authoritative cast of an already parsed value by a context data type hint.

    ``raw_text`` is the trimmed input text when the raw input was a string;
    ``string`` contexts keep that text when it parsed to a number or boolean.
    """
    data_type = data_type.lower()

    if data_type.startswith("bool"):
        return _to_bool(value)
    if data_type.startswith("int"):
        return _to_int(value)
    if data_type.startswith("float") or data_type == "decimal":
        return _to_float(value)
    if data_type == "list":
        return _to_list(value)
    if data_type.startswith("string"):
        if isinstance(value, (int, float)) and raw_text is not None:
            return raw_text
    return value


def coerce(raw_value: Any, data_type: Optional[str] = None) -> Any:
    """Coerce a raw context value to align with the declared data type.

    Non-textual values skip the generic pass: a list that is already
    structured is never stringified or split again.
    """
    raw_text: Optional[str] = None
    value = raw_value
    if isinstance(raw_value, str):
        raw_text = raw_value.strip()
        value = parse_scalar(raw_value)

    if data_type:
        value = cast_by_data_type(value, data_type, raw_text=raw_text)
    return value
