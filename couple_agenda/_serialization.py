"""Document key and timestamp conversion for stored agenda records."""

from __future__ import annotations

import re
from datetime import date, datetime, timezone, tzinfo
from typing import Any

from dateutil.parser import parse as dtparse

_CAMEL_TO_SNAKE = re.compile(r"(?<=[a-z0-9])([A-Z])")
_SNAKE_TO_CAMEL = re.compile(r"_([a-z])")


def _to_snake(name: str) -> str:
    return _CAMEL_TO_SNAKE.sub(r"_\1", name).lower()


def _to_camel(name: str) -> str:
    return _SNAKE_TO_CAMEL.sub(lambda m: m.group(1).upper(), name)


def decamelize(data: Any) -> Any:
    """Recursively convert all dict keys from camelCase to snake_case."""
    if isinstance(data, dict):
        return {_to_snake(k): decamelize(v) for k, v in data.items()}
    if isinstance(data, list):
        return [decamelize(item) for item in data]
    return data


def camelize(data: Any) -> Any:
    """Recursively convert all dict keys from snake_case to camelCase."""
    if isinstance(data, dict):
        return {_to_camel(k): camelize(v) for k, v in data.items()}
    if isinstance(data, list):
        return [camelize(item) for item in data]
    return data


def to_datetime(value: Any, tz: tzinfo) -> datetime:
    """Convert a stored instant to an aware datetime in ``tz``.

    Accepts Unix milliseconds, ISO-8601 strings, ``datetime`` and ``date``.
    Naive values are read as wall-clock time in ``tz``.

    Raises:
        ValueError: If the value cannot be interpreted as an instant.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc).astimezone(tz)
    if isinstance(value, str):
        value = dtparse(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=tz)
        return value.astimezone(tz)
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time(), tzinfo=tz)
    raise ValueError(f"Not a timestamp: {value!r}")


def to_date(value: Any, tz: tzinfo) -> date:
    """Convert a stored instant or calendar date to a local calendar date."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    return to_datetime(value, tz).date()


def to_timestamp(value: datetime) -> int:
    """Convert an aware datetime to Unix milliseconds."""
    return int(value.timestamp() * 1000)
