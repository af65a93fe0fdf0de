"""Settings for the agenda store."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import voluptuous as vol

from .const import (
    CONF_LOCALE,
    CONF_MAX_OCCURRENCES,
    CONF_TIMEZONE,
    CONF_WEEK_STARTS_ON,
    DEFAULT_LOCALE,
    DEFAULT_TIMEZONE,
    DEFAULT_WEEK_START,
    MAX_OCCURRENCES,
    SATURDAY,
    SUNDAY,
    SUPPORTED_LOCALES,
)
from .exceptions import ConfigurationError


def _timezone_name(value: Any) -> str:
    """Voluptuous validator accepting IANA zone names."""
    name = str(value)
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as err:
        raise vol.Invalid(f"Unknown timezone: {name}") from err
    return name


SETTINGS_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_MAX_OCCURRENCES, default=MAX_OCCURRENCES): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
        vol.Optional(CONF_LOCALE, default=DEFAULT_LOCALE): vol.In(SUPPORTED_LOCALES),
        vol.Optional(CONF_TIMEZONE, default=DEFAULT_TIMEZONE): _timezone_name,
        vol.Optional(CONF_WEEK_STARTS_ON, default=DEFAULT_WEEK_START): vol.All(
            vol.Coerce(int), vol.Range(min=SUNDAY, max=SATURDAY)
        ),
    }
)


@dataclass(frozen=True)
class AgendaSettings:
    """Settings shared by every query on an ``AgendaStore``."""

    max_occurrences: int = MAX_OCCURRENCES
    locale: str = DEFAULT_LOCALE
    timezone: str = DEFAULT_TIMEZONE
    week_starts_on: int = DEFAULT_WEEK_START

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None = None) -> AgendaSettings:
        """Validate a settings mapping and fill in defaults.

        Raises:
            ConfigurationError: If a value is out of range or unknown.
        """
        try:
            validated = SETTINGS_SCHEMA(dict(data or {}))
        except vol.Invalid as err:
            raise ConfigurationError(f"Invalid agenda settings: {err}") from err
        return cls(**validated)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)
