"""Constants for the couple agenda package."""

from typing import Final

__version__ = "0.1.0"

# Upper bound on occurrences generated inside one query window.
MAX_OCCURRENCES: Final = 365

DEFAULT_LOCALE: Final = "en"
DEFAULT_TIMEZONE: Final = "UTC"
DEFAULT_WEEK_START: Final = 0  # Sunday

SUPPORTED_LOCALES: Final = ("en", "fr")

# Weekday numbering used in stored rules: 0 = Sunday .. 6 = Saturday.
SUNDAY: Final = 0
SATURDAY: Final = 6

DAY_NAMES: Final = {
    "en": ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"),
    "fr": ("Dim", "Lun", "Mar", "Mer", "Jeu", "Ven", "Sam"),
}

CONF_MAX_OCCURRENCES: Final = "max_occurrences"
CONF_LOCALE: Final = "locale"
CONF_TIMEZONE: Final = "timezone"
CONF_WEEK_STARTS_ON: Final = "week_starts_on"
