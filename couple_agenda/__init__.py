"""Shared agenda for couples: events, recurrence rules and occurrence expansion."""

from .const import MAX_OCCURRENCES, __version__
from .agenda import AgendaStore, marked_days
from .config import AgendaSettings
from .exceptions import (
    AgendaError,
    ConfigurationError,
    EventNotFoundError,
    InvalidDocumentError,
    InvalidRecurrenceError,
)
from .models import (
    AgendaEvent,
    CustomRule,
    DailyRule,
    DateRange,
    MonthlyRule,
    Occurrence,
    RecurrenceRule,
    RecurrenceType,
    WeeklyRule,
    YearlyRule,
)
from .recurrence import (
    default_rule,
    describe,
    expand,
    generate_multi_day_span,
    is_multi_day_event,
    is_same_day,
    next_occurrence,
    validate,
)

__all__ = [
    "__version__",
    "MAX_OCCURRENCES",
    "AgendaStore",
    "AgendaSettings",
    "marked_days",
    "AgendaError",
    "ConfigurationError",
    "EventNotFoundError",
    "InvalidDocumentError",
    "InvalidRecurrenceError",
    "AgendaEvent",
    "CustomRule",
    "DailyRule",
    "DateRange",
    "MonthlyRule",
    "Occurrence",
    "RecurrenceRule",
    "RecurrenceType",
    "WeeklyRule",
    "YearlyRule",
    "default_rule",
    "describe",
    "expand",
    "generate_multi_day_span",
    "is_multi_day_event",
    "is_same_day",
    "next_occurrence",
    "validate",
]
