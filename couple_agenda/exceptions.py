"""Exception hierarchy for the couple agenda package."""

from __future__ import annotations


class AgendaError(Exception):
    """Base exception for all agenda errors."""


class InvalidDocumentError(AgendaError):
    """A stored document could not be decoded into an event or rule.

    Attributes:
        field: Dotted path of the offending field, if known.
    """

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class InvalidRecurrenceError(AgendaError):
    """A recurrence rule was refused.

    Attributes:
        errors: Human-readable problems reported by ``validate()``.
    """

    def __init__(self, errors: list[str], message: str | None = None) -> None:
        super().__init__(message or "; ".join(errors) or "Invalid recurrence")
        self.errors = list(errors)


class EventNotFoundError(AgendaError):
    """No event with the requested id exists in the store."""

    def __init__(self, event_id: str) -> None:
        super().__init__(f"Unknown event: {event_id}")
        self.event_id = event_id


class ConfigurationError(AgendaError):
    """Agenda settings were rejected."""
