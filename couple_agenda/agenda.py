"""In-memory agenda of a couple's events and the occurrence queries over it."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Any

from .config import AgendaSettings
from .exceptions import (
    AgendaError,
    EventNotFoundError,
    InvalidDocumentError,
    InvalidRecurrenceError,
)
from .models import AgendaEvent, DateRange, Occurrence
from .recurrence import describe, expand, generate_multi_day_span, validate

_LOGGER = logging.getLogger(__name__)


class AgendaStore:
    """Holds a couple's events and materializes the occurrences to display.

    Stores a dict of event_id -> AgendaEvent. Backend snapshots are merged
    with ``apply_documents``; local edits go through ``add_event``,
    ``update_event``, ``remove_event`` and ``delete_occurrence``, which
    refuse rules that ``validate`` reports problems for.
    """

    def __init__(self, settings: AgendaSettings | None = None) -> None:
        self._settings = settings or AgendaSettings()
        self._events: dict[str, AgendaEvent] = {}

    @property
    def settings(self) -> AgendaSettings:
        return self._settings

    def __len__(self) -> int:
        return len(self._events)

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._events

    def get(self, event_id: str) -> AgendaEvent:
        """Return the stored event with ``event_id``.

        Raises:
            EventNotFoundError: If no such event is stored.
        """
        try:
            return self._events[event_id]
        except KeyError:
            raise EventNotFoundError(event_id) from None

    # ------------------------------------------------------------------ #
    #  Sync
    # ------------------------------------------------------------------ #

    def apply_documents(self, documents: Iterable[dict[str, Any]]) -> int:
        """Merge a batch of backend documents into the store.

        Documents flagged ``deleted`` remove their event; all others insert
        or replace one. Documents that cannot be decoded are logged and
        skipped so one bad record does not hide the rest of the agenda.

        Returns:
            Number of events inserted, replaced or removed.
        """
        changed = 0
        for document in documents:
            if document.get("deleted"):
                if self._events.pop(str(document.get("id")), None) is not None:
                    changed += 1
                continue

            try:
                event = AgendaEvent.from_document(
                    document, default_timezone=self._settings.timezone
                )
            except InvalidDocumentError:
                _LOGGER.warning(
                    "Skipping undecodable event document %s",
                    document.get("id"),
                    exc_info=True,
                )
                continue

            if event.rule is not None:
                errors = validate(event.rule)
                if errors:
                    _LOGGER.debug(
                        "Event %s has an invalid recurrence: %s", event.id, errors
                    )
            self._events[event.id] = event
            changed += 1

        _LOGGER.debug("Merged %d event changes, %d events stored", changed, len(self))
        return changed

    # ------------------------------------------------------------------ #
    #  Edits
    # ------------------------------------------------------------------ #

    def add_event(self, event: AgendaEvent) -> AgendaEvent:
        """Insert a new event.

        Raises:
            InvalidRecurrenceError: If the event's rule is invalid.
            AgendaError: If an event with the same id already exists.
        """
        self._check_rule(event)
        if event.id in self._events:
            raise AgendaError(f"Event already exists: {event.id}")
        self._events[event.id] = event
        return event

    def update_event(self, event: AgendaEvent) -> AgendaEvent:
        """Replace a stored event.

        Raises:
            EventNotFoundError: If no event has ``event.id``.
            InvalidRecurrenceError: If the event's rule is invalid.
        """
        self.get(event.id)
        self._check_rule(event)
        self._events[event.id] = event
        return event

    def remove_event(self, event_id: str) -> AgendaEvent:
        """Remove an event and every one of its occurrences."""
        event = self.get(event_id)
        del self._events[event_id]
        return event

    def delete_occurrence(self, event_id: str, day: date) -> AgendaEvent:
        """Skip a single occurrence of a recurring event.

        The day is added to the rule's exceptions; the rest of the series
        is unchanged. An aware ``datetime`` is read in the event's timezone.

        Raises:
            EventNotFoundError: If no event has ``event_id``.
            InvalidRecurrenceError: If the event does not recur.
        """
        event = self.get(event_id)
        if event.rule is None:
            raise InvalidRecurrenceError([f"Event {event_id} does not recur"])
        if (
            isinstance(day, datetime)
            and day.tzinfo is not None
            and event.start.tzinfo is not None
        ):
            day = day.astimezone(event.start.tzinfo)
        updated = replace(event, rule=event.rule.with_exception(day))
        self._events[event_id] = updated
        return updated

    def describe_recurrence(self, event_id: str) -> str | None:
        """Phrase for the event's rule in the configured locale."""
        event = self.get(event_id)
        if event.rule is None:
            return None
        return describe(event.rule, self._settings.locale)

    @staticmethod
    def _check_rule(event: AgendaEvent) -> None:
        if event.rule is None:
            return
        errors = validate(event.rule)
        if errors:
            raise InvalidRecurrenceError(errors)

    # ------------------------------------------------------------------ #
    #  Queries
    # ------------------------------------------------------------------ #

    def get_events(
        self,
        start: datetime,
        end: datetime,
        *,
        include_recurring: bool = True,
    ) -> list[Occurrence]:
        """Return the occurrences visible between ``start`` and ``end``.

        Non-recurring events are kept when they overlap the window.
        Recurring events are expanded, never pre-filtered by their base
        start date, and their occurrences are kept on the same overlap
        test, so a multi-day occurrence that began before the window shows
        up too. With ``include_recurring=False`` a recurring event only
        contributes its base record, and only when that overlaps.
        """
        window = DateRange(start, end)
        occurrences: list[Occurrence] = []

        for event in self._events.values():
            try:
                if event.is_recurring and include_recurring:
                    # Occurrences starting up to one duration early still run into the window.
                    lookback = max(event.duration or timedelta(0), timedelta(0))
                    occurrences.extend(
                        occ
                        for occ in expand(
                            event,
                            start - lookback,
                            end,
                            max_occurrences=self._settings.max_occurrences,
                        )
                        if window.overlaps(occ.start, occ.end)
                    )
                elif window.overlaps(event.start, event.end):
                    occurrences.append(Occurrence.of(event))
            except (TypeError, ValueError, OverflowError):
                _LOGGER.warning(
                    "Failed to process event %s (%s)",
                    event.id,
                    event.title,
                    exc_info=True,
                )

        occurrences.sort(key=lambda occ: occ.start)
        return occurrences

    def get_day_events(self, day: date) -> list[Occurrence]:
        """Occurrences on one calendar day."""
        window = DateRange.day(day, self._settings.tz)
        return self.get_events(window.start, window.end)

    def get_week_events(self, day: date) -> list[Occurrence]:
        """Occurrences in the week containing ``day``."""
        window = DateRange.week(
            day, self._settings.tz, week_starts_on=self._settings.week_starts_on
        )
        return self.get_events(window.start, window.end)

    def get_month_events(self, year: int, month: int) -> list[Occurrence]:
        """Occurrences in one calendar month."""
        window = DateRange.month(year, month, self._settings.tz)
        return self.get_events(window.start, window.end)


def marked_days(occurrences: Iterable[Occurrence]) -> dict[date, list[Occurrence]]:
    """Group occurrences by every calendar day they touch.

    Multi-day occurrences appear under each day of their span, in the
    order the occurrences were given.
    """
    marked: dict[date, list[Occurrence]] = {}
    for occ in occurrences:
        if occ.is_multi_day:
            days = [d.date() for d in generate_multi_day_span(occ.start, occ.end)]
        else:
            days = [occ.start.date()]
        for day in days:
            marked.setdefault(day, []).append(occ)
    return marked
