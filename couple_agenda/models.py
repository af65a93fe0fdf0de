"""Data models for agenda events and their recurrence rules."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any, ClassVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import voluptuous as vol

from ._serialization import camelize, decamelize, to_date, to_datetime, to_timestamp
from .const import DEFAULT_TIMEZONE
from .exceptions import InvalidDocumentError


class RecurrenceType(str, enum.Enum):
    """How a recurring event repeats.

    ``custom`` steps by ``interval`` days, like ``daily``.
    """

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"


RULE_SCHEMA = vol.Schema(
    {
        vol.Required("type"): vol.Coerce(RecurrenceType),
        vol.Optional("interval", default=1): vol.Coerce(int),
        vol.Optional("end_date"): vol.Any(None, str, int, float, date),
        vol.Optional("count"): vol.Any(None, vol.Coerce(int)),
        vol.Optional("days_of_week"): vol.Any(None, [vol.Coerce(int)]),
        vol.Optional("day_of_month"): vol.Any(None, vol.Coerce(int)),
        vol.Optional("exceptions"): vol.Any(None, [vol.Any(str, int, float, date)]),
    },
    extra=vol.REMOVE_EXTRA,
)

EVENT_SCHEMA = vol.Schema(
    {
        vol.Required("id"): vol.Coerce(str),
        vol.Optional("title", default=""): vol.Any(None, str),
        vol.Required("start_date"): vol.Any(str, int, float, date),
        vol.Optional("end_date"): vol.Any(None, str, int, float, date),
        vol.Optional("all_day", default=False): bool,
        vol.Optional("recurring"): vol.Any(None, dict),
        vol.Optional("created_by", default=""): vol.Any(None, str),
        vol.Optional("description"): vol.Any(None, str),
        vol.Optional("location"): vol.Any(None, str),
        vol.Optional("type", default="general"): str,
        vol.Optional("color"): vol.Any(None, str),
        vol.Optional("reminder"): vol.Any(None, [str]),
        vol.Optional("timezone"): vol.Any(None, str),
    },
    extra=vol.REMOVE_EXTRA,
)


@dataclass(frozen=True)
class RecurrenceRule:
    """Common part of every recurrence rule.

    Concrete rules are the subclasses below; the subclass is the rule's
    type. Construction never validates, see ``recurrence.validate``.
    """

    type: ClassVar[RecurrenceType]

    interval: int = 1
    end_date: date | None = None
    count: int | None = None
    exceptions: frozenset[date] = field(default_factory=frozenset)

    def with_exception(self, day: date) -> RecurrenceRule:
        """Return a copy that also skips ``day``."""
        if isinstance(day, datetime):
            day = day.date()
        return replace(self, exceptions=self.exceptions | {day})

    @classmethod
    def from_document(cls, data: dict[str, Any], *, tz: tzinfo) -> RecurrenceRule:
        """Construct the matching rule subclass from a stored document.

        Args:
            data: Rule document, camelCase or snake_case keys.
            tz: Timezone used to resolve ``endDate`` and ``exceptions``
                instants to calendar dates.

        Raises:
            InvalidDocumentError: If the document has the wrong shape.
        """
        try:
            parsed = RULE_SCHEMA(decamelize(data))
        except vol.Invalid as err:
            raise InvalidDocumentError(
                f"Invalid recurrence document: {err}", field=_error_path(err)
            ) from err

        rule_cls = RULE_TYPES[parsed["type"]]
        try:
            end_date = (
                to_date(parsed["end_date"], tz)
                if parsed.get("end_date") is not None
                else None
            )
            exceptions = frozenset(
                to_date(value, tz) for value in parsed.get("exceptions") or ()
            )
        except (ValueError, OverflowError) as err:
            raise InvalidDocumentError(
                f"Invalid date in recurrence document: {err}", field="recurring"
            ) from err

        return rule_cls(
            interval=parsed["interval"],
            end_date=end_date,
            count=parsed.get("count"),
            exceptions=exceptions,
            **rule_cls._type_fields(parsed),
        )

    def to_document(self) -> dict[str, Any]:
        """Convert to a camelCase document; dates become ISO strings."""
        data: dict[str, Any] = {"type": self.type.value, "interval": self.interval}
        if self.end_date is not None:
            data["end_date"] = self.end_date.isoformat()
        if self.count is not None:
            data["count"] = self.count
        if self.exceptions:
            data["exceptions"] = [day.isoformat() for day in sorted(self.exceptions)]
        data.update(self._type_document())
        return camelize(data)

    @classmethod
    def _type_fields(cls, parsed: dict[str, Any]) -> dict[str, Any]:
        return {}

    def _type_document(self) -> dict[str, Any]:
        return {}


@dataclass(frozen=True)
class DailyRule(RecurrenceRule):
    """Repeats every ``interval`` days."""

    type = RecurrenceType.DAILY


@dataclass(frozen=True)
class WeeklyRule(RecurrenceRule):
    """Repeats every ``interval`` weeks.

    ``days_of_week`` uses 0 = Sunday .. 6 = Saturday. When empty the
    event repeats on the weekday it started on.
    """

    type = RecurrenceType.WEEKLY

    days_of_week: tuple[int, ...] = ()

    @classmethod
    def _type_fields(cls, parsed: dict[str, Any]) -> dict[str, Any]:
        return {"days_of_week": tuple(parsed.get("days_of_week") or ())}

    def _type_document(self) -> dict[str, Any]:
        if not self.days_of_week:
            return {}
        return {"days_of_week": list(self.days_of_week)}


@dataclass(frozen=True)
class MonthlyRule(RecurrenceRule):
    """Repeats every ``interval`` months.

    With ``day_of_month`` set every occurrence is pinned to that day,
    otherwise to the day the series started on. Both are clamped to the
    last day of shorter months.
    """

    type = RecurrenceType.MONTHLY

    day_of_month: int | None = None

    @classmethod
    def _type_fields(cls, parsed: dict[str, Any]) -> dict[str, Any]:
        return {"day_of_month": parsed.get("day_of_month")}

    def _type_document(self) -> dict[str, Any]:
        if self.day_of_month is None:
            return {}
        return {"day_of_month": self.day_of_month}


@dataclass(frozen=True)
class YearlyRule(RecurrenceRule):
    """Repeats every ``interval`` years on the start's month and day."""

    type = RecurrenceType.YEARLY


@dataclass(frozen=True)
class CustomRule(RecurrenceRule):
    """Repeats every ``interval`` days."""

    type = RecurrenceType.CUSTOM


RULE_TYPES: dict[RecurrenceType, type[RecurrenceRule]] = {
    RecurrenceType.DAILY: DailyRule,
    RecurrenceType.WEEKLY: WeeklyRule,
    RecurrenceType.MONTHLY: MonthlyRule,
    RecurrenceType.YEARLY: YearlyRule,
    RecurrenceType.CUSTOM: CustomRule,
}


@dataclass(frozen=True)
class AgendaEvent:
    """An event as stored in the shared agenda.

    ``start`` and ``end`` are timezone-aware; recurrence arithmetic runs in
    the wall-clock time of ``start.tzinfo``.
    """

    id: str
    title: str
    start: datetime
    end: datetime | None = None
    rule: RecurrenceRule | None = None
    created_by: str = ""
    all_day: bool = False
    description: str | None = None
    location: str | None = None
    event_type: str = "general"
    color: str | None = None
    reminders: tuple[str, ...] = ()

    @property
    def is_recurring(self) -> bool:
        """Whether this event has a recurrence rule."""
        return self.rule is not None

    @property
    def is_multi_day(self) -> bool:
        """Whether the event ends on a later calendar day than it starts."""
        from .recurrence import is_multi_day_event  # noqa: PLC0415

        return is_multi_day_event(self.start, self.end)

    @property
    def duration(self) -> timedelta | None:
        if self.end is None:
            return None
        return self.end - self.start

    @classmethod
    def from_document(
        cls,
        data: dict[str, Any],
        *,
        default_timezone: str = DEFAULT_TIMEZONE,
    ) -> AgendaEvent:
        """Construct from a stored event document.

        Args:
            data: Event document with camelCase keys, as kept by the backend.
            default_timezone: Zone used when the document names none.

        Raises:
            InvalidDocumentError: If the document cannot be decoded.
        """
        try:
            parsed = EVENT_SCHEMA(decamelize(data))
        except vol.Invalid as err:
            raise InvalidDocumentError(
                f"Invalid event document: {err}", field=_error_path(err)
            ) from err

        tz_name = parsed.get("timezone") or default_timezone
        try:
            tz = ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError) as err:
            raise InvalidDocumentError(
                f"Unknown timezone: {tz_name}", field="timezone"
            ) from err

        try:
            start = to_datetime(parsed["start_date"], tz)
        except (ValueError, OverflowError) as err:
            raise InvalidDocumentError(
                f"Invalid start date: {err}", field="start_date"
            ) from err
        end = None
        if parsed.get("end_date") is not None:
            try:
                end = to_datetime(parsed["end_date"], tz)
            except (ValueError, OverflowError) as err:
                raise InvalidDocumentError(
                    f"Invalid end date: {err}", field="end_date"
                ) from err

        rule = None
        if parsed.get("recurring"):
            rule = RecurrenceRule.from_document(parsed["recurring"], tz=tz)

        return cls(
            id=parsed["id"],
            title=parsed.get("title") or "",
            start=start,
            end=end,
            rule=rule,
            created_by=parsed.get("created_by") or "",
            all_day=parsed["all_day"],
            description=parsed.get("description"),
            location=parsed.get("location"),
            event_type=parsed["type"],
            color=parsed.get("color"),
            reminders=tuple(parsed.get("reminder") or ()),
        )

    def to_document(self) -> dict[str, Any]:
        """Convert to a camelCase document with Unix-millisecond instants."""
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "start_date": to_timestamp(self.start),
            "all_day": self.all_day,
            "type": self.event_type,
            "created_by": self.created_by,
            "is_multi_day": self.is_multi_day,
            "timezone": DEFAULT_TIMEZONE,
        }
        # Only IANA keys decode again; fixed offsets keep the default.
        if isinstance(self.start.tzinfo, ZoneInfo):
            data["timezone"] = self.start.tzinfo.key
        if self.end is not None:
            data["end_date"] = to_timestamp(self.end)
        if self.description is not None:
            data["description"] = self.description
        if self.location is not None:
            data["location"] = self.location
        if self.color is not None:
            data["color"] = self.color
        if self.reminders:
            data["reminder"] = list(self.reminders)
        data = camelize(data)
        if self.rule is not None:
            data["recurring"] = self.rule.to_document()
        return data


@dataclass(frozen=True)
class Occurrence:
    """One concrete appearance of an event on the calendar.

    Generated occurrences carry the originating event's id in
    ``recurrence_id``. They are never stored.
    """

    id: str
    event: AgendaEvent
    start: datetime
    end: datetime | None = None
    recurrence_id: str | None = None

    @classmethod
    def of(cls, event: AgendaEvent) -> Occurrence:
        """The event itself, as its own single occurrence."""
        return cls(id=event.id, event=event, start=event.start, end=event.end)

    @property
    def is_generated(self) -> bool:
        return self.recurrence_id is not None

    @property
    def title(self) -> str:
        return self.event.title

    @property
    def is_multi_day(self) -> bool:
        from .recurrence import is_multi_day_event  # noqa: PLC0415

        return is_multi_day_event(self.start, self.end)


@dataclass(frozen=True)
class DateRange:
    """Closed interval ``[start, end]``."""

    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end

    def overlaps(self, start: datetime, end: datetime | None = None) -> bool:
        """Whether ``[start, end]`` shares at least one instant with the range."""
        if end is None or end < start:
            end = start
        return start <= self.end and end >= self.start

    @classmethod
    def day(cls, day: date, tz: tzinfo) -> DateRange:
        """The whole calendar day, midnight to the last microsecond."""
        return cls(
            datetime.combine(day, time.min, tzinfo=tz),
            datetime.combine(day, time.max, tzinfo=tz),
        )

    @classmethod
    def week(cls, day: date, tz: tzinfo, *, week_starts_on: int = 0) -> DateRange:
        """The seven days containing ``day``.

        ``week_starts_on`` uses 0 = Sunday .. 6 = Saturday.
        """
        offset = ((day.weekday() + 1) % 7 - week_starts_on) % 7
        first = day - timedelta(days=offset)
        return cls(
            datetime.combine(first, time.min, tzinfo=tz),
            datetime.combine(first + timedelta(days=6), time.max, tzinfo=tz),
        )

    @classmethod
    def month(cls, year: int, month: int, tz: tzinfo) -> DateRange:
        """The whole calendar month."""
        first = date(year, month, 1)
        following = date(year + month // 12, month % 12 + 1, 1)
        return cls(
            datetime.combine(first, time.min, tzinfo=tz),
            datetime.combine(following - timedelta(days=1), time.max, tzinfo=tz),
        )


def _error_path(err: vol.Invalid) -> str | None:
    """Dotted path of a voluptuous error, if it has one."""
    if not err.path:
        return None
    return ".".join(str(part) for part in err.path)
