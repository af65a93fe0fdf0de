"""Tests for event/rule document decoding and the value types."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from couple_agenda import (
    AgendaEvent,
    DailyRule,
    DateRange,
    InvalidDocumentError,
    MonthlyRule,
    Occurrence,
    RecurrenceRule,
    RecurrenceType,
    WeeklyRule,
    YearlyRule,
)
from couple_agenda._serialization import camelize, decamelize, to_date, to_datetime

UTC = ZoneInfo("UTC")
BERLIN = ZoneInfo("Europe/Berlin")

# 2024-01-01T09:00:00Z
MONDAY_9_UTC_MS = 1704099600000
# 2024-01-04T23:30:00Z, already Jan 5 in Berlin
THURSDAY_LATE_UTC_MS = 1704411000000


def _event_document(**overrides) -> dict:
    doc = {
        "id": "evt_1",
        "title": "Date night",
        "startDate": MONDAY_9_UTC_MS,
        "endDate": MONDAY_9_UTC_MS + 2 * 3600 * 1000,
        "allDay": False,
        "createdBy": "user_a",
        "type": "date",
        "timezone": "Europe/Berlin",
        "reminder": ["15min"],
        "isMultiDay": False,
        "createdAt": MONDAY_9_UTC_MS,
    }
    doc.update(overrides)
    return doc


# =========================================================================== #
#  1. Key and timestamp conversion
# =========================================================================== #


class TestSerialization:
    def test_decamelize_nested(self):
        assert decamelize({"startDate": 1, "recurring": {"daysOfWeek": [1]}}) == {
            "start_date": 1,
            "recurring": {"days_of_week": [1]},
        }

    def test_camelize_nested(self):
        assert camelize({"day_of_month": 3, "items": [{"end_date": None}]}) == {
            "dayOfMonth": 3,
            "items": [{"endDate": None}],
        }

    def test_milliseconds_to_local_time(self):
        assert to_datetime(MONDAY_9_UTC_MS, BERLIN) == datetime(2024, 1, 1, 10, 0, tzinfo=BERLIN)

    def test_naive_iso_string_read_in_zone(self):
        result = to_datetime("2024-01-01T10:00:00", BERLIN)
        assert result.tzinfo is BERLIN
        assert result.hour == 10

    def test_aware_iso_string_converted(self):
        assert to_datetime("2024-01-01T09:00:00Z", BERLIN).hour == 10

    def test_to_date_uses_zone(self):
        assert to_date(THURSDAY_LATE_UTC_MS, BERLIN) == date(2024, 1, 5)
        assert to_date(THURSDAY_LATE_UTC_MS, UTC) == date(2024, 1, 4)

    def test_rejects_garbage(self):
        with pytest.raises(ValueError):
            to_datetime(True, UTC)


# =========================================================================== #
#  2. RecurrenceRule documents
# =========================================================================== #


class TestRecurrenceRuleDocument:
    def test_subclass_per_type(self):
        for rule_type, rule_cls in [
            ("daily", DailyRule),
            ("weekly", WeeklyRule),
            ("monthly", MonthlyRule),
            ("yearly", YearlyRule),
        ]:
            rule = RecurrenceRule.from_document({"type": rule_type}, tz=UTC)
            assert type(rule) is rule_cls
            assert rule.type is RecurrenceType(rule_type)
            assert rule.interval == 1

    def test_weekly_fields(self):
        rule = RecurrenceRule.from_document(
            {
                "type": "weekly",
                "interval": 2,
                "daysOfWeek": [1, 5],
                "endDate": "2024-06-30",
                "exceptions": ["2024-01-05", THURSDAY_LATE_UTC_MS],
            },
            tz=BERLIN,
        )
        assert rule == WeeklyRule(
            interval=2,
            days_of_week=(1, 5),
            end_date=date(2024, 6, 30),
            exceptions=frozenset({date(2024, 1, 5)}),
        )

    def test_type_specific_fields_ignored_elsewhere(self):
        rule = RecurrenceRule.from_document(
            {"type": "daily", "daysOfWeek": [1], "dayOfMonth": 4}, tz=UTC
        )
        assert rule == DailyRule()

    def test_monthly_day_of_month(self):
        rule = RecurrenceRule.from_document({"type": "monthly", "dayOfMonth": "15"}, tz=UTC)
        assert rule == MonthlyRule(day_of_month=15)

    def test_out_of_range_values_still_decode(self):
        rule = RecurrenceRule.from_document({"type": "weekly", "daysOfWeek": [7]}, tz=UTC)
        assert rule.days_of_week == (7,)

    def test_unknown_type(self):
        with pytest.raises(InvalidDocumentError) as exc_info:
            RecurrenceRule.from_document({"type": "hourly"}, tz=UTC)
        assert exc_info.value.field == "type"

    def test_bad_exception_date(self):
        with pytest.raises(InvalidDocumentError):
            RecurrenceRule.from_document({"type": "daily", "exceptions": ["soon"]}, tz=UTC)

    def test_round_trip(self):
        rule = MonthlyRule(
            interval=3,
            day_of_month=31,
            count=4,
            exceptions=frozenset({date(2024, 3, 31), date(2024, 1, 31)}),
        )
        doc = rule.to_document()
        assert doc == {
            "type": "monthly",
            "interval": 3,
            "count": 4,
            "exceptions": ["2024-01-31", "2024-03-31"],
            "dayOfMonth": 31,
        }
        assert RecurrenceRule.from_document(doc, tz=UTC) == rule

    def test_with_exception(self):
        rule = DailyRule()
        updated = rule.with_exception(datetime(2024, 1, 3, 19, 0, tzinfo=UTC))
        assert updated.exceptions == frozenset({date(2024, 1, 3)})
        assert rule.exceptions == frozenset()

    def test_rules_of_different_types_differ(self):
        assert DailyRule() != WeeklyRule()


# =========================================================================== #
#  3. AgendaEvent documents
# =========================================================================== #


class TestAgendaEventDocument:
    def test_basic_event(self):
        ev = AgendaEvent.from_document(_event_document())
        assert ev.id == "evt_1"
        assert ev.title == "Date night"
        assert ev.start == datetime(2024, 1, 1, 10, 0, tzinfo=BERLIN)
        assert ev.end == datetime(2024, 1, 1, 12, 0, tzinfo=BERLIN)
        assert ev.created_by == "user_a"
        assert ev.event_type == "date"
        assert ev.reminders == ("15min",)
        assert ev.rule is None
        assert not ev.is_recurring
        assert not ev.is_multi_day

    def test_recurring_event(self):
        ev = AgendaEvent.from_document(
            _event_document(
                recurring={"type": "weekly", "daysOfWeek": [1, 5], "exceptions": [THURSDAY_LATE_UTC_MS]}
            )
        )
        assert ev.is_recurring
        assert ev.rule == WeeklyRule(
            days_of_week=(1, 5), exceptions=frozenset({date(2024, 1, 5)})
        )

    def test_default_timezone(self):
        doc = _event_document()
        del doc["timezone"]
        ev = AgendaEvent.from_document(doc, default_timezone="America/New_York")
        assert ev.start.hour == 4

    def test_numeric_id_coerced(self):
        assert AgendaEvent.from_document(_event_document(id=42)).id == "42"

    def test_missing_start(self):
        doc = _event_document()
        del doc["startDate"]
        with pytest.raises(InvalidDocumentError) as exc_info:
            AgendaEvent.from_document(doc)
        assert exc_info.value.field == "start_date"

    def test_unparseable_start(self):
        with pytest.raises(InvalidDocumentError) as exc_info:
            AgendaEvent.from_document(_event_document(startDate="garbage"))
        assert exc_info.value.field == "start_date"

    def test_unknown_timezone(self):
        with pytest.raises(InvalidDocumentError) as exc_info:
            AgendaEvent.from_document(_event_document(timezone="Mars/Olympus"))
        assert exc_info.value.field == "timezone"

    def test_invalid_rule_document(self):
        with pytest.raises(InvalidDocumentError):
            AgendaEvent.from_document(_event_document(recurring={"interval": 2}))

    def test_round_trip(self):
        ev = AgendaEvent.from_document(
            _event_document(
                description="Table for two",
                location="Le Petit Bistro",
                color="#ff6b9d",
                recurring={"type": "monthly", "dayOfMonth": 14, "endDate": "2024-12-31"},
            )
        )
        doc = ev.to_document()
        assert doc["startDate"] == MONDAY_9_UTC_MS
        assert doc["timezone"] == "Europe/Berlin"
        assert doc["isMultiDay"] is False
        assert doc["recurring"]["dayOfMonth"] == 14
        assert AgendaEvent.from_document(doc) == ev

    def test_round_trip_fixed_offset(self):
        ev = AgendaEvent(
            id="evt_2",
            title="Breakfast",
            start=datetime(2024, 1, 1, 9, 0, tzinfo=timezone(timedelta(hours=2))),
        )
        doc = ev.to_document()
        assert doc["timezone"] == "UTC"
        decoded = AgendaEvent.from_document(doc)
        assert decoded.start == ev.start
        assert decoded.start == datetime(2024, 1, 1, 7, 0, tzinfo=UTC)

    def test_multi_day_flag_in_document(self):
        ev = AgendaEvent(
            id="trip",
            title="Weekend away",
            start=datetime(2024, 1, 5, 18, 0, tzinfo=UTC),
            end=datetime(2024, 1, 7, 20, 0, tzinfo=UTC),
        )
        assert ev.is_multi_day
        assert ev.to_document()["isMultiDay"] is True


# =========================================================================== #
#  4. Occurrence / DateRange
# =========================================================================== #


class TestOccurrence:
    def test_of_event(self):
        ev = AgendaEvent(
            id="evt_1",
            title="Movie",
            start=datetime(2024, 1, 1, 20, 0, tzinfo=UTC),
            end=datetime(2024, 1, 1, 22, 0, tzinfo=UTC),
        )
        occ = Occurrence.of(ev)
        assert occ.id == "evt_1"
        assert occ.title == "Movie"
        assert occ.start == ev.start
        assert occ.end == ev.end
        assert occ.recurrence_id is None
        assert not occ.is_generated
        assert not occ.is_multi_day


class TestDateRange:
    def test_contains_is_closed(self):
        window = DateRange(datetime(2024, 1, 1, tzinfo=UTC), datetime(2024, 1, 2, tzinfo=UTC))
        assert window.contains(datetime(2024, 1, 1, tzinfo=UTC))
        assert window.contains(datetime(2024, 1, 2, tzinfo=UTC))
        assert not window.contains(datetime(2024, 1, 2, 0, 1, tzinfo=UTC))

    def test_overlaps(self):
        window = DateRange.day(date(2024, 1, 2), UTC)
        assert window.overlaps(
            datetime(2024, 1, 1, 22, 0, tzinfo=UTC), datetime(2024, 1, 2, 1, 0, tzinfo=UTC)
        )
        assert window.overlaps(datetime(2024, 1, 2, 12, 0, tzinfo=UTC))
        assert not window.overlaps(
            datetime(2024, 1, 1, 10, 0, tzinfo=UTC), datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
        )

    def test_day(self):
        window = DateRange.day(date(2024, 1, 2), BERLIN)
        assert window.start == datetime(2024, 1, 2, 0, 0, tzinfo=BERLIN)
        assert window.end == datetime.combine(date(2024, 1, 2), time.max, tzinfo=BERLIN)

    def test_week_starts_sunday(self):
        window = DateRange.week(date(2024, 1, 3), UTC)
        assert window.start == datetime(2023, 12, 31, tzinfo=UTC)
        assert window.end.date() == date(2024, 1, 6)

    def test_week_starting_monday(self):
        window = DateRange.week(date(2024, 1, 7), UTC, week_starts_on=1)
        assert window.start.date() == date(2024, 1, 1)
        assert window.end.date() == date(2024, 1, 7)

    def test_month(self):
        window = DateRange.month(2024, 2, UTC)
        assert window.start.date() == date(2024, 2, 1)
        assert window.end.date() == date(2024, 2, 29)

    def test_december(self):
        window = DateRange.month(2024, 12, UTC)
        assert window.end.date() == date(2024, 12, 31)
