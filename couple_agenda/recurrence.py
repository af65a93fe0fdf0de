"""Recurring event expansion and calendar-day helpers.

Every function here is pure: no I/O, no shared state, no logging. Date
arithmetic is done on wall-clock time in the tzinfo of the values passed
in, so an event at 09:00 stays at 09:00 across DST changes.
"""

from __future__ import annotations

from calendar import monthrange
from datetime import date, datetime, time, timedelta

from dateutil.relativedelta import relativedelta

from .const import DAY_NAMES, DEFAULT_LOCALE, MAX_OCCURRENCES, SATURDAY, SUNDAY
from .models import (
    RULE_TYPES,
    AgendaEvent,
    MonthlyRule,
    Occurrence,
    RecurrenceRule,
    RecurrenceType,
    WeeklyRule,
    YearlyRule,
)

_PHRASES: dict[str, dict[str, tuple[str, str]]] = {
    "en": {
        "daily": ("Every day", "Every {n} days"),
        "weekly": ("Every week", "Every {n} weeks"),
        "weekly_days": ("Every {days}", "Every {n} weeks on {days}"),
        "monthly": ("Every month", "Every {n} months"),
        "monthly_day": ("Monthly on the {day}", "Every {n} months on the {day}"),
        "yearly": ("Every year", "Every {n} years"),
    },
    "fr": {
        "daily": ("Tous les jours", "Tous les {n} jours"),
        "weekly": ("Chaque semaine", "Toutes les {n} semaines"),
        "weekly_days": ("Chaque {days}", "Toutes les {n} semaines le {days}"),
        "monthly": ("Chaque mois", "Tous les {n} mois"),
        "monthly_day": ("Le {day} de chaque mois", "Le {day} tous les {n} mois"),
        "yearly": ("Chaque année", "Tous les {n} ans"),
    },
}


# --------------------------------------------------------------------------- #
#  Calendar-day helpers
# --------------------------------------------------------------------------- #


def weekday_number(value: date) -> int:
    """Return the weekday of ``value`` with Sunday as 0 and Saturday as 6."""
    return value.isoweekday() % 7


def is_same_day(a: date, b: date) -> bool:
    """Whether ``a`` and ``b`` fall on the same calendar day.

    Works for ``date`` and ``datetime`` alike; time of day is ignored and
    each value is read in its own timezone.
    """
    return (a.year, a.month, a.day) == (b.year, b.month, b.day)


def is_multi_day_event(start: date, end: date | None = None) -> bool:
    """Whether ``end`` falls on a later calendar day than ``start``."""
    if end is None:
        return False
    return (end.year, end.month, end.day) > (start.year, start.month, start.day)


def generate_multi_day_span(start: date, end: date) -> list[datetime]:
    """List every calendar day from ``start`` through ``end`` at midnight.

    The days keep the tzinfo of ``start``. An ``end`` on an earlier day
    than ``start`` yields an empty list.
    """
    current = _midnight(start)
    last = date(end.year, end.month, end.day)
    days: list[datetime] = []
    while current.date() <= last:
        days.append(current)
        current += timedelta(days=1)
    return days


def _midnight(value: date) -> datetime:
    if isinstance(value, datetime):
        return value.replace(hour=0, minute=0, second=0, microsecond=0)
    return datetime.combine(value, time.min)


def _days_in_month(year: int, month: int) -> int:
    return monthrange(year, month)[1]


# --------------------------------------------------------------------------- #
#  Stepping
# --------------------------------------------------------------------------- #


def next_occurrence(
    current: datetime,
    rule: RecurrenceRule,
    *,
    anchor: date | None = None,
) -> datetime:
    """Return the occurrence that follows ``current``, ignoring exceptions.

    Args:
        current: Start of an occurrence of the series.
        rule: The series' recurrence rule.
        anchor: Start of the series. Monthly and yearly rules re-aim at the
            anchor's day every cycle, so a series started on Jan 31 goes
            Feb 28, Mar 31, Apr 30. Without an anchor the day of ``current``
            is used.
    """
    if isinstance(rule, WeeklyRule):
        return _next_weekly(current, rule)
    if isinstance(rule, MonthlyRule):
        return _next_monthly(current, rule, anchor)
    if isinstance(rule, YearlyRule):
        return _next_yearly(current, rule, anchor)
    # daily and custom
    return current + timedelta(days=rule.interval)


def _next_weekly(current: datetime, rule: WeeklyRule) -> datetime:
    days = sorted({d for d in rule.days_of_week if SUNDAY <= d <= SATURDAY})
    if not days:
        return current + timedelta(weeks=rule.interval)

    today = weekday_number(current)
    later = [d for d in days if d > today]
    if later:
        return current + timedelta(days=later[0] - today)
    # Last configured day of this week: jump ``interval`` weeks ahead and
    # land on the earliest configured day of that week.
    return current + timedelta(days=7 * rule.interval + days[0] - today)


def _next_monthly(
    current: datetime, rule: MonthlyRule, anchor: date | None
) -> datetime:
    target = current + relativedelta(months=rule.interval)
    if rule.day_of_month is not None and 1 <= rule.day_of_month <= 31:
        day = rule.day_of_month
    else:
        day = (anchor or current).day
    return target.replace(day=min(day, _days_in_month(target.year, target.month)))


def _next_yearly(current: datetime, rule: YearlyRule, anchor: date | None) -> datetime:
    # relativedelta clamps Feb 29 to Feb 28; the anchor restores it in leap years.
    target = current + relativedelta(years=rule.interval)
    if anchor is None:
        return target
    return target.replace(
        day=min(anchor.day, _days_in_month(target.year, target.month))
    )


# --------------------------------------------------------------------------- #
#  Expansion
# --------------------------------------------------------------------------- #


def expand(
    event: AgendaEvent,
    window_start: datetime,
    window_end: datetime,
    *,
    max_occurrences: int = MAX_OCCURRENCES,
) -> list[Occurrence]:
    """Expand an event into its occurrences within ``[window_start, window_end]``.

    A non-recurring event is returned as its own single occurrence whatever
    the window; filtering those is up to the caller.

    For a recurring event the series is walked from ``event.start``, so
    ``count`` and the weekly/monthly cadence are always measured from the
    series start. Occurrences before the window are stepped over. Inside
    the window at most ``max_occurrences`` occurrences are generated;
    exception days are generated and then dropped, so they count against
    both ``count`` and ``max_occurrences``. The rule is not validated: a
    rule that makes no progress (``interval <= 0``) stops after its first
    occurrence.

    Returns:
        Occurrences in ascending start order, each keeping the base
        event's duration.
    """
    rule = event.rule
    if rule is None:
        return [Occurrence.of(event)]

    duration = event.duration
    anchor = event.start
    lower = max(anchor, window_start)

    occurrences: list[Occurrence] = []
    current = anchor
    position = 0
    generated = 0

    while current <= window_end and generated < max_occurrences:
        if rule.end_date is not None and current.date() > rule.end_date:
            break
        if rule.count is not None and position >= rule.count:
            break

        if current >= lower:
            generated += 1
            if not any(is_same_day(day, current) for day in rule.exceptions):
                occurrences.append(
                    Occurrence(
                        id=f"{event.id}_{current.date().isoformat()}",
                        event=event,
                        start=current,
                        end=current + duration if duration is not None else None,
                        recurrence_id=event.id,
                    )
                )

        following = next_occurrence(current, rule, anchor=anchor)
        if following <= current:
            break
        current = following
        position += 1

    return occurrences


# --------------------------------------------------------------------------- #
#  Rule helpers for edit forms
# --------------------------------------------------------------------------- #


def validate(rule: RecurrenceRule) -> list[str]:
    """Check a rule and return its problems; an empty list means valid."""
    errors: list[str] = []

    if rule.interval <= 0:
        errors.append("Interval must be greater than 0")

    if isinstance(rule, WeeklyRule) and any(
        not SUNDAY <= day <= SATURDAY for day in rule.days_of_week
    ):
        errors.append("Days of the week must be between 0 and 6")

    if (
        isinstance(rule, MonthlyRule)
        and rule.day_of_month is not None
        and not 1 <= rule.day_of_month <= 31
    ):
        errors.append("Day of the month must be between 1 and 31")

    if rule.count is not None and rule.count <= 0:
        errors.append("Number of occurrences must be greater than 0")

    if rule.end_date is not None and rule.count is not None:
        errors.append("An end date and a number of occurrences cannot both be set")

    return errors


def default_rule(
    rule_type: RecurrenceType | str, *, today: date | None = None
) -> RecurrenceRule:
    """Build a minimal valid rule of ``rule_type`` with an interval of 1.

    Weekly rules repeat on today's weekday and monthly rules on today's
    day of the month.
    """
    rule_type = RecurrenceType(rule_type)
    today = today or date.today()
    if rule_type is RecurrenceType.WEEKLY:
        return WeeklyRule(days_of_week=(weekday_number(today),))
    if rule_type is RecurrenceType.MONTHLY:
        return MonthlyRule(day_of_month=today.day)
    return RULE_TYPES[rule_type]()


def describe(rule: RecurrenceRule, locale: str = DEFAULT_LOCALE) -> str:
    """Render a rule as a short phrase, e.g. ``Every 2 weeks on Mon, Wed``.

    Unknown locales fall back to English.
    """
    if locale not in _PHRASES:
        locale = DEFAULT_LOCALE
    phrases = _PHRASES[locale]
    n = rule.interval
    params: dict[str, object] = {"n": n}

    if isinstance(rule, WeeklyRule):
        names = DAY_NAMES[locale]
        days = sorted({d for d in rule.days_of_week if SUNDAY <= d <= SATURDAY})
        if days:
            key = "weekly_days"
            params["days"] = ", ".join(names[d] for d in days)
        else:
            key = "weekly"
    elif isinstance(rule, MonthlyRule):
        if rule.day_of_month is not None:
            key = "monthly_day"
            params["day"] = _ordinal(rule.day_of_month, locale)
        else:
            key = "monthly"
    elif isinstance(rule, YearlyRule):
        key = "yearly"
    else:
        key = "daily"

    single, plural = phrases[key]
    return (single if n == 1 else plural).format(**params)


def _ordinal(day: int, locale: str) -> str:
    if locale == "fr":
        return "1er" if day == 1 else str(day)
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"
