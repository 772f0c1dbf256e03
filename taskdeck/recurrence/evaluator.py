"""Evaluate recurrence rules against calendar dates.

All functions here are pure. They accept either the persisted rule string or an
already-parsed rule variant, and ignore time of day entirely.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Optional, Union

from taskdeck.models.constants import DEFAULT_MONTHLY_OVERFLOW_POLICY
from taskdeck.models.recurrence import (
    Daily,
    MonthlyOn,
    MonthlyOnLast,
    MonthlyOverflowPolicy,
    RecurrenceRule,
    Weekday,
    WeeklyOn,
)
from taskdeck.recurrence.rules import parse_recurrence_rule

RuleLike = Union[str, RecurrenceRule, None]

# A monthly-n rule with the skip policy fires at least once within this many months.
_MAX_MONTHS_AHEAD = 12


def _as_rule(rule: RuleLike) -> Optional[RecurrenceRule]:
    if rule is None or isinstance(rule, str):
        return parse_recurrence_rule(rule)
    return rule


def _days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def _add_months(year: int, month: int, months: int) -> tuple[int, int]:
    idx = year * 12 + (month - 1) + months
    return idx // 12, idx % 12 + 1


def _monthly_day_in(year: int, month: int, day: int, policy: MonthlyOverflowPolicy) -> Optional[date]:
    """Date on which a monthly-<day> rule fires in the given month, if any."""
    dim = _days_in_month(year, month)
    if day <= dim:
        return date(year, month, day)
    if MonthlyOverflowPolicy(policy) == MonthlyOverflowPolicy.CLAMP:
        return date(year, month, dim)
    return None


def occurs_on(
    rule: RuleLike,
    day: date,
    *,
    overflow_policy: MonthlyOverflowPolicy = DEFAULT_MONTHLY_OVERFLOW_POLICY,
) -> bool:
    """Return True iff the rule fires on the given calendar date."""
    parsed = _as_rule(rule)
    if parsed is None:
        return False

    if isinstance(parsed, Daily):
        return True

    if isinstance(parsed, WeeklyOn):
        return day.weekday() == Weekday(parsed.weekday).python_weekday

    if isinstance(parsed, MonthlyOnLast):
        return day.day == _days_in_month(day.year, day.month)

    if isinstance(parsed, MonthlyOn):
        return _monthly_day_in(day.year, day.month, parsed.day, overflow_policy) == day

    return False


def next_due_date_on_or_after(
    rule: RuleLike,
    from_date: date,
    *,
    overflow_policy: MonthlyOverflowPolicy = DEFAULT_MONTHLY_OVERFLOW_POLICY,
) -> Optional[date]:
    """Earliest date >= from_date on which the rule fires; None for malformed rules."""
    parsed = _as_rule(rule)
    if parsed is None:
        return None

    if isinstance(parsed, Daily):
        return from_date

    if isinstance(parsed, WeeklyOn):
        days_until = (Weekday(parsed.weekday).python_weekday - from_date.weekday()) % 7
        return from_date + timedelta(days=days_until)

    if isinstance(parsed, MonthlyOnLast):
        return date(from_date.year, from_date.month, _days_in_month(from_date.year, from_date.month))

    if isinstance(parsed, MonthlyOn):
        for offset in range(_MAX_MONTHS_AHEAD + 1):
            year, month = _add_months(from_date.year, from_date.month, offset)
            candidate = _monthly_day_in(year, month, parsed.day, overflow_policy)
            if candidate is not None and candidate >= from_date:
                return candidate
        return None

    return None


def _ordinal(n: int) -> str:
    if 11 <= n % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def render_label(rule: RuleLike) -> str:
    """Human-readable description of a rule; malformed rule strings render verbatim."""
    parsed = _as_rule(rule)
    if parsed is None:
        return rule if isinstance(rule, str) else ""

    if isinstance(parsed, Daily):
        return "every day"
    if isinstance(parsed, WeeklyOn):
        return f"every {Weekday(parsed.weekday).value.capitalize()}"
    if isinstance(parsed, MonthlyOnLast):
        return "last day of each month"
    return f"{_ordinal(parsed.day)} of each month"
