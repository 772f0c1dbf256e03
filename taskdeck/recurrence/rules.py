"""Parse and render the persisted string form of recurrence rules.

Grammar: `<frequency>[-<param>]`
- "daily"
- "weekly-<weekday>"       full English weekday name, case-insensitive
- "monthly-<n>"            n in 1..31
- "monthly-last"

Parsing is deterministic and total: anything outside the grammar yields None
rather than an exception.
"""

from __future__ import annotations

import re
from typing import Optional

from taskdeck.models.recurrence import (
    Daily,
    MonthlyOn,
    MonthlyOnLast,
    RecurrenceFrequency,
    RecurrenceRule,
    Weekday,
    WeeklyOn,
)


_DAY_OF_MONTH_RE = re.compile(r"^\d{1,2}$")

_WEEKDAYS_BY_NAME: dict[str, Weekday] = {d.value: d for d in Weekday}


def parse_recurrence_rule(raw: Optional[str]) -> Optional[RecurrenceRule]:
    """Parse a rule string into its tagged variant, or None if malformed."""
    if not raw:
        return None
    text = raw.strip().lower()
    if not text:
        return None

    frequency, sep, param = text.partition("-")
    try:
        freq = RecurrenceFrequency(frequency)
    except ValueError:
        return None

    if freq == RecurrenceFrequency.DAILY:
        return Daily() if not sep else None

    if freq == RecurrenceFrequency.WEEKLY:
        weekday = _WEEKDAYS_BY_NAME.get(param)
        return WeeklyOn(weekday=weekday) if weekday is not None else None

    # Monthly
    if param == "last":
        return MonthlyOnLast()
    if not _DAY_OF_MONTH_RE.match(param):
        return None
    day = int(param)
    if day < 1 or day > 31:
        return None
    return MonthlyOn(day=day)


def rule_to_string(rule: RecurrenceRule) -> str:
    """Render a parsed rule back to its persisted string form."""
    if isinstance(rule, Daily):
        return RecurrenceFrequency.DAILY.value
    if isinstance(rule, WeeklyOn):
        return f"{RecurrenceFrequency.WEEKLY.value}-{Weekday(rule.weekday).value}"
    if isinstance(rule, MonthlyOnLast):
        return f"{RecurrenceFrequency.MONTHLY.value}-last"
    if isinstance(rule, MonthlyOn):
        return f"{RecurrenceFrequency.MONTHLY.value}-{rule.day}"
    raise TypeError(f"Unsupported recurrence rule: {rule!r}")


def is_valid_recurrence_rule(raw: Optional[str]) -> bool:
    return parse_recurrence_rule(raw) is not None
