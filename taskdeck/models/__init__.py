"""Data models for taskdeck."""

from taskdeck.models.task import Task, TaskStatus, TaskCategory, TaskPriority
from taskdeck.models.recurrence import (
    Daily,
    MonthlyOn,
    MonthlyOnLast,
    MonthlyOverflowPolicy,
    RecurrenceFrequency,
    RecurrenceRule,
    RecurringTemplate,
    Weekday,
    WeeklyOn,
)
from taskdeck.models.user import User

__all__ = [
    "Task",
    "TaskStatus",
    "TaskCategory",
    "TaskPriority",
    "Daily",
    "MonthlyOn",
    "MonthlyOnLast",
    "MonthlyOverflowPolicy",
    "RecurrenceFrequency",
    "RecurrenceRule",
    "RecurringTemplate",
    "Weekday",
    "WeeklyOn",
    "User",
]
