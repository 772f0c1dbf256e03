"""Recurrence models for taskdeck.

Templates persist their rule as a short string ("daily", "weekly-monday",
"monthly-15", "monthly-last"). The string is parsed once at the boundary into one
of the variants below; code past the parser never splits strings.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from taskdeck.models.task import TaskCategory, TaskPriority, TaskStatus


class RecurrenceFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Weekday(str, Enum):
    # Declared in Python weekday() order: Monday=0 ... Sunday=6
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def python_weekday(self) -> int:
        return list(Weekday).index(self)


class MonthlyOverflowPolicy(str, Enum):
    """How `monthly-<n>` behaves in months that have fewer than n days."""

    CLAMP = "clamp"  # fire on the last day of the short month
    SKIP = "skip"  # do not fire in the short month


class Daily(BaseModel):
    kind: Literal["daily"] = "daily"

    model_config = {"frozen": True}


class WeeklyOn(BaseModel):
    kind: Literal["weekly"] = "weekly"
    weekday: Weekday

    model_config = {"frozen": True}


class MonthlyOn(BaseModel):
    kind: Literal["monthly"] = "monthly"
    day: int = Field(..., ge=1, le=31, description="Day of month (1-31)")

    model_config = {"frozen": True}


class MonthlyOnLast(BaseModel):
    kind: Literal["monthly_last"] = "monthly_last"

    model_config = {"frozen": True}


RecurrenceRule = Union[Daily, WeeklyOn, MonthlyOn, MonthlyOnLast]


class RecurringTemplate(BaseModel):
    """Authoring record for a repeating task.

    The engine only reads templates. `status` is the bucket the user picked when
    creating the template; it is used verbatim only in exact-day engine mode.
    """

    id: str = Field(..., description="Unique template identifier (UUID v4)")
    user_id: str = Field(..., description="Owner user ID")
    title: str = Field(..., description="Title copied onto each instance")
    description: Optional[str] = Field(None, description="Description copied onto each instance")
    category: Optional[TaskCategory] = Field(None, description="Task category")
    client_id: Optional[str] = Field(None, description="Owning client (for client tasks)")
    priority: TaskPriority = Field(TaskPriority.NORMAL, description="Task priority")
    recurrence_rule: str = Field(..., description="Persisted rule string, e.g. 'weekly-monday'")
    is_paused: bool = Field(False, description="Paused templates are never expanded")
    status: TaskStatus = Field(TaskStatus.TODAY, description="Target bucket configured by the user")
    time_block_start: Optional[datetime] = None
    time_block_end: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    def parsed_rule(self) -> Optional[RecurrenceRule]:
        """Parse `recurrence_rule`; None when it is malformed."""
        from taskdeck.recurrence.rules import parse_recurrence_rule

        return parse_recurrence_rule(self.recurrence_rule)
