"""Constants for taskdeck.

This module centralizes default values used throughout the application.
"""

from taskdeck.models.recurrence import MonthlyOverflowPolicy
from taskdeck.models.task import TaskPriority, TaskStatus


# Task defaults
DEFAULT_TASK_STATUS = TaskStatus.INBOX
DEFAULT_TASK_PRIORITY = TaskPriority.NORMAL
DEFAULT_TEMPLATE_STATUS = TaskStatus.TODAY

# Recurring task engine
RECURRENCE_HORIZON_DAYS = 14  # instances are materialized for today .. today+14 inclusive
DEFAULT_MONTHLY_OVERFLOW_POLICY = MonthlyOverflowPolicy.CLAMP

# Bucket boundaries (days from today, inclusive upper bounds)
THIS_WEEK_MAX_DAYS = 7
NEXT_WEEK_MAX_DAYS = 14

# Template deletion: "orphan" keeps instances (parent link cleared), "cascade" deletes them
TEMPLATE_DELETE_ORPHAN = "orphan"
TEMPLATE_DELETE_CASCADE = "cascade"
DEFAULT_TEMPLATE_DELETE_POLICY = TEMPLATE_DELETE_ORPHAN
