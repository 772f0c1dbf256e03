"""Planning bucket classification for generated task instances."""

from datetime import date

from taskdeck.models.constants import NEXT_WEEK_MAX_DAYS, THIS_WEEK_MAX_DAYS
from taskdeck.models.task import TaskStatus


def classify_bucket(due_date: date, today: date) -> TaskStatus:
    """Map a due date to the bucket it belongs in, relative to today.

    0 days -> today, 1 -> tomorrow, 2..7 -> this_week, 8..14 -> next_week,
    anything else (past or farther out) -> backburner.
    """
    days_until = (due_date - today).days
    if days_until == 0:
        return TaskStatus.TODAY
    if days_until == 1:
        return TaskStatus.TOMORROW
    if 2 <= days_until <= THIS_WEEK_MAX_DAYS:
        return TaskStatus.THIS_WEEK
    if THIS_WEEK_MAX_DAYS < days_until <= NEXT_WEEK_MAX_DAYS:
        return TaskStatus.NEXT_WEEK
    return TaskStatus.BACKBURNER
