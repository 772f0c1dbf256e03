"""Recurring task rules, evaluation and bucket classification for taskdeck."""

from taskdeck.recurrence.rules import parse_recurrence_rule, rule_to_string, is_valid_recurrence_rule
from taskdeck.recurrence.evaluator import occurs_on, next_due_date_on_or_after, render_label
from taskdeck.recurrence.buckets import classify_bucket

__all__ = [
    "parse_recurrence_rule",
    "rule_to_string",
    "is_valid_recurrence_rule",
    "occurs_on",
    "next_due_date_on_or_after",
    "render_label",
    "classify_bucket",
]
