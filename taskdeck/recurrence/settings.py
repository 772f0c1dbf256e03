"""Environment-driven settings for the recurring task engine."""

from __future__ import annotations

import logging
import os
from enum import Enum

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from taskdeck.models.constants import DEFAULT_MONTHLY_OVERFLOW_POLICY, RECURRENCE_HORIZON_DAYS
from taskdeck.models.recurrence import MonthlyOverflowPolicy

load_dotenv()

logger = logging.getLogger(__name__)


class EngineMode(str, Enum):
    """How the engine decides which instance to create for a template."""

    # Next occurrence on/after today within the horizon; bucket from days until due;
    # dedupe on (template, due date).
    DUE_DATE = "due_date"
    # Only when the rule fires today; bucket copied from the template;
    # dedupe on (template, creation day).
    EXACT_DAY = "exact_day"


class EngineSettings(BaseModel):
    horizon_days: int = Field(RECURRENCE_HORIZON_DAYS, ge=0, description="Lookahead window in days (inclusive)")
    overflow_policy: MonthlyOverflowPolicy = DEFAULT_MONTHLY_OVERFLOW_POLICY
    mode: EngineMode = EngineMode.DUE_DATE


def _env_enum(name: str, enum_class, default):
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return enum_class(raw.strip().lower())
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}; using {default.value!r}")
        return default


def load_engine_settings() -> EngineSettings:
    """Read engine settings from the environment (.env supported)."""
    horizon_raw = os.getenv("RECURRENCE_HORIZON_DAYS")
    horizon = RECURRENCE_HORIZON_DAYS
    if horizon_raw:
        try:
            horizon = max(int(horizon_raw), 0)
        except ValueError:
            logger.warning(f"Ignoring invalid RECURRENCE_HORIZON_DAYS={horizon_raw!r}; using {RECURRENCE_HORIZON_DAYS}")

    return EngineSettings(
        horizon_days=horizon,
        overflow_policy=_env_enum("MONTHLY_OVERFLOW_POLICY", MonthlyOverflowPolicy, DEFAULT_MONTHLY_OVERFLOW_POLICY),
        mode=_env_enum("RECURRENCE_ENGINE_MODE", EngineMode, EngineMode.DUE_DATE),
    )
