from __future__ import annotations
import logging
from datetime import date, datetime
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, computed_field, field_validator


logger = logging.getLogger(__name__)

PomodoroType = Literal["standard", "extended", "custom"]

DEFAULT_STUDY_HOURS = 4
DEFAULT_HORIZON_DAYS = 30
DEFAULT_START_HOUR = 9

POMODORO_PRESETS = {
    "standard": (25, 5),
    "extended": (50, 10),
}

START_HOURS = {
    "morning": 9,
    "afternoon": 14,
    "evening": 18,
    "night": 21,
}


def _positive_int_or_none(value):
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = int(float(value))
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def _date_or_none(value):
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()[:10]
        if not text:
            return None
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None
    return None


class PlanConfig(BaseModel):
    """
    Study-plan settings as entered by the user.
    Form values arrive as strings; anything blank or unparsable becomes None
    and is replaced by a default when the config is resolved.
    """
    exam_date: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    study_hours: Optional[int] = None
    max_hours: Optional[int] = None
    pomodoro_type: PomodoroType = "standard"
    custom_study: Optional[int] = None
    custom_break: Optional[int] = None

    @field_validator("exam_date", "start_date", "end_date", mode="before")
    @classmethod
    def _coerce_date(cls, value):
        return _date_or_none(value)

    @field_validator("study_hours", "max_hours", "custom_study", "custom_break", mode="before")
    @classmethod
    def _coerce_positive(cls, value):
        return _positive_int_or_none(value)

    @field_validator("pomodoro_type", mode="before")
    @classmethod
    def _coerce_pomodoro(cls, value):
        if value in ("standard", "extended", "custom"):
            return value
        return "standard"


class ResolvedConfig(BaseModel):
    total_days: int = Field(ge=1)
    hours_per_day: int = Field(ge=1)
    max_hours_per_day: int = Field(ge=1)
    study_minutes: int = Field(gt=0)
    break_minutes: int = Field(ge=0)
    start_hour: int = Field(ge=0, le=23)
    first_day: date

    @computed_field
    @property
    def daily_hours(self) -> int:
        return min(self.hours_per_day, self.max_hours_per_day)

    @computed_field
    @property
    def total_available_hours(self) -> int:
        return self.total_days * self.hours_per_day

    @property
    def sessions_per_hour(self) -> float:
        return 60 / (self.study_minutes + self.break_minutes)


def start_hour_for(preferred_time: Optional[str]) -> int:
    return START_HOURS.get((preferred_time or "").strip().lower(), DEFAULT_START_HOUR)


def pomodoro_minutes(
    pomodoro_type: str,
    custom_study: Optional[int] = None,
    custom_break: Optional[int] = None,
) -> Tuple[int, int]:
    if pomodoro_type == "custom":
        return (custom_study or 25, custom_break or 5)
    return POMODORO_PRESETS.get(pomodoro_type, POMODORO_PRESETS["standard"])


def _total_days(config: PlanConfig, today: date) -> int:
    if config.exam_date:
        return max(1, (config.exam_date - today).days)
    start = config.start_date or today
    end = config.end_date
    if end:
        return max(1, (end - start).days)
    return DEFAULT_HORIZON_DAYS


def resolve_config(
    config: PlanConfig | dict | None,
    preferred_time: Optional[str] = None,
    today: Optional[date] = None,
) -> ResolvedConfig:
    """
    Fill in every missing setting so the planner works with plain numbers.

    - hours/day: study_hours, else 4
    - max hours/day: max_hours, else hours/day
    - days: exam date minus today, else end minus start (start defaults to
      today), else a 30-day horizon; never below 1
    - Pomodoro minutes: preset, or the custom pair with 25/5 fallbacks
    - start hour: from the preferred time of day, morning when unknown
    """
    if config is None:
        config = PlanConfig()
    elif isinstance(config, dict):
        config = PlanConfig.model_validate(config)
    today = today or date.today()

    hours_per_day = config.study_hours or DEFAULT_STUDY_HOURS
    study_minutes, break_minutes = pomodoro_minutes(
        config.pomodoro_type, config.custom_study, config.custom_break
    )
    resolved = ResolvedConfig(
        total_days=_total_days(config, today),
        hours_per_day=hours_per_day,
        max_hours_per_day=config.max_hours or hours_per_day,
        study_minutes=study_minutes,
        break_minutes=break_minutes,
        start_hour=start_hour_for(preferred_time),
        first_day=today,
    )
    logger.debug("Resolved plan config: %s", resolved.model_dump())
    return resolved


def validation_errors(config: PlanConfig, subject_count: int) -> List[str]:
    """Problems worth telling the user about before a timetable is generated."""
    errors: List[str] = []
    if subject_count <= 0:
        errors.append("Please add subjects first before generating a timetable.")
    if not config.exam_date or not config.study_hours:
        errors.append("Please fill Exam Date and Study Hours per Day.")
    if config.start_date and config.end_date and config.start_date > config.end_date:
        errors.append("Start Date cannot be after End Date.")
    if config.pomodoro_type == "custom" and (not config.custom_study or not config.custom_break):
        errors.append("Please enter both Study Minutes and Break Minutes for custom Pomodoro.")
    return errors
