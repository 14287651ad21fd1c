from __future__ import annotations
from pydantic import BaseModel, Field, computed_field
from datetime import date
from typing import List, Literal, Optional

from plan_config import PlanConfig


TimeOfDay = Literal["morning", "afternoon", "evening", "night"]
ProgressStatus = Literal["completed", "in-progress", "skipped"]


class Subject(BaseModel):
    name: str
    difficulty: Optional[int] = Field(default=None, ge=1, le=5)
    importance: Optional[int] = Field(default=None, ge=1, le=5)

    @computed_field
    @property
    def priority(self) -> int:
        # subjects without both ratings count as the lowest priority
        if self.difficulty is None or self.importance is None:
            return 1
        return self.difficulty * self.importance


class SubjectAllocation(BaseModel):
    subject: Subject
    total_hours: int = Field(ge=1)
    remaining_hours: float = Field(ge=0)


class Session(BaseModel):
    day: int = Field(ge=1)
    day_name: str
    date_label: str
    calendar_day: date
    subject: str
    start_time: str
    end_time: str
    duration: float = Field(gt=0, le=1)
    difficulty: Optional[int] = None
    importance: Optional[int] = None
    priority: int = Field(ge=1)
    pomodoro_sessions: int = Field(ge=0)
    study_minutes: int
    break_minutes: int


class ProgressEntry(BaseModel):
    subject: str
    on: date
    hours: float = Field(default=0, ge=0)
    status: ProgressStatus = "completed"


class AppState(BaseModel):
    subjects: List[Subject] = Field(default_factory=list)
    config: PlanConfig = Field(default_factory=PlanConfig)
    preferred_time: TimeOfDay = "morning"
    timetable: List[Session] = Field(default_factory=list)
    progress: List[ProgressEntry] = Field(default_factory=list)
    last_generated_on: Optional[date] = None
    profile: str = "default"
