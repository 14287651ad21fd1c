from __future__ import annotations
import logging
import math
from datetime import date, timedelta
from typing import List, Optional, Tuple

from models import Session, Subject, SubjectAllocation
from plan_config import PlanConfig, resolve_config


logger = logging.getLogger(__name__)

MAX_SCHEDULE_DAYS = 30
BREAK_MINUTES_BETWEEN_SUBJECTS = 15
LAST_START_HOUR = 23


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_time(hour: float, minute: float) -> str:
    h = int(math.floor(hour)) % 24
    m = int(math.floor(minute)) % 60
    period = "PM" if h >= 12 else "AM"
    display_hour = h % 12 or 12
    return f"{display_hour}:{m:02d} {period}"


def _advance(hour: int, minute: float, hours: float) -> Tuple[int, float]:
    # whole hours move the hour hand, the fraction lands in minutes
    end_hour = hour + math.floor(hours)
    end_minute = minute + (hours % 1) * 60
    return end_hour + math.floor(end_minute / 60), end_minute % 60


def allocate(subjects: List[Subject], total_available_hours: float) -> List[SubjectAllocation]:
    """
    Split the available hours between subjects in proportion to priority.
    Every subject gets at least one hour; rounding drift is left as is.
    Allocations come back in priority order (highest first), which is also the
    rotation order used by the daily schedule.
    """
    if not subjects:
        return []

    ordered = sorted(subjects, key=lambda s: s.priority, reverse=True)
    total_priority = sum(s.priority for s in ordered)

    allocations = []
    for s in ordered:
        share = s.priority / total_priority
        hours = max(1, _round_half_up(total_available_hours * share))
        allocations.append(SubjectAllocation(
            subject=s,
            total_hours=hours,
            remaining_hours=hours,
        ))
    return allocations


def generate_schedule(
    allocations: List[SubjectAllocation],
    hours_per_day: float,
    total_days: int,
    study_minutes: int = 25,
    break_minutes: int = 5,
    start_hour: int = 9,
    first_day: Optional[date] = None,
) -> List[Session]:
    """
    Walk day by day (at most 30 days) and carve blocks of up to one hour from
    each subject's remaining allocation.

    Each day starts at ``start_hour`` with the rotation offset at
    ``day % len(allocations)``. A subject with nothing left still uses up its
    rotation step. Blocks are separated by a 15 minute break and nothing
    starts at or after 23:00. ``remaining_hours`` on the allocations is
    consumed in place.
    """
    if not allocations:
        return []

    first_day = first_day or date.today()
    sessions_per_hour = 60 / (study_minutes + break_minutes)
    count = len(allocations)
    sessions: List[Session] = []

    for day in range(min(total_days, MAX_SCHEDULE_DAYS)):
        if not any(a.remaining_hours > 0 for a in allocations):
            logger.debug("All allocations used up after %d day(s)", day)
            break

        on = first_day + timedelta(days=day)
        day_name = on.strftime("%A")
        date_label = f"{on.strftime('%b')} {on.day}"

        current_hour = start_hour
        current_minute: float = 0
        scheduled_today: float = 0
        index = day % count

        while scheduled_today < hours_per_day:
            # a day can run out mid-way; nothing would ever move the clock again
            if not any(a.remaining_hours > 0 for a in allocations):
                break
            allocation = allocations[index]

            if allocation.remaining_hours > 0:
                subject = allocation.subject
                session_hours = min(1, allocation.remaining_hours)
                end_hour, end_minute = _advance(current_hour, current_minute, session_hours)

                sessions.append(Session(
                    day=day + 1,
                    day_name=day_name,
                    date_label=date_label,
                    calendar_day=on,
                    subject=subject.name,
                    start_time=format_time(current_hour, current_minute),
                    end_time=format_time(end_hour, end_minute),
                    duration=session_hours,
                    difficulty=subject.difficulty,
                    importance=subject.importance,
                    priority=subject.priority,
                    pomodoro_sessions=math.ceil(session_hours * sessions_per_hour),
                    study_minutes=study_minutes,
                    break_minutes=break_minutes,
                ))

                allocation.remaining_hours -= session_hours
                scheduled_today += session_hours

                current_hour, current_minute = _advance(
                    end_hour, end_minute, BREAK_MINUTES_BETWEEN_SUBJECTS / 60
                )

            index = (index + 1) % count

            if current_hour >= LAST_START_HOUR or scheduled_today >= hours_per_day:
                break

    return sessions


def build_timetable(
    subjects: List[Subject],
    config: PlanConfig | dict | None,
    preferred_time: Optional[str] = None,
    today: Optional[date] = None,
) -> List[Session]:
    if not subjects:
        return []

    resolved = resolve_config(config, preferred_time, today)
    allocations = allocate(subjects, resolved.total_available_hours)
    sessions = generate_schedule(
        allocations,
        resolved.daily_hours,
        resolved.total_days,
        resolved.study_minutes,
        resolved.break_minutes,
        resolved.start_hour,
        resolved.first_day,
    )
    logger.info(
        "Generated %d session(s) for %d subject(s) over %d day(s)",
        len(sessions), len(subjects), min(resolved.total_days, MAX_SCHEDULE_DAYS),
    )
    return sessions


def allocation_overview(
    subjects: List[Subject],
    config: PlanConfig | dict | None,
    preferred_time: Optional[str] = None,
    today: Optional[date] = None,
) -> List[dict]:
    resolved = resolve_config(config, preferred_time, today)
    rows = []
    for rank, a in enumerate(allocate(subjects, resolved.total_available_hours), start=1):
        rows.append({
            "no": rank,
            "subject": a.subject.name,
            "difficulty": a.subject.difficulty,
            "importance": a.subject.importance,
            "priority": a.subject.priority,
            "hours": a.total_hours,
        })
    return rows
