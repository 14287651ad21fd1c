from __future__ import annotations
from datetime import date, timedelta
from typing import Dict, List, Optional

from models import ProgressEntry, Session


COUNTED_STATUSES = ("completed", "in-progress")


def planned_hours_by_subject(sessions: List[Session]) -> Dict[str, float]:
    planned: Dict[str, float] = {}
    for s in sessions:
        planned[s.subject] = planned.get(s.subject, 0) + s.duration
    return planned


def filter_entries(
    entries: List[ProgressEntry],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[ProgressEntry]:
    return [
        e for e in entries
        if (start is None or e.on >= start) and (end is None or e.on <= end)
    ]


def compute_stats(
    sessions: List[Session],
    entries: List[ProgressEntry],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> dict:
    """
    Compare logged study hours against the timetable.
    Skipped entries are ignored; productivity is studied / planned as a
    whole percentage.
    """
    planned = planned_hours_by_subject(sessions)
    studied: Dict[str, float] = {name: 0 for name in planned}
    for e in filter_entries(entries, start, end):
        if e.status not in COUNTED_STATUSES:
            continue
        studied[e.subject] = studied.get(e.subject, 0) + e.hours

    total_studied = sum(studied.values())
    total_planned = sum(planned.values())
    productivity = int(round(total_studied / total_planned * 100)) if total_planned > 0 else 0
    return {
        "subject_totals": studied,
        "planned_totals": planned,
        "total_studied": total_studied,
        "total_planned": total_planned,
        "productivity": productivity,
    }


def compute_streak(entries: List[ProgressEntry], today: date) -> int:
    days = {e.on for e in entries if e.status == "completed"}
    streak = 0
    cursor = today
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def recent_entries(entries: List[ProgressEntry], limit: int = 10) -> List[ProgressEntry]:
    return sorted(entries, key=lambda e: e.on, reverse=True)[:limit]
