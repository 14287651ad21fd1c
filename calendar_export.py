from __future__ import annotations
from datetime import datetime, timedelta
from typing import List
from zoneinfo import ZoneInfo
from icalendar import Calendar, Event as IcsEvent
from models import Session


def _get_timezone() -> ZoneInfo | None:
    local = datetime.now().astimezone().tzinfo
    if isinstance(local, ZoneInfo):
        return local
    # floating times when the local zone has no IANA name
    return None


def _clock(value: str) -> tuple[int, int]:
    parsed = datetime.strptime(value.strip(), "%I:%M %p")
    return parsed.hour, parsed.minute


def session_bounds(session: Session, tz: ZoneInfo | None = None) -> tuple[datetime, datetime]:
    start_h, start_m = _clock(session.start_time)
    end_h, end_m = _clock(session.end_time)
    start = datetime.combine(session.calendar_day, datetime.min.time()).replace(
        hour=start_h, minute=start_m, tzinfo=tz
    )
    end = start.replace(hour=end_h, minute=end_m)
    if end <= start:
        # clock wrapped past midnight
        end += timedelta(days=1)
    return start, end


def sessions_to_ics(sessions: List[Session]) -> bytes:
    cal = Calendar()
    cal.add("PRODID", "-//Study Planner//Local//")
    cal.add("version", "2.0")
    cal.add("X-WR-CALNAME", "Study Timetable")

    tz = _get_timezone()
    for s in sessions:
        start, end = session_bounds(s, tz)
        event = IcsEvent()
        uid = f"day{s.day}-{start.strftime('%Y%m%dT%H%M')}-{s.subject}"
        event.add("uid", f"{uid}@study-planner")
        event.add("summary", f"Study: {s.subject}")
        event.add("dtstart", start)
        event.add("dtend", end)
        event.add(
            "description",
            f"{s.pomodoro_sessions} x {s.study_minutes}/{s.break_minutes} min Pomodoro "
            f"(priority {s.priority}).",
        )
        cal.add_component(event)

    return cal.to_ical()
