from __future__ import annotations
import csv
from io import StringIO
from typing import List

from models import Session


SESSION_HEADER = [
    "Day", "Date", "Subject", "Start Time", "End Time",
    "Duration (hrs)", "Pomodoro Sessions", "Priority",
]
ALLOCATION_HEADER = ["No", "Subject", "Difficulty", "Importance", "Priority", "Hours"]


def _hours(value: float) -> float | int:
    return int(value) if float(value).is_integer() else value


def _write(header: List[str], rows: List[list]) -> str:
    buf = StringIO()
    # header unquoted, text cells quoted, numbers bare
    buf.write(",".join(header) + "\n")
    writer = csv.writer(buf, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    writer.writerows(rows)
    return buf.getvalue()


def sessions_to_csv(sessions: List[Session]) -> str:
    rows = [
        [
            f"Day {s.day} - {s.day_name}",
            s.date_label,
            s.subject,
            s.start_time,
            s.end_time,
            _hours(s.duration),
            s.pomodoro_sessions,
            s.priority,
        ]
        for s in sessions
    ]
    return _write(SESSION_HEADER, rows)


def allocations_to_csv(rows: List[dict]) -> str:
    return _write(ALLOCATION_HEADER, [
        [
            r["no"],
            r["subject"],
            r["difficulty"] if r["difficulty"] is not None else "-",
            r["importance"] if r["importance"] is not None else "-",
            r["priority"],
            r["hours"],
        ]
        for r in rows
    ])
