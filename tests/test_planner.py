"""Tests for planner."""
from datetime import date, timedelta

import pytest

from models import Subject, SubjectAllocation
from plan_config import PlanConfig
from planner import (
    allocate,
    allocation_overview,
    build_timetable,
    format_time,
    generate_schedule,
)


TODAY = date(2026, 10, 17)


def _config(days: int, hours: int, **kwargs) -> PlanConfig:
    return PlanConfig(exam_date=TODAY + timedelta(days=days), study_hours=hours, **kwargs)


def _alloc(name: str, hours: int, priority_pair=(1, 1)) -> SubjectAllocation:
    subject = Subject(name=name, difficulty=priority_pair[0], importance=priority_pair[1])
    return SubjectAllocation(subject=subject, total_hours=hours, remaining_hours=hours)


@pytest.mark.parametrize(
    "hour, minute, expected",
    [
        (0, 0, "12:00 AM"),
        (9, 0, "9:00 AM"),
        (12, 5, "12:05 PM"),
        (13, 30, "1:30 PM"),
        (24, 0, "12:00 AM"),
        (23, 75, "11:15 PM"),
        (10, 29.9999, "10:29 AM"),
    ],
)
def test_format_time(hour, minute, expected) -> None:
    assert format_time(hour, minute) == expected


def test_allocate_empty() -> None:
    assert allocate([], 40) == []


def test_allocate_proportional_to_priority() -> None:
    subjects = [
        Subject(name="History", difficulty=1, importance=2),
        Subject(name="Math", difficulty=4, importance=4),
    ]
    allocations = allocate(subjects, 18)
    assert [a.subject.name for a in allocations] == ["Math", "History"]
    assert [a.total_hours for a in allocations] == [16, 2]
    assert all(a.remaining_hours == a.total_hours for a in allocations)


def test_allocate_floor_of_one_hour() -> None:
    subjects = [
        Subject(name="Physics", difficulty=5, importance=5),
        Subject(name="Art", difficulty=1, importance=1),
    ]
    allocations = allocate(subjects, 4)
    assert {a.subject.name: a.total_hours for a in allocations} == {"Physics": 4, "Art": 1}


def test_allocate_rounds_half_up() -> None:
    subjects = [Subject(name="A", difficulty=2, importance=2), Subject(name="B", difficulty=2, importance=2)]
    assert [a.total_hours for a in allocate(subjects, 5)] == [3, 3]


def test_allocate_keeps_rounding_drift() -> None:
    subjects = [Subject(name=n, difficulty=3, importance=3) for n in ("A", "B", "C")]
    allocations = allocate(subjects, 10)
    assert [a.total_hours for a in allocations] == [3, 3, 3]
    assert abs(sum(a.total_hours for a in allocations) - 10) <= len(subjects)


def test_allocate_unrated_subject_counts_as_priority_one() -> None:
    allocations = allocate([Subject(name="Reading"), Subject(name="Math", difficulty=3, importance=1)], 8)
    assert [a.subject.name for a in allocations] == ["Math", "Reading"]
    assert [a.total_hours for a in allocations] == [6, 2]


def test_single_subject_two_hours_one_day() -> None:
    subjects = [Subject(name="Chemistry", difficulty=3, importance=3)]
    sessions = build_timetable(subjects, _config(1, 2), today=TODAY)

    assert len(sessions) == 2
    assert {s.day for s in sessions} == {1}
    assert [(s.start_time, s.end_time) for s in sessions] == [
        ("9:00 AM", "10:00 AM"),
        ("10:15 AM", "11:15 AM"),
    ]
    assert sum(s.duration for s in sessions) == 2
    assert sessions[0].priority == 9
    assert sessions[0].day_name == "Saturday"
    assert sessions[0].date_label == "Oct 17"
    assert sessions[0].calendar_day == TODAY


def test_two_equal_subjects_alternate() -> None:
    subjects = [
        Subject(name="Biology", difficulty=2, importance=3),
        Subject(name="English", difficulty=3, importance=2),
    ]
    allocations = allocate(subjects, 4)
    assert [a.total_hours for a in allocations] == [2, 2]

    sessions = build_timetable(subjects, _config(1, 4), today=TODAY)
    assert [s.subject for s in sessions] == ["Biology", "English", "Biology", "English"]
    assert [s.start_time for s in sessions] == ["9:00 AM", "10:15 AM", "11:30 AM", "12:45 PM"]
    assert sessions[-1].end_time == "1:45 PM"


def test_rotation_offset_resets_each_day() -> None:
    allocations = [_alloc("A", 3), _alloc("B", 3), _alloc("C", 3)]
    sessions = generate_schedule(allocations, 2, 3, first_day=TODAY)
    by_day = {}
    for s in sessions:
        by_day.setdefault(s.day, []).append(s.subject)
    assert by_day == {1: ["A", "B"], 2: ["B", "C"], 3: ["C", "A"]}


def test_exhausted_subject_still_uses_rotation_step() -> None:
    allocations = [_alloc("A", 1), _alloc("B", 3)]
    sessions = generate_schedule(allocations, 2, 2, first_day=TODAY)

    day_two = [(s.subject, s.start_time) for s in sessions if s.day == 2]
    assert day_two == [("B", "9:00 AM"), ("B", "10:15 AM")]
    assert allocations[0].remaining_hours == 0
    assert allocations[1].remaining_hours == 0


def test_stops_when_all_allocations_used() -> None:
    allocations = [_alloc("A", 1), _alloc("B", 1), _alloc("C", 1)]
    sessions = generate_schedule(allocations, 4, 5, first_day=TODAY)
    assert [s.subject for s in sessions] == ["A", "B", "C"]
    assert {s.day for s in sessions} == {1}


def test_fractional_block() -> None:
    subject = Subject(name="Latin", difficulty=1, importance=1)
    allocations = [SubjectAllocation(subject=subject, total_hours=1, remaining_hours=0.5)]
    sessions = generate_schedule(allocations, 2, 1, first_day=TODAY)
    assert len(sessions) == 1
    assert sessions[0].duration == 0.5
    assert sessions[0].end_time == "9:30 AM"
    assert sessions[0].pomodoro_sessions == 1


def test_no_session_starts_after_eleven_pm() -> None:
    subjects = [Subject(name="Math", difficulty=5, importance=5)]
    sessions = build_timetable(subjects, _config(3, 6), preferred_time="night", today=TODAY)

    day_one = [s for s in sessions if s.day == 1]
    assert [(s.start_time, s.end_time) for s in day_one] == [
        ("9:00 PM", "10:00 PM"),
        ("10:15 PM", "11:15 PM"),
    ]
    for s in sessions:
        assert not (s.start_time.endswith("PM") and s.start_time.startswith("11:"))


def test_day_bound_is_thirty() -> None:
    subjects = [Subject(name="Math", difficulty=2, importance=2)]
    sessions = build_timetable(subjects, _config(100, 1), today=TODAY)
    assert len(sessions) == 30
    assert max(s.day for s in sessions) == 30


@pytest.mark.parametrize(
    "pomodoro, expected",
    [
        ({"pomodoro_type": "standard"}, 2),
        ({"pomodoro_type": "extended"}, 1),
        ({"pomodoro_type": "custom", "custom_study": 50, "custom_break": 10}, 1),
        ({"pomodoro_type": "custom", "custom_study": 15, "custom_break": 5}, 3),
    ],
)
def test_pomodoro_sessions_per_block(pomodoro, expected) -> None:
    subjects = [Subject(name="Math", difficulty=2, importance=2)]
    sessions = build_timetable(subjects, _config(1, 1, **pomodoro), today=TODAY)
    assert sessions[0].pomodoro_sessions == expected


def test_durations_never_exceed_allocation() -> None:
    subjects = [
        Subject(name="Math", difficulty=5, importance=4),
        Subject(name="Physics", difficulty=4, importance=4),
        Subject(name="History", difficulty=2, importance=3),
        Subject(name="Art", difficulty=1, importance=1),
    ]
    config = _config(12, 5)
    allocated = {row["subject"]: row["hours"] for row in allocation_overview(subjects, config, today=TODAY)}
    sessions = build_timetable(subjects, config, today=TODAY)

    for name, hours in allocated.items():
        assert sum(s.duration for s in sessions if s.subject == name) <= hours
    assert all(0 < s.duration <= 1 for s in sessions)
    assert set(allocated) == {s.subject for s in sessions}


def test_generation_is_deterministic() -> None:
    subjects = [
        Subject(name="Math", difficulty=5, importance=4),
        Subject(name="Physics", difficulty=4, importance=4),
    ]
    config = _config(5, 3)
    first = build_timetable(subjects, config, today=TODAY)
    second = build_timetable(subjects, config, today=TODAY)
    assert first == second


def test_empty_subjects_gives_empty_timetable() -> None:
    assert build_timetable([], _config(3, 2), today=TODAY) == []
    assert generate_schedule([], 2, 3) == []


def test_allocation_overview_rows() -> None:
    subjects = [
        Subject(name="History", difficulty=1, importance=2),
        Subject(name="Math", difficulty=4, importance=4),
    ]
    rows = allocation_overview(subjects, _config(9, 2), today=TODAY)
    assert rows == [
        {"no": 1, "subject": "Math", "difficulty": 4, "importance": 4, "priority": 16, "hours": 16},
        {"no": 2, "subject": "History", "difficulty": 1, "importance": 2, "priority": 2, "hours": 2},
    ]
