from __future__ import annotations
from io import BytesIO
from typing import Dict, List
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from models import Session
from plan_config import ResolvedConfig


def _hours_text(value: float) -> str:
    return f"{value:g}"


def timetable_to_pdf(
    sessions: List[Session],
    resolved: ResolvedConfig,
    overview: List[dict],
) -> bytes:
    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=letter,
        leftMargin=40,
        rightMargin=40,
        topMargin=40,
        bottomMargin=40,
    )
    styles = getSampleStyleSheet()
    elems = []

    elems.append(Paragraph("Study Timetable", styles["Title"]))
    elems.append(Spacer(1, 10))
    elems.append(Paragraph(
        f"Days: {resolved.total_days} | Hours/day: {resolved.daily_hours} "
        f"| Total hours: {resolved.total_available_hours} "
        f"| Pomodoro: {resolved.study_minutes}/{resolved.break_minutes} min",
        styles["Normal"],
    ))
    elems.append(Paragraph(
        f"First session starts at {resolved.start_hour}:00 on {resolved.first_day.isoformat()}",
        styles["Normal"],
    ))
    elems.append(Spacer(1, 12))

    if overview:
        elems.append(Paragraph("Allocation", styles["Heading3"]))
        overview_data = [["No", "Subject", "Difficulty", "Importance", "Priority", "Hours"]]
        for r in overview:
            overview_data.append([
                str(r["no"]),
                r["subject"],
                str(r["difficulty"] or "-"),
                str(r["importance"] or "-"),
                str(r["priority"]),
                str(r["hours"]),
            ])
        overview_table = Table(overview_data, hAlign="LEFT")
        overview_table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ("ALIGN", (2, 1), (-1, -1), "RIGHT"),
        ]))
        elems.append(overview_table)
        elems.append(Spacer(1, 12))

    # Sessions by day
    by_day: Dict[int, List[Session]] = {}
    for s in sessions:
        by_day.setdefault(s.day, []).append(s)

    for day in sorted(by_day.keys()):
        day_sessions = by_day[day]
        first = day_sessions[0]
        elems.append(Paragraph(
            f"Day {day} - {first.day_name}, {first.date_label}", styles["Heading3"]
        ))
        table_data = [["Subject", "Start", "End", "Hours", "Pomodoros", "Priority"]]
        total = 0.0
        for s in day_sessions:
            total += s.duration
            table_data.append([
                s.subject,
                s.start_time,
                s.end_time,
                _hours_text(s.duration),
                str(s.pomodoro_sessions),
                str(s.priority),
            ])
        table_data.append(["Total", "", "", _hours_text(total), "", ""])

        table = Table(table_data, hAlign="LEFT", colWidths=[150, 65, 65, 45, 65, 50])
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ("BACKGROUND", (0, -1), (-1, -1), colors.whitesmoke),
            ("ALIGN", (3, 1), (-1, -1), "RIGHT"),
        ]))
        elems.append(table)
        elems.append(Spacer(1, 8))

    if not sessions:
        elems.append(Paragraph("No sessions scheduled.", styles["Normal"]))

    doc.build(elems)
    return buf.getvalue()
