from __future__ import annotations
import logging
import os
import streamlit as st
import pandas as pd
from datetime import date

from calendar_export import sessions_to_ics
from csv_export import allocations_to_csv, sessions_to_csv
from models import AppState, ProgressEntry, Subject
from pdf_export import timetable_to_pdf
from plan_config import PlanConfig, START_HOURS, resolve_config, validation_errors
from planner import allocation_overview, build_timetable
from progress import compute_stats, compute_streak, recent_entries
from profiles import (
    create_profile,
    delete_profile,
    last_active_profile,
    list_profiles,
    load_profile,
    save_profile,
)


logging.basicConfig(
    level=os.environ.get("STUDY_PLANNER_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

TIME_OF_DAY = list(START_HOURS.keys())
POMODORO_LABELS = {
    "standard": "Standard (25/5)",
    "extended": "Extended (50/10)",
    "custom": "Custom",
}
STATUS_BADGE = {"completed": "✅ Completed", "in-progress": "⏳ In progress", "skipped": "⏭️ Skipped"}

st.set_page_config(page_title="Study Planner", page_icon="📚", layout="wide")


def _ensure_session_state() -> list[str]:
    profiles = list_profiles()
    if "profile_name" not in st.session_state or st.session_state.profile_name not in profiles:
        st.session_state.profile_name = last_active_profile()

    if "state" not in st.session_state:
        st.session_state.state = load_profile(st.session_state.profile_name)

    return profiles


def _switch_profile(name: str) -> None:
    st.session_state.profile_name = name
    st.session_state.state = load_profile(name)


def _queue_toast(message: str) -> None:
    st.session_state.toast_message = message


def _flush_toast() -> None:
    message = st.session_state.pop("toast_message", None)
    if message:
        st.toast(message)


def _subject_exists(state: AppState, name: str, skip: int | None = None) -> bool:
    return any(
        s.name.lower() == name.lower()
        for i, s in enumerate(state.subjects)
        if i != skip
    )


def _regenerate(state: AppState) -> None:
    today = date.today()
    state.timetable = build_timetable(
        state.subjects, state.config, state.preferred_time, today
    )
    state.last_generated_on = today
    save_profile(current_profile, state)
    logger.info("Profile %r: timetable rebuilt with %d session(s)", current_profile, len(state.timetable))


def render_subjects(state: AppState) -> None:
    st.header("Subjects")

    st.subheader("Add subject")
    with st.form("add_subject_form", clear_on_submit=True):
        col1, col2, col3 = st.columns([2, 1, 1])
        with col1:
            name = st.text_input("Name", placeholder="Math")
        with col2:
            difficulty = st.selectbox("Difficulty", [1, 2, 3, 4, 5], index=2)
        with col3:
            importance = st.selectbox("Importance", [1, 2, 3, 4, 5], index=2)
        submitted = st.form_submit_button("Add subject", type="primary")
        if submitted:
            name = name.strip()
            if not name:
                st.warning("Name is required.")
            elif _subject_exists(state, name):
                st.warning("Subject already exists.")
            else:
                state.subjects.append(
                    Subject(name=name, difficulty=int(difficulty), importance=int(importance))
                )
                save_profile(current_profile, state)
                st.toast("Subject added.")

    st.divider()
    st.subheader("Subjects manager")
    if not state.subjects:
        st.info("No subjects added yet.")
        return

    rows = [
        {
            "Delete": False,
            "Name": s.name,
            "Difficulty": s.difficulty,
            "Importance": s.importance,
            "Priority": s.priority,
        }
        for s in state.subjects
    ]
    edited = st.data_editor(
        pd.DataFrame(rows),
        hide_index=True,
        use_container_width=True,
        column_config={
            "Delete": st.column_config.CheckboxColumn("Delete"),
            "Name": st.column_config.TextColumn("Name"),
            "Difficulty": st.column_config.SelectboxColumn("Difficulty", options=[1, 2, 3, 4, 5]),
            "Importance": st.column_config.SelectboxColumn("Importance", options=[1, 2, 3, 4, 5]),
            "Priority": st.column_config.NumberColumn("Priority", format="%d"),
        },
        disabled=["Priority"],
        key=f"subjects_editor_{current_profile}",
    )

    if st.button("Apply changes"):
        updated = []
        for i, row in enumerate(edited.to_dict("records")):
            if row.get("Delete"):
                continue
            new_name = str(row.get("Name") or "").strip()
            if not new_name:
                st.warning("Subject name cannot be empty.")
                return
            if _subject_exists(state, new_name, skip=i) or any(
                s.name.lower() == new_name.lower() for s in updated
            ):
                st.warning(f"Subject '{new_name}' already exists.")
                return
            original = state.subjects[i]
            difficulty = row.get("Difficulty")
            importance = row.get("Importance")
            updated.append(Subject(
                name=new_name,
                difficulty=original.difficulty if pd.isna(difficulty) else int(difficulty),
                importance=original.importance if pd.isna(importance) else int(importance),
            ))
        state.subjects = updated
        save_profile(current_profile, state)
        _queue_toast("Subjects updated.")
        st.rerun()


def render_generate(state: AppState) -> None:
    st.header("Generate")

    cfg = state.config
    with st.form("plan_config_form"):
        col1, col2 = st.columns(2)
        with col1:
            exam_date = st.date_input("Exam date", value=cfg.exam_date)
            study_hours = st.number_input(
                "Study hours per day", min_value=1, max_value=16, value=cfg.study_hours or 4
            )
            max_hours = st.number_input(
                "Max hours per day (0 = same as study hours)",
                min_value=0, max_value=16, value=cfg.max_hours or 0,
            )
        with col2:
            start_date = st.date_input("Start date (optional)", value=cfg.start_date)
            end_date = st.date_input("End date (optional)", value=cfg.end_date)
            pomodoro_type = st.selectbox(
                "Pomodoro",
                list(POMODORO_LABELS.keys()),
                index=list(POMODORO_LABELS.keys()).index(cfg.pomodoro_type),
                format_func=lambda x: POMODORO_LABELS[x],
            )
        col3, col4 = st.columns(2)
        with col3:
            custom_study = st.number_input(
                "Custom study minutes", min_value=0, max_value=180, value=cfg.custom_study or 0
            )
        with col4:
            custom_break = st.number_input(
                "Custom break minutes", min_value=0, max_value=60, value=cfg.custom_break or 0
            )
        generate = st.form_submit_button("Generate timetable", type="primary")

    if not generate:
        resolved = resolve_config(state.config, state.preferred_time)
        st.caption(
            f"{resolved.total_days} day(s) x {resolved.hours_per_day} h "
            f"= {resolved.total_available_hours} h available"
        )
        return

    state.config = PlanConfig(
        exam_date=exam_date,
        start_date=start_date,
        end_date=end_date,
        study_hours=study_hours,
        max_hours=max_hours,
        pomodoro_type=pomodoro_type,
        custom_study=custom_study,
        custom_break=custom_break,
    )
    errors = validation_errors(state.config, len(state.subjects))
    save_profile(current_profile, state)
    if errors:
        for err in errors:
            st.warning(err)
        return

    _regenerate(state)
    st.success(f"Timetable generated ({len(state.timetable)} sessions). Open the Timetable page to view it.")


def render_timetable(state: AppState) -> None:
    st.header("Timetable")

    resolved = resolve_config(state.config, state.preferred_time, state.last_generated_on)
    m1, m2, m3 = st.columns(3)
    m1.metric("Total days", resolved.total_days)
    m2.metric("Hours per day", resolved.daily_hours)
    m3.metric("Total hours", resolved.total_available_hours)

    if st.button("Regenerate"):
        _regenerate(state)
        st.toast("Timetable regenerated.")

    if not state.timetable:
        st.info("No timetable generated. Please add subjects and configure settings first.")
        return

    overview = allocation_overview(
        state.subjects, state.config, state.preferred_time, state.last_generated_on
    )
    with st.expander("Allocation by priority", expanded=False):
        st.dataframe(pd.DataFrame(overview), use_container_width=True, hide_index=True)

    subject_options = ["All subjects"] + sorted({s.subject for s in state.timetable})
    chosen = st.selectbox("Subject filter", subject_options)
    shown = [s for s in state.timetable if chosen == "All subjects" or s.subject == chosen]
    table_rows = [
        {
            "Day": f"Day {s.day} - {s.day_name}",
            "Date": s.date_label,
            "Subject": s.subject,
            "Start": s.start_time,
            "End": s.end_time,
            "Hours": s.duration,
            "Pomodoros": s.pomodoro_sessions,
            "Priority": s.priority,
        }
        for s in shown
    ]
    st.dataframe(pd.DataFrame(table_rows), use_container_width=True, hide_index=True, height=420)

    st.divider()
    st.subheader("Exports")
    c1, c2, c3, c4 = st.columns(4)
    c1.download_button(
        "Download CSV",
        data=sessions_to_csv(state.timetable),
        file_name="study-schedule.csv",
        mime="text/csv",
    )
    c2.download_button(
        "Download allocation CSV",
        data=allocations_to_csv(overview),
        file_name="timetable.csv",
        mime="text/csv",
    )
    c3.download_button(
        "Download PDF",
        data=timetable_to_pdf(state.timetable, resolved, overview),
        file_name="timetable.pdf",
        mime="application/pdf",
    )
    c4.download_button(
        "Download ICS",
        data=sessions_to_ics(state.timetable),
        file_name="study-schedule.ics",
        mime="text/calendar",
    )


def render_progress(state: AppState) -> None:
    st.header("Progress")

    subject_names = sorted({s.subject for s in state.timetable}) or [s.name for s in state.subjects]
    if not subject_names:
        st.info("No subjects yet.")
        return

    with st.form("track_progress_form", clear_on_submit=True):
        col1, col2, col3, col4 = st.columns([2, 1, 1, 1])
        with col1:
            subject = st.selectbox("Subject", subject_names)
        with col2:
            on = st.date_input("Date", value=date.today())
        with col3:
            hours = st.number_input("Hours", min_value=0.0, max_value=16.0, value=1.0, step=0.5)
        with col4:
            status = st.selectbox("Status", list(STATUS_BADGE.keys()), format_func=lambda x: STATUS_BADGE[x])
        if st.form_submit_button("Mark progress", type="primary"):
            state.progress.append(ProgressEntry(subject=subject, on=on, hours=hours, status=status))
            save_profile(current_profile, state)
            st.toast("Progress saved.")

    stats = compute_stats(state.timetable, state.progress)
    a, b, c, d = st.columns(4)
    a.metric("Planned hours", round(stats["total_planned"], 1))
    b.metric("Studied hours", round(stats["total_studied"], 1))
    c.metric("Productivity", f"{stats['productivity']}%")
    d.metric("Streak (days)", compute_streak(state.progress, date.today()))

    st.divider()
    st.subheader("By subject")
    subject_rows = []
    for name, planned in stats["planned_totals"].items():
        studied = stats["subject_totals"].get(name, 0)
        subject_rows.append({
            "Subject": name,
            "Completion %": round(studied / planned * 100, 1) if planned else 0,
            "Studied (h)": studied,
            "Planned (h)": planned,
        })
    if subject_rows:
        df = pd.DataFrame(subject_rows).sort_values(by="Completion %", ascending=True)
        st.dataframe(
            df,
            use_container_width=True,
            hide_index=True,
            column_config={
                "Completion %": st.column_config.NumberColumn("Completion %", format="%.1f%%")
            },
        )

    st.subheader("Recent")
    recent = recent_entries(state.progress)
    if not recent:
        st.info("No progress tracked yet. Start by marking your first session!")
    else:
        st.table([
            {
                "Date": e.on.strftime("%b %d, %Y"),
                "Subject": e.subject,
                "Hours": e.hours,
                "Status": STATUS_BADGE.get(e.status, e.status),
            }
            for e in recent
        ])


profiles = _ensure_session_state()
state: AppState = st.session_state.state
current_profile = st.session_state.profile_name

st.title("Study Planner")
st.caption("Priority-weighted study timetable with Pomodoro sessions.")
_flush_toast()

if "nav_page" not in st.session_state:
    st.session_state.nav_page = "Subjects"

with st.sidebar:
    st.header("Profile")
    selected_profile = st.selectbox(
        "Active profile",
        options=profiles,
        index=profiles.index(current_profile) if current_profile in profiles else 0,
    )
    if selected_profile != current_profile:
        _switch_profile(selected_profile)
        st.rerun()

    preferred = st.selectbox(
        "Preferred study time",
        TIME_OF_DAY,
        index=TIME_OF_DAY.index(state.preferred_time),
        format_func=str.capitalize,
    )
    if preferred != state.preferred_time:
        state.preferred_time = preferred
        save_profile(current_profile, state)

    with st.form("create_profile_form"):
        new_profile_name = st.text_input("New profile name", placeholder="e.g. Finals")
        if st.form_submit_button("Create profile"):
            try:
                new_state = create_profile(new_profile_name)
            except ValueError as e:
                st.error(str(e))
            else:
                _queue_toast(f"Profile '{new_profile_name.strip()}' created.")
                st.session_state.profile_name = new_profile_name.strip()
                st.session_state.state = new_state
                st.rerun()

    if st.button("Delete profile", disabled=len(profiles) <= 1):

        @st.dialog("Delete profile?")
        def _confirm_delete_profile() -> None:
            st.write(f"Delete profile '{current_profile}' and its data?")
            if st.button("Delete", type="primary"):
                delete_profile(current_profile)
                _switch_profile(list_profiles()[0])
                _queue_toast("Profile deleted.")
                st.rerun()

        _confirm_delete_profile()

    st.divider()
    st.header("Navigate")
    pages = ["Subjects", "Generate", "Timetable", "Progress"]
    page = st.radio("Page", pages, key="nav_page", label_visibility="collapsed")

    st.caption("Workflow: Subjects -> Generate -> Timetable -> Progress")

if page == "Subjects":
    render_subjects(state)
elif page == "Generate":
    render_generate(state)
elif page == "Timetable":
    render_timetable(state)
elif page == "Progress":
    render_progress(state)
