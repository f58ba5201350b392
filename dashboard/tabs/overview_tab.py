from datetime import date

import streamlit as st

from dashboard.constants import HUB_COLORS, TASK_PRIORITIES
from dashboard.metrics import hub_breakdown, life_score


def render_overview_tab(ctx):
    st.markdown("<div class='section-title'>Dashboard</div>", unsafe_allow_html=True)
    tasks = ctx.tasks.rows
    habits = ctx.habits.rows

    score = life_score(
        tasks,
        habits,
        events_factor=ctx.settings.life_score_events_factor,
        mood_factor=ctx.settings.life_score_mood_factor,
    )
    cols = st.columns(4)
    for col, (label, value) in zip(cols, score.breakdown.items()):
        col.metric(label.title(), f"{value}%")

    today = ctx.attendance.get_calendar_day(date.today())
    if today is not None:
        status = "Present" if today.get("went_to_college") else f"Absent ({today.get('absence_type') or '-'})"
        st.caption(f"Today: {status}")

    left, right = st.columns(2)
    with left:
        st.markdown("<div class='small-label'>Up next</div>", unsafe_allow_html=True)
        pending = sorted(
            (task for task in tasks if task.get("status") != "done"),
            key=lambda task: (task.get("priority") or 3, task.get("due_at") or "9999"),
        )
        if not pending:
            st.caption("Nothing pending.")
        for task in pending[:5]:
            due = f" · due {task['due_at'][:10]}" if task.get("due_at") else ""
            st.markdown(f"- **{task.get('title')}** ({TASK_PRIORITIES.get(task.get('priority'), '-')}){due}")
    with right:
        st.markdown("<div class='small-label'>Hubs</div>", unsafe_allow_html=True)
        breakdown = hub_breakdown(ctx.hubs.rows, tasks)
        for _, hub in breakdown.iterrows():
            color = HUB_COLORS.get(hub["color"], "#ADB5BD")
            st.markdown(
                f"<span style='color:{color}'>●</span> {hub['hub']} · {hub['completed']}/{hub['tasks']} tasks",
                unsafe_allow_html=True,
            )
