from datetime import date

import streamlit as st

from dashboard.metrics import current_streak, life_score


@st.fragment
def render_global_header(ctx):
    tasks = ctx.tasks.rows
    habits = ctx.habits.rows
    score = life_score(
        tasks,
        habits,
        events_factor=ctx.settings.life_score_events_factor,
        mood_factor=ctx.settings.life_score_mood_factor,
    )

    st.markdown(f"<div class='small-label'>Life Hub • {date.today().isoformat()}</div>", unsafe_allow_html=True)
    cols = st.columns(4)
    cols[0].metric("Life score", score.score)
    cols[1].metric("Credits", ctx.ledger.total)
    cols[2].metric("Current streak", f"{current_streak(habits)} days")
    cols[3].metric("Open tasks", sum(1 for task in tasks if task.get("status") != "done"))

    if not ctx.settings.api_enabled or not ctx.client.is_authenticated:
        st.warning("Backend not configured. Set API_BASE_URL, BACKEND_SESSION_SECRET and DASHBOARD_USER_ID.")
