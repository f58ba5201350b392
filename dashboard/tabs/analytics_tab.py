import streamlit as st

from dashboard.metrics import completion_counts, hub_breakdown, life_score
from dashboard.visualizations import credits_history_chart, hub_completion_chart, life_score_breakdown_chart


def render_analytics_tab(ctx):
    st.markdown("<div class='section-title'>Analytics</div>", unsafe_allow_html=True)
    tasks = ctx.tasks.rows
    habits = ctx.habits.rows

    counts = completion_counts(tasks, habits)
    cols = st.columns(4)
    cols[0].metric("Tasks done", f"{counts['tasks_done']}/{counts['tasks_total']}")
    cols[1].metric("Habits today", f"{counts['habits_done']}/{counts['habits_total']}")
    cols[2].metric("Credits earned", sum(max(0, int(row.get("amount") or 0)) for row in ctx.ledger.rows))
    cols[3].metric("Credits spent", -sum(min(0, int(row.get("amount") or 0)) for row in ctx.ledger.rows))

    score = life_score(
        tasks,
        habits,
        events_factor=ctx.settings.life_score_events_factor,
        mood_factor=ctx.settings.life_score_mood_factor,
    )
    chart_cols = st.columns(2)
    chart_cols[0].plotly_chart(life_score_breakdown_chart(score), use_container_width=True)
    chart_cols[1].plotly_chart(credits_history_chart(ctx.ledger.rows), use_container_width=True)

    breakdown = hub_breakdown(ctx.hubs.rows, tasks)
    if breakdown.empty:
        st.caption("No hubs to compare yet.")
        return
    st.plotly_chart(hub_completion_chart(breakdown), use_container_width=True)
    st.dataframe(breakdown[["hub", "tasks", "completed", "completion_rate"]], hide_index=True, use_container_width=True)
