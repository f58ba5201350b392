import streamlit as st

from dashboard.constants import HABIT_CADENCES
from dashboard.data.synchronizers import ValidationError
from dashboard.metrics import current_streak, habit_completion_rate


def _create_habit(ctx):
    fields = {
        "name": st.session_state.get("habits.new_name", ""),
        "cadence": st.session_state.get("habits.new_cadence", "daily"),
        "credits": int(st.session_state.get("habits.new_credits", 2) or 0),
        "hub_id": st.session_state.get("habits.new_hub") or None,
    }
    try:
        created = ctx.habits.create(fields)
    except ValidationError as exc:
        ctx.notifier.notify("Invalid habit", str(exc), variant="destructive")
        return
    if created is not None:
        st.session_state["habits.new_name"] = ""


def render_habits_tab(ctx):
    st.markdown("<div class='section-title'>Habits</div>", unsafe_allow_html=True)
    habits = ctx.habits.rows
    hubs = {hub["id"]: hub.get("title") for hub in ctx.hubs.rows}

    cols = st.columns(2)
    cols[0].metric("Completed today", f"{habit_completion_rate(habits)}%")
    cols[1].metric("Best streak", current_streak(habits))

    with st.expander("New habit"):
        st.text_input("Name", key="habits.new_name")
        form_cols = st.columns(3)
        form_cols[0].selectbox("Cadence", HABIT_CADENCES, key="habits.new_cadence")
        form_cols[1].number_input("Credits", min_value=0, value=2, step=1, key="habits.new_credits")
        form_cols[2].selectbox("Hub", [""] + list(hubs), format_func=lambda value: hubs.get(value, "None"), key="habits.new_hub")
        st.button("Add habit", on_click=_create_habit, args=(ctx,), key="habits.add")

    if not habits:
        st.info("No habits yet.")
        return

    for habit in habits:
        habit_id = habit["id"]
        row = st.columns([0.06, 0.64, 0.2, 0.1])
        row[0].checkbox(
            "Done today",
            value=bool(habit.get("completed_today")),
            key=f"habits.done.{habit_id}",
            on_change=ctx.habits.toggle_complete,
            args=(habit_id,),
            label_visibility="collapsed",
        )
        row[1].markdown(f"**{habit.get('name')}** · {habit.get('cadence') or 'daily'}")
        row[2].markdown(f"🔥 {int(habit.get('streak') or 0)} days")
        row[3].button("Delete", key=f"habits.delete.{habit_id}", on_click=ctx.habits.delete, args=(habit_id,))
