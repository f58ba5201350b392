import streamlit as st

from dashboard.constants import TASK_PRIORITIES, TASK_STATUSES
from dashboard.data.synchronizers import ValidationError


def _hub_options(ctx):
    return {hub["id"]: hub.get("title") or hub.get("slug") for hub in ctx.hubs.rows}


def _create_task(ctx):
    fields = {
        "title": st.session_state.get("tasks.new_title", ""),
        "description": (st.session_state.get("tasks.new_description") or "").strip() or None,
        "priority": st.session_state.get("tasks.new_priority", 2),
        "credits": int(st.session_state.get("tasks.new_credits", 5) or 0),
        "hub_id": st.session_state.get("tasks.new_hub") or None,
    }
    due = st.session_state.get("tasks.new_due")
    if due:
        fields["due_at"] = due.isoformat()
    try:
        created = ctx.tasks.create(fields)
    except ValidationError as exc:
        ctx.notifier.notify("Invalid task", str(exc), variant="destructive")
        return
    if created is not None:
        st.session_state["tasks.new_title"] = ""
        st.session_state["tasks.new_description"] = ""


def _set_status(ctx, task_id):
    ctx.tasks.update(task_id, {"status": st.session_state.get(f"tasks.status.{task_id}")})


def _filter_changed(ctx):
    ctx.tasks.set_scope(st.session_state.get("tasks.hub_filter") or None)


def render_tasks_tab(ctx):
    st.markdown("<div class='section-title'>Tasks</div>", unsafe_allow_html=True)
    hubs = _hub_options(ctx)

    st.selectbox(
        "Hub",
        [""] + list(hubs),
        format_func=lambda value: hubs.get(value, "All hubs"),
        key="tasks.hub_filter",
        on_change=_filter_changed,
        args=(ctx,),
    )

    with st.expander("New task"):
        st.text_input("Title", key="tasks.new_title")
        st.text_area("Description", key="tasks.new_description")
        cols = st.columns(4)
        cols[0].selectbox("Priority", list(TASK_PRIORITIES), format_func=TASK_PRIORITIES.get, index=1, key="tasks.new_priority")
        cols[1].number_input("Credits", min_value=0, value=5, step=1, key="tasks.new_credits")
        cols[2].selectbox("Hub", [""] + list(hubs), format_func=lambda value: hubs.get(value, "None"), key="tasks.new_hub")
        cols[3].date_input("Due", value=None, key="tasks.new_due")
        st.button("Add task", on_click=_create_task, args=(ctx,), key="tasks.add")

    tasks = ctx.tasks.rows
    if not tasks:
        st.info("No tasks yet.")
        return

    for task in tasks:
        task_id = task["id"]
        cols = st.columns([0.06, 0.54, 0.2, 0.1, 0.1])
        cols[0].checkbox(
            "Done",
            value=task.get("status") == "done",
            key=f"tasks.done.{task_id}",
            on_change=ctx.tasks.toggle_complete,
            args=(task_id,),
            label_visibility="collapsed",
        )
        label = task.get("title") or "Untitled"
        hub_label = hubs.get(task.get("hub_id"))
        cols[1].markdown(f"**{label}**" + (f"  \n<span class='small-label'>{hub_label}</span>" if hub_label else ""), unsafe_allow_html=True)
        cols[2].selectbox(
            "Status",
            TASK_STATUSES,
            index=TASK_STATUSES.index(task.get("status")) if task.get("status") in TASK_STATUSES else 0,
            key=f"tasks.status.{task_id}",
            on_change=_set_status,
            args=(ctx, task_id),
            label_visibility="collapsed",
        )
        cols[3].caption(f"{task.get('credits') or 0} cr")
        cols[4].button("Delete", key=f"tasks.delete.{task_id}", on_click=ctx.tasks.delete, args=(task_id,))
