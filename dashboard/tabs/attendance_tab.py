from datetime import date

import streamlit as st

from dashboard.constants import ABSENCE_TYPES
from dashboard.data.synchronizers import ValidationError
from dashboard.visualizations import attendance_chart


def _selected_day():
    return st.session_state.get("attendance.selected_date") or date.today()


def _save_attendance(ctx):
    went = bool(st.session_state.get("attendance.went"))
    updates = {"went_to_college": went}
    if went:
        updates.update({"absence_type": None, "absence_note": None})
    else:
        updates["absence_type"] = st.session_state.get("attendance.absence_type")
        updates["absence_note"] = (st.session_state.get("attendance.absence_note") or "").strip() or None
    try:
        ctx.attendance.update_attendance(_selected_day(), updates)
    except ValidationError as exc:
        ctx.notifier.notify("Invalid attendance", str(exc), variant="destructive")


def _toggle_tasks_completed(ctx):
    ctx.attendance.mark_tasks_completed(_selected_day(), bool(st.session_state.get("attendance.tasks_done")))


def render_attendance_tab(ctx):
    st.markdown("<div class='section-title'>Attendance</div>", unsafe_allow_html=True)
    st.date_input("Day", value=date.today(), key="attendance.selected_date")
    day = _selected_day()

    record = ctx.attendance.view_day(day)
    if record is None:
        st.info("Attendance is unavailable right now.")
        return

    went = bool(record.get("went_to_college"))
    st.toggle("Went to college", value=went, key="attendance.went")
    if not st.session_state.get("attendance.went", went):
        current_type = record.get("absence_type")
        st.selectbox(
            "Absence type",
            ABSENCE_TYPES,
            index=ABSENCE_TYPES.index(current_type) if current_type in ABSENCE_TYPES else 0,
            key="attendance.absence_type",
        )
        st.text_input("Note", value=record.get("absence_note") or "", key="attendance.absence_note")
    st.button("Save attendance", on_click=_save_attendance, args=(ctx,), key="attendance.save")

    st.checkbox(
        "Completed planned tasks",
        value=bool(record.get("completed_planned_tasks")),
        key="attendance.tasks_done",
        on_change=_toggle_tasks_completed,
        args=(ctx,),
    )

    planned = ctx.attendance.planned_for(day)
    if planned:
        st.markdown("<div class='small-label'>Planned for this day</div>", unsafe_allow_html=True)
        for item in planned:
            st.checkbox(
                item.get("card_id") or "card",
                value=bool(item.get("completed")),
                key=f"attendance.planned.{item['id']}",
                on_change=lambda planned_id=item["id"]: ctx.attendance.set_planned_completed(
                    planned_id, bool(st.session_state.get(f"attendance.planned.{planned_id}"))
                ),
            )

    days = ctx.attendance.rows
    if days:
        st.plotly_chart(attendance_chart(days), use_container_width=True)
    st.download_button(
        "Export CSV",
        data=ctx.attendance.export_csv(),
        file_name=ctx.attendance.export_filename(),
        mime="text/csv",
        key="attendance.export",
    )
