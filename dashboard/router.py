import streamlit as st

from dashboard.tabs.analytics_tab import render_analytics_tab
from dashboard.tabs.attendance_tab import render_attendance_tab
from dashboard.tabs.board_tab import render_board_tab
from dashboard.tabs.habits_tab import render_habits_tab
from dashboard.tabs.overview_tab import render_overview_tab
from dashboard.tabs.rewards_tab import render_rewards_tab
from dashboard.tabs.tasks_tab import render_tasks_tab


TAB_OPTIONS = [
    "Dashboard",
    "Tasks",
    "Habits",
    "Attendance",
    "Board",
    "Analytics",
    "Rewards",
]

RENDERERS = {
    "Dashboard": render_overview_tab,
    "Tasks": render_tasks_tab,
    "Habits": render_habits_tab,
    "Attendance": render_attendance_tab,
    "Board": render_board_tab,
    "Analytics": render_analytics_tab,
    "Rewards": render_rewards_tab,
}


def render_router(ctx):
    active = st.session_state.get("ui.active_tab", TAB_OPTIONS[0])
    active = st.segmented_control(
        "Workspace",
        TAB_OPTIONS,
        key="ui.active_tab",
        default=active,
    )
    _render_tab(active or TAB_OPTIONS[0], ctx)


@st.fragment
def _render_tab(name, ctx):
    RENDERERS[name](ctx)
