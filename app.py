import logging

import streamlit as st

from dashboard.context import DashboardContext
from dashboard.data.api_client import build_client
from dashboard.data.attendance import AttendanceSynchronizer
from dashboard.data.credits import CreditsLedger, RewardsStore
from dashboard.data.kanban import BoardSynchronizer
from dashboard.data.provisioning import ensure_defaults
from dashboard.data.synchronizers import HabitSynchronizer, HubSynchronizer, TaskSynchronizer
from dashboard.header import render_global_header
from dashboard.logging_config import configure_logging
from dashboard.notifications import StreamlitNotifier
from dashboard.router import render_router
from dashboard.settings import get_settings
from dashboard.state import session_slices

configure_logging()
logger = logging.getLogger("dashboard.app")

st.set_page_config(page_title="Life Hub", layout="wide")


def _build_context():
    settings = get_settings()
    client = session_slices.get_or_create("session", "client", lambda: build_client(settings, settings.user_id))
    notifier = StreamlitNotifier()

    def synchronizer(name, factory):
        return session_slices.get_or_create("sync", name, factory)

    ledger = synchronizer("ledger", lambda: CreditsLedger(client, notifier))
    ctx = DashboardContext(
        settings=settings,
        client=client,
        notifier=notifier,
        hubs=synchronizer("hubs", lambda: HubSynchronizer(client, notifier)),
        tasks=synchronizer("tasks", lambda: TaskSynchronizer(client, notifier, ledger=ledger)),
        habits=synchronizer("habits", lambda: HabitSynchronizer(client, notifier, ledger=ledger)),
        attendance=synchronizer(
            "attendance",
            lambda: AttendanceSynchronizer(client, notifier, window_days=settings.attendance_window_days),
        ),
        boards=synchronizer("boards", lambda: BoardSynchronizer(client, notifier)),
        ledger=ledger,
        rewards=synchronizer("rewards", lambda: RewardsStore(client, ledger, notifier=notifier)),
    )

    if not session_slices.get_value("session", "initialized"):
        outcome = ensure_defaults(client, notifier, hubs=ctx.hubs, boards=ctx.boards)
        if outcome.created:
            logger.info("Default workspace provisioned for %s", client.user_id)
        for mirror in (ctx.hubs, ctx.tasks, ctx.habits, ctx.attendance, ctx.boards, ctx.rewards):
            mirror.load()
        session_slices.set_value("session", "initialized", True)
    return ctx


def _reload():
    session_slices.clear_slice("sync")
    session_slices.clear_slice("kanban")
    session_slices.set_value("session", "initialized", False)


st.sidebar.button("Reload data", on_click=_reload, key="ui.reload")
context = _build_context()
render_global_header(context)
render_router(context)
