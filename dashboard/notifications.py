from __future__ import annotations

import logging
from dataclasses import dataclass

import streamlit as st

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    title: str
    description: str = ""
    variant: str = "default"


class LogNotifier:
    def notify(self, title, description="", variant="default"):
        level = logging.WARNING if variant == "destructive" else logging.INFO
        logger.log(level, "%s: %s", title, description)
        return Notification(title, description, variant)


class StreamlitNotifier(LogNotifier):
    """Transient toasts in the Streamlit session."""

    def notify(self, title, description="", variant="default"):
        note = super().notify(title, description, variant)
        icon = "⚠️" if variant == "destructive" else "✅"
        st.toast(f"**{title}**  \n{description}" if description else f"**{title}**", icon=icon)
        return note
