from __future__ import annotations

import pandas as pd
import plotly.graph_objects as go

from dashboard.constants import HUB_COLORS

PLOT_THEME = {
    "text_main": "#E9ECEF",
    "text_soft": "#ADB5BD",
    "plot_grid": "rgba(173,181,189,0.15)",
    "border": "rgba(173,181,189,0.35)",
    "accent": "#6C8EF5",
}


def apply_common_plot_style(fig, title, show_xgrid=True, show_ygrid=True):
    fig.update_layout(
        title=title,
        title_font=dict(color=PLOT_THEME["text_main"], size=16),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color=PLOT_THEME["text_main"]),
        margin=dict(l=40, r=20, t=40, b=30),
        xaxis=dict(
            showgrid=show_xgrid,
            gridcolor=PLOT_THEME["plot_grid"],
            tickfont=dict(color=PLOT_THEME["text_soft"]),
            zeroline=False,
            showline=True,
            linecolor=PLOT_THEME["border"],
        ),
        yaxis=dict(
            showgrid=show_ygrid,
            gridcolor=PLOT_THEME["plot_grid"],
            zeroline=False,
            tickfont=dict(color=PLOT_THEME["text_soft"]),
            showline=True,
            linecolor=PLOT_THEME["border"],
        ),
    )
    return fig


def life_score_breakdown_chart(score, height=260):
    labels = ["Tasks", "Habits", "Events", "Mood"]
    values = [score.tasks, score.habits, score.events, score.mood]
    fig = go.Figure(
        data=go.Bar(
            x=values,
            y=labels,
            orientation="h",
            marker=dict(color=PLOT_THEME["accent"]),
            text=[f"{value}%" for value in values],
            textposition="auto",
        )
    )
    apply_common_plot_style(fig, f"Life score {score.score}", show_ygrid=False)
    fig.update_layout(height=height)
    fig.update_xaxes(range=[0, 100])
    return fig


def hub_completion_chart(frame: pd.DataFrame, height=300):
    colors = [HUB_COLORS.get(color, PLOT_THEME["accent"]) for color in frame.get("color", [])]
    fig = go.Figure(
        data=go.Bar(
            x=list(frame["hub"]),
            y=list(frame["completion_rate"]),
            marker=dict(color=colors),
            customdata=list(zip(frame["completed"], frame["tasks"])),
            hovertemplate="%{x}: %{customdata[0]}/%{customdata[1]} done<extra></extra>",
        )
    )
    apply_common_plot_style(fig, "Task completion by hub (%)", show_xgrid=False)
    fig.update_layout(height=height)
    fig.update_yaxes(range=[0, 100])
    return fig


def credits_history_chart(transactions, height=260):
    frame = pd.DataFrame(transactions or [], columns=["created_at", "amount"])
    if not frame.empty:
        frame = frame.sort_values("created_at")
        frame["balance"] = frame["amount"].astype(int).cumsum()
    fig = go.Figure(
        data=go.Scatter(
            x=list(frame["created_at"]),
            y=list(frame.get("balance", [])),
            mode="lines+markers",
            line=dict(color=PLOT_THEME["accent"], width=2),
            marker=dict(size=6),
        )
    )
    apply_common_plot_style(fig, "Credits balance")
    fig.update_layout(height=height)
    return fig


def attendance_chart(days, height=260):
    frame = pd.DataFrame(days or [], columns=["date", "went_to_college"])
    if not frame.empty:
        frame = frame.sort_values("date")
    fig = go.Figure(
        data=go.Scatter(
            x=list(frame["date"]),
            y=[1 if value else 0 for value in frame["went_to_college"]],
            mode="markers",
            marker=dict(size=10, color=PLOT_THEME["accent"]),
        )
    )
    apply_common_plot_style(fig, "Attendance", show_ygrid=False)
    fig.update_layout(height=height)
    fig.update_yaxes(tickvals=[0, 1], ticktext=["Absent", "Present"], range=[-0.5, 1.5])
    return fig
