from __future__ import annotations

import math
from dataclasses import dataclass

import pandas as pd

from dashboard.constants import (
    LIFE_SCORE_EVENTS_PLACEHOLDER,
    LIFE_SCORE_MOOD_PLACEHOLDER,
    LIFE_SCORE_WEIGHTS,
)


@dataclass(frozen=True)
class LifeScore:
    score: int
    tasks: int
    habits: int
    events: int
    mood: int

    @property
    def breakdown(self) -> dict:
        return {"tasks": self.tasks, "habits": self.habits, "events": self.events, "mood": self.mood}


def round_half_up(value) -> int:
    """Round .5 away from zero for positive values, unlike the builtin round."""
    return int(math.floor(value + 0.5))


def _raw_rate(completed, total) -> float:
    if not total:
        return 0.0
    return completed / total * 100


def completion_rate(completed, total):
    return round_half_up(_raw_rate(completed, total))


def _task_counts(tasks):
    tasks = list(tasks or [])
    return sum(1 for task in tasks if task.get("status") == "done"), len(tasks)


def _habit_counts(habits):
    habits = list(habits or [])
    return sum(1 for habit in habits if habit.get("completed_today")), len(habits)


def task_completion_rate(tasks):
    return completion_rate(*_task_counts(tasks))


def habit_completion_rate(habits):
    return completion_rate(*_habit_counts(habits))


def life_score(
    tasks,
    habits,
    events_factor=LIFE_SCORE_EVENTS_PLACEHOLDER,
    mood_factor=LIFE_SCORE_MOOD_PLACEHOLDER,
) -> LifeScore:
    # The weighted sum uses the unrounded rates; only the displayed parts are rounded.
    raw = {
        "tasks": _raw_rate(*_task_counts(tasks)),
        "habits": _raw_rate(*_habit_counts(habits)),
        "events": float(events_factor),
        "mood": float(mood_factor),
    }
    score = sum(raw[key] * weight for key, weight in LIFE_SCORE_WEIGHTS.items())
    return LifeScore(score=round_half_up(score), **{key: round_half_up(value) for key, value in raw.items()})


def total_credits(transactions):
    return sum(int(row.get("amount") or 0) for row in transactions or [])


def current_streak(habits):
    return max((int(habit.get("streak") or 0) for habit in habits or []), default=0)


def completion_counts(tasks, habits):
    tasks = list(tasks or [])
    habits = list(habits or [])
    return {
        "tasks_done": sum(1 for task in tasks if task.get("status") == "done"),
        "tasks_total": len(tasks),
        "habits_done": sum(1 for habit in habits if habit.get("completed_today")),
        "habits_total": len(habits),
    }


def hub_breakdown(hubs, tasks) -> pd.DataFrame:
    """Tasks per hub with their completion rate, one row per hub."""
    columns = ["hub", "slug", "color", "tasks", "completed", "completion_rate"]
    hubs = list(hubs or [])
    if not hubs:
        return pd.DataFrame(columns=columns)
    frame = pd.DataFrame(
        [{"hub_id": task.get("hub_id"), "done": task.get("status") == "done"} for task in tasks or []],
        columns=["hub_id", "done"],
    )
    records = []
    for hub in hubs:
        hub_tasks = frame[frame["hub_id"] == hub.get("id")]
        total = int(len(hub_tasks))
        done = int(hub_tasks["done"].sum()) if total else 0
        records.append(
            {
                "hub": hub.get("title"),
                "slug": hub.get("slug"),
                "color": hub.get("color"),
                "tasks": total,
                "completed": done,
                "completion_rate": completion_rate(done, total),
            }
        )
    return pd.DataFrame(records, columns=columns)
