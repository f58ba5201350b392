"""
Derived Metrics Tests
=====================

Life score, credits total, current streak and the per-hub breakdown.
"""

import pytest

from dashboard.metrics import (
    completion_rate,
    completion_counts,
    current_streak,
    habit_completion_rate,
    hub_breakdown,
    life_score,
    task_completion_rate,
    total_credits,
)


def _tasks(*statuses):
    return [{"id": str(idx), "status": status} for idx, status in enumerate(statuses)]


def _habits(*flags, streaks=None):
    streaks = streaks or [0] * len(flags)
    return [
        {"id": str(idx), "completed_today": flag, "streak": streak}
        for idx, (flag, streak) in enumerate(zip(flags, streaks))
    ]


class TestCompletionRates:
    @pytest.mark.parametrize(
        "statuses, expected",
        [
            ((), 0),
            (("todo",), 0),
            (("done",), 100),
            (("done", "todo", "doing"), 33),
            (("done", "done", "todo"), 67),
        ],
    )
    def test_task_rate_is_rounded_share_of_done(self, statuses, expected):
        assert task_completion_rate(_tasks(*statuses)) == expected

    def test_habit_rate_counts_completed_today(self):
        assert habit_completion_rate(_habits(True, False, False, True)) == 50

    def test_habit_rate_is_zero_without_habits(self):
        assert habit_completion_rate([]) == 0

    @pytest.mark.parametrize("completed, total, expected", [(1, 8, 13), (3, 8, 38), (5, 8, 63), (1, 200, 1)])
    def test_halves_round_up(self, completed, total, expected):
        assert completion_rate(completed, total) == expected


class TestLifeScore:
    def test_empty_mirrors_use_only_placeholders(self):
        score = life_score([], [])

        assert score.tasks == 0
        assert score.habits == 0
        # 80 * 0.15 + 75 * 0.15
        assert score.score == 23

    def test_weights_match_breakdown(self):
        score = life_score(_tasks("done", "done", "done", "todo"), _habits(True, False))

        assert score.breakdown == {"tasks": 75, "habits": 50, "events": 80, "mood": 75}
        assert score.score == round(75 * 0.40 + 50 * 0.30 + 80 * 0.15 + 75 * 0.15)

    def test_perfect_day_scores_placeholder_bound(self):
        score = life_score(_tasks("done"), _habits(True))
        assert score.score == round(100 * 0.40 + 100 * 0.30 + 80 * 0.15 + 75 * 0.15)

    def test_score_uses_unrounded_rates(self):
        score = life_score(_tasks("done", "todo", "todo"), _habits(True, False, False))

        assert score.tasks == 33
        assert score.habits == 33
        # 33.33 * 0.40 + 33.33 * 0.30 + 80 * 0.15 + 75 * 0.15 = 46.58
        assert score.score == 47

    def test_half_point_score_rounds_up(self):
        # 50 * 0.40 + 0 * 0.30 + 90 * 0.15 + 80 * 0.15 = 45.5
        score = life_score(_tasks("done", "todo"), [], events_factor=90, mood_factor=80)
        assert score.score == 46

    def test_factors_are_configurable(self):
        score = life_score([], [], events_factor=100, mood_factor=100)
        assert score.score == 30
        assert score.events == 100


class TestAggregates:
    def test_total_credits_sums_amounts(self):
        assert total_credits([{"amount": 5}, {"amount": -20}, {"amount": 20}, {"amount": 2}]) == 7

    def test_total_credits_of_nothing_is_zero(self):
        assert total_credits([]) == 0

    def test_current_streak_is_the_best_streak(self):
        assert current_streak(_habits(True, False, True, streaks=[3, 9, 4])) == 9

    def test_current_streak_without_habits(self):
        assert current_streak([]) == 0

    def test_completion_counts(self):
        counts = completion_counts(_tasks("done", "todo"), _habits(True, True, False))
        assert counts == {"tasks_done": 1, "tasks_total": 2, "habits_done": 2, "habits_total": 3}


class TestHubBreakdown:
    def test_counts_tasks_per_hub(self):
        hubs = [
            {"id": "h1", "title": "Tech", "slug": "tech", "color": "hub-tech"},
            {"id": "h2", "title": "Fitness", "slug": "fitness", "color": "hub-fitness"},
        ]
        tasks = [
            {"hub_id": "h1", "status": "done"},
            {"hub_id": "h1", "status": "todo"},
            {"hub_id": None, "status": "done"},
        ]

        frame = hub_breakdown(hubs, tasks)

        assert list(frame["hub"]) == ["Tech", "Fitness"]
        assert list(frame["tasks"]) == [2, 0]
        assert list(frame["completed"]) == [1, 0]
        assert list(frame["completion_rate"]) == [50, 0]

    def test_no_hubs_gives_empty_frame(self):
        assert hub_breakdown([], [{"hub_id": "x", "status": "done"}]).empty
