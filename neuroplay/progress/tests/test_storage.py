import datetime
import random
from unittest.mock import patch

import pytest
from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.utils import timezone

from neuroplay.progress.exceptions import StorageError
from neuroplay.progress.helpers.storage import append_performance
from neuroplay.progress.helpers.storage import clear_all
from neuroplay.progress.helpers.storage import get_or_create_todays_challenge
from neuroplay.progress.helpers.storage import get_todays_challenge
from neuroplay.progress.helpers.storage import get_user_stats
from neuroplay.progress.helpers.storage import list_performances
from neuroplay.progress.helpers.storage import list_performances_by_task
from neuroplay.progress.helpers.storage import mark_challenge_task_complete
from neuroplay.progress.helpers.storage import put_user_stats
from neuroplay.progress.helpers.storage import update_user_stats
from neuroplay.progress.helpers.storage import upsert_daily_challenge
from neuroplay.progress.models import DailyChallenge
from neuroplay.progress.models import UserStats
from neuroplay.tasks.models import Performance
from neuroplay.tasks.registry import TaskType
from neuroplay.users.tests.factories import UserFactory


def _todays_challenge(user, tasks=("reaction-time", "stroop-test", "tapping-speed")):
    return DailyChallenge.objects.create(user=user, date=timezone.localdate(), tasks=list(tasks))


# ─────────────────────────────────────────────────────────────────────────────
# Performances
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.django_db
class TestPerformanceStorage:
    def test_append_and_list_in_order(self):
        user = UserFactory()
        first = append_performance(user, "reaction-time", 70, {"average_reaction_time_ms": 300})
        second = append_performance(user, TaskType.STROOP_TEST, 55, {})
        assert list_performances(user) == [first, second]
        assert second.task_type == "stroop-test"

    def test_list_by_task(self):
        user = UserFactory()
        append_performance(user, "reaction-time", 70, {})
        append_performance(user, "stroop-test", 55, {})
        append_performance(user, "reaction-time", 80, {})
        assert [p.score for p in list_performances_by_task(user, "reaction-time")] == [70, 80]

    def test_histories_are_per_user(self):
        user = UserFactory()
        append_performance(UserFactory(), "reaction-time", 70, {})
        assert list_performances(user) == []

    def test_invalid_task_type_rejected(self):
        with pytest.raises(ValidationError):
            append_performance(UserFactory(), "juggling", 10, {})

    def test_write_failure_raises_storage_error(self):
        with patch.object(Performance, "save", side_effect=DatabaseError("disk full")):
            with pytest.raises(StorageError):
                append_performance(UserFactory(), "reaction-time", 70, {})

    def test_read_failure_degrades_to_empty(self):
        user = UserFactory()
        with patch.object(Performance.objects, "filter", side_effect=DatabaseError("locked")):
            assert list_performances(user) == []


# ─────────────────────────────────────────────────────────────────────────────
# Stats
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.django_db
class TestUserStatsStorage:
    def test_default_stats(self):
        stats = get_user_stats(UserFactory())
        assert stats.pk is None
        assert stats.tasks_completed == 0
        assert stats.average_scores == {t: 0 for t in TaskType.values}

    def test_put_then_get(self):
        user = UserFactory()
        stats = get_user_stats(user)
        stats.total_score = 42
        put_user_stats(user, stats)
        assert get_user_stats(user).total_score == 42

    def test_put_failure_raises(self):
        user = UserFactory()
        with patch.object(UserStats, "save", side_effect=DatabaseError):
            with pytest.raises(StorageError):
                put_user_stats(user, get_user_stats(user))

    def test_read_failure_returns_default(self):
        user = UserFactory()
        append_performance(user, "reaction-time", 70, {})
        with patch.object(UserStats.objects, "filter", side_effect=DatabaseError):
            assert get_user_stats(user).tasks_completed == 0

    def test_each_performance_updates_stats(self):
        user = UserFactory()
        append_performance(user, "reaction-time", 70, {})
        append_performance(user, "reaction-time", 91, {})
        append_performance(user, "stroop-test", 40, {})

        stats = get_user_stats(user)
        assert stats.tasks_completed == 3
        assert stats.total_score == 201
        assert stats.streak == 1
        assert stats.average_scores["reaction-time"] == pytest.approx(80.5)
        assert stats.average_scores["stroop-test"] == 40
        assert stats.average_scores["tapping-speed"] == 0

    def test_averages_match_history(self):
        user = UserFactory()
        for score in (12, 57, 88, 31):
            append_performance(user, "spatial-memory", score, {})
        scores = [p.score for p in list_performances_by_task(user, "spatial-memory")]
        assert get_user_stats(user).average_scores["spatial-memory"] == pytest.approx(sum(scores) / len(scores))

    def test_activity_yesterday_extends_streak(self):
        user = UserFactory()
        append_performance(user, "reaction-time", 70, {})
        UserStats.objects.filter(user=user).update(
            streak=3, last_activity=timezone.now() - datetime.timedelta(days=1)
        )
        append_performance(user, "reaction-time", 70, {})
        assert get_user_stats(user).streak == 4

    def test_gap_resets_streak(self):
        user = UserFactory()
        append_performance(user, "reaction-time", 70, {})
        UserStats.objects.filter(user=user).update(
            streak=3, last_activity=timezone.now() - datetime.timedelta(days=3)
        )
        append_performance(user, "reaction-time", 70, {})
        assert get_user_stats(user).streak == 1

    def test_stats_failure_keeps_performance(self):
        user = UserFactory()
        with patch("neuroplay.progress.helpers.storage.put_user_stats", side_effect=StorageError):
            performance = append_performance(user, "reaction-time", 70, {})
        assert Performance.objects.filter(pk=performance.pk).exists()
        assert not UserStats.objects.filter(user=user).exists()

    def test_history_read_failure_leaves_average_untouched(self):
        user = UserFactory()
        append_performance(user, "reaction-time", 80, {})
        # Stored without firing post_save, so the recompute runs under the patch
        (performance,) = Performance.objects.bulk_create(
            [Performance(user=user, task_type="reaction-time", score=60, metrics={})]
        )
        with patch.object(Performance.objects, "filter", side_effect=DatabaseError("locked")):
            with pytest.raises(StorageError):
                update_user_stats(performance)

        stats = get_user_stats(user)
        assert stats.average_scores["reaction-time"] == 80
        assert stats.tasks_completed == 1

        update_user_stats(performance)
        stats = get_user_stats(user)
        assert stats.average_scores["reaction-time"] == pytest.approx((80 + 60) / 2)
        assert stats.tasks_completed == 2

    def test_stats_read_failure_is_not_overwritten(self):
        user = UserFactory()
        append_performance(user, "reaction-time", 80, {})
        append_performance(user, "stroop-test", 50, {})
        (performance,) = Performance.objects.bulk_create(
            [Performance(user=user, task_type="reaction-time", score=60, metrics={})]
        )
        with patch.object(UserStats.objects, "filter", side_effect=DatabaseError("locked")):
            with pytest.raises(StorageError):
                update_user_stats(performance)

        stats = get_user_stats(user)
        assert stats.tasks_completed == 2
        assert stats.average_scores["stroop-test"] == 50


# ─────────────────────────────────────────────────────────────────────────────
# Daily challenges
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.django_db
class TestDailyChallengeStorage:
    def test_created_lazily_with_three_distinct_tasks(self):
        user = UserFactory()
        assert get_todays_challenge(user) is None
        challenge = get_or_create_todays_challenge(user, rng=random.Random(4))
        assert challenge.date == timezone.localdate()
        assert len(challenge.tasks) == 3
        assert len(set(challenge.tasks)) == 3
        assert set(challenge.tasks) <= set(TaskType.values)
        assert challenge.completed_tasks == []
        assert not challenge.completed

    def test_same_challenge_all_day(self):
        user = UserFactory()
        first = get_or_create_todays_challenge(user)
        second = get_or_create_todays_challenge(user)
        assert first.pk == second.pk
        assert first.tasks == second.tasks

    def test_performance_ticks_off_challenge_task(self):
        user = UserFactory()
        _todays_challenge(user)
        append_performance(user, "stroop-test", 60, {})
        challenge = get_todays_challenge(user)
        assert challenge.completed_tasks == ["stroop-test"]
        assert not challenge.completed

    def test_all_tasks_complete_challenge(self):
        user = UserFactory()
        _todays_challenge(user)
        for task_type in ("reaction-time", "stroop-test", "stroop-test", "tapping-speed", "decision-task"):
            append_performance(user, task_type, 60, {})
        challenge = get_todays_challenge(user)
        assert challenge.completed_tasks == ["reaction-time", "stroop-test", "tapping-speed"]
        assert challenge.completed
        assert challenge.completion_percentage == 100

    def test_no_challenge_nothing_to_mark(self):
        assert mark_challenge_task_complete(UserFactory(), "stroop-test") is None

    def test_upsert_replaces_same_day(self):
        user = UserFactory()
        _todays_challenge(user)
        replacement = DailyChallenge(
            user=user, date=timezone.localdate(), tasks=["decision-task", "tower-of-hanoi", "spatial-memory"]
        )
        upsert_daily_challenge(replacement)
        assert DailyChallenge.objects.filter(user=user).count() == 1
        assert get_todays_challenge(user).tasks == ["decision-task", "tower-of-hanoi", "spatial-memory"]


@pytest.mark.django_db
class TestClearAll:
    def test_removes_only_that_users_data(self):
        user = UserFactory()
        other = UserFactory()
        _todays_challenge(user)
        append_performance(user, "reaction-time", 70, {})
        append_performance(other, "reaction-time", 70, {})

        clear_all(user)

        assert list_performances(user) == []
        assert get_todays_challenge(user) is None
        assert get_user_stats(user).pk is None
        assert len(list_performances(other)) == 1
