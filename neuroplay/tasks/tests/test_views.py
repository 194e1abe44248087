import json
from unittest.mock import patch

import pytest
from django.urls import reverse

from neuroplay.progress.exceptions import StorageError
from neuroplay.progress.models import UserStats
from neuroplay.tasks.models import Performance
from neuroplay.users.tests.factories import UserFactory


def _post(client, url_name, payload):
    return client.post(reverse(url_name), data=json.dumps(payload), content_type="application/json")


def _logged_in(client):
    user = UserFactory()
    client.force_login(user)
    return user


# ─────────────────────────────────────────────────────────────────────────────
# PerformanceSubmitView
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.django_db
class TestPerformanceSubmitView:
    def test_login_required(self, client):
        response = _post(client, "tasks:submit_performance", {"task_type": "tapping-speed", "metrics": {}})
        assert response.status_code == 302

    def test_scores_and_stores_performance(self, client):
        user = _logged_in(client)
        response = _post(
            client,
            "tasks:submit_performance",
            {"task_type": "tapping-speed", "metrics": {"number_of_taps": 52, "duration_ms": 10_000}},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["ok"] is True
        assert body["score"] == 72
        assert body["stats"]["tasks_completed"] == 1
        assert body["stats"]["streak"] == 1
        assert body["stats"]["average_scores"]["tapping-speed"] == 72

        performance = Performance.objects.get(user=user)
        assert str(performance.id) == body["id"]
        assert performance.metrics == {"number_of_taps": 52, "duration_ms": 10_000, "tap_times_ms": []}

    def test_missing_metrics_store_a_zero_score(self, client):
        _logged_in(client)
        response = _post(client, "tasks:submit_performance", {"task_type": "stroop-test", "metrics": {}})
        assert response.status_code == 201
        assert response.json()["score"] == 0

    def test_invalid_json(self, client):
        _logged_in(client)
        response = client.post(
            reverse("tasks:submit_performance"), data="not json", content_type="application/json"
        )
        assert response.status_code == 422

    def test_unknown_task_type(self, client):
        _logged_in(client)
        response = _post(client, "tasks:submit_performance", {"task_type": "juggling", "metrics": {}})
        assert response.status_code == 422
        assert not Performance.objects.exists()

    def test_non_numeric_metric(self, client):
        _logged_in(client)
        response = _post(
            client, "tasks:submit_performance", {"task_type": "reaction-time", "metrics": {"average_reaction_time_ms": "fast"}}
        )
        assert response.status_code == 422

    def test_decision_metrics_recomputed_from_choices(self, client):
        user = _logged_in(client)
        choices = [
            {"trial": 1, "choice": "left", "reward": 10, "reward_type": "high"},
            {"trial": 2, "choice": "left", "reward": 2, "reward_type": "low"},
            {"trial": 3, "choice": "right", "reward": 2, "reward_type": "low"},
        ]
        response = _post(
            client,
            "tasks:submit_performance",
            {"task_type": "decision-task", "metrics": {"total_reward": 9999, "left_door_choices": 0, "choices": choices}},
        )
        assert response.status_code == 201
        metrics = Performance.objects.get(user=user).metrics
        assert metrics["total_reward"] == 14
        assert metrics["left_door_choices"] == 2
        assert metrics["right_door_choices"] == 1

    def test_malformed_decision_choices(self, client):
        _logged_in(client)
        response = _post(
            client,
            "tasks:submit_performance",
            {"task_type": "decision-task", "metrics": {"choices": [{"trial": 1, "choice": "up", "reward": 2}]}},
        )
        assert response.status_code == 422

    def test_sound_counts_recomputed_from_responses(self, client):
        user = _logged_in(client)
        responses = [
            {"frequencies": [440, 440, 440, 440], "last_tone_relation": "same", "user_response": "same",
             "response_time_ms": 1200},
            {"frequencies": [440, 440, 440, 392], "last_tone_relation": "lower", "user_response": "higher",
             "response_time_ms": 1800},
        ]
        response = _post(
            client,
            "tasks:submit_performance",
            {"task_type": "sound-discrimination", "metrics": {"correct_identifications": 2, "responses": responses}},
        )
        assert response.status_code == 201
        metrics = Performance.objects.get(user=user).metrics
        assert metrics["correct_identifications"] == 1
        assert metrics["incorrect_identifications"] == 1
        assert metrics["accuracy_by_frequency"] == {"A4": 50.0}

    def test_decision_log_with_duplicate_trials_rejected(self, client):
        _logged_in(client)
        choices = [
            {"trial": 1, "choice": "left", "reward": 10},
            {"trial": 1, "choice": "left", "reward": 10},
        ]
        response = _post(client, "tasks:submit_performance", {"task_type": "decision-task", "metrics": {"choices": choices}})
        assert response.status_code == 422
        assert not Performance.objects.exists()

    def test_tapping_count_recomputed_from_tap_times(self, client):
        user = _logged_in(client)
        response = _post(
            client,
            "tasks:submit_performance",
            {"task_type": "tapping-speed", "metrics": {"number_of_taps": 500, "tap_times_ms": [100, 2500, 9000, 12_000]}},
        )
        assert response.status_code == 201
        metrics = Performance.objects.get(user=user).metrics
        assert metrics["number_of_taps"] == 3
        assert metrics["duration_ms"] == 10_000
        # 0.3 taps/s
        assert response.json()["score"] == 6

    def test_stroop_counts_recomputed_from_responses(self, client):
        user = _logged_in(client)
        responses = [
            {"word": "red", "color": "blue", "chosen_color": "blue", "rt_ms": 800},
            {"word": "red", "color": "blue", "chosen_color": "red", "rt_ms": 1200},
        ]
        response = _post(
            client,
            "tasks:submit_performance",
            {"task_type": "stroop-test", "metrics": {"correct_answers": 2, "responses": responses}},
        )
        assert response.status_code == 201
        metrics = Performance.objects.get(user=user).metrics
        assert metrics["correct_answers"] == 1
        assert metrics["incorrect_answers"] == 1
        assert metrics["average_reaction_time_ms"] == 1000

    def test_reaction_time_average_recomputed_from_times(self, client):
        user = _logged_in(client)
        response = _post(
            client,
            "tasks:submit_performance",
            {"task_type": "reaction-time", "metrics": {"average_reaction_time_ms": 100, "reaction_times_ms": [200, 300]}},
        )
        assert response.status_code == 201
        assert Performance.objects.get(user=user).metrics["average_reaction_time_ms"] == 250
        assert response.json()["score"] == 75

    def test_hanoi_minimum_recomputed_from_disks(self, client):
        user = _logged_in(client)
        response = _post(
            client,
            "tasks:submit_performance",
            {"task_type": "tower-of-hanoi", "metrics": {"moves": 14, "solve_time_ms": 120_000, "min_moves": 14, "disks": 3}},
        )
        assert response.status_code == 201
        assert Performance.objects.get(user=user).metrics["min_moves"] == 7
        assert response.json()["score"] == 30

    def test_hanoi_unoffered_disk_count_rejected(self, client):
        _logged_in(client)
        response = _post(
            client,
            "tasks:submit_performance",
            {"task_type": "tower-of-hanoi", "metrics": {"moves": 14, "solve_time_ms": 1000, "disks": 40}},
        )
        assert response.status_code == 422

    def test_spatial_memory_recomputed_from_attempts(self, client):
        user = _logged_in(client)
        attempts = [
            {"shown": [1, 2, 3], "recalled": [1, 2, 3]},
            {"shown": [4, 5, 6, 7], "recalled": [4, 5, 6, 7]},
            {"shown": [8, 9, 10, 11, 12], "recalled": [8, 9]},
        ]
        response = _post(
            client,
            "tasks:submit_performance",
            {"task_type": "spatial-memory", "metrics": {"correct_matches": 3, "level": 3, "attempts": attempts}},
        )
        assert response.status_code == 201
        metrics = Performance.objects.get(user=user).metrics
        assert metrics["correct_matches"] == 2
        assert metrics["total_attempts"] == 3
        assert metrics["sequence_length"] == 5

    @pytest.mark.parametrize(
        ("task_type", "metrics"),
        [
            ("stroop-test", {"responses": ["red"]}),
            ("reaction-time", {"reaction_times_ms": ["fast"]}),
            ("tapping-speed", {"tap_times_ms": "100,200"}),
            ("spatial-memory", {"attempts": [[1, 2, 3]]}),
            ("sound-discrimination", {"responses": [{"frequencies": ["A4"]}]}),
        ],
    )
    def test_malformed_raw_logs_rejected(self, client, task_type, metrics):
        _logged_in(client)
        response = _post(client, "tasks:submit_performance", {"task_type": task_type, "metrics": metrics})
        assert response.status_code == 422

    def test_storage_failure_returns_503(self, client):
        _logged_in(client)
        with patch("neuroplay.tasks.views.append_performance", side_effect=StorageError("down")):
            response = _post(
                client, "tasks:submit_performance", {"task_type": "reaction-time", "metrics": {"average_reaction_time_ms": 250}}
            )
        assert response.status_code == 503


@pytest.mark.django_db
class TestTaskRegistryView:
    def test_lists_all_tasks(self, client):
        _logged_in(client)
        response = client.get(reverse("tasks:registry"))
        assert response.status_code == 200
        tasks = response.json()["tasks"]
        assert len(tasks) == 7
        assert tasks[0]["task_type"] == "tapping-speed"
        assert tasks[0]["label"] == "Tapping Speed"


# ─────────────────────────────────────────────────────────────────────────────
# Decision task run
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.django_db
class TestDecisionRunViews:
    def _choose(self, client, door="left"):
        return _post(client, "tasks:decision_choose", {"choice": door, "reaction_time_ms": 450})

    def test_start_creates_run(self, client):
        _logged_in(client)
        response = client.post(reverse("tasks:decision_start"))
        assert response.status_code == 201
        run = response.json()["run"]
        assert run["state"] == "playing"
        assert run["current_trial"] == 1
        assert run["phase"] == "Initial Learning"

    def test_choose_without_run(self, client):
        _logged_in(client)
        assert self._choose(client).status_code == 409

    def test_choose_unknown_door(self, client):
        _logged_in(client)
        client.post(reverse("tasks:decision_start"))
        assert self._choose(client, door="middle").status_code == 422

    def test_choose_advances_run(self, client):
        _logged_in(client)
        client.post(reverse("tasks:decision_start"))
        response = self._choose(client)
        assert response.status_code == 200
        body = response.json()
        assert body["trial"]["trial"] == 1
        assert body["run"]["current_trial"] == 2
        assert body["performance"] is None

    def test_continue_while_playing_is_conflict(self, client):
        _logged_in(client)
        client.post(reverse("tasks:decision_start"))
        assert _post(client, "tasks:decision_continue", {"continue": True}).status_code == 409

    def test_continue_requires_boolean(self, client):
        _logged_in(client)
        client.post(reverse("tasks:decision_start"))
        assert _post(client, "tasks:decision_continue", {"continue": "yes"}).status_code == 422

    def test_full_run_saves_performance(self, client):
        user = _logged_in(client)
        client.post(reverse("tasks:decision_start"))
        for _ in range(40):
            response = self._choose(client)
        assert response.json()["run"]["state"] == "continue-prompt"
        assert self._choose(client).status_code == 409

        response = _post(client, "tasks:decision_continue", {"continue": True})
        assert response.json()["run"]["current_trial"] == 41
        for _ in range(10):
            response = self._choose(client, door="right")

        body = response.json()
        assert body["run"]["state"] == "finished"
        assert body["performance"] is not None
        performance = Performance.objects.get(user=user)
        assert performance.task_type == "decision-task"
        assert len(performance.metrics["choices"]) == 50
        assert UserStats.objects.get(user=user).tasks_completed == 1
        # The finished run is cleared from the session
        assert self._choose(client).status_code == 409

    def test_finished_run_saved_after_storage_failure(self, client):
        user = _logged_in(client)
        client.post(reverse("tasks:decision_start"))
        for _ in range(40):
            self._choose(client)
        with patch("neuroplay.tasks.views.append_performance", side_effect=StorageError("down")):
            response = _post(client, "tasks:decision_continue", {"continue": False})
        assert response.status_code == 503
        assert not Performance.objects.filter(user=user).exists()

        response = _post(client, "tasks:decision_continue", {"continue": False})
        assert response.status_code == 200
        assert response.json()["performance"] is not None
        assert len(Performance.objects.get(user=user).metrics["choices"]) == 40
        assert self._choose(client).status_code == 409

    def test_stopping_at_forty_saves_performance(self, client):
        user = _logged_in(client)
        client.post(reverse("tasks:decision_start"))
        for _ in range(40):
            self._choose(client)
        response = _post(client, "tasks:decision_continue", {"continue": False})
        assert response.json()["run"]["state"] == "finished"
        assert len(Performance.objects.get(user=user).metrics["choices"]) == 40
