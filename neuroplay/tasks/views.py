import json
import logging

from django.contrib.auth.mixins import LoginRequiredMixin
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.views import View

from neuroplay.progress.exceptions import StorageError
from neuroplay.progress.helpers.analytics import stats_summary
from neuroplay.progress.helpers.storage import append_performance
from neuroplay.progress.helpers.storage import get_user_stats
from neuroplay.tasks.helpers.decision_run import DecisionRunError
from neuroplay.tasks.helpers.decision_run import DecisionTaskRun
from neuroplay.tasks.helpers.decision_schedule import DOORS
from neuroplay.tasks.helpers.metrics import InvalidMetrics
from neuroplay.tasks.helpers.metrics import parse_metrics
from neuroplay.tasks.helpers.metrics.decision import compute_decision_summary
from neuroplay.tasks.helpers.metrics.decision import normalise_trials
from neuroplay.tasks.helpers.metrics.hanoi import compute_hanoi_summary
from neuroplay.tasks.helpers.metrics.reaction_time import compute_reaction_time_summary
from neuroplay.tasks.helpers.metrics.sound import compute_sound_summary
from neuroplay.tasks.helpers.metrics.spatial_memory import compute_spatial_memory_summary
from neuroplay.tasks.helpers.metrics.stroop import compute_stroop_summary
from neuroplay.tasks.helpers.metrics.tapping import DEFAULT_DURATION_MS
from neuroplay.tasks.helpers.metrics.tapping import compute_tapping_summary
from neuroplay.tasks.helpers.scoring import calculate_score
from neuroplay.tasks.registry import TASK_REGISTRY
from neuroplay.tasks.registry import TaskType

logger = logging.getLogger(__name__)

# Maps task_type → (raw log key, server-side metric compute function)
_METRIC_COMPUTERS = {
    TaskType.TAPPING_SPEED: (
        "tap_times_ms",
        lambda taps, metrics: compute_tapping_summary(taps, metrics.get("duration_ms") or DEFAULT_DURATION_MS),
    ),
    TaskType.STROOP_TEST: ("responses", lambda responses, metrics: compute_stroop_summary(responses)),
    TaskType.REACTION_TIME: ("reaction_times_ms", lambda times, metrics: compute_reaction_time_summary(times)),
    TaskType.TOWER_OF_HANOI: (
        "disks",
        lambda disks, metrics: compute_hanoi_summary(metrics.get("moves"), metrics.get("solve_time_ms"), disks),
    ),
    TaskType.SPATIAL_MEMORY: (
        "attempts",
        lambda attempts, metrics: compute_spatial_memory_summary(attempts, metrics.get("level") or 1),
    ),
    TaskType.DECISION_TASK: ("choices", lambda choices, metrics: compute_decision_summary(normalise_trials(choices))),
    TaskType.SOUND_DISCRIMINATION: ("responses", lambda responses, metrics: compute_sound_summary(responses)),
}

_DECISION_RUN_KEY = "decision_task_run"


def _load_json(request):
    """Parse the request body as a JSON object, or return None."""
    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def _recompute_metrics(task_type, metrics):
    """
    Replace client-derived figures with ones computed from the raw trial data,
    where the payload carries it.
    """
    raw_key, compute = _METRIC_COMPUTERS[task_type]
    raw = metrics.get(raw_key)
    if not raw:
        return metrics
    if raw_key != "disks" and not isinstance(raw, list):
        raise InvalidMetrics(f"'{raw_key}' must be a list")
    try:
        summary = compute(raw, metrics)
    except InvalidMetrics:
        raise
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise InvalidMetrics(f"Malformed '{raw_key}': {exc}") from exc
    return {**metrics, **summary}


def _save_performance(user, task_type, metrics):
    score = calculate_score(task_type, metrics)
    performance = append_performance(user, task_type, score, metrics.to_dict())
    return performance, get_user_stats(user)


class PerformanceSubmitView(LoginRequiredMixin, View):
    """
    Scores and stores one completed task session.

    POST body: {"task_type": "<type>", "metrics": {...}}

    Returns:
        201 {"ok": true, "id": "<uuid>", "score": <int>, "stats": {...}}
        422 on malformed JSON, an unknown task type or invalid metrics
        503 when the performance could not be stored
    """

    def post(self, request):
        data = _load_json(request)
        if data is None:
            return JsonResponse({"error": "Invalid JSON"}, status=422)

        task_type = data.get("task_type")
        if task_type not in TASK_REGISTRY:
            return JsonResponse({"error": f"Unknown task_type: '{task_type}'"}, status=422)

        raw_metrics = data.get("metrics") or {}
        if not isinstance(raw_metrics, dict):
            return JsonResponse({"error": "'metrics' must be an object"}, status=422)

        try:
            metrics = parse_metrics(task_type, _recompute_metrics(task_type, raw_metrics))
        except InvalidMetrics as exc:
            return JsonResponse({"error": str(exc)}, status=422)

        try:
            performance, stats = _save_performance(request.user, task_type, metrics)
        except ValidationError as exc:
            return JsonResponse({"error": exc.messages}, status=422)
        except StorageError:
            logger.exception("Could not store %s performance for user %s", task_type, request.user.pk)
            return JsonResponse({"error": "Could not save performance"}, status=503)

        return JsonResponse(
            {"ok": True, "id": str(performance.id), "score": performance.score, "stats": stats_summary(stats)},
            status=201,
        )


class TaskRegistryView(LoginRequiredMixin, View):
    """JSON API: the task catalogue, in display order."""

    def get(self, request):
        tasks = [
            {
                "task_type": task_type,
                "label": entry["label"],
                "color": entry["color"],
                "gradient": list(entry["gradient"]),
                "route": entry["route"],
                "description": entry["description"],
                "duration_ms": entry["duration_ms"],
            }
            for task_type, entry in TASK_REGISTRY.items()
        ]
        return JsonResponse({"tasks": tasks})


# ─── Decision task runs ──────────────────────────────────────────────────────


class _DecisionRunMixin:
    """Keeps the active decision run in the Django session."""

    def _load_run(self, request):
        data = request.session.get(_DECISION_RUN_KEY)
        if not data:
            return None
        return DecisionTaskRun.from_dict(data)

    def _store_run(self, request, run):
        request.session[_DECISION_RUN_KEY] = run.to_dict()

    def _finish_run(self, request, run):
        """Score and store a finished run. Returns the response payload fragment."""
        performance, stats = _save_performance(request.user, TaskType.DECISION_TASK.value, run.metrics())
        request.session.pop(_DECISION_RUN_KEY, None)
        return {"id": str(performance.id), "score": performance.score, "stats": stats_summary(stats)}

    def _respond(self, request, run, **extra):
        payload = {"run": run.describe(), "performance": None, **extra}
        if run.is_finished:
            try:
                payload["performance"] = self._finish_run(request, run)
            except StorageError:
                logger.exception("Could not store decision run for user %s", request.user.pk)
                return JsonResponse({"error": "Could not save performance"}, status=503)
        return JsonResponse(payload)


class DecisionStartView(LoginRequiredMixin, _DecisionRunMixin, View):
    """Starts a fresh 50-trial run, discarding any run in progress."""

    def post(self, request):
        run = DecisionTaskRun()
        self._store_run(request, run)
        return JsonResponse({"run": run.describe()}, status=201)


class DecisionChooseView(LoginRequiredMixin, _DecisionRunMixin, View):
    """
    Plays the current trial.

    POST body: {"choice": "left"|"right", "reaction_time_ms": <number>}

    Returns:
        200 {"trial": {...}, "run": {...}, "performance": {...}|null}
        409 when no run is in progress or the run is paused
        422 on malformed JSON or an unknown door
        503 when a finished run could not be stored; it stays in the session
            and the next choose or continue request stores it
    """

    def post(self, request):
        data = _load_json(request)
        if data is None:
            return JsonResponse({"error": "Invalid JSON"}, status=422)
        choice = data.get("choice")
        if choice not in DOORS:
            return JsonResponse({"error": f"Unknown door: {choice!r}"}, status=422)
        reaction_time_ms = data.get("reaction_time_ms")
        if reaction_time_ms is not None and (
            isinstance(reaction_time_ms, bool) or not isinstance(reaction_time_ms, (int, float))
        ):
            return JsonResponse({"error": "reaction_time_ms must be a number"}, status=422)

        run = self._load_run(request)
        if run is None:
            return JsonResponse({"error": "No decision run in progress"}, status=409)
        if run.is_finished:
            # The run ended but its save failed; store it now
            return self._respond(request, run)
        try:
            trial = run.choose(choice, reaction_time_ms)
        except DecisionRunError as exc:
            return JsonResponse({"error": str(exc)}, status=409)
        self._store_run(request, run)
        return self._respond(request, run, trial=trial)


class DecisionContinueView(LoginRequiredMixin, _DecisionRunMixin, View):
    """
    Answers the pause after trial 40.

    POST body: {"continue": true|false}
    """

    def post(self, request):
        data = _load_json(request)
        if data is None or not isinstance(data.get("continue"), bool):
            return JsonResponse({"error": "'continue' must be true or false"}, status=422)

        run = self._load_run(request)
        if run is None:
            return JsonResponse({"error": "No decision run in progress"}, status=409)
        if run.is_finished:
            # The run ended but its save failed; store it now
            return self._respond(request, run)
        try:
            run.resolve_continue(data["continue"])
        except DecisionRunError as exc:
            return JsonResponse({"error": str(exc)}, status=409)
        self._store_run(request, run)
        return self._respond(request, run)


performance_submit_view = PerformanceSubmitView.as_view()
task_registry_view = TaskRegistryView.as_view()
decision_start_view = DecisionStartView.as_view()
decision_choose_view = DecisionChooseView.as_view()
decision_continue_view = DecisionContinueView.as_view()
