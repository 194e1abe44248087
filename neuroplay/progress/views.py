"""Progress API: stats, daily challenge, per-task stats and analytics."""
import json
import logging

from django.conf import settings
from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import JsonResponse
from django.utils import timezone
from django.views import View

from neuroplay.progress.exceptions import StorageError
from neuroplay.progress.helpers.analytics import brain_body_summary
from neuroplay.progress.helpers.analytics import personal_records
from neuroplay.progress.helpers.analytics import skill_breakdown
from neuroplay.progress.helpers.analytics import stats_summary
from neuroplay.progress.helpers.analytics import task_stats
from neuroplay.progress.helpers.analytics import within_days
from neuroplay.progress.helpers.storage import clear_all
from neuroplay.progress.helpers.storage import get_or_create_todays_challenge
from neuroplay.progress.helpers.storage import get_todays_challenge
from neuroplay.progress.helpers.storage import get_user_stats
from neuroplay.progress.helpers.storage import list_performances
from neuroplay.tasks.registry import TASK_REGISTRY
from neuroplay.tasks.registry import TaskType

logger = logging.getLogger(__name__)

ANALYTICS_RANGES = tuple(getattr(settings, "NEUROPLAY_ANALYTICS_RANGES", (7, 14, 30)))


def _challenge_payload(challenge):
    if challenge is None:
        return None
    return {
        "date": challenge.date.isoformat(),
        "tasks": [
            {
                "task_type": task_type,
                "label": TASK_REGISTRY[task_type]["label"],
                "route": TASK_REGISTRY[task_type]["route"],
                "is_done": task_type in challenge.completed_tasks,
            }
            for task_type in challenge.tasks
        ],
        "completed_tasks": list(challenge.completed_tasks),
        "completed": challenge.completed,
        "completion_percentage": challenge.completion_percentage,
    }


class DashboardView(LoginRequiredMixin, View):
    """
    JSON API: headline figures for the home screen.

    Returns:
        200 {"stats": {...}, "brain_body": {"current", "tier", "tier_name", "progress"},
             "challenge": {...}|null}
    """

    def get(self, request):
        stats = get_user_stats(request.user)
        return JsonResponse(
            {
                "stats": stats_summary(stats),
                "brain_body": brain_body_summary(stats.average_scores or {}),
                "challenge": _challenge_payload(get_todays_challenge(request.user)),
            }
        )


class ChallengeView(LoginRequiredMixin, View):
    """JSON API: today's challenge, picking its tasks on the first visit of the day."""

    def get(self, request):
        try:
            challenge = get_or_create_todays_challenge(request.user)
        except StorageError:
            logger.exception("Could not load daily challenge for user %s", request.user.pk)
            return JsonResponse({"error": "Could not load today's challenge"}, status=503)
        return JsonResponse({"challenge": _challenge_payload(challenge)})


class TaskStatsView(LoginRequiredMixin, View):
    """JSON API: average, best, total and recent scores per task (null if never played)."""

    def get(self, request):
        performances = list_performances(request.user)
        return JsonResponse(
            {"task_stats": {task_type: task_stats(performances, task_type) for task_type in TaskType.values}}
        )


class AnalyticsView(LoginRequiredMixin, View):
    """
    JSON API: skill breakdown, tier, personal records and score history.

    Query params: ``days`` (one of the configured ranges, default the first).
    """

    def get(self, request):
        try:
            days = int(request.GET.get("days", ANALYTICS_RANGES[0]))
        except ValueError:
            days = None
        if days not in ANALYTICS_RANGES:
            return JsonResponse(
                {"error": f"days must be one of {', '.join(str(d) for d in ANALYTICS_RANGES)}"},
                status=422,
            )

        stats = get_user_stats(request.user)
        performances = list_performances(request.user)
        recent = within_days(performances, days, timezone.now())
        averages = stats.average_scores or {}

        return JsonResponse(
            {
                "days": days,
                "skills": skill_breakdown(averages),
                "brain_body": brain_body_summary(averages),
                "personal_records": personal_records(performances),
                "history": [
                    {"date": p.date.isoformat(), "task_type": p.task_type, "score": p.score} for p in recent
                ],
            }
        )


class ResetView(LoginRequiredMixin, View):
    """
    Deletes every performance, challenge and stats row for the user.

    POST body: {"confirm": "yes"}
    """

    def post(self, request):
        try:
            data = json.loads(request.body)
        except (json.JSONDecodeError, ValueError):
            return JsonResponse({"error": "Invalid JSON"}, status=422)
        if not isinstance(data, dict) or data.get("confirm") != "yes":
            return JsonResponse({"error": "Reset must be confirmed with {\"confirm\": \"yes\"}"}, status=422)

        try:
            clear_all(request.user)
        except StorageError:
            logger.exception("Could not clear data for user %s", request.user.pk)
            return JsonResponse({"error": "Could not clear data"}, status=503)
        return JsonResponse({"ok": True})


dashboard_view = DashboardView.as_view()
challenge_view = ChallengeView.as_view()
task_stats_view = TaskStatsView.as_view()
analytics_view = AnalyticsView.as_view()
reset_view = ResetView.as_view()
