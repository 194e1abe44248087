"""
Persistence for performances, user stats and daily challenges.

Every database error is wrapped in StorageError. Reads log the failure and
fall back to an empty value so a page can still render; writes raise.
"""

import logging

from django.db import DatabaseError
from django.db import transaction
from django.utils import timezone

from neuroplay.progress.exceptions import StorageError
from neuroplay.progress.helpers.aggregation import apply_performance
from neuroplay.progress.helpers.challenges import pick_challenge_tasks
from neuroplay.progress.models import DailyChallenge
from neuroplay.progress.models import UserStats
from neuroplay.tasks.models import Performance

logger = logging.getLogger(__name__)


# ── Performances ─────────────────────────────────────────────────────────────


def append_performance(user, task_type, score, metrics, date=None) -> Performance:
    """Store one completed session. Raises ValidationError for a bad task type or score."""
    performance = Performance(
        user=user,
        task_type=str(task_type),
        score=score,
        metrics=metrics or {},
        date=date or timezone.now(),
    )
    performance.full_clean()
    try:
        performance.save()
    except DatabaseError as exc:
        raise StorageError("Could not save performance") from exc
    logger.info("Saved %s performance for user %s (score %s)", performance.task_type, user.pk, score)
    return performance


def list_performances(user) -> list[Performance]:
    try:
        return list(Performance.objects.filter(user=user))
    except DatabaseError:
        logger.exception("Could not load performances for user %s", user.pk)
        return []


def list_performances_by_task(user, task_type) -> list[Performance]:
    try:
        return list(Performance.objects.filter(user=user, task_type=str(task_type)))
    except DatabaseError:
        logger.exception("Could not load %s performances for user %s", task_type, user.pk)
        return []


# ── Daily challenges ─────────────────────────────────────────────────────────


def get_todays_challenge(user) -> DailyChallenge | None:
    try:
        return DailyChallenge.objects.filter(user=user, date=timezone.localdate()).first()
    except DatabaseError:
        logger.exception("Could not load today's challenge for user %s", user.pk)
        return None


def get_or_create_todays_challenge(user, rng=None) -> DailyChallenge:
    """Return today's challenge, picking its tasks on the first request of the day."""
    try:
        challenge, created = DailyChallenge.objects.get_or_create(
            user=user,
            date=timezone.localdate(),
            defaults={"tasks": pick_challenge_tasks(rng)},
        )
    except DatabaseError as exc:
        raise StorageError("Could not create today's challenge") from exc
    if created:
        logger.info("Created daily challenge for user %s: %s", user.pk, ", ".join(challenge.tasks))
    return challenge


def upsert_daily_challenge(challenge: DailyChallenge) -> None:
    """Store *challenge*, replacing any challenge the user already has for that date."""
    challenge.validate_state()
    try:
        DailyChallenge.objects.update_or_create(
            user=challenge.user,
            date=challenge.date,
            defaults={
                "tasks": challenge.tasks,
                "completed_tasks": challenge.completed_tasks,
                "completed": challenge.completed,
            },
        )
    except DatabaseError as exc:
        raise StorageError("Could not save daily challenge") from exc


def mark_challenge_task_complete(user, task_type) -> DailyChallenge | None:
    """Tick *task_type* off today's challenge, if there is one and it includes the task."""
    challenge = get_todays_challenge(user)
    if challenge is None:
        return None
    if challenge.mark_task_complete(task_type):
        upsert_daily_challenge(challenge)
        if challenge.completed:
            logger.info("User %s completed the daily challenge", user.pk)
    return challenge


# ── Stats ────────────────────────────────────────────────────────────────────


def get_user_stats(user) -> UserStats:
    """The user's stats, or an unsaved all-zero default."""
    try:
        stats = UserStats.objects.filter(user=user).first()
    except DatabaseError:
        logger.exception("Could not load stats for user %s", user.pk)
        stats = None
    return stats or UserStats(user=user)


def put_user_stats(user, stats: UserStats) -> None:
    stats.user = user
    try:
        stats.save()
    except DatabaseError as exc:
        raise StorageError("Could not save user stats") from exc


def _stored_stats(user) -> UserStats:
    try:
        stats = UserStats.objects.filter(user=user).first()
    except DatabaseError as exc:
        raise StorageError("Could not load user stats") from exc
    return stats or UserStats(user=user)


def _stored_task_scores(user, task_type) -> list[int]:
    try:
        return list(
            Performance.objects.filter(user=user, task_type=str(task_type)).values_list("score", flat=True)
        )
    except DatabaseError as exc:
        raise StorageError("Could not load performance history") from exc


def update_user_stats(performance: Performance) -> UserStats:
    """
    Fold a newly stored performance into the user's stats and today's challenge.

    The performance must already be saved: the task average is recomputed from
    every stored performance of its type. Unlike the public readers, a failed
    read here raises StorageError so the cached stats are left untouched.
    """
    user = performance.user
    stats = _stored_stats(user)
    if stats.tasks_completed:
        last_activity_date = timezone.localdate(stats.last_activity)
    else:
        last_activity_date = None
    task_scores = _stored_task_scores(user, performance.task_type)

    now = timezone.now()
    updated = apply_performance(
        stats,
        performance.task_type,
        performance.score,
        task_scores,
        now=now,
        last_activity_date=last_activity_date,
        today=timezone.localdate(now),
    )
    for name, value in updated.items():
        setattr(stats, name, value)
    put_user_stats(user, stats)

    mark_challenge_task_complete(user, performance.task_type)
    return stats


def clear_all(user) -> None:
    """Delete every performance, challenge and stats row belonging to *user*."""
    try:
        with transaction.atomic():
            Performance.objects.filter(user=user).delete()
            DailyChallenge.objects.filter(user=user).delete()
            UserStats.objects.filter(user=user).delete()
    except DatabaseError as exc:
        raise StorageError("Could not clear user data") from exc
    logger.info("Cleared all data for user %s", user.pk)
