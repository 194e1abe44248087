"""Dashboard and analytics figures derived from stats and performance history.

Pure functions: *performances* are any objects with ``task_type``, ``score``
and ``date`` attributes, in chronological order.
"""

from __future__ import annotations

import datetime
import statistics
from dataclasses import dataclass
from typing import Sequence

from django.conf import settings

from neuroplay.tasks.helpers.scoring import calculate_overall_score
from neuroplay.tasks.helpers.scoring import round_half_up
from neuroplay.tasks.registry import TaskType

PERSONAL_RECORD_THRESHOLD: int = getattr(settings, "NEUROPLAY_PERSONAL_RECORD_THRESHOLD", 70)
RECENT_PERFORMANCE_COUNT = 5


@dataclass(frozen=True)
class Tier:
    level: int
    name: str
    floor: float
    ceiling: float | None  # None for the top tier


TIERS = (
    Tier(1, "Beginner", 0, 45),
    Tier(2, "Brain Builder", 45, 65),
    Tier(3, "Mind Athlete", 65, 80),
    Tier(4, "Brain Master", 80, 90),
    Tier(5, "Cognitive Elite", 90, None),
)


def tier_for_score(score: float) -> dict:
    """
    Return ``{"tier", "tier_name", "progress"}`` for an overall score.

    ``progress`` is the percentage of the way to the next tier (100 at the top).
    """
    for tier in reversed(TIERS):
        if score >= tier.floor:
            break
    if tier.ceiling is None:
        progress = 100
    else:
        progress = (score - tier.floor) / (tier.ceiling - tier.floor) * 100
    return {"tier": tier.level, "tier_name": tier.name, "progress": round_half_up(progress)}


def brain_body_summary(average_scores: dict) -> dict:
    """The headline overall score and the tier it falls in."""
    current = calculate_overall_score(average_scores)
    return {"current": current, **tier_for_score(current)}


def skill_breakdown(average_scores: dict) -> dict:
    """Group task averages into the five skill areas shown on the radar chart."""

    def avg(task_type):
        return average_scores.get(task_type, 0) or 0

    return {
        "memory": avg(TaskType.SPATIAL_MEMORY.value),
        "reaction_time": avg(TaskType.REACTION_TIME.value),
        "attention": (avg(TaskType.STROOP_TEST.value) + avg(TaskType.SOUND_DISCRIMINATION.value)) / 2,
        "problem_solving": (avg(TaskType.TOWER_OF_HANOI.value) + avg(TaskType.DECISION_TASK.value)) / 2,
        "motor_control": avg(TaskType.TAPPING_SPEED.value),
    }


def personal_records(performances: Sequence, threshold: int = PERSONAL_RECORD_THRESHOLD) -> dict:
    """
    Highest score, session count, rounded mean score, and the longest run of
    consecutive sessions scoring at least *threshold*.
    """
    if not performances:
        return {"highest_score": 0, "best_streak": 0, "total_sessions": 0, "average_score": 0}

    scores = [p.score for p in performances]
    best_streak = 0
    current = 0
    for score in scores:
        if score >= threshold:
            current += 1
            best_streak = max(best_streak, current)
        else:
            current = 0

    return {
        "highest_score": max(scores),
        "best_streak": best_streak,
        "total_sessions": len(scores),
        "average_score": round_half_up(statistics.mean(scores)),
    }


def task_stats(performances: Sequence, task_type: str) -> dict | None:
    """Average, best, count and most recent scores for one task, or None if never played."""
    scores = [p.score for p in performances if p.task_type == task_type]
    if not scores:
        return None
    return {
        "average": round_half_up(statistics.mean(scores)),
        "best": max(scores),
        "total": len(scores),
        "recent": scores[-RECENT_PERFORMANCE_COUNT:][::-1],
    }


def within_days(performances: Sequence, days: int, now: datetime.datetime) -> list:
    """Performances dated within the last *days* days of *now*."""
    cutoff = now - datetime.timedelta(days=days)
    return [p for p in performances if p.date >= cutoff]


def stats_summary(stats) -> dict:
    """JSON-ready view of a UserStats row."""
    return {
        "total_score": stats.total_score,
        "streak": stats.streak,
        "tasks_completed": stats.tasks_completed,
        "average_scores": dict(stats.average_scores or {}),
        "last_activity": stats.last_activity.isoformat() if stats.last_activity else None,
    }
