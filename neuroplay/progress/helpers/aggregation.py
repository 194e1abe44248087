"""Pure functions for keeping a user's running stats in step with their history.

No Django ORM calls are made here; inputs are plain Python objects so these
functions can be tested without a database.
"""

from __future__ import annotations

import datetime
import statistics
from typing import Sequence

from neuroplay.tasks.registry import TaskType


def default_average_scores() -> dict[str, float]:
    """One entry per task type, all zero."""
    return {task_type: 0 for task_type in TaskType.values}


def average_score(scores: Sequence[float]) -> float:
    """Mean of *scores*, or 0 if there are none."""
    if not scores:
        return 0
    return statistics.mean(scores)


def next_streak(
    streak: int,
    last_activity_date: datetime.date | None,
    today: datetime.date,
) -> int:
    """Return the streak after an activity on *today*.

    Calendar days are compared, not elapsed time: activity yesterday extends
    the streak, activity earlier today leaves it alone, and anything else
    (including no previous activity at all, ``None``) starts a new streak of 1.
    """
    if last_activity_date is None:
        return 1
    if last_activity_date == today:
        return streak
    if last_activity_date == today - datetime.timedelta(days=1):
        return streak + 1
    return 1


def apply_performance(
    stats,
    task_type: str,
    score: int,
    task_scores: Sequence[float],
    now: datetime.datetime,
    last_activity_date: datetime.date | None,
    today: datetime.date,
) -> dict:
    """Return the updated stats field values after one new performance.

    *stats* needs ``total_score``, ``streak``, ``tasks_completed`` and
    ``average_scores`` attributes. *task_scores* are all stored scores for
    *task_type*, the new one included. *last_activity_date* is the local
    date of the previous activity, ``None`` if there was none.
    """
    averages = default_average_scores()
    averages.update(stats.average_scores or {})
    averages[str(task_type)] = average_score(task_scores)

    return {
        "total_score": stats.total_score + score,
        "streak": next_streak(stats.streak, last_activity_date, today),
        "tasks_completed": stats.tasks_completed + 1,
        "average_scores": averages,
        "last_activity": now,
    }
