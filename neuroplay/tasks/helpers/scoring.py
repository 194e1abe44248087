"""Map a task's raw metrics to a 0-100 score.

All functions are pure. A formula whose required measurements are missing
or zero returns 0, the "ungraded" score, instead of raising.
"""

from __future__ import annotations

import math
import statistics

from neuroplay.tasks.helpers.metrics import DecisionMetrics
from neuroplay.tasks.helpers.metrics import METRIC_TYPES
from neuroplay.tasks.helpers.metrics import ReactionTimeMetrics
from neuroplay.tasks.helpers.metrics import SoundDiscriminationMetrics
from neuroplay.tasks.helpers.metrics import SpatialMemoryMetrics
from neuroplay.tasks.helpers.metrics import StroopMetrics
from neuroplay.tasks.helpers.metrics import TappingMetrics
from neuroplay.tasks.helpers.metrics import TowerOfHanoiMetrics
from neuroplay.tasks.helpers.metrics import parse_metrics
from neuroplay.tasks.helpers.metrics.tapping import taps_per_second

MAX_SCORE = 100


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (``round`` would go to even)."""
    return math.floor(value + 0.5)


def _finalise(raw: float) -> int:
    return min(round_half_up(raw), MAX_SCORE)


def calculate_tapping_score(metrics: TappingMetrics) -> int:
    """
    Piecewise-linear score over taps per second.

    Roughly: 3-4 taps/s is average, 5-6 good, 7-8 excellent, 9+ exceptional.
    Neighbouring segments meet at 1, 3, 5, 7 and 9 taps/s.
    """
    if not metrics.number_of_taps or not metrics.duration_ms:
        return 0

    rate = taps_per_second(metrics)
    if rate >= 9:
        score = 95 + min(5, (rate - 9) * 2)
    elif rate >= 7:
        score = 85 + ((rate - 7) / 2) * 10
    elif rate >= 5:
        score = 70 + ((rate - 5) / 2) * 15
    elif rate >= 3:
        score = 50 + ((rate - 3) / 2) * 20
    elif rate >= 1:
        score = 20 + ((rate - 1) / 2) * 30
    else:
        score = rate * 20
    return _finalise(score)


def calculate_stroop_score(metrics: StroopMetrics) -> int:
    if not metrics.correct_answers or not metrics.incorrect_answers or not metrics.average_reaction_time_ms:
        return 0

    accuracy = metrics.correct_answers / (metrics.correct_answers + metrics.incorrect_answers)
    # Bonus for answering in under 2 s
    speed_bonus = max(0, (2000 - metrics.average_reaction_time_ms) / 20)
    return _finalise(accuracy * 70 + speed_bonus)


def calculate_reaction_time_score(metrics: ReactionTimeMetrics) -> int:
    if not metrics.average_reaction_time_ms:
        return 0
    return _finalise(max(0, (1000 - metrics.average_reaction_time_ms) / 10))


def calculate_tower_of_hanoi_score(metrics: TowerOfHanoiMetrics) -> int:
    if not metrics.moves or not metrics.solve_time_ms or not metrics.min_moves:
        return 0

    efficiency = metrics.min_moves / metrics.moves
    # Bonus for solving in under 2 minutes
    time_bonus = max(0, (120_000 - metrics.solve_time_ms) / 1200)
    return _finalise(efficiency * 60 + time_bonus)


def calculate_spatial_memory_score(metrics: SpatialMemoryMetrics) -> int:
    if not metrics.correct_matches or not metrics.total_attempts or not metrics.sequence_length:
        return 0

    accuracy = metrics.correct_matches / metrics.total_attempts
    length_bonus = metrics.sequence_length * 5
    return _finalise(accuracy * 70 + length_bonus)


def calculate_decision_task_score(metrics: DecisionMetrics) -> int:
    if (
        not metrics.total_reward
        or not metrics.adaptation_rate
        or not metrics.risk_taking_score
        or not metrics.learning_score
    ):
        return 0

    reward_points = min(metrics.total_reward / 10, 40)
    adaptation_points = metrics.adaptation_rate * 30
    risk_points = metrics.risk_taking_score * 15
    learning_points = metrics.learning_score * 15
    return _finalise(reward_points + adaptation_points + risk_points + learning_points)


def calculate_sound_discrimination_score(metrics: SoundDiscriminationMetrics) -> int:
    if (
        not metrics.correct_identifications
        or not metrics.incorrect_identifications
        or not metrics.average_response_time_ms
    ):
        return 0

    total = metrics.correct_identifications + metrics.incorrect_identifications
    accuracy = metrics.correct_identifications / total
    # Bonus for answering in under 3 s
    speed_bonus = max(0, (3000 - metrics.average_response_time_ms) / 30)
    return _finalise(accuracy * 80 + speed_bonus)


_SCORERS = {
    "tapping-speed": calculate_tapping_score,
    "stroop-test": calculate_stroop_score,
    "reaction-time": calculate_reaction_time_score,
    "tower-of-hanoi": calculate_tower_of_hanoi_score,
    "spatial-memory": calculate_spatial_memory_score,
    "decision-task": calculate_decision_task_score,
    "sound-discrimination": calculate_sound_discrimination_score,
}


def calculate_score(task_type: str, metrics) -> int:
    """
    Score *metrics* for *task_type*.

    *metrics* may be the task's metrics dataclass or a plain dict, which is
    parsed first. Unknown task types score 0.
    """
    scorer = _SCORERS.get(str(task_type))
    if scorer is None:
        return 0
    if isinstance(metrics, dict) or metrics is None:
        metrics = parse_metrics(task_type, metrics)
    elif not isinstance(metrics, METRIC_TYPES[str(task_type)]):
        raise TypeError(f"{type(metrics).__name__} cannot be scored as '{task_type}'")
    return scorer(metrics)


def calculate_overall_score(scores: dict) -> int:
    """
    Mean of the nonzero per-task scores, rounded.

    A zero means the task was never attempted, so it does not drag the
    average down. Returns 0 when nothing has been attempted.
    """
    values = [score for score in scores.values() if score > 0]
    if not values:
        return 0
    return round_half_up(statistics.mean(values))
