"""Server-side summary metric computation for the two-door decision task."""

from __future__ import annotations

import statistics
from dataclasses import dataclass
from dataclasses import field

from neuroplay.tasks.helpers.decision_schedule import DOORS
from neuroplay.tasks.helpers.decision_schedule import FRUSTRATION_PERIOD
from neuroplay.tasks.helpers.decision_schedule import HIGH_REWARD
from neuroplay.tasks.helpers.decision_schedule import LEFT
from neuroplay.tasks.helpers.decision_schedule import LOW_REWARD
from neuroplay.tasks.helpers.decision_schedule import PHASE_TRANSITIONS
from neuroplay.tasks.helpers.decision_schedule import REWARD_NONE
from neuroplay.tasks.helpers.decision_schedule import RIGHT
from neuroplay.tasks.helpers.decision_schedule import TOTAL_TRIALS
from neuroplay.tasks.helpers.metrics.base import InvalidMetrics
from neuroplay.tasks.helpers.metrics.base import MetricsPayload

# Trials compared on each side of a phase transition
TRANSITION_WINDOW = 3
# Trials averaged at the start and end of the run for the learning score
LEARNING_WINDOW = 10
PAYABLE_REWARDS = frozenset({0, LOW_REWARD, HIGH_REWARD})


@dataclass(frozen=True)
class DecisionMetrics(MetricsPayload):
    left_door_choices: int = 0
    right_door_choices: int = 0
    total_reward: float = 0
    adaptation_rate: float = 0
    risk_taking_score: float = 0
    learning_score: float = 0
    choices: list = field(default_factory=list)


def _left_rate(trials) -> float:
    return sum(1 for t in trials if t["choice"] == LEFT) / len(trials)


def adaptation_rate(trials) -> float:
    """
    Mean absolute shift in left-door preference across phase transitions.

    For each transition trial ``n`` the left-choice rate over trials
    ``[n-3, n)`` is compared with ``[n, n+3)``. Transitions without trials on
    both sides are left out of the mean.
    """
    changes = []
    for transition in PHASE_TRANSITIONS:
        before = [t for t in trials if transition - TRANSITION_WINDOW <= t["trial"] < transition]
        after = [t for t in trials if transition <= t["trial"] < transition + TRANSITION_WINDOW]
        if before and after:
            changes.append(abs(_left_rate(after) - _left_rate(before)))
    if not changes:
        return 0.0
    return statistics.mean(changes)


def risk_taking_score(trials) -> float:
    """Share of left-door choices during the frustration period (0.5 if none)."""
    frustration = [t for t in trials if FRUSTRATION_PERIOD.contains(t["trial"])]
    if not frustration:
        return 0.5
    return _left_rate(frustration)


def learning_score(trials) -> float:
    """Gain in mean reward from the first 10 to the last 10 trials, as a fraction of the high reward."""
    if not trials:
        return 0.0
    early = trials[:LEARNING_WINDOW]
    late = trials[-LEARNING_WINDOW:]
    early_mean = statistics.mean(t["reward"] for t in early)
    late_mean = statistics.mean(t["reward"] for t in late)
    return max(0.0, (late_mean - early_mean) / HIGH_REWARD)


def compute_decision_summary(trials):
    """
    Compute decision task metrics from the ordered trial log.

    Each trial dict is expected to have:
      trial (int)            : 1-based trial number
      choice (str)           : "left" or "right"
      reward (int)           : points paid (0, 2 or 10)
      reward_type (str)      : "high", "low" or "none"
      reaction_time_ms (int)

    Returns a dict with every :class:`DecisionMetrics` field.
    """
    trials = list(trials)
    return {
        "left_door_choices": sum(1 for t in trials if t["choice"] == LEFT),
        "right_door_choices": sum(1 for t in trials if t["choice"] == RIGHT),
        "total_reward": sum(t["reward"] for t in trials),
        "adaptation_rate": adaptation_rate(trials),
        "risk_taking_score": risk_taking_score(trials),
        "learning_score": learning_score(trials),
        "choices": trials,
    }


def normalise_trials(raw_trials) -> list[dict]:
    """
    Validate a client-supplied trial log and return it sorted by trial number.

    Trial numbers must be distinct and within the run, and each reward must be
    one the schedule can pay.
    """
    trials = []
    seen = set()
    for raw in raw_trials:
        try:
            trial = {
                "trial": int(raw["trial"]),
                "choice": raw["choice"],
                "reward": raw["reward"],
                "reward_type": raw.get("reward_type", REWARD_NONE),
                "reaction_time_ms": raw.get("reaction_time_ms"),
            }
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise InvalidMetrics(f"Malformed decision trial: {raw!r}") from exc
        if trial["choice"] not in DOORS:
            raise InvalidMetrics(f"Unknown door: {trial['choice']!r}")
        reward = trial["reward"]
        if isinstance(reward, bool) or not isinstance(reward, (int, float)) or reward not in PAYABLE_REWARDS:
            raise InvalidMetrics(f"Trial reward must be one of {sorted(PAYABLE_REWARDS)}: {raw!r}")
        if not 1 <= trial["trial"] <= TOTAL_TRIALS:
            raise InvalidMetrics(f"Trial number must be between 1 and {TOTAL_TRIALS}: {raw!r}")
        if trial["trial"] in seen:
            raise InvalidMetrics(f"Duplicate trial number {trial['trial']}")
        seen.add(trial["trial"])
        trials.append(trial)
    return sorted(trials, key=lambda t: t["trial"])
