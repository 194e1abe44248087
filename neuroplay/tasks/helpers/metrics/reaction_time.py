"""Summary metrics for the simple reaction time task."""

from __future__ import annotations

import random
import statistics
from dataclasses import dataclass
from dataclasses import field

from neuroplay.tasks.helpers.metrics.base import MetricsPayload

# Random wait before the stimulus appears
FOREPERIOD_MIN_MS = 2000
FOREPERIOD_MAX_MS = 6000


@dataclass(frozen=True)
class ReactionTimeMetrics(MetricsPayload):
    average_reaction_time_ms: float = 0
    reaction_times_ms: list = field(default_factory=list)


def random_foreperiod_ms(rng: random.Random | None = None) -> float:
    rng = rng or random.Random()
    return rng.uniform(FOREPERIOD_MIN_MS, FOREPERIOD_MAX_MS)


def compute_reaction_time_summary(reaction_times_ms):
    """
    Return ``{"reaction_times_ms": [...], "average_reaction_time_ms": float | None}``.

    Premature taps are never recorded by the client, so every value counts.
    """
    times = [t for t in reaction_times_ms if t is not None]
    return {
        "reaction_times_ms": times,
        "average_reaction_time_ms": statistics.mean(times) if times else None,
    }
