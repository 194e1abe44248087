"""Server-side summary metric computation for the Stroop test."""

from __future__ import annotations

import random
import statistics
from dataclasses import dataclass
from dataclasses import field

from neuroplay.tasks.helpers.metrics.base import MetricsPayload

COLORS = ("red", "blue", "green", "yellow")


@dataclass(frozen=True)
class StroopMetrics(MetricsPayload):
    correct_answers: int = 0
    incorrect_answers: int = 0
    average_reaction_time_ms: float = 0
    responses: list = field(default_factory=list)


def generate_stroop_item(rng: random.Random | None = None) -> dict:
    """Draw a colour word and an ink colour independently."""
    rng = rng or random.Random()
    word = rng.choice(COLORS)
    color = rng.choice(COLORS)
    return {"word": word, "color": color, "is_congruent": word == color}


def compute_stroop_summary(responses):
    """
    Compute Stroop summary metrics from a list of response dicts.

    Each response dict is expected to have:
      color (str)         : ink colour of the item
      chosen_color (str)  : colour the player tapped
      rt_ms (int)         : response time in ms

    Returns dict with:
      correct_answers, incorrect_answers,
      average_reaction_time_ms (None when there are no timed responses)
    """
    correct = sum(1 for r in responses if r.get("chosen_color") == r.get("color"))
    rts = [r["rt_ms"] for r in responses if r.get("rt_ms") is not None]
    return {
        "correct_answers": correct,
        "incorrect_answers": len(responses) - correct,
        "average_reaction_time_ms": statistics.mean(rts) if rts else None,
    }
