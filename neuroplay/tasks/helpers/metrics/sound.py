"""Server-side summary metric computation for the sound discrimination task.

A trial plays three identical tones followed by a fourth that is higher,
lower or the same; the player reports which.
"""

from __future__ import annotations

import random
import statistics
from dataclasses import dataclass
from dataclasses import field

from neuroplay.tasks.helpers.metrics.base import MetricsPayload

# Predefined tone frequencies in Hz
FREQUENCIES: dict[str, float] = {
    "C4": 261.63,
    "D4": 293.66,
    "E4": 329.63,
    "F4": 349.23,
    "G4": 392.00,
    "A4": 440.00,
    "B4": 493.88,
    "C5": 523.25,
    "D5": 587.33,
    "E5": 659.25,
}

# Base tones used by the task, lowest first
TRIAL_FREQUENCIES = tuple(FREQUENCIES[name] for name in ("C4", "D4", "E4", "F4", "G4", "A4"))

DIFFERENT_PROBABILITY = 0.4
RESPONSE_TIME_LIMIT_MS = 5000


@dataclass(frozen=True)
class SoundDiscriminationMetrics(MetricsPayload):
    correct_identifications: int = 0
    incorrect_identifications: int = 0
    average_response_time_ms: float = 0
    accuracy_by_frequency: dict = field(default_factory=dict)
    responses: list = field(default_factory=list)


def frequency_name(frequency: float) -> str:
    """Return the note name within 1 Hz of *frequency*, else e.g. ``"300.0Hz"``."""
    for name, value in FREQUENCIES.items():
        if abs(value - frequency) < 1:
            return name
    return f"{frequency:.1f}Hz"


def generate_sound_trial(rng: random.Random | None = None) -> dict:
    """
    Draw one trial: ``{"frequencies": [f, f, f, last], "relation": str}``.

    The last tone moves one step up or down the scale with probability 0.4.
    A step off either end of the scale falls back to ``"same"``.
    """
    rng = rng or random.Random()
    base_index = rng.randrange(len(TRIAL_FREQUENCIES))
    base = TRIAL_FREQUENCIES[base_index]
    frequencies = [base, base, base]

    relation = "same"
    last = base
    if rng.random() > 1 - DIFFERENT_PROBABILITY:
        is_higher = rng.random() > 0.5
        if is_higher and base_index < len(TRIAL_FREQUENCIES) - 1:
            relation = "higher"
            last = TRIAL_FREQUENCIES[base_index + 1]
        elif not is_higher and base_index > 0:
            relation = "lower"
            last = TRIAL_FREQUENCIES[base_index - 1]
    frequencies.append(last)
    return {"frequencies": frequencies, "relation": relation}


def compute_sound_summary(responses):
    """
    Compute sound discrimination metrics from a list of response dicts.

    Each response dict is expected to have:
      frequencies (list[float]) : the four tones played
      last_tone_relation (str)  : "higher", "lower" or "same"
      user_response (str)       : the player's answer
      response_time_ms (int)

    A response counts as correct when the answer matches the relation; an
    explicit ``correct`` flag sent by the client is ignored.

    Returns dict with:
      correct_identifications, incorrect_identifications,
      average_response_time_ms (None when empty),
      accuracy_by_frequency: percent correct keyed by base tone name
    """
    correct_flags = [r.get("user_response") == r.get("last_tone_relation") for r in responses]
    response_times = [r["response_time_ms"] for r in responses if r.get("response_time_ms") is not None]
    correct = sum(correct_flags)

    by_base: dict[str, list[bool]] = {}
    for response, is_correct in zip(responses, correct_flags):
        tones = response.get("frequencies") or []
        if not tones:
            continue
        by_base.setdefault(frequency_name(tones[0]), []).append(is_correct)

    return {
        "correct_identifications": correct,
        "incorrect_identifications": len(responses) - correct,
        "average_response_time_ms": statistics.mean(response_times) if response_times else None,
        "accuracy_by_frequency": {
            name: sum(flags) / len(flags) * 100 for name, flags in by_base.items()
        },
    }
