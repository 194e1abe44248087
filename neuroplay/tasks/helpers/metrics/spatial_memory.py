"""Summary metrics for the spatial memory (sequence recall) task."""

from __future__ import annotations

import random
from dataclasses import dataclass
from dataclasses import field

from neuroplay.tasks.helpers.metrics.base import MetricsPayload

GRID_SIZE = 16  # 4x4
MAX_SEQUENCE_LENGTH = 8


@dataclass(frozen=True)
class SpatialMemoryMetrics(MetricsPayload):
    correct_matches: int = 0
    total_attempts: int = 0
    sequence_length: int = 0
    level: int = 0
    attempts: list = field(default_factory=list)


def sequence_length_for_level(level: int) -> int:
    """Level 1 shows 3 cells; each level adds one, capped at 8."""
    return min(level + 2, MAX_SEQUENCE_LENGTH)


def generate_sequence(length: int, rng: random.Random | None = None) -> list[int]:
    """Return *length* distinct grid cell indices in presentation order."""
    if length > GRID_SIZE:
        raise ValueError(f"sequence length {length} exceeds grid size {GRID_SIZE}")
    rng = rng or random.Random()
    return rng.sample(range(GRID_SIZE), length)


def compute_spatial_memory_summary(attempts, level: int) -> dict:
    """
    Compute spatial memory metrics from the recall attempts of one game.

    Each attempt dict has:
      shown (list[int])    : the presented sequence
      recalled (list[int]) : the cells the player tapped, in order

    *level* is the last level reached; its sequence length is reported.
    """
    correct = sum(1 for a in attempts if list(a.get("recalled", [])) == list(a.get("shown", [])))
    return {
        "correct_matches": correct,
        "total_attempts": len(attempts),
        "sequence_length": sequence_length_for_level(level),
    }
