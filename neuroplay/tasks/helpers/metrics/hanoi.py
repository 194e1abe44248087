"""Summary metrics for the Tower of Hanoi puzzle."""

from __future__ import annotations

from dataclasses import dataclass

from neuroplay.tasks.helpers.metrics.base import MetricsPayload

# Difficulty levels offered to the player
DISK_COUNTS = (3, 4, 5)


@dataclass(frozen=True)
class TowerOfHanoiMetrics(MetricsPayload):
    moves: int = 0
    solve_time_ms: float = 0
    min_moves: int = 0
    disks: int = 0


def minimum_moves(disks: int) -> int:
    """Optimal solution length for *disks* disks."""
    if isinstance(disks, bool) or not isinstance(disks, int):
        raise TypeError(f"disks must be a whole number, got {disks!r}")
    if disks < 1:
        raise ValueError("a puzzle needs at least one disk")
    return 2**disks - 1


def compute_hanoi_summary(moves: int, solve_time_ms: float, disks: int) -> dict:
    if disks not in DISK_COUNTS:
        raise ValueError(f"puzzles use {DISK_COUNTS} disks, got {disks!r}")
    return {
        "moves": moves,
        "solve_time_ms": solve_time_ms,
        "min_moves": minimum_moves(disks),
        "disks": disks,
    }
