"""Summary metrics for the tapping speed task."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field

from neuroplay.tasks.helpers.metrics.base import MetricsPayload

# The client runs a fixed 10 second tapping window
DEFAULT_DURATION_MS = 10_000


@dataclass(frozen=True)
class TappingMetrics(MetricsPayload):
    number_of_taps: int = 0
    duration_ms: float = 0
    tap_times_ms: list = field(default_factory=list)


def taps_per_second(metrics: TappingMetrics) -> float | None:
    """Return the tap rate, or ``None`` if the window length is unknown."""
    if not metrics.duration_ms:
        return None
    return metrics.number_of_taps / (metrics.duration_ms / 1000)


def compute_tapping_summary(tap_times_ms, duration_ms=DEFAULT_DURATION_MS):
    """
    Compute tapping metrics from the list of tap timestamps.

    Each element of *tap_times_ms* is the offset of one tap from the start of
    the window; taps recorded after *duration_ms* are not counted.

    Returns dict with:
      number_of_taps, duration_ms, taps_per_second
    """
    number_of_taps = sum(1 for t in tap_times_ms if t is not None and 0 <= t <= duration_ms)
    metrics = TappingMetrics(number_of_taps=number_of_taps, duration_ms=duration_ms)
    return {
        "number_of_taps": number_of_taps,
        "duration_ms": duration_ms,
        "taps_per_second": taps_per_second(metrics),
    }
