"""Per-task metric payloads.

``METRIC_TYPES`` maps each task type to the dataclass describing its raw
measurements; ``parse_metrics`` turns a submitted JSON object into one.
"""

from neuroplay.tasks.helpers.metrics.base import InvalidMetrics
from neuroplay.tasks.helpers.metrics.decision import DecisionMetrics
from neuroplay.tasks.helpers.metrics.hanoi import TowerOfHanoiMetrics
from neuroplay.tasks.helpers.metrics.reaction_time import ReactionTimeMetrics
from neuroplay.tasks.helpers.metrics.sound import SoundDiscriminationMetrics
from neuroplay.tasks.helpers.metrics.spatial_memory import SpatialMemoryMetrics
from neuroplay.tasks.helpers.metrics.stroop import StroopMetrics
from neuroplay.tasks.helpers.metrics.tapping import TappingMetrics

METRIC_TYPES = {
    "tapping-speed": TappingMetrics,
    "stroop-test": StroopMetrics,
    "reaction-time": ReactionTimeMetrics,
    "tower-of-hanoi": TowerOfHanoiMetrics,
    "spatial-memory": SpatialMemoryMetrics,
    "decision-task": DecisionMetrics,
    "sound-discrimination": SoundDiscriminationMetrics,
}

TaskMetrics = (
    TappingMetrics
    | StroopMetrics
    | ReactionTimeMetrics
    | TowerOfHanoiMetrics
    | SpatialMemoryMetrics
    | DecisionMetrics
    | SoundDiscriminationMetrics
)


def parse_metrics(task_type: str, data: dict | None) -> TaskMetrics:
    """Build the payload for *task_type* from *data*; raises InvalidMetrics."""
    try:
        metrics_class = METRIC_TYPES[str(task_type)]
    except KeyError:
        raise InvalidMetrics(f"Unknown task_type: '{task_type}'") from None
    return metrics_class.from_dict(data)


__all__ = [
    "METRIC_TYPES",
    "DecisionMetrics",
    "InvalidMetrics",
    "ReactionTimeMetrics",
    "SoundDiscriminationMetrics",
    "SpatialMemoryMetrics",
    "StroopMetrics",
    "TappingMetrics",
    "TaskMetrics",
    "TowerOfHanoiMetrics",
    "parse_metrics",
]
