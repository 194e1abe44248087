"""Daily challenge generation."""

import random

from django.conf import settings

from neuroplay.tasks.registry import TaskType

DAILY_CHALLENGE_SIZE: int = getattr(settings, "NEUROPLAY_DAILY_CHALLENGE_SIZE", 3)


def pick_challenge_tasks(rng: random.Random | None = None, size: int = DAILY_CHALLENGE_SIZE) -> list[str]:
    """Return *size* distinct task types in random order."""
    rng = rng or random.Random()
    return rng.sample(list(TaskType.values), size)
