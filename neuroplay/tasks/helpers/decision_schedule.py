"""Reward schedule for the two-door decision task.

The task runs for 50 trials split into four phases. In each phase the two
doors pay the high reward with fixed probabilities; the schedule reverses
after trial 7, starves the player in trials 31-40 and recovers afterwards.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

TOTAL_TRIALS = 50
HIGH_REWARD = 10
LOW_REWARD = 2
# Chance that a frustration-period trial pays anything at all
FRUSTRATION_REWARD_CHANCE = 0.1
# The run pauses after this trial and asks whether to carry on
CONTINUE_PROMPT_TRIAL = 40

LEFT = "left"
RIGHT = "right"
DOORS = (LEFT, RIGHT)

REWARD_HIGH = "high"
REWARD_LOW = "low"
REWARD_NONE = "none"


@dataclass(frozen=True)
class Phase:
    name: str
    start_trial: int
    end_trial: int
    left_probability: float
    right_probability: float

    def contains(self, trial: int) -> bool:
        return self.start_trial <= trial <= self.end_trial

    def probability(self, door: str) -> float:
        """Probability that *door* pays the high reward in this phase."""
        if door == LEFT:
            return self.left_probability
        if door == RIGHT:
            return self.right_probability
        raise ValueError(f"Unknown door: {door!r}")


INITIAL_LEARNING = Phase("Initial Learning", 1, 7, 0.8, 0.2)
PROBABILITY_REVERSAL = Phase("Probability Reversal", 8, 30, 0.3, 0.7)
FRUSTRATION_PERIOD = Phase("Frustration Period", 31, 40, 0.1, 0.1)
RECOVERY = Phase("Recovery", 41, 50, 0.6, 0.4)

PHASES = (INITIAL_LEARNING, PROBABILITY_REVERSAL, FRUSTRATION_PERIOD, RECOVERY)

# First trial of every phase after the first
PHASE_TRANSITIONS = tuple(phase.start_trial for phase in PHASES[1:])

PHASE_DESCRIPTIONS = {
    INITIAL_LEARNING.name: "Learning phase - discover which door is better",
    PROBABILITY_REVERSAL.name: "Things have changed - adapt your strategy",
    FRUSTRATION_PERIOD.name: "Difficult times - rewards are scarce",
    RECOVERY.name: "Recovery phase - new opportunities await",
}


def phase_for_trial(trial: int) -> Phase:
    """Return the phase containing *trial* (1-based)."""
    for phase in PHASES:
        if phase.contains(trial):
            return phase
    raise ValueError(f"Trial {trial} is outside 1-{TOTAL_TRIALS}")


def resolve_reward(trial: int, door: str, rng: random.Random) -> tuple[int, str]:
    """
    Return ``(reward, reward_type)`` for choosing *door* on *trial*.

    Outside the frustration period one draw against the door's probability
    picks the high or low reward. Inside it, a first draw decides whether
    anything is paid (10% of trials) and a second draw against the door's
    probability picks the tier.
    """
    phase = phase_for_trial(trial)
    probability = phase.probability(door)

    if phase is FRUSTRATION_PERIOD:
        if rng.random() >= FRUSTRATION_REWARD_CHANCE:
            return 0, REWARD_NONE
        if rng.random() < probability:
            return HIGH_REWARD, REWARD_HIGH
        return LOW_REWARD, REWARD_LOW

    if rng.random() < probability:
        return HIGH_REWARD, REWARD_HIGH
    return LOW_REWARD, REWARD_LOW
