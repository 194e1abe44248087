"""Trial-by-trial state machine for one decision task run.

A run is a plain object that can be serialised with :meth:`DecisionTaskRun.to_dict`
and stored between requests (the views keep it in the Django session).
Randomness for each trial comes from ``random.Random`` seeded with the run
seed and the trial number, so a stored seed reproduces every reward drawn.
"""

from __future__ import annotations

import random
import uuid

from neuroplay.tasks.helpers.decision_schedule import CONTINUE_PROMPT_TRIAL
from neuroplay.tasks.helpers.decision_schedule import DOORS
from neuroplay.tasks.helpers.decision_schedule import PHASE_DESCRIPTIONS
from neuroplay.tasks.helpers.decision_schedule import TOTAL_TRIALS
from neuroplay.tasks.helpers.decision_schedule import phase_for_trial
from neuroplay.tasks.helpers.decision_schedule import resolve_reward
from neuroplay.tasks.helpers.metrics.decision import DecisionMetrics
from neuroplay.tasks.helpers.metrics.decision import compute_decision_summary

PLAYING = "playing"
CONTINUE_PROMPT = "continue-prompt"
FINISHED = "finished"


class DecisionRunError(ValueError):
    """Raised when a run is driven out of order."""


class DecisionTaskRun:
    def __init__(self, seed: str | None = None, trials=None, state: str = PLAYING):
        self.seed = seed or str(uuid.uuid4())
        self.trials: list[dict] = list(trials or [])
        self.state = state

    @property
    def current_trial(self) -> int | None:
        """Number of the trial awaiting a choice, or ``None`` when not playing."""
        if self.state != PLAYING:
            return None
        return len(self.trials) + 1

    @property
    def total_reward(self) -> int:
        return sum(t["reward"] for t in self.trials)

    def current_phase(self):
        trial = self.current_trial
        if trial is None:
            return None
        return phase_for_trial(trial)

    def _rng_for(self, trial: int) -> random.Random:
        return random.Random(f"{self.seed}:{trial}")

    def choose(self, door: str, reaction_time_ms: float | None = None) -> dict:
        """Record the player's door for the current trial and return the trial dict."""
        if self.state != PLAYING:
            raise DecisionRunError(f"Cannot choose a door while the run is '{self.state}'")
        if door not in DOORS:
            raise DecisionRunError(f"Unknown door: {door!r}")

        trial_number = len(self.trials) + 1
        reward, reward_type = resolve_reward(trial_number, door, self._rng_for(trial_number))
        trial = {
            "trial": trial_number,
            "choice": door,
            "reward": reward,
            "reward_type": reward_type,
            "reaction_time_ms": reaction_time_ms,
        }
        self.trials.append(trial)

        if trial_number == CONTINUE_PROMPT_TRIAL:
            self.state = CONTINUE_PROMPT
        elif trial_number >= TOTAL_TRIALS:
            self.state = FINISHED
        return trial

    def resolve_continue(self, carry_on: bool) -> None:
        """Answer the pause after trial 40: carry on to trial 50, or stop here."""
        if self.state != CONTINUE_PROMPT:
            raise DecisionRunError("The run is not waiting for a continue/stop answer")
        self.state = PLAYING if carry_on else FINISHED

    @property
    def is_finished(self) -> bool:
        return self.state == FINISHED

    def metrics(self) -> DecisionMetrics:
        return DecisionMetrics(**compute_decision_summary(self.trials))

    def describe(self) -> dict:
        """Client-facing snapshot of the run."""
        phase = self.current_phase()
        return {
            "state": self.state,
            "current_trial": self.current_trial,
            "total_trials": TOTAL_TRIALS,
            "total_reward": self.total_reward,
            "phase": phase.name if phase else None,
            "phase_description": PHASE_DESCRIPTIONS[phase.name] if phase else None,
        }

    def to_dict(self) -> dict:
        return {"seed": self.seed, "trials": self.trials, "state": self.state}

    @classmethod
    def from_dict(cls, data: dict) -> DecisionTaskRun:
        state = data.get("state", PLAYING)
        if state not in (PLAYING, CONTINUE_PROMPT, FINISHED):
            raise DecisionRunError(f"Unknown run state: {state!r}")
        return cls(seed=data["seed"], trials=data.get("trials", []), state=state)
