from uuid import uuid4

from django.conf import settings
from django.db import models
from django.db.models import CASCADE
from django.db.models import BooleanField
from django.db.models import DateField
from django.db.models import DateTimeField
from django.db.models import JSONField
from django.db.models import Model
from django.db.models import OneToOneField
from django.db.models import PositiveIntegerField
from django.db.models import UUIDField
from django.utils import timezone

from neuroplay.progress.exceptions import InvalidChallengeState
from neuroplay.progress.helpers.aggregation import default_average_scores
from neuroplay.tasks.registry import TaskType


class UserStats(Model):
    """
    Running totals derived from a user's performance history.

    This is a cache: it is rebuilt incrementally after every new Performance
    and ``average_scores[t]`` always equals the mean score of the user's
    performances of type ``t``.
    """

    user = OneToOneField(settings.AUTH_USER_MODEL, on_delete=CASCADE, related_name="stats")
    total_score = PositiveIntegerField(default=0)
    streak = PositiveIntegerField(default=0)
    tasks_completed = PositiveIntegerField(default=0)
    average_scores = JSONField(default=default_average_scores)
    last_activity = DateTimeField(default=timezone.now)

    class Meta:
        verbose_name_plural = "user stats"

    def __str__(self) -> str:
        return f"Stats: {self.user} ({self.tasks_completed} tasks, streak {self.streak})"


class DailyChallenge(Model):
    """Three tasks picked for a user for one calendar day."""

    id = UUIDField(primary_key=True, default=uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=CASCADE, related_name="daily_challenges")
    date = DateField()
    tasks = JSONField()
    completed_tasks = JSONField(default=list)
    completed = BooleanField(default=False)
    created_at = DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user", "date"], name="unique_daily_challenge_per_day"),
        ]
        ordering = ["-date"]

    def validate_state(self):
        """Raise InvalidChallengeState unless the task lists are consistent."""
        tasks = list(self.tasks or [])
        done = list(self.completed_tasks or [])
        unknown = [t for t in tasks if t not in TaskType.values]
        if unknown:
            raise InvalidChallengeState(f"Unknown task types in challenge: {unknown}")
        if len(set(tasks)) != len(tasks):
            raise InvalidChallengeState("Challenge tasks must be distinct")
        if len(set(done)) != len(done):
            raise InvalidChallengeState("Completed tasks must not repeat")
        stray = [t for t in done if t not in tasks]
        if stray:
            raise InvalidChallengeState(f"Completed tasks not part of the challenge: {stray}")
        if self.completed != (len(done) == len(tasks)):
            raise InvalidChallengeState("'completed' does not match the completed task count")

    def clean(self):
        self.validate_state()

    def save(self, *args, **kwargs):
        self.validate_state()
        super().save(*args, **kwargs)

    def mark_task_complete(self, task_type: str) -> bool:
        """
        Record *task_type* as done. Returns True if the challenge changed.

        Tasks outside the challenge and tasks already done are ignored.
        """
        task_type = str(task_type)
        if task_type not in self.tasks or task_type in self.completed_tasks:
            return False
        self.completed_tasks = [*self.completed_tasks, task_type]
        self.completed = len(self.completed_tasks) == len(self.tasks)
        self.validate_state()
        return True

    @property
    def completion_percentage(self) -> float:
        if not self.tasks:
            return 0.0
        return len(self.completed_tasks) / len(self.tasks) * 100

    def __str__(self) -> str:
        return f"Challenge {self.date:%Y-%m-%d} \u2013 {self.user}"
