from uuid import uuid4

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator
from django.db import models
from django.db.models import CASCADE
from django.db.models import CharField
from django.db.models import DateTimeField
from django.db.models import JSONField
from django.db.models import Model
from django.db.models import PositiveSmallIntegerField
from django.db.models import UUIDField
from django.utils import timezone

from neuroplay.tasks.registry import TaskType


class Performance(Model):
    """One completed task session. Written once, never edited."""

    id = UUIDField(primary_key=True, default=uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=CASCADE, related_name="performances")
    task_type = CharField(max_length=30, choices=TaskType.choices)
    score = PositiveSmallIntegerField(validators=[MaxValueValidator(100)])
    date = DateTimeField(default=timezone.now)
    metrics = JSONField(default=dict, blank=True)
    created_at = DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["date", "created_at"]
        indexes = [
            models.Index(fields=["user", "date"], name="performance_user_date_idx"),
            models.Index(fields=["user", "task_type"], name="performance_user_task_idx"),
        ]

    def clean(self):
        if self.task_type not in TaskType.values:
            raise ValidationError(
                {"task_type": f"'{self.task_type}' is not a registered task type."}
            )

    def __str__(self) -> str:
        return f"{self.task_type} {self.score} \u2013 {self.user}"
