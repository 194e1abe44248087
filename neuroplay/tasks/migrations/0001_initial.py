import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations
from django.db import models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Performance",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "task_type",
                    models.CharField(
                        choices=[
                            ("tapping-speed", "Tapping Speed"),
                            ("stroop-test", "Stroop Test"),
                            ("reaction-time", "Reaction Time"),
                            ("tower-of-hanoi", "Tower of Hanoi"),
                            ("spatial-memory", "Spatial Memory"),
                            ("decision-task", "Decision Task"),
                            ("sound-discrimination", "Sound Discrimination"),
                        ],
                        max_length=30,
                    ),
                ),
                (
                    "score",
                    models.PositiveSmallIntegerField(validators=[django.core.validators.MaxValueValidator(100)]),
                ),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("metrics", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="performances",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["date", "created_at"],
                "indexes": [
                    models.Index(fields=["user", "date"], name="performance_user_date_idx"),
                    models.Index(fields=["user", "task_type"], name="performance_user_task_idx"),
                ],
            },
        ),
    ]
