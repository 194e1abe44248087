# Registry of all task types in the battery.
# Each entry defines metadata shared by the backend and the mobile client.

from django.db.models import TextChoices


class TaskType(TextChoices):
    TAPPING_SPEED = "tapping-speed", "Tapping Speed"
    STROOP_TEST = "stroop-test", "Stroop Test"
    REACTION_TIME = "reaction-time", "Reaction Time"
    TOWER_OF_HANOI = "tower-of-hanoi", "Tower of Hanoi"
    SPATIAL_MEMORY = "spatial-memory", "Spatial Memory"
    DECISION_TASK = "decision-task", "Decision Task"
    SOUND_DISCRIMINATION = "sound-discrimination", "Sound Discrimination"


TASK_REGISTRY: dict[str, dict] = {
    "tapping-speed": {
        "label": "Tapping Speed",
        "color": "#FF6B6B",
        "gradient": ("#FF6B6B", "#FF8E53"),
        "route": "/tasks/tapping-speed",
        "description": "Test your motor speed and coordination",
        "duration_ms": 10_000,
    },
    "stroop-test": {
        "label": "Stroop Test",
        "color": "#4ECDC4",
        "gradient": ("#4ECDC4", "#44A08D"),
        "route": "/tasks/stroop-test",
        "description": "Challenge your cognitive flexibility",
        "duration_ms": None,
    },
    "reaction-time": {
        "label": "Reaction Time",
        "color": "#45B7D1",
        "gradient": ("#45B7D1", "#2196F3"),
        "route": "/tasks/reaction-time",
        "description": "Measure your response speed",
        "duration_ms": None,
    },
    "tower-of-hanoi": {
        "label": "Tower of Hanoi",
        "color": "#96CEB4",
        "gradient": ("#96CEB4", "#FFEAA7"),
        "route": "/tasks/tower-of-hanoi",
        "description": "Solve the classic puzzle",
        "duration_ms": None,
    },
    "spatial-memory": {
        "label": "Spatial Memory",
        "color": "#FFEAA7",
        "gradient": ("#A8EDEA", "#FED6E3"),
        "route": "/tasks/spatial-memory",
        "description": "Test your working memory",
        "duration_ms": None,
    },
    "decision-task": {
        "label": "Decision Task",
        "color": "#8B5CF6",
        "gradient": ("#8B5CF6", "#A78BFA"),
        "route": "/tasks/decision-task",
        "description": "Test risk-taking and learning",
        "duration_ms": None,
    },
    "sound-discrimination": {
        "label": "Sound Discrimination",
        "color": "#10B981",
        "gradient": ("#10B981", "#059669"),
        "route": "/tasks/sound-discrimination",
        "description": "Test auditory perception",
        "duration_ms": None,
    },
}
