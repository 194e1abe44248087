from django.apps import AppConfig


class ProgressConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "neuroplay.progress"

    def ready(self):
        import neuroplay.progress.signals  # noqa: F401
