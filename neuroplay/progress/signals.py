import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from neuroplay.progress.exceptions import StorageError
from neuroplay.tasks.models import Performance

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Performance, dispatch_uid="performance_update_user_stats")
def on_performance_created(sender, instance, created, **kwargs):
    """After a new performance is stored, fold it into the user's stats and challenge."""
    if not created:
        return
    try:
        from neuroplay.progress.helpers.storage import update_user_stats

        update_user_stats(instance)
    except StorageError:
        # A stale stats cache must never lose the performance itself
        logger.exception("Failed to update stats for Performance %s", instance.pk)
