from django.core.exceptions import ValidationError


class StorageError(Exception):
    """The database failed while reading or writing progress data."""


class InvalidChallengeState(ValidationError):
    """A daily challenge's task lists disagree with each other."""
