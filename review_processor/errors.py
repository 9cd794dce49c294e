"""
Exception hierarchy for review processing.

Adapters raise these; activities translate them into Temporal
``ApplicationError`` instances whose ``type`` is the class name, which is
what the workflow inspects to decide between a fatal and a best-effort
failure.
"""


class ReviewProcessingError(Exception):
    """Base class for all review processing errors."""


class ClassificationError(ReviewProcessingError):
    """Sentiment classifier unavailable or input rejected. Fatal."""


class StoreError(ReviewProcessingError):
    """Review record could not be persisted. Fatal, nothing was written."""


class NotificationError(ReviewProcessingError):
    """Notification dispatch failed. Logged and swallowed by the workflow."""


class PublishError(ReviewProcessingError):
    """A ReviewSubmitted event could not be published to the bus."""


class InvalidEventError(ReviewProcessingError):
    """A bus event matched the review type but lacks the review text."""
