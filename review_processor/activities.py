"""
Temporal activities for review processing.

Activities are the only place the workflow touches the outside world. Each
one wraps a single adapter and translates its domain error into a Temporal
``ApplicationError`` whose ``type`` is the domain error's class name, so
the workflow can tell a ClassificationError from a StoreError without
importing adapter code.

All adapter errors are raised as non-retryable: retry policy is an
explicit workflow-level decision, never an accident of Temporal defaults.

The activities are methods on ``ReviewActivities`` so adapters and
configuration are injected once, at worker construction, instead of being
read from the environment on every call.
"""

import asyncio
from typing import Any, Optional, Protocol

from temporalio import activity
from temporalio.exceptions import ApplicationError

from review_processor.aws_client.ses import compose_notification
from review_processor.errors import (
    ClassificationError,
    NotificationError,
    ReviewProcessingError,
    StoreError,
)
from review_processor.ids import ReviewIdGenerator
from review_processor.models import (
    DetectSentimentInput,
    NotificationMessage,
    NotifyInput,
    ReviewRecord,
    SentimentResult,
)


class SentimentClassifier(Protocol):
    def classify(self, text: str) -> SentimentResult: ...


class ReviewWriter(Protocol):
    async def put(self, record: ReviewRecord) -> None: ...


class Notifier(Protocol):
    def notify(self, message: NotificationMessage, recipient: str) -> Any: ...


def _application_error(message: str, error: ReviewProcessingError) -> ApplicationError:
    return ApplicationError(
        f"{message}: {error}",
        type=type(error).__name__,
        non_retryable=True,
    )


class ReviewActivities:
    """
    Activity implementations bound to their adapters.

    Register the bound methods on a worker:

        activities = ReviewActivities(classifier, store, notifier, recipient)
        Worker(..., activities=[
            activities.detect_sentiment,
            activities.generate_review_id,
            activities.save_review,
            activities.send_notification,
        ])
    """

    def __init__(
        self,
        classifier: SentimentClassifier,
        store: ReviewWriter,
        notifier: Notifier,
        recipient: str,
        id_generator: Optional[ReviewIdGenerator] = None,
    ) -> None:
        self.classifier = classifier
        self.store = store
        self.notifier = notifier
        self.recipient = recipient
        self.id_generator = id_generator or ReviewIdGenerator()

    @activity.defn
    async def detect_sentiment(self, input: DetectSentimentInput) -> SentimentResult:
        """
        Classify the review text.

        Raises:
            ApplicationError: type ClassificationError, non-retryable
        """
        try:
            # Comprehend's client is blocking; keep the event loop free
            result = await asyncio.to_thread(self.classifier.classify, input.text)
        except ClassificationError as e:
            raise _application_error("Sentiment detection failed", e) from e

        activity.logger.info(f"Detected sentiment {result.label.value}")
        return result

    @activity.defn
    async def generate_review_id(self) -> str:
        """Mint a fresh, time-sortable review ID. Never fails."""
        return self.id_generator.generate()

    @activity.defn
    async def save_review(self, record: ReviewRecord) -> None:
        """
        Persist the review record as a single atomic insert.

        Raises:
            ApplicationError: type StoreError, non-retryable. Nothing was written.
        """
        try:
            await self.store.put(record)
        except StoreError as e:
            raise _application_error(f"Failed to persist review {record.review_id}", e) from e

        activity.logger.info(f"Persisted review {record.review_id} ({record.sentiment.value})")

    @activity.defn
    async def send_notification(self, input: NotifyInput) -> str:
        """
        Send one notification about a review to the configured recipient.

        Returns:
            Provider message ID

        Raises:
            ApplicationError: type NotificationError, non-retryable
        """
        message = compose_notification(input.review_id, input.sentiment, input.customer_message)

        try:
            message_id = await asyncio.to_thread(self.notifier.notify, message, self.recipient)
        except NotificationError as e:
            raise _application_error(
                f"Failed to send notification for review {input.review_id}", e
            ) from e

        activity.logger.info(f"Sent notification for review {input.review_id}")
        return message_id
