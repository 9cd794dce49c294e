"""
Temporal workflow that processes one submitted customer review.

Workflows are the orchestration layer in Temporal: they coordinate
activities, hold state durably and survive worker restarts. Workflow code
must be deterministic (no random numbers, wall-clock time or direct I/O),
which is why even ID generation runs as an activity.

Pipeline, in strict order:

    DetectingSentiment -> GeneratingId -> Persisting -> EvaluatingSentiment
        -> Notifying (NEGATIVE only) -> Completed

Classification and persistence failures are fatal and end the execution in
Failed, tagged with the stage. Notification is best-effort: once the record
is persisted the execution completes whether or not the alert went out.
"""

import asyncio
from datetime import timedelta
from typing import Any, Dict, Optional, Tuple

from temporalio import workflow
from temporalio.common import RetryPolicy
from temporalio.exceptions import ActivityError, ApplicationError, CancelledError

with workflow.unsafe.imports_passed_through():
    from review_processor.activities import ReviewActivities
    from review_processor.models import (
        DetectSentimentInput,
        ExecutionStatus,
        NotifyInput,
        ProcessReviewInput,
        ReviewProcessingResult,
        ReviewRecord,
        ReviewSubmittedEvent,
        SentimentLabel,
        SentimentResult,
        WorkflowStage,
        next_stage,
    )

# External calls are attempted exactly once; retries, if ever wanted, are a
# policy decision layered on top, not a Temporal default.
NO_RETRY_POLICY = RetryPolicy(maximum_attempts=1)

# ID generation is local and side-effect free, so retrying it is harmless
ID_RETRY_POLICY = RetryPolicy(
    initial_interval=timedelta(milliseconds=100),
    maximum_interval=timedelta(seconds=1),
    maximum_attempts=3,
)

CLASSIFY_TIMEOUT = timedelta(seconds=10)
GENERATE_ID_TIMEOUT = timedelta(seconds=5)
PERSIST_TIMEOUT = timedelta(seconds=10)
NOTIFY_TIMEOUT = timedelta(seconds=10)


def _is_cancellation(err: ActivityError) -> bool:
    return isinstance(err.cause, CancelledError)


def _describe(err: ActivityError) -> Tuple[str, str]:
    """Return (error_type, message) for a failed activity."""
    cause = err.cause
    if isinstance(cause, ApplicationError):
        return cause.type or "ApplicationError", cause.message
    if cause is not None:
        return type(cause).__name__, str(cause)
    return type(err).__name__, str(err)


@workflow.defn
class ProcessReview:
    """
    Classifies, identifies, persists and (for negative reviews) reports one
    customer review.

    The execution is a state machine over ``WorkflowStage``; every move goes
    through ``next_stage`` so an illegal transition fails loudly instead of
    silently skipping a stage. The current stage is what a failure is
    tagged with, including a deadline expiry.

    Supports monitoring via the ``get_status`` query.
    """

    def __init__(self) -> None:
        """Initialize execution state for query support."""
        self._stage = WorkflowStage.STARTED
        self._event: Optional[ReviewSubmittedEvent] = None
        self._started_at: Optional[str] = None
        self._completed_at: Optional[str] = None
        self._error: Optional[str] = None
        self._review_id: Optional[str] = None
        self._sentiment: Optional[SentimentLabel] = None

    @workflow.query
    def get_status(self) -> Dict[str, Any]:
        """
        Query the execution's current state.

        Returns:
            Dictionary with the execution view:
                - workflow_id: Execution ID
                - input: Submitted review (or None before start)
                - stage: Current stage name
                - started_at / completed_at: ISO-8601 timestamps
                - error: Fatal error description, if failed
                - review_id / sentiment: Set once produced
        """
        return {
            "workflow_id": workflow.info().workflow_id,
            "input": (
                {
                    "review_text": self._event.review_text,
                    "submitted_at": self._event.submitted_at,
                }
                if self._event is not None
                else None
            ),
            "stage": self._stage.value,
            "started_at": self._started_at,
            "completed_at": self._completed_at,
            "error": self._error,
            "review_id": self._review_id,
            "sentiment": self._sentiment.value if self._sentiment else None,
        }

    @workflow.run
    async def run(self, input: ProcessReviewInput) -> ReviewProcessingResult:
        """
        Process one review within the input's deadline.

        Args:
            input: Submitted review and execution deadline

        Returns:
            Terminal outcome. Fatal errors are reported here as FAILED rather
            than by failing the workflow, so callers always get the stage.
        """
        self._event = input.event
        self._started_at = workflow.now().isoformat()
        workflow.logger.info(f"Processing review submitted at {input.event.submitted_at}")

        pipeline = asyncio.create_task(self._process(input.event))

        timed_out = False
        try:
            await workflow.wait_condition(
                pipeline.done,
                timeout=timedelta(seconds=input.deadline_seconds),
            )
        except asyncio.TimeoutError:
            timed_out = not pipeline.done()

        if timed_out:
            stage = self._stage
            pipeline.cancel()
            try:
                result = await pipeline
            except (asyncio.CancelledError, ActivityError):
                # In-flight call abandoned; its remote side effect may still land
                result = self._fail(
                    stage,
                    "TimeoutError",
                    f"Execution exceeded its {input.deadline_seconds:g}s deadline",
                )
        else:
            try:
                result = pipeline.result()
            except ActivityError as err:
                result = self._fail(self._stage, *_describe(err))

        self._completed_at = workflow.now().isoformat()
        return result

    async def _process(self, event: ReviewSubmittedEvent) -> ReviewProcessingResult:
        self._advance(WorkflowStage.DETECTING_SENTIMENT)
        sentiment: SentimentResult = await workflow.execute_activity_method(
            ReviewActivities.detect_sentiment,
            DetectSentimentInput(text=event.review_text),
            start_to_close_timeout=CLASSIFY_TIMEOUT,
            retry_policy=NO_RETRY_POLICY,
        )
        self._sentiment = sentiment.label

        self._advance(WorkflowStage.GENERATING_ID)
        self._review_id = await workflow.execute_activity_method(
            ReviewActivities.generate_review_id,
            start_to_close_timeout=GENERATE_ID_TIMEOUT,
            retry_policy=ID_RETRY_POLICY,
        )

        self._advance(WorkflowStage.PERSISTING)
        await workflow.execute_activity_method(
            ReviewActivities.save_review,
            ReviewRecord(
                review_id=self._review_id,
                customer_message=event.review_text,
                sentiment=self._sentiment,
                created_at=workflow.now().isoformat(),
            ),
            start_to_close_timeout=PERSIST_TIMEOUT,
            retry_policy=NO_RETRY_POLICY,
        )

        self._advance(WorkflowStage.EVALUATING_SENTIMENT)
        notified = False
        notification_error: Optional[str] = None

        if self._sentiment == SentimentLabel.NEGATIVE:
            self._advance(WorkflowStage.NOTIFYING)
            try:
                await workflow.execute_activity_method(
                    ReviewActivities.send_notification,
                    NotifyInput(
                        review_id=self._review_id,
                        sentiment=self._sentiment,
                        customer_message=event.review_text,
                    ),
                    start_to_close_timeout=NOTIFY_TIMEOUT,
                    retry_policy=NO_RETRY_POLICY,
                )
                notified = True
            except ActivityError as err:
                if _is_cancellation(err):
                    raise
                # The record is already durable; a lost alert does not undo it
                _, notification_error = _describe(err)
                workflow.logger.warning(
                    f"Notification for review {self._review_id} failed: {notification_error}"
                )

        self._advance(WorkflowStage.COMPLETED)
        workflow.logger.info(f"Review {self._review_id} completed ({self._sentiment.value})")

        return ReviewProcessingResult(
            status=ExecutionStatus.COMPLETED,
            review_id=self._review_id,
            sentiment=self._sentiment,
            notified=notified,
            notification_error=notification_error,
        )

    def _advance(self, stage: WorkflowStage) -> None:
        self._stage = next_stage(self._stage, stage)

    def _fail(self, stage: WorkflowStage, error_type: str, message: str) -> ReviewProcessingResult:
        self._advance(WorkflowStage.FAILED)
        self._error = f"{error_type}: {message}"
        workflow.logger.error(f"Review processing failed at {stage.value}: {self._error}")

        return ReviewProcessingResult(
            status=ExecutionStatus.FAILED,
            review_id=self._review_id,
            sentiment=self._sentiment,
            failed_stage=stage,
            error_type=error_type,
            error=message,
        )
