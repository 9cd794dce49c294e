"""
Data models for workflow execution and activity parameters.

Activities and workflows take a single dataclass parameter so optional
fields can be added without breaking running executions.
Timestamps cross the Temporal boundary as ISO-8601 strings.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Dict, FrozenSet, Mapping, Optional

# Overall wall-clock budget for one execution (seconds)
DEFAULT_DEADLINE_SECONDS = 30.0


class SentimentLabel(StrEnum):
    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    NEUTRAL = "NEUTRAL"
    MIXED = "MIXED"


class WorkflowStage(StrEnum):
    """Stages of one ProcessReview execution."""

    STARTED = "Started"
    DETECTING_SENTIMENT = "DetectingSentiment"
    GENERATING_ID = "GeneratingId"
    PERSISTING = "Persisting"
    EVALUATING_SENTIMENT = "EvaluatingSentiment"
    NOTIFYING = "Notifying"
    COMPLETED = "Completed"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        return not TRANSITIONS[self]


# Every non-terminal stage may fail: the execution deadline applies everywhere.
TRANSITIONS: Dict[WorkflowStage, FrozenSet[WorkflowStage]] = {
    WorkflowStage.STARTED: frozenset(
        {WorkflowStage.DETECTING_SENTIMENT, WorkflowStage.FAILED}
    ),
    WorkflowStage.DETECTING_SENTIMENT: frozenset(
        {WorkflowStage.GENERATING_ID, WorkflowStage.FAILED}
    ),
    WorkflowStage.GENERATING_ID: frozenset(
        {WorkflowStage.PERSISTING, WorkflowStage.FAILED}
    ),
    WorkflowStage.PERSISTING: frozenset(
        {WorkflowStage.EVALUATING_SENTIMENT, WorkflowStage.FAILED}
    ),
    WorkflowStage.EVALUATING_SENTIMENT: frozenset(
        {WorkflowStage.NOTIFYING, WorkflowStage.COMPLETED, WorkflowStage.FAILED}
    ),
    WorkflowStage.NOTIFYING: frozenset(
        {WorkflowStage.COMPLETED, WorkflowStage.FAILED}
    ),
    WorkflowStage.COMPLETED: frozenset(),
    WorkflowStage.FAILED: frozenset(),
}


def next_stage(current: WorkflowStage, target: WorkflowStage) -> WorkflowStage:
    """
    Validate a stage transition against the transition table.

    Raises:
        ValueError: If ``target`` is not reachable from ``current``
    """
    if target not in TRANSITIONS[current]:
        raise ValueError(f"Illegal stage transition {current.value} -> {target.value}")
    return target


class ExecutionStatus(StrEnum):
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


# Domain Types
# ------------

@dataclass(frozen=True)
class ReviewSubmittedEvent:
    """
    A customer review as delivered by the event bus.

    Attributes:
        review_text: Free-form review text
        submitted_at: ISO-8601 submission timestamp
    """
    review_text: str
    submitted_at: str


@dataclass(frozen=True)
class SentimentResult:
    """
    Classifier output for one text.

    Attributes:
        label: Dominant sentiment
        raw: Opaque classifier response (e.g. Comprehend's SentimentScore)
    """
    label: SentimentLabel
    raw: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ReviewRecord:
    """
    The persisted output of a completed execution. Written once, never updated.

    Attributes:
        review_id: ULID primary key
        customer_message: Original review text
        sentiment: Classified sentiment
        created_at: ISO-8601 creation timestamp
    """
    review_id: str
    customer_message: str
    sentiment: SentimentLabel
    created_at: str

    def to_item(self) -> Dict[str, str]:
        """Serialize using the store's attribute names."""
        return {
            "reviewId": self.review_id,
            "customerMessage": self.customer_message,
            "sentiment": self.sentiment.value,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_item(cls, item: Mapping[str, Any]) -> "ReviewRecord":
        return cls(
            review_id=item["reviewId"],
            customer_message=item["customerMessage"],
            sentiment=SentimentLabel(item["sentiment"]),
            created_at=item.get("createdAt", ""),
        )


@dataclass(frozen=True)
class NotificationMessage:
    subject: str
    body: str


# Activity Parameters
# -------------------

@dataclass(frozen=True)
class DetectSentimentInput:
    """
    Input parameters for the detect_sentiment activity.

    Attributes:
        text: Review text to classify
    """
    text: str


@dataclass(frozen=True)
class NotifyInput:
    """
    Input parameters for the send_notification activity.

    Sender and recipient are fixed by worker configuration, not passed here.

    Attributes:
        review_id: ID of the persisted review
        sentiment: Classified sentiment
        customer_message: Original review text
    """
    review_id: str
    sentiment: SentimentLabel
    customer_message: str


# Workflow Parameters
# -------------------

@dataclass(frozen=True)
class ProcessReviewInput:
    """
    Input parameters for the ProcessReview workflow.

    Attributes:
        event: The submitted review
        deadline_seconds: Overall wall-clock budget for the execution
    """
    event: ReviewSubmittedEvent
    deadline_seconds: float = DEFAULT_DEADLINE_SECONDS


# Workflow Return Types
# ---------------------

@dataclass(frozen=True)
class ReviewProcessingResult:
    """
    Terminal outcome of one ProcessReview execution.

    Attributes:
        status: COMPLETED or FAILED
        review_id: Generated ID (set on success, and on failures after generation)
        sentiment: Classified sentiment, if classification succeeded
        failed_stage: Stage that was in flight when a fatal error occurred
        error_type: Error class name (ClassificationError, StoreError, TimeoutError, ...)
        error: Human-readable error message
        notified: Whether a notification was sent successfully
        notification_error: Message of a swallowed notification failure
    """
    status: ExecutionStatus
    review_id: Optional[str] = None
    sentiment: Optional[SentimentLabel] = None
    failed_stage: Optional[WorkflowStage] = None
    error_type: Optional[str] = None
    error: Optional[str] = None
    notified: bool = False
    notification_error: Optional[str] = None
