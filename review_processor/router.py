"""
Event Ingress Router.

Turns ReviewSubmitted bus events into ProcessReview workflow executions.
Delivery is at-least-once, so the workflow ID is derived from the bus
event ID: a redelivered event maps onto the execution it already started
and Temporal refuses to start it twice.
"""

import asyncio
import logging
import uuid
from typing import Any, Iterable, List, Mapping, Optional

from temporalio.client import Client
from temporalio.exceptions import WorkflowAlreadyStartedError

from review_processor.errors import InvalidEventError
from review_processor.events import REVIEW_SUBMITTED, utc_now_iso
from review_processor.models import (
    DEFAULT_DEADLINE_SECONDS,
    ProcessReviewInput,
    ReviewSubmittedEvent,
)
from review_processor.workflows import ProcessReview

logger = logging.getLogger(__name__)

WORKFLOW_ID_PREFIX = "review-"


def event_type(event: Mapping[str, Any]) -> Optional[str]:
    """Read the discriminator, accepting EventBridge and camel-case spelling."""
    return event.get("detail-type") or event.get("detailType")


def to_review_event(event: Mapping[str, Any]) -> ReviewSubmittedEvent:
    """
    Extract the review from a bus event.

    Raises:
        InvalidEventError: If ``detail`` is not an object, or ``detail.reviewText``
            is missing or not a string
    """
    detail = event.get("detail") or {}
    if not isinstance(detail, Mapping):
        raise InvalidEventError(f"Event {event.get('id')} has a non-object detail")

    review_text = detail.get("reviewText")
    if not isinstance(review_text, str):
        raise InvalidEventError(f"Event {event.get('id')} has no detail.reviewText")

    submitted_at = detail.get("submittedAt") or event.get("time") or utc_now_iso()
    return ReviewSubmittedEvent(review_text=review_text, submitted_at=submitted_at)


class EventIngressRouter:
    """Starts one ProcessReview execution per matching event."""

    def __init__(
        self,
        client: Client,
        task_queue: str,
        deadline_seconds: float = DEFAULT_DEADLINE_SECONDS,
    ) -> None:
        """
        Args:
            client: Connected Temporal client
            task_queue: Queue the review worker polls
            deadline_seconds: Per-execution deadline passed to the workflow
        """
        self.client = client
        self.task_queue = task_queue
        self.deadline_seconds = deadline_seconds

    async def route(self, event: Mapping[str, Any]) -> Optional[str]:
        """
        Start a workflow for a ReviewSubmitted event without waiting for it.

        Args:
            event: Bus event envelope

        Returns:
            The started workflow ID, or None when the event was ignored
            (other event type, malformed review, or a duplicate delivery)
        """
        if event_type(event) != REVIEW_SUBMITTED:
            logger.debug("Ignoring event of type %r", event_type(event))
            return None

        try:
            review = to_review_event(event)
        except InvalidEventError as e:
            logger.warning("Dropping malformed review event: %s", e)
            return None

        workflow_id = f"{WORKFLOW_ID_PREFIX}{event.get('id') or uuid.uuid4()}"

        try:
            await self.client.start_workflow(
                ProcessReview.run,
                ProcessReviewInput(event=review, deadline_seconds=self.deadline_seconds),
                id=workflow_id,
                task_queue=self.task_queue,
            )
        except WorkflowAlreadyStartedError:
            logger.info("Duplicate delivery for %s; execution already started", workflow_id)
            return None

        logger.info("Started workflow %s", workflow_id)
        return workflow_id

    async def route_many(self, events: Iterable[Mapping[str, Any]]) -> List[Optional[str]]:
        """Route a batch of events concurrently, one independent execution each."""
        return list(await asyncio.gather(*(self.route(event) for event in events)))
