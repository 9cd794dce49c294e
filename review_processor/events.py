"""
ReviewSubmitted events and the in-process event bus.

Events use EventBridge's envelope (``id``, ``source``, ``detail-type``,
``time``, ``detail``) so the router handles events from the local bus and
from EventBridge identically.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Set

logger = logging.getLogger(__name__)

# Event-type discriminator for review submissions
REVIEW_SUBMITTED = "ReviewSubmitted"

EventHandler = Callable[[Dict[str, Any]], Awaitable[Any]]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_review_submitted_event(message: str, source: str = "reviews.api") -> Dict[str, Any]:
    """Wrap a review message in an EventBridge-shaped envelope."""
    submitted_at = utc_now_iso()
    return {
        "id": str(uuid.uuid4()),
        "source": source,
        "detail-type": REVIEW_SUBMITTED,
        "time": submitted_at,
        "detail": {"reviewText": message, "submittedAt": submitted_at},
    }


class LocalEventBus:
    """
    In-process stand-in for EventBridge.

    ``publish`` hands the event to every subscriber on a background task and
    returns immediately: publishers never wait for delivery, let alone for
    the workflow the delivery starts. Handler failures are logged.
    """

    def __init__(self, source: str = "reviews.api") -> None:
        self.source = source
        self._subscribers: List[EventHandler] = []
        self._pending: Set[asyncio.Task] = set()

    def subscribe(self, handler: EventHandler) -> None:
        self._subscribers.append(handler)

    async def publish(self, message: str) -> str:
        """
        Publish one ReviewSubmitted event.

        Returns:
            The event ID
        """
        event = build_review_submitted_event(message, self.source)

        for handler in self._subscribers:
            task = asyncio.create_task(handler(event))
            # Keep a strong reference until the task finishes
            self._pending.add(task)
            task.add_done_callback(self._on_delivered)

        return event["id"]

    async def drain(self) -> None:
        """Wait for all in-flight deliveries (used at shutdown)."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    def _on_delivered(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Event delivery failed: %s", error, exc_info=error)
