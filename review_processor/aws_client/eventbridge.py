"""
EventBridge publisher for ReviewSubmitted events.
"""

import asyncio
import json
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from review_processor.errors import PublishError
from review_processor.events import REVIEW_SUBMITTED, utc_now_iso


class EventBridgePublisher:
    """
    Publishes review submissions to an EventBridge bus.

    ``publish`` returns as soon as EventBridge has accepted the event; it
    never waits for the workflow the event will eventually start.
    """

    def __init__(
        self,
        event_bus_name: str,
        source: str = "reviews.api",
        region_name: Optional[str] = None,
        client: Optional[Any] = None,
    ) -> None:
        self.event_bus_name = event_bus_name
        self.source = source
        self.client = client or boto3.client("events", region_name=region_name)

    async def publish(self, message: str) -> str:
        """
        Publish one ReviewSubmitted event.

        Returns:
            EventBridge event ID

        Raises:
            PublishError: If the call fails or the entry is rejected
        """
        return await asyncio.to_thread(self._publish, message)

    def _publish(self, message: str) -> str:
        entry = {
            "Source": self.source,
            "DetailType": REVIEW_SUBMITTED,
            "Detail": json.dumps({"reviewText": message, "submittedAt": utc_now_iso()}),
            "EventBusName": self.event_bus_name,
        }

        try:
            response = self.client.put_events(Entries=[entry])
        except (ClientError, BotoCoreError) as e:
            raise PublishError(f"EventBridge PutEvents failed: {e}") from e

        result = response["Entries"][0]
        if response.get("FailedEntryCount") or "EventId" not in result:
            raise PublishError(
                f"EventBridge rejected event: {result.get('ErrorCode')} {result.get('ErrorMessage')}"
            )

        return result["EventId"]
