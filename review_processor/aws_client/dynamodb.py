"""
DynamoDB-backed review store.

The table is keyed by ``reviewId`` and carries a global secondary index
partitioned on ``sentiment``; the index is maintained by DynamoDB, never by
the workflow. Writes are conditional puts so a write is always an insert.

boto3 is blocking, so the async methods run each call on a worker thread to
keep one execution's I/O from stalling the others on the event loop.
"""

import asyncio
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError

from review_processor.errors import StoreError
from review_processor.models import ReviewRecord, SentimentLabel


class DynamoReviewStore:
    """Review store on a DynamoDB table with a sentiment index."""

    def __init__(
        self,
        table_name: str,
        index_name: str = "SentimentIndex",
        region_name: Optional[str] = None,
        table: Optional[Any] = None,
    ) -> None:
        """
        Args:
            table_name: DynamoDB table name
            index_name: GSI partitioned on ``sentiment``
            region_name: AWS region (defaults to environment configuration)
            table: Pre-built boto3 Table resource (mainly for tests)
        """
        self.index_name = index_name
        self.table = table or boto3.resource(
            "dynamodb", region_name=region_name
        ).Table(table_name)

    async def put(self, record: ReviewRecord) -> None:
        """
        Insert a review record atomically.

        Raises:
            StoreError: If the key already exists or the write fails. The
                caller must not assume anything was persisted.
        """
        await asyncio.to_thread(self._put, record)

    def _put(self, record: ReviewRecord) -> None:
        try:
            self.table.put_item(
                Item=record.to_item(),
                ConditionExpression="attribute_not_exists(reviewId)",
            )
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"Failed to persist review {record.review_id}: {e}") from e

    async def get(self, review_id: str) -> Optional[ReviewRecord]:
        """Return the record for ``review_id``, or None if absent."""
        return await asyncio.to_thread(self._get, review_id)

    def _get(self, review_id: str) -> Optional[ReviewRecord]:
        try:
            response = self.table.get_item(Key={"reviewId": review_id})
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"Failed to read review {review_id}: {e}") from e

        item = response.get("Item")
        return ReviewRecord.from_item(item) if item else None

    async def list_by_sentiment(self, sentiment: SentimentLabel) -> List[ReviewRecord]:
        """Return all records with ``sentiment`` in index order."""
        return await asyncio.to_thread(self._list_by_sentiment, sentiment)

    def _list_by_sentiment(self, sentiment: SentimentLabel) -> List[ReviewRecord]:
        records: List[ReviewRecord] = []
        query: Dict[str, Any] = {
            "IndexName": self.index_name,
            "KeyConditionExpression": Key("sentiment").eq(sentiment.value),
        }

        # Follow pagination until DynamoDB stops returning a cursor
        while True:
            try:
                response = self.table.query(**query)
            except (ClientError, BotoCoreError) as e:
                raise StoreError(f"Failed to query {sentiment.value} reviews: {e}") from e

            records.extend(ReviewRecord.from_item(item) for item in response.get("Items", []))

            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            query["ExclusiveStartKey"] = last_key

        return records
