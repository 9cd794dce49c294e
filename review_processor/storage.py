"""
Local file-backed review store.

Stores one JSON document per review under a directory, for development and
single-host deployments without DynamoDB. It honours the same contract as
the DynamoDB store: a put is a single atomic insert keyed by reviewId, and
listing by sentiment returns records in reviewId order, which for ULIDs is
creation order.
"""

import json
import os
from typing import List, Optional, Union

import aiofiles
import aiofiles.os

from review_processor.aws_client.dynamodb import DynamoReviewStore
from review_processor.config import Settings
from review_processor.errors import StoreError
from review_processor.models import ReviewRecord, SentimentLabel

RECORD_PREFIX = "review_"
RECORD_SUFFIX = ".json"


class FileReviewStore:
    """
    Review store writing ``review_<reviewId>.json`` files.

    Writes go to a staging file first and are moved into place with
    ``os.replace()``, so a record is either fully present or absent.
    """

    def __init__(self, root_path: str) -> None:
        """
        Args:
            root_path: Directory holding the record files (created on demand)
        """
        self.root_path = root_path

    def get_file_path(self, review_id: str) -> str:
        """
        Get the file path for a review record.

        Args:
            review_id: Review ID

        Returns:
            Absolute path to the record's JSON file
        """
        return os.path.join(self.root_path, f"{RECORD_PREFIX}{review_id}{RECORD_SUFFIX}")

    async def put(self, record: ReviewRecord) -> None:
        """
        Atomically insert a record.

        Raises:
            StoreError: If the record already exists or any file I/O fails
        """
        record_file = self.get_file_path(record.review_id)
        staging_file = f"{record_file}.tmp"

        try:
            await aiofiles.os.makedirs(self.root_path, exist_ok=True)

            if await aiofiles.os.path.exists(record_file):
                raise StoreError(f"Review {record.review_id} already exists")

            async with aiofiles.open(staging_file, "w", encoding="utf-8") as f:
                await f.write(json.dumps(record.to_item()))

            # Atomic swap guarantees all-or-nothing semantics
            await aiofiles.os.replace(staging_file, record_file)
        except OSError as e:
            await self._discard(staging_file)
            raise StoreError(f"Failed to persist review {record.review_id}: {e}") from e

    async def get(self, review_id: str) -> Optional[ReviewRecord]:
        """Return the record for ``review_id``, or None if absent."""
        try:
            async with aiofiles.open(self.get_file_path(review_id), "r", encoding="utf-8") as f:
                content = await f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreError(f"Failed to read review {review_id}: {e}") from e

        return ReviewRecord.from_item(json.loads(content))

    async def list_by_sentiment(self, sentiment: SentimentLabel) -> List[ReviewRecord]:
        """Return all records with ``sentiment``, oldest first."""
        try:
            names = await aiofiles.os.listdir(self.root_path)
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StoreError(f"Failed to list reviews: {e}") from e

        records: List[ReviewRecord] = []
        for name in sorted(names):
            if not (name.startswith(RECORD_PREFIX) and name.endswith(RECORD_SUFFIX)):
                continue

            review_id = name[len(RECORD_PREFIX):-len(RECORD_SUFFIX)]
            record = await self.get(review_id)
            if record is not None and record.sentiment == sentiment:
                records.append(record)

        return records

    async def _discard(self, path: str) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            # Never written
            pass


ReviewStore = Union[FileReviewStore, DynamoReviewStore]


def build_review_store(settings: Settings) -> ReviewStore:
    """Pick the file store when a path is configured, DynamoDB otherwise."""
    if settings.review_store_path:
        return FileReviewStore(settings.review_store_path)

    return DynamoReviewStore(
        table_name=settings.reviews_table_name,
        index_name=settings.sentiment_index_name,
        region_name=settings.aws_region,
    )
