"""
Unit tests for the file-backed review store.
"""

import json
import os
import pytest
import tempfile
from unittest.mock import patch

from review_processor.config import Settings
from review_processor.errors import StoreError
from review_processor.models import ReviewRecord, SentimentLabel
from review_processor.storage import FileReviewStore, build_review_store


def record(review_id: str, sentiment: SentimentLabel = SentimentLabel.POSITIVE) -> ReviewRecord:
    return ReviewRecord(
        review_id=review_id,
        customer_message=f"message for {review_id}",
        sentiment=sentiment,
        created_at="2026-10-19T12:00:00+00:00",
    )


class TestFileReviewStore:
    """Test file persistence."""

    @pytest.fixture
    def temp_dir(self):
        """Create temporary directory for test files."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield tmpdir

    @pytest.mark.asyncio
    async def test_put_writes_record_atomically(self, temp_dir):
        store = FileReviewStore(temp_dir)

        await store.put(record("01JAB6"))

        file_path = store.get_file_path("01JAB6")
        assert os.path.exists(file_path)
        assert not os.path.exists(f"{file_path}.tmp")

        with open(file_path, "r") as f:
            assert json.load(f) == {
                "reviewId": "01JAB6",
                "customerMessage": "message for 01JAB6",
                "sentiment": "POSITIVE",
                "createdAt": "2026-10-19T12:00:00+00:00",
            }

    @pytest.mark.asyncio
    async def test_put_creates_missing_directory(self, temp_dir):
        store = FileReviewStore(os.path.join(temp_dir, "nested", "reviews"))

        await store.put(record("01JAB6"))

        assert await store.get("01JAB6") == record("01JAB6")

    @pytest.mark.asyncio
    async def test_put_never_overwrites(self, temp_dir):
        store = FileReviewStore(temp_dir)
        await store.put(record("01JAB6", SentimentLabel.POSITIVE))

        with pytest.raises(StoreError):
            await store.put(record("01JAB6", SentimentLabel.NEGATIVE))

        assert (await store.get("01JAB6")).sentiment == SentimentLabel.POSITIVE

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, temp_dir):
        store = FileReviewStore(temp_dir)

        assert await store.get("01MISSING") is None

    @pytest.mark.asyncio
    async def test_list_by_sentiment_in_id_order(self, temp_dir):
        store = FileReviewStore(temp_dir)
        for review_id, sentiment in [
            ("01C", SentimentLabel.NEGATIVE),
            ("01A", SentimentLabel.NEGATIVE),
            ("01B", SentimentLabel.POSITIVE),
        ]:
            await store.put(record(review_id, sentiment))

        negative = await store.list_by_sentiment(SentimentLabel.NEGATIVE)

        assert [r.review_id for r in negative] == ["01A", "01C"]
        assert await store.list_by_sentiment(SentimentLabel.MIXED) == []

    @pytest.mark.asyncio
    async def test_list_ignores_foreign_files(self, temp_dir):
        store = FileReviewStore(temp_dir)
        await store.put(record("01A"))
        with open(os.path.join(temp_dir, "notes.txt"), "w") as f:
            f.write("not a review")

        assert [r.review_id for r in await store.list_by_sentiment(SentimentLabel.POSITIVE)] == ["01A"]

    @pytest.mark.asyncio
    async def test_list_missing_directory_is_empty(self, temp_dir):
        store = FileReviewStore(os.path.join(temp_dir, "absent"))

        assert await store.list_by_sentiment(SentimentLabel.POSITIVE) == []


class TestBuildReviewStore:
    def test_file_store_when_path_configured(self, tmp_path):
        store = build_review_store(Settings(review_store_path=str(tmp_path)))

        assert isinstance(store, FileReviewStore)
        assert store.root_path == str(tmp_path)

    def test_dynamodb_store_otherwise(self):
        with patch("review_processor.storage.DynamoReviewStore") as dynamo:
            store = build_review_store(
                Settings(reviews_table_name="Reviews", sentiment_index_name="ByMood", aws_region="eu-west-1")
            )

        assert store is dynamo.return_value
        dynamo.assert_called_once_with(
            table_name="Reviews",
            index_name="ByMood",
            region_name="eu-west-1",
        )
