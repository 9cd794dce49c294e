"""
Unit tests for the HTTP layer.
"""

import pytest
import tempfile
from unittest.mock import AsyncMock, MagicMock

from aiohttp.test_utils import TestClient, TestServer

from review_processor.api import create_app
from review_processor.errors import PublishError
from review_processor.models import ReviewRecord, SentimentLabel
from review_processor.router import EventIngressRouter
from review_processor.storage import FileReviewStore


class FakePublisher:
    def __init__(self) -> None:
        self.messages = []
        self.fail = False

    async def publish(self, message: str) -> str:
        if self.fail:
            raise PublishError("EventBridge down")
        self.messages.append(message)
        return f"evt-{len(self.messages)}"


class TestReviewApi:
    @pytest.fixture
    def temp_dir(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            yield tmpdir

    @pytest.fixture
    async def store(self, temp_dir):
        store = FileReviewStore(temp_dir)
        await store.put(ReviewRecord("01A", "Broke on day one", SentimentLabel.NEGATIVE, "2026-10-19T12:00:00+00:00"))
        await store.put(ReviewRecord("01B", "Great service!", SentimentLabel.POSITIVE, "2026-10-19T12:01:00+00:00"))
        await store.put(ReviewRecord("01C", "Never again", SentimentLabel.NEGATIVE, "2026-10-19T12:02:00+00:00"))
        return store

    @pytest.fixture
    def publisher(self):
        return FakePublisher()

    @pytest.fixture
    def router(self):
        router = MagicMock()
        router.route = AsyncMock(return_value="review-evt-9")
        return router

    @pytest.fixture
    async def client(self, publisher, store, router):
        async with TestClient(TestServer(create_app(publisher, store, router))) as client:
            yield client

    @pytest.mark.asyncio
    async def test_submit_review_is_accepted(self, client, publisher):
        resp = await client.post("/reviews", json={"message": "Great service!"})

        assert resp.status == 202
        assert await resp.json() == {"eventId": "evt-1"}
        assert publisher.messages == ["Great service!"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"message": ""}, {"message": "   "}, {"message": 42}])
    async def test_submit_review_rejects_bad_message(self, client, publisher, body):
        resp = await client.post("/reviews", json=body)

        assert resp.status == 400
        assert publisher.messages == []

    @pytest.mark.asyncio
    async def test_submit_review_rejects_non_json(self, client):
        resp = await client.post("/reviews", data="not json")

        assert resp.status == 400

    @pytest.mark.asyncio
    async def test_submit_review_publish_failure(self, client, publisher):
        publisher.fail = True

        resp = await client.post("/reviews", json={"message": "Great service!"})

        assert resp.status == 502

    @pytest.mark.asyncio
    async def test_get_review(self, client):
        resp = await client.get("/reviews/01B")

        assert resp.status == 200
        assert await resp.json() == {
            "reviewId": "01B",
            "customerMessage": "Great service!",
            "sentiment": "POSITIVE",
            "createdAt": "2026-10-19T12:01:00+00:00",
        }

    @pytest.mark.asyncio
    async def test_unknown_review_is_not_found(self, client):
        resp = await client.get("/reviews/01NEVERSTORED")

        assert resp.status == 404

    @pytest.mark.asyncio
    async def test_list_reviews_by_sentiment(self, client):
        resp = await client.get("/reviews", params={"sentiment": "negative"})

        assert resp.status == 200
        body = await resp.json()
        assert [item["reviewId"] for item in body["items"]] == ["01A", "01C"]

    @pytest.mark.asyncio
    async def test_list_reviews_rejects_unknown_sentiment(self, client):
        resp = await client.get("/reviews", params={"sentiment": "ANGRY"})

        assert resp.status == 400

    @pytest.mark.asyncio
    async def test_bus_delivery_is_routed(self, client, router):
        event = {"id": "evt-9", "detail-type": "ReviewSubmitted", "detail": {"reviewText": "Meh"}}

        resp = await client.post("/events", json=event)

        assert resp.status == 202
        assert await resp.json() == {"workflowId": "review-evt-9"}
        router.route.assert_awaited_once_with(event)

    @pytest.mark.asyncio
    async def test_malformed_bus_delivery_is_accepted_and_dropped(self, publisher, store):
        client_mock = MagicMock()
        client_mock.start_workflow = AsyncMock()
        router = EventIngressRouter(client_mock, task_queue="review-processing")
        event = {"id": "evt-10", "detail-type": "ReviewSubmitted", "detail": "oops"}

        async with TestClient(TestServer(create_app(publisher, store, router))) as client:
            resp = await client.post("/events", json=event)

            assert resp.status == 202
            assert await resp.json() == {"workflowId": None}
        client_mock.start_workflow.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_events_endpoint_absent_without_router(self, publisher, store):
        async with TestClient(TestServer(create_app(publisher, store))) as client:
            resp = await client.post("/events", json={})

        assert resp.status in (404, 405)
