"""
Unit tests for the Event Ingress Router and the in-process event bus.
"""

import asyncio
import logging
import pytest
from unittest.mock import AsyncMock, MagicMock

from temporalio.exceptions import WorkflowAlreadyStartedError

from review_processor.events import REVIEW_SUBMITTED, LocalEventBus, build_review_submitted_event
from review_processor.models import ProcessReviewInput, ReviewSubmittedEvent
from review_processor.router import EventIngressRouter
from review_processor.workflows import ProcessReview


def bus_event(event_id: str, text: str = "Great service!", **overrides) -> dict:
    event = {
        "id": event_id,
        "source": "reviews.api",
        "detail-type": REVIEW_SUBMITTED,
        "time": "2026-10-19T12:00:00Z",
        "detail": {"reviewText": text},
    }
    event.update(overrides)
    return event


class TestEventIngressRouter:
    """Test event filtering and workflow dispatch."""

    @pytest.fixture
    def client(self):
        client = MagicMock()
        client.start_workflow = AsyncMock()
        return client

    @pytest.fixture
    def router(self, client):
        return EventIngressRouter(client, task_queue="review-processing", deadline_seconds=30)

    @pytest.mark.asyncio
    async def test_matching_event_starts_one_workflow(self, router, client):
        workflow_id = await router.route(bus_event("evt-1"))

        assert workflow_id == "review-evt-1"
        client.start_workflow.assert_awaited_once_with(
            ProcessReview.run,
            ProcessReviewInput(
                event=ReviewSubmittedEvent(
                    review_text="Great service!",
                    submitted_at="2026-10-19T12:00:00Z",
                ),
                deadline_seconds=30,
            ),
            id="review-evt-1",
            task_queue="review-processing",
        )

    @pytest.mark.asyncio
    async def test_camel_case_discriminator_accepted(self, router, client):
        event = {"detailType": REVIEW_SUBMITTED, "detail": {"reviewText": "Great service!"}}

        workflow_id = await router.route(event)

        assert workflow_id.startswith("review-")
        client.start_workflow.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_submitted_at_prefers_detail(self, router, client):
        event = bus_event("evt-2")
        event["detail"]["submittedAt"] = "2026-10-19T11:59:00Z"

        await router.route(event)

        workflow_input = client.start_workflow.call_args.args[1]
        assert workflow_input.event.submitted_at == "2026-10-19T11:59:00Z"

    @pytest.mark.asyncio
    async def test_other_event_types_ignored(self, router, client):
        result = await router.route(bus_event("evt-3", **{"detail-type": "OrderPlaced"}))

        assert result is None
        client.start_workflow.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_malformed_review_event_dropped(self, router, client):
        result = await router.route(bus_event("evt-4", detail={}))

        assert result is None
        client.start_workflow.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("detail", ["oops", ["reviewText"], 42])
    async def test_non_object_detail_dropped(self, router, client, detail):
        result = await router.route(bus_event("evt-6", detail=detail))

        assert result is None
        client.start_workflow.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_redelivered_event_does_not_start_twice(self, router, client):
        client.start_workflow.side_effect = WorkflowAlreadyStartedError(
            "review-evt-5", "ProcessReview"
        )

        assert await router.route(bus_event("evt-5")) is None

    @pytest.mark.asyncio
    async def test_route_many_starts_independent_executions(self, router, client):
        events = [
            bus_event("evt-a"),
            bus_event("evt-b"),
            bus_event("evt-c", **{"detail-type": "Other"}),
            bus_event("evt-d"),
        ]

        results = await router.route_many(events)

        assert results == ["review-evt-a", "review-evt-b", None, "review-evt-d"]
        started_ids = {call.kwargs["id"] for call in client.start_workflow.call_args_list}
        assert started_ids == {"review-evt-a", "review-evt-b", "review-evt-d"}

    @pytest.mark.asyncio
    async def test_identical_texts_get_separate_executions(self, router, client):
        results = await router.route_many([bus_event("evt-x"), bus_event("evt-y")])

        assert results[0] != results[1]
        assert client.start_workflow.await_count == 2


class TestLocalEventBus:
    """Test the in-process bus."""

    def test_event_envelope(self):
        event = build_review_submitted_event("Great service!", source="tests")

        assert event["detail-type"] == REVIEW_SUBMITTED
        assert event["source"] == "tests"
        assert event["detail"]["reviewText"] == "Great service!"
        assert event["detail"]["submittedAt"] == event["time"]
        assert event["id"]

    @pytest.mark.asyncio
    async def test_publish_does_not_wait_for_delivery(self):
        bus = LocalEventBus()
        release = asyncio.Event()
        delivered = []

        async def slow_handler(event):
            await release.wait()
            delivered.append(event)

        bus.subscribe(slow_handler)

        event_id = await bus.publish("Great service!")

        # Publisher has its ID while the handler is still blocked
        assert event_id
        assert delivered == []

        release.set()
        await bus.drain()

        assert [event["id"] for event in delivered] == [event_id]

    @pytest.mark.asyncio
    async def test_handler_failure_is_logged_not_raised(self, caplog):
        bus = LocalEventBus()

        async def failing_handler(event):
            raise RuntimeError("router down")

        bus.subscribe(failing_handler)

        with caplog.at_level(logging.ERROR, logger="review_processor.events"):
            await bus.publish("Great service!")
            await bus.drain()
            # Let done-callbacks run
            await asyncio.sleep(0)

        assert "router down" in caplog.text
