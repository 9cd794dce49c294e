"""
HTTP surface for review submission and lookup.

    POST /reviews              {"message": str} -> 202 {"eventId": str}
    POST /events               bus event        -> 202 {"workflowId": str|null}
    GET  /reviews/{reviewId}                    -> 200 record | 404
    GET  /reviews?sentiment=NEGATIVE            -> 200 {"items": [record, ...]}

Submission is fire-and-forget: the handler publishes a ReviewSubmitted
event and answers 202 without waiting for the workflow. A review whose
execution failed was never stored, so it reads as 404 like an unknown ID.
"""

import logging
from typing import Any, Awaitable, Dict, List, Mapping, Optional, Protocol

from aiohttp import web

from review_processor.errors import PublishError, StoreError
from review_processor.models import ReviewRecord, SentimentLabel
from review_processor.router import EventIngressRouter

logger = logging.getLogger(__name__)


class ReviewPublisher(Protocol):
    def publish(self, message: str) -> Awaitable[str]: ...


class ReviewReader(Protocol):
    def get(self, review_id: str) -> Awaitable[Optional[ReviewRecord]]: ...

    def list_by_sentiment(self, sentiment: SentimentLabel) -> Awaitable[List[ReviewRecord]]: ...


PUBLISHER_KEY = web.AppKey("publisher", ReviewPublisher)
STORE_KEY = web.AppKey("store", ReviewReader)
ROUTER_KEY = web.AppKey("router", EventIngressRouter)


def _error(status: int, message: str) -> web.Response:
    return web.json_response({"error": message}, status=status)


async def submit_review(request: web.Request) -> web.Response:
    try:
        body: Mapping[str, Any] = await request.json()
    except ValueError:
        return _error(400, "Request body must be JSON")

    message = body.get("message") if isinstance(body, dict) else None
    if not isinstance(message, str) or not message.strip():
        return _error(400, "'message' must be a non-empty string")

    try:
        event_id = await request.app[PUBLISHER_KEY].publish(message)
    except PublishError as e:
        logger.error("Failed to publish review: %s", e)
        return _error(502, "Review could not be submitted")

    return web.json_response({"eventId": event_id}, status=202)


async def receive_event(request: web.Request) -> web.Response:
    try:
        event = await request.json()
    except ValueError:
        return _error(400, "Request body must be JSON")

    if not isinstance(event, dict):
        return _error(400, "Event must be a JSON object")

    workflow_id = await request.app[ROUTER_KEY].route(event)
    return web.json_response({"workflowId": workflow_id}, status=202)


async def get_review(request: web.Request) -> web.Response:
    review_id = request.match_info["review_id"]

    try:
        record = await request.app[STORE_KEY].get(review_id)
    except StoreError as e:
        logger.error("Failed to read review %s: %s", review_id, e)
        return _error(503, "Review store unavailable")

    if record is None:
        return _error(404, f"Review {review_id} not found")

    return web.json_response(record.to_item())


async def list_reviews(request: web.Request) -> web.Response:
    raw = request.query.get("sentiment", "")
    try:
        sentiment = SentimentLabel(raw.upper())
    except ValueError:
        allowed = ", ".join(label.value for label in SentimentLabel)
        return _error(400, f"'sentiment' must be one of: {allowed}")

    try:
        records = await request.app[STORE_KEY].list_by_sentiment(sentiment)
    except StoreError as e:
        logger.error("Failed to list %s reviews: %s", sentiment.value, e)
        return _error(503, "Review store unavailable")

    items: List[Dict[str, str]] = [record.to_item() for record in records]
    return web.json_response({"items": items})


def create_app(
    publisher: ReviewPublisher,
    store: ReviewReader,
    router: Optional[EventIngressRouter] = None,
) -> web.Application:
    """
    Build the aiohttp application.

    Args:
        publisher: Destination for submitted reviews (EventBridge or local bus)
        store: Read side of the review store
        router: When given, exposes POST /events for bus delivery
    """
    app = web.Application()
    app[PUBLISHER_KEY] = publisher
    app[STORE_KEY] = store

    app.router.add_post("/reviews", submit_review)
    app.router.add_get("/reviews", list_reviews)
    app.router.add_get("/reviews/{review_id}", get_review)

    if router is not None:
        app[ROUTER_KEY] = router
        app.router.add_post("/events", receive_event)

    return app
