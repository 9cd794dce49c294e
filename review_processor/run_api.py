"""
HTTP server for review submission and the read API.

Submitted reviews are published to EventBridge when REVIEWS_EVENT_BUS_NAME
is set; otherwise they go through an in-process bus straight to the router,
which is convenient for local development against a dev Temporal server.

To run:
    python -m review_processor.run_api
"""

import logging

from aiohttp import web
from dotenv import load_dotenv
from temporalio.client import Client

from review_processor.api import create_app
from review_processor.aws_client.eventbridge import EventBridgePublisher
from review_processor.config import Settings
from review_processor.events import LocalEventBus
from review_processor.router import EventIngressRouter
from review_processor.storage import build_review_store

load_dotenv()

logger = logging.getLogger(__name__)


async def build_app(settings: Settings) -> web.Application:
    client = await Client.connect(settings.temporal_host)
    router = EventIngressRouter(
        client,
        task_queue=settings.task_queue,
        deadline_seconds=settings.execution_timeout_seconds,
    )

    if settings.event_bus_name:
        publisher = EventBridgePublisher(
            event_bus_name=settings.event_bus_name,
            source=settings.event_source,
            region_name=settings.aws_region,
        )
        logger.info(f"Publishing reviews to EventBridge bus {settings.event_bus_name}")
    else:
        publisher = LocalEventBus(source=settings.event_source)
        publisher.subscribe(router.route)
        logger.info("Publishing reviews on the in-process bus")

    app = create_app(publisher, build_review_store(settings), router)

    if isinstance(publisher, LocalEventBus):
        async def drain_bus(_: web.Application) -> None:
            await publisher.drain()

        app.on_shutdown.append(drain_bus)

    return app


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    settings = Settings.from_env()
    # run_app awaits the factory on its own loop, which the Temporal client then shares
    web.run_app(build_app(settings), host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
