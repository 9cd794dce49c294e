"""
Temporal worker process for the review processing workflow.

Workers poll the Temporal server for tasks and execute workflow and activity
code. This worker hosts the ProcessReview workflow and its activities
(detect_sentiment, generate_review_id, save_review, send_notification).

To run:
    python -m review_processor.run_worker

Prerequisites:
    - Temporal server reachable at TEMPORAL_HOST (default localhost:7233)
    - Environment variables configured in .env (NOTIFICATION_SENDER and
      NOTIFICATION_RECIPIENT are required)
    - AWS credentials for Comprehend, SES and (unless REVIEW_STORE_PATH is
      set) DynamoDB
"""

import asyncio
import logging

from dotenv import load_dotenv
from temporalio.client import Client
from temporalio.worker import Worker

from review_processor.activities import ReviewActivities
from review_processor.aws_client.comprehend import ComprehendClassifier
from review_processor.aws_client.ses import SesNotifier
from review_processor.config import Settings
from review_processor.storage import build_review_store
from review_processor.workflows import ProcessReview

# Load environment variables from .env file
load_dotenv()


def build_activities(settings: Settings) -> ReviewActivities:
    """Construct every adapter once and bind them to the activities."""
    settings.require_notification_addresses()

    return ReviewActivities(
        classifier=ComprehendClassifier(
            language_code=settings.language_code,
            region_name=settings.aws_region,
        ),
        store=build_review_store(settings),
        notifier=SesNotifier(
            sender=settings.notification_sender,
            region_name=settings.aws_region,
        ),
        recipient=settings.notification_recipient,
    )


async def main() -> None:
    """
    Start the Temporal worker and begin polling for tasks.

    The worker will run indefinitely until interrupted (Ctrl+C) or the
    process is terminated.
    """
    settings = Settings.from_env()
    activities = build_activities(settings)

    client = await Client.connect(settings.temporal_host)

    worker = Worker(
        client,
        task_queue=settings.task_queue,
        workflows=[ProcessReview],
        activities=[
            activities.detect_sentiment,
            activities.generate_review_id,
            activities.save_review,
            activities.send_notification,
        ],
    )

    logging.getLogger(__name__).info(f"Worker polling task queue {settings.task_queue}")

    # Run worker (blocks until shutdown signal)
    await worker.run()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
