"""
CLI client for processing a single review directly.

Starts a ProcessReview execution on the Temporal server, bypassing the
event bus, and waits for the outcome. A worker must be running to process
it (see run_worker.py).

Usage:
    python -m review_processor.run_workflow "Great service!"
    python -m review_processor.run_workflow "Terrible, broke immediately" --deadline 60

Example output:
    ============================================================
    Review Processing Result
    ============================================================
    Status        : COMPLETED
    Review ID     : 01JAB6W3Y9D2X4N5C8QK7R0M1T
    Sentiment     : NEGATIVE
    Notified      : yes
    ============================================================
"""

import argparse
import asyncio
import uuid
from datetime import datetime, timezone

from dotenv import load_dotenv
from temporalio.client import Client

from review_processor.config import Settings
from review_processor.models import (
    ExecutionStatus,
    ProcessReviewInput,
    ReviewProcessingResult,
    ReviewSubmittedEvent,
)
from review_processor.router import WORKFLOW_ID_PREFIX
from review_processor.workflows import ProcessReview

load_dotenv()


def parse_args(settings: Settings) -> argparse.Namespace:
    """
    Parse command-line arguments for workflow execution.

    Returns:
        Parsed arguments with review_text and deadline
    """
    parser = argparse.ArgumentParser(
        description="Process one customer review on Temporal",
        epilog='Example: python -m review_processor.run_workflow "Great service!"',
    )
    parser.add_argument(
        "review_text",
        help="Customer review text to process",
    )
    parser.add_argument(
        "--deadline",
        type=float,
        default=settings.execution_timeout_seconds,
        help=f"Execution deadline in seconds (default: {settings.execution_timeout_seconds:g})",
    )

    args = parser.parse_args()

    if not args.review_text.strip():
        parser.error("review_text must not be empty")
    if args.deadline <= 0:
        parser.error("--deadline must be positive")

    return args


async def main(settings: Settings, review_text: str, deadline: float) -> None:
    """
    Execute the review processing workflow and print its outcome.

    Args:
        settings: Deployment configuration
        review_text: Customer review text
        deadline: Execution deadline in seconds
    """
    workflow_id = f"{WORKFLOW_ID_PREFIX}{uuid.uuid4()}"

    print("Starting workflow execution...")
    print(f"  Workflow ID: {workflow_id}")
    print(f"  Deadline: {deadline:g}s")
    print()

    client = await Client.connect(settings.temporal_host)

    workflow_input = ProcessReviewInput(
        event=ReviewSubmittedEvent(
            review_text=review_text,
            submitted_at=datetime.now(timezone.utc).isoformat(),
        ),
        deadline_seconds=deadline,
    )

    # Execute workflow and wait for completion
    result = await client.execute_workflow(
        ProcessReview.run,
        workflow_input,
        id=workflow_id,
        task_queue=settings.task_queue,
    )

    print_result(result)


def print_result(result: ReviewProcessingResult) -> None:
    """
    Pretty-print a workflow outcome.

    Args:
        result: Terminal outcome of the execution
    """
    print("=" * 60)
    print("Review Processing Result")
    print("=" * 60)
    print(f"Status        : {result.status.value}")
    print(f"Review ID     : {result.review_id or 'N/A'}")
    print(f"Sentiment     : {result.sentiment.value if result.sentiment else 'N/A'}")

    if result.status == ExecutionStatus.FAILED:
        print(f"Failed Stage  : {result.failed_stage.value if result.failed_stage else 'N/A'}")
        print(f"Error         : {result.error_type}: {result.error}")
    else:
        print(f"Notified      : {'yes' if result.notified else 'no'}")
        if result.notification_error:
            print(f"Notify Error  : {result.notification_error}")

    print("=" * 60 + "\n")


if __name__ == "__main__":
    settings = Settings.from_env()
    args = parse_args(settings)
    asyncio.run(main(settings, args.review_text, args.deadline))
