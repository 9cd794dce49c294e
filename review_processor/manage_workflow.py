"""
Management CLI for review executions and stored reviews.

Provides commands to inspect executions, cancel them, and read back the
records they produced. Useful for operational tasks such as telling a
review that was never classified from one that was classified but not
persisted.

Usage:
    # Query execution state
    python -m review_processor.manage_workflow status <workflow_id>

    # List recent executions
    python -m review_processor.manage_workflow list

    # Cancel an execution
    python -m review_processor.manage_workflow cancel <workflow_id>

    # Read a stored review
    python -m review_processor.manage_workflow review <review_id>

    # List stored reviews by sentiment
    python -m review_processor.manage_workflow by-sentiment NEGATIVE

Examples:
    python -m review_processor.manage_workflow status review-8f7d3c2a-1b4e-4f5a-9c8d-2e6f1a3b5c7d
    python -m review_processor.manage_workflow list --limit 10
"""

import argparse
import asyncio

from dotenv import load_dotenv
from temporalio.client import Client, WorkflowHandle, WorkflowQueryFailedError
from temporalio.service import RPCError

from review_processor.config import Settings
from review_processor.errors import StoreError
from review_processor.models import SentimentLabel
from review_processor.storage import build_review_store
from review_processor.workflows import ProcessReview

load_dotenv()


async def query_status(settings: Settings, workflow_id: str) -> None:
    """
    Query and display the state of an execution.

    Args:
        settings: Deployment configuration
        workflow_id: Workflow execution ID
    """
    client = await Client.connect(settings.temporal_host)

    try:
        handle: WorkflowHandle = client.get_workflow_handle(workflow_id)
        status = await handle.query(ProcessReview.get_status)
    except (RPCError, WorkflowQueryFailedError) as e:
        print(f"Error querying workflow: {e}")
        print("Workflow ID may be invalid or its history may have been purged.")
        return

    review = status["input"] or {}

    print("=" * 60)
    print(f"Execution: {workflow_id}")
    print("=" * 60)
    print(f"Stage        : {status['stage']}")
    print(f"Submitted At : {review.get('submitted_at', 'N/A')}")
    print(f"Started At   : {status['started_at'] or 'N/A'}")
    print(f"Completed At : {status['completed_at'] or 'N/A'}")
    print(f"Review ID    : {status['review_id'] or 'Not yet generated'}")
    print(f"Sentiment    : {status['sentiment'] or 'Not yet classified'}")
    if status["error"]:
        print(f"Error        : {status['error']}")
    print("=" * 60 + "\n")


async def list_workflows(settings: Settings, limit: int = 10) -> None:
    """
    List recent executions.

    Args:
        settings: Deployment configuration
        limit: Maximum number of executions to display
    """
    client = await Client.connect(settings.temporal_host)

    try:
        workflows = client.list_workflows("WorkflowType = 'ProcessReview'")

        print("=" * 100)
        print(f"{'Workflow ID':<50} {'Status':<15} {'Start Time':<25}")
        print("=" * 100)

        count = 0
        async for workflow in workflows:
            if count >= limit:
                break

            status_name = workflow.status.name if workflow.status else "UNKNOWN"
            start_time = workflow.start_time.strftime("%Y-%m-%d %H:%M:%S") if workflow.start_time else "N/A"

            print(f"{workflow.id:<50} {status_name:<15} {start_time:<25}")
            count += 1

        print("=" * 100)
        print(f"\nShowing {count} workflow(s)")

    except RPCError as e:
        print(f"Error listing workflows: {e}")


async def cancel_workflow(settings: Settings, workflow_id: str) -> None:
    """
    Cancel a running execution.

    Args:
        settings: Deployment configuration
        workflow_id: Workflow execution ID
    """
    client = await Client.connect(settings.temporal_host)

    try:
        handle: WorkflowHandle = client.get_workflow_handle(workflow_id)
        await handle.cancel()
    except RPCError as e:
        print(f"Error cancelling workflow: {e}")
        return

    print(f"✓ Cancellation requested for workflow: {workflow_id}")
    print("  Any in-flight external call is abandoned; its side effect may still occur.")


async def show_review(settings: Settings, review_id: str) -> None:
    """
    Display a stored review.

    Args:
        settings: Deployment configuration
        review_id: Review ID
    """
    store = build_review_store(settings)

    try:
        record = await store.get(review_id)
    except StoreError as e:
        print(f"Error reading review: {e}")
        return

    if record is None:
        print(f"Review {review_id} not found")
        return

    print("=" * 60)
    print(f"Review ID    : {record.review_id}")
    print(f"Sentiment    : {record.sentiment.value}")
    print(f"Created At   : {record.created_at or 'N/A'}")
    print(f"Message      : {record.customer_message}")
    print("=" * 60 + "\n")


async def list_by_sentiment(settings: Settings, sentiment: SentimentLabel) -> None:
    """
    List stored reviews with the given sentiment.

    Args:
        settings: Deployment configuration
        sentiment: Sentiment to filter on
    """
    store = build_review_store(settings)

    try:
        records = await store.list_by_sentiment(sentiment)
    except StoreError as e:
        print(f"Error listing reviews: {e}")
        return

    print("=" * 100)
    print(f"{'Review ID':<30} {'Created At':<35} {'Message':<35}")
    print("=" * 100)

    for record in records:
        message = record.customer_message.replace("\n", " ")
        if len(message) > 32:
            message = message[:32] + "..."
        print(f"{record.review_id:<30} {record.created_at:<35} {message:<35}")

    print("=" * 100)
    print(f"\nShowing {len(records)} {sentiment.value} review(s)")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Manage review executions and stored reviews",
        epilog="Example: python -m review_processor.manage_workflow status <workflow_id>",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    status_parser = subparsers.add_parser(
        "status",
        help="Query execution state",
    )
    status_parser.add_argument(
        "workflow_id",
        help="Workflow execution ID",
    )

    list_parser = subparsers.add_parser(
        "list",
        help="List recent executions",
    )
    list_parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Maximum number of executions to display (default: 10)",
    )

    cancel_parser = subparsers.add_parser(
        "cancel",
        help="Cancel a running execution",
    )
    cancel_parser.add_argument(
        "workflow_id",
        help="Workflow execution ID to cancel",
    )

    review_parser = subparsers.add_parser(
        "review",
        help="Show a stored review",
    )
    review_parser.add_argument(
        "review_id",
        help="Review ID",
    )

    sentiment_parser = subparsers.add_parser(
        "by-sentiment",
        help="List stored reviews by sentiment",
    )
    sentiment_parser.add_argument(
        "sentiment",
        type=lambda value: SentimentLabel(value.upper()),
        choices=list(SentimentLabel),
        metavar="{" + ",".join(label.value for label in SentimentLabel) + "}",
        help="Sentiment to filter on",
    )

    return parser.parse_args()


async def main() -> None:
    """Main entry point for management CLI."""
    args = parse_args()
    settings = Settings.from_env()

    if args.command == "status":
        await query_status(settings, args.workflow_id)
    elif args.command == "list":
        await list_workflows(settings, args.limit)
    elif args.command == "cancel":
        await cancel_workflow(settings, args.workflow_id)
    elif args.command == "review":
        await show_review(settings, args.review_id)
    elif args.command == "by-sentiment":
        await list_by_sentiment(settings, args.sentiment)
    else:
        print("Error: No command specified")
        print("Use --help for usage information")


if __name__ == "__main__":
    asyncio.run(main())
