"""
AWS SES client for negative-review notifications.
"""

from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from review_processor.errors import NotificationError
from review_processor.models import NotificationMessage, SentimentLabel


def compose_notification(
    review_id: str,
    sentiment: SentimentLabel,
    customer_message: str,
) -> NotificationMessage:
    """
    Build the alert sent for a review.

    Example:
        >>> compose_notification("01J...", SentimentLabel.NEGATIVE, "Broke in a day").subject
        'NEGATIVE review received (01J...)'
    """
    subject = f"{sentiment.value} review received ({review_id})"
    body = (
        f"A customer review was classified as {sentiment.value}.\n"
        f"\n"
        f"Review ID: {review_id}\n"
        f"Customer message:\n"
        f"{customer_message}\n"
    )
    return NotificationMessage(subject=subject, body=body)


class SesNotifier:
    """
    Sends one plain-text email per call from a fixed sender.

    There is no deduplication: calling ``notify`` twice sends two emails.
    """

    def __init__(
        self,
        sender: str,
        region_name: Optional[str] = None,
        client: Optional[Any] = None,
    ) -> None:
        """
        Args:
            sender: SES-verified From address
            region_name: AWS region (defaults to environment configuration)
            client: Pre-built boto3 SES client (mainly for tests)
        """
        self.sender = sender
        self.client = client or boto3.client("ses", region_name=region_name)

    def notify(self, message: NotificationMessage, recipient: str) -> str:
        """
        Send a notification email.

        Args:
            message: Subject and body to send
            recipient: Destination address

        Returns:
            SES message ID

        Raises:
            NotificationError: On AWS API errors
        """
        try:
            response = self.client.send_email(
                Source=self.sender,
                Destination={"ToAddresses": [recipient]},
                Message={
                    "Subject": {"Data": message.subject, "Charset": "UTF-8"},
                    "Body": {"Text": {"Data": message.body, "Charset": "UTF-8"}},
                },
            )
        except (ClientError, BotoCoreError) as e:
            raise NotificationError(f"SES SendEmail failed: {e}") from e

        return response["MessageId"]
