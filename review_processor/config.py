"""
Process-wide configuration.

Settings are read from the environment once, at process start, by the entry
points (after ``load_dotenv()``). Adapters receive the values they need as
constructor arguments and never consult the environment themselves.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from review_processor.models import DEFAULT_DEADLINE_SECONDS


@dataclass(frozen=True)
class Settings:
    """
    Deployment configuration.

    Attributes:
        temporal_host: Temporal frontend address
        task_queue: Task queue shared by worker, router and CLIs
        aws_region: AWS region (None = boto3 default resolution)
        language_code: Classifier language, fixed per deployment
        notification_sender: SES-verified From address
        notification_recipient: Address alerted on negative reviews
        reviews_table_name: DynamoDB table keyed by reviewId
        sentiment_index_name: DynamoDB GSI partitioned on sentiment
        review_store_path: Directory for the file store (None = DynamoDB)
        event_bus_name: EventBridge bus (None = in-process bus)
        event_source: EventBridge Source for published events
        execution_timeout_seconds: Per-execution deadline
        api_host: HTTP bind host
        api_port: HTTP bind port
    """
    temporal_host: str = "localhost:7233"
    task_queue: str = "review-processing"
    aws_region: Optional[str] = None
    language_code: str = "en"
    notification_sender: Optional[str] = None
    notification_recipient: Optional[str] = None
    reviews_table_name: str = "Reviews"
    sentiment_index_name: str = "SentimentIndex"
    review_store_path: Optional[str] = None
    event_bus_name: Optional[str] = None
    event_source: str = "reviews.api"
    execution_timeout_seconds: float = DEFAULT_DEADLINE_SECONDS
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables, falling back to defaults.

        Raises:
            ValueError: If a numeric variable cannot be parsed
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        return cls(
            temporal_host=env.get("TEMPORAL_HOST", defaults.temporal_host),
            task_queue=env.get("TASK_QUEUE", defaults.task_queue),
            aws_region=env.get("AWS_REGION") or None,
            language_code=env.get("SENTIMENT_LANGUAGE_CODE", defaults.language_code),
            notification_sender=env.get("NOTIFICATION_SENDER") or None,
            notification_recipient=env.get("NOTIFICATION_RECIPIENT") or None,
            reviews_table_name=env.get("REVIEWS_TABLE_NAME", defaults.reviews_table_name),
            sentiment_index_name=env.get(
                "REVIEWS_SENTIMENT_INDEX", defaults.sentiment_index_name
            ),
            review_store_path=env.get("REVIEW_STORE_PATH") or None,
            event_bus_name=env.get("REVIEWS_EVENT_BUS_NAME") or None,
            event_source=env.get("REVIEWS_EVENT_SOURCE", defaults.event_source),
            execution_timeout_seconds=float(
                env.get("EXECUTION_TIMEOUT_SECONDS", defaults.execution_timeout_seconds)
            ),
            api_host=env.get("API_HOST", defaults.api_host),
            api_port=int(env.get("API_PORT", defaults.api_port)),
        )

    def require_notification_addresses(self) -> None:
        """
        Raises:
            ValueError: If sender or recipient is not configured
        """
        missing = [
            name
            for name, value in (
                ("NOTIFICATION_SENDER", self.notification_sender),
                ("NOTIFICATION_RECIPIENT", self.notification_recipient),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"Missing notification configuration: {', '.join(missing)}")
