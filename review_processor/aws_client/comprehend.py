"""
AWS Comprehend client for sentiment classification.

Wraps ``DetectSentiment`` behind the classifier contract used by the
workflow: one text in, one ``SentimentResult`` out, or a
``ClassificationError``. The adapter does not retry; that decision belongs
to the caller.
"""

from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from review_processor.errors import ClassificationError
from review_processor.models import SentimentLabel, SentimentResult

# AWS Comprehend limit for DetectSentiment
COMPREHEND_MAX_TEXT_BYTES = 5000  # 5KB UTF-8


class ComprehendClassifier:
    """
    Sentiment classifier backed by AWS Comprehend.

    The language code is fixed at construction; Comprehend supports one
    language per deployment here and the adapter does not detect language.
    """

    def __init__(
        self,
        language_code: str = "en",
        region_name: Optional[str] = None,
        client: Optional[Any] = None,
    ) -> None:
        """
        Args:
            language_code: ISO 639-1 language code passed on every call
            region_name: AWS region (defaults to environment configuration)
            client: Pre-built boto3 Comprehend client (mainly for tests)
        """
        self.language_code = language_code
        self.client = client or boto3.client("comprehend", region_name=region_name)

    def classify(self, text: str) -> SentimentResult:
        """
        Classify the sentiment of a single text.

        Args:
            text: Non-empty text, at most 5KB UTF-8 encoded

        Returns:
            SentimentResult with the dominant label and Comprehend's raw
            response (Sentiment and SentimentScore)

        Raises:
            ClassificationError: Empty or oversized input, AWS API errors,
                or an unrecognised sentiment label
        """
        if not isinstance(text, str) or not text.strip():
            raise ClassificationError("Review text must be non-empty")

        if self.is_text_oversized(text):
            raise ClassificationError(
                f"Review text exceeds {COMPREHEND_MAX_TEXT_BYTES} bytes"
            )

        try:
            response = self.client.detect_sentiment(
                Text=text,
                LanguageCode=self.language_code,
            )
        except (ClientError, BotoCoreError) as e:
            raise ClassificationError(f"Comprehend DetectSentiment failed: {e}") from e

        sentiment = response.get("Sentiment")
        try:
            label = SentimentLabel(sentiment)
        except ValueError as e:
            raise ClassificationError(f"Unrecognised sentiment label: {sentiment!r}") from e

        return SentimentResult(
            label=label,
            raw={
                "Sentiment": sentiment,
                "SentimentScore": response.get("SentimentScore", {}),
            },
        )

    def is_text_oversized(self, text: str) -> bool:
        """
        Check if text exceeds AWS Comprehend's size limit.

        Args:
            text: Text to check

        Returns:
            True if text exceeds 5KB when UTF-8 encoded
        """
        return len(text.encode("utf-8")) > COMPREHEND_MAX_TEXT_BYTES
