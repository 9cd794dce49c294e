"""
Temporal workflow for customer review sentiment processing.

Each submitted review is classified with AWS Comprehend, given a ULID,
persisted, and (when negative) reported by email, as one durable,
independently failing workflow execution.
"""

__version__ = "0.1.0"
