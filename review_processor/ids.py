"""
Review ID generation.

Review IDs are ULIDs: a 48-bit millisecond timestamp followed by 80 random
bits, rendered as 26 characters of Crockford base32. The string form sorts
lexicographically in generation order, so consumers can derive creation
order from the ID alone.
"""

import threading

from ulid import ULID


class ReviewIdGenerator:
    """
    Thread-safe, strictly monotonic ULID source.

    Two ULIDs minted in the same millisecond are ordered by their random
    component, which would break call-order sorting. The generator remembers
    the last value issued and, when a fresh ULID would not sort after it,
    issues that value plus one instead (same timestamp, incremented
    randomness).
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last = 0

    def generate(self) -> str:
        """Return a new review ID. Never fails."""
        with self._lock:
            value = int(ULID())
            if value <= self._last:
                value = self._last + 1
            self._last = value
        return str(ULID.from_int(value))
