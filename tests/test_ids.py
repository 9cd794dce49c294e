"""
Unit tests for review ID generation.
"""

from concurrent.futures import ThreadPoolExecutor

from ulid import ULID

from review_processor.ids import ReviewIdGenerator


class TestReviewIdGenerator:
    def test_ids_are_valid_ulids(self):
        review_id = ReviewIdGenerator().generate()

        assert len(review_id) == 26
        assert str(ULID.from_str(review_id)) == review_id

    def test_sequential_ids_sort_in_call_order(self):
        generator = ReviewIdGenerator()

        # Far more IDs than fit in one millisecond
        ids = [generator.generate() for _ in range(10000)]

        assert ids == sorted(ids)
        assert len(set(ids)) == len(ids)

    def test_concurrent_ids_are_distinct(self):
        generator = ReviewIdGenerator()

        with ThreadPoolExecutor(max_workers=16) as pool:
            ids = list(pool.map(lambda _: generator.generate(), range(5000)))

        assert len(set(ids)) == len(ids)

    def test_independent_generators_do_not_collide(self):
        first = [ReviewIdGenerator().generate() for _ in range(1000)]
        second = [ReviewIdGenerator().generate() for _ in range(1000)]

        assert not set(first) & set(second)
