import unittest

from backfill.gaps import GapTracker


class TestGapTracker(unittest.TestCase):
    def test_single_gap_is_recorded(self) -> None:
        tracker = GapTracker()

        for sequence in (1, 2, 4):
            tracker.observe(sequence)

        self.assertEqual(tracker.pending, frozenset({3}))
        self.assertEqual(tracker.expected_sequence, 5)

    def test_observe_returns_newly_missing_sequences(self) -> None:
        tracker = GapTracker()

        self.assertEqual(tracker.observe(1), ())
        self.assertEqual(tracker.observe(5), (2, 3, 4))
        self.assertEqual(tracker.observe(6), ())
        self.assertEqual(len(tracker), 3)

    def test_leading_gap_from_first_sequence(self) -> None:
        tracker = GapTracker()

        tracker.observe(3)

        self.assertEqual(tracker.pending, frozenset({1, 2}))
        self.assertEqual(tracker.expected_sequence, 4)

    def test_late_arrival_fills_its_gap(self) -> None:
        tracker = GapTracker()

        for sequence in (1, 3, 2, 4):
            tracker.observe(sequence)

        self.assertTrue(tracker.is_empty())
        self.assertEqual(tracker.expected_sequence, 5)

    def test_resolve_drains_pending(self) -> None:
        tracker = GapTracker()
        tracker.observe(1)
        tracker.observe(4)

        while not tracker.is_empty():
            tracker.resolve(tracker.next_pending())

        self.assertEqual(tracker.pending, frozenset())
        self.assertEqual(tracker.expected_sequence, 5)

    def test_resolve_unknown_sequence_is_noop(self) -> None:
        tracker = GapTracker()
        tracker.observe(3)

        tracker.resolve(9)

        self.assertEqual(tracker.pending, frozenset({1, 2}))

    def test_next_pending_on_empty_tracker(self) -> None:
        with self.assertRaises(LookupError):
            GapTracker().next_pending()


if __name__ == "__main__":
    unittest.main()
