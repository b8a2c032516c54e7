import unittest

from backfill.assembler import assemble
from feed_fakes import tick


class TestAssemble(unittest.TestCase):
    def test_sorts_by_sequence(self) -> None:
        records = [tick(4), tick(1), tick(5), tick(3), tick(2)]

        assembled = assemble(records)

        self.assertEqual([record.sequence for record in assembled], [1, 2, 3, 4, 5])

    def test_sorting_sorted_collection_is_noop(self) -> None:
        records = tuple(tick(sequence) for sequence in (1, 2, 3))

        self.assertEqual(assemble(records), records)
        self.assertEqual(assemble(assemble(records)), records)

    def test_duplicates_are_kept_in_arrival_order(self) -> None:
        first = tick(2, symbol="AAAA")
        second = tick(2, symbol="BBBB")

        assembled = assemble([second, tick(1), first])

        self.assertEqual(assembled, (tick(1), second, first))

    def test_empty(self) -> None:
        self.assertEqual(assemble([]), ())


if __name__ == "__main__":
    unittest.main()
