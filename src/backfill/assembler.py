from __future__ import annotations

from collections.abc import Iterable

from tick_feed.contracts import TickRecord


def assemble(records: Iterable[TickRecord]) -> tuple[TickRecord, ...]:
    # sorted() is stable; duplicate sequences keep arrival order
    return tuple(sorted(records, key=_sequence_key))


def _sequence_key(record: TickRecord) -> int:
    return record.sequence
