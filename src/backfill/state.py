from __future__ import annotations

from dataclasses import dataclass, field

from backfill.gaps import GapTracker
from tick_feed.contracts import TickRecord


@dataclass
class FeedState:
    """Result collection and gap set for one feed run, owned by the orchestrator."""

    records: list[TickRecord] = field(default_factory=list)
    gaps: GapTracker = field(default_factory=GapTracker)

    def accept(self, record: TickRecord) -> None:
        self.records.append(record)

    @property
    def has_records(self) -> bool:
        return bool(self.records)
