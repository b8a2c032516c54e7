from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FeedPhase(str, Enum):
    INIT = "init"
    BULK_TRANSFER = "bulk_transfer"
    BACKFILL = "backfill"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class FeedLifecycle:
    phase: FeedPhase = FeedPhase.INIT

    def start_bulk(self) -> None:
        if self.phase != FeedPhase.INIT:
            raise RuntimeError(f"cannot start bulk transfer from {self.phase}")
        self.phase = FeedPhase.BULK_TRANSFER

    def start_backfill(self) -> None:
        if self.phase != FeedPhase.BULK_TRANSFER:
            raise RuntimeError(f"cannot start backfill from {self.phase}")
        self.phase = FeedPhase.BACKFILL

    def complete(self) -> None:
        if self.phase != FeedPhase.BACKFILL:
            raise RuntimeError(f"cannot complete from {self.phase}")
        self.phase = FeedPhase.COMPLETE

    def fail(self) -> None:
        self.phase = FeedPhase.FAILED
