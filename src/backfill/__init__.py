"""Bulk transfer, gap backfill and assembly for the tick feed."""

from backfill.assembler import assemble
from backfill.contracts import (
    MODE_REQUEST_ALL,
    MODE_REQUEST_ONE,
    SessionResult,
    SessionStatus,
)
from backfill.failure_handling import (
    BackfillFailure,
    BulkTransferFailure,
    FeedCorruptionError,
)
from backfill.gaps import GapTracker
from backfill.lifecycle import FeedLifecycle, FeedPhase
from backfill.observability import Observability
from backfill.orchestrator import BackfillOrchestrator
from backfill.retry import Retrier, RetrySchedule
from backfill.session import SessionController
from backfill.state import FeedState

__all__ = [
    "assemble",
    "MODE_REQUEST_ALL",
    "MODE_REQUEST_ONE",
    "SessionResult",
    "SessionStatus",
    "BackfillFailure",
    "BulkTransferFailure",
    "FeedCorruptionError",
    "GapTracker",
    "FeedLifecycle",
    "FeedPhase",
    "Observability",
    "BackfillOrchestrator",
    "Retrier",
    "RetrySchedule",
    "SessionController",
    "FeedState",
]
