from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import NoReturn

from backfill.contracts import SessionResult
from backfill.lifecycle import FeedLifecycle
from backfill.observability import Observability
from backfill.retry import Retrier


class FeedCorruptionError(RuntimeError):
    """Raised when a decoded record fails validation; the feed cannot be trusted."""

    def __init__(self, result: SessionResult) -> None:
        super().__init__(result.error_detail or "corrupted record")
        self.result = result


class BulkTransferFailure(RuntimeError):
    """Raised when bulk transfer retries are exhausted."""


class BackfillFailure(RuntimeError):
    """Raised when a missing sequence cannot be retrieved."""

    def __init__(self, sequence: int, message: str) -> None:
        super().__init__(message)
        self.sequence = sequence


@dataclass
class FailureHandler:
    lifecycle: FeedLifecycle
    observability: Observability

    def handle_bulk(self, action: Callable[[int], bool], retrier: Retrier) -> None:
        if retrier.run(action):
            return
        self.lifecycle.fail()
        self.observability.log_failure(
            domain="bulk_transfer",
            error_kind="retries_exhausted",
            error_detail="no records received from bulk transfer",
        )
        raise BulkTransferFailure("bulk transfer retries exhausted")

    def handle_backfill(
        self, sequence: int, action: Callable[[int], bool], retrier: Retrier
    ) -> None:
        if retrier.run(action):
            return
        self.lifecycle.fail()
        self.observability.log_failure(
            domain="backfill",
            error_kind="retries_exhausted",
            error_detail=f"sequence {sequence} could not be retrieved",
            sequence=sequence,
        )
        raise BackfillFailure(sequence, f"backfill retries exhausted for sequence {sequence}")

    def handle_unaddressable(self, sequence: int, exc: ValueError) -> NoReturn:
        self.lifecycle.fail()
        self.observability.log_failure(
            domain="backfill",
            error_kind="unaddressable_sequence",
            error_detail=str(exc),
            sequence=sequence,
        )
        raise BackfillFailure(sequence, str(exc)) from exc

    def handle_corruption(self, result: SessionResult) -> NoReturn:
        self.lifecycle.fail()
        violation = None
        if result.validation is not None and result.validation.violation is not None:
            violation = result.validation.violation.value
        self.observability.log_failure(
            domain=result.mode,
            error_kind=f"invalid_{violation}" if violation else "invalid_record",
            error_detail=result.error_detail or "corrupted record",
            sequence=result.record.sequence if result.record is not None else None,
        )
        raise FeedCorruptionError(result)
