from __future__ import annotations

from functools import partial
from typing import Callable

from backfill.assembler import assemble
from backfill.contracts import SessionResult, SessionStatus
from backfill.failure_handling import FailureHandler
from backfill.lifecycle import FeedLifecycle
from backfill.observability import Observability
from backfill.retry import Retrier, RetrySchedule
from backfill.session import SessionController
from backfill.state import FeedState
from tick_feed.config import TickFeedConfig
from tick_feed.contracts import TickRecord
from tick_feed.decoder import SequenceOutOfRangeError
from tick_feed.observability import NullLogger, NullMetrics
from tick_feed.observability import Observability as FeedObservability
from tick_feed.transport import Transport


class BackfillOrchestrator:
    """Drives one feed run: bulk transfer, per-gap backfill, then assembly."""

    def __init__(
        self,
        *,
        transport: Transport,
        config: TickFeedConfig,
        feed_observability: FeedObservability | None = None,
        observability: Observability | None = None,
        sleeper: Callable[[int], None] | None = None,
    ) -> None:
        self._state = FeedState()
        self.lifecycle = FeedLifecycle()
        self._feed = feed_observability or FeedObservability(
            logger=NullLogger(), metrics=NullMetrics()
        )
        self._observability = observability or Observability(
            logger=NullLogger(), metrics=NullMetrics()
        )
        self._session = SessionController(
            transport=transport,
            state=self._state,
            feed_observability=self._feed,
            observability=self._observability,
            receive_buffer_bytes=config.limits.receive_buffer_bytes,
        )
        self._failures = FailureHandler(
            lifecycle=self.lifecycle, observability=self._observability
        )
        self._bulk_retrier = Retrier(
            RetrySchedule.from_policy(config.bulk_retry),
            sleeper=sleeper,
            on_retry=partial(self._observability.log_retry, "bulk_transfer"),
        )
        self._backfill_retrier = Retrier(
            RetrySchedule.from_policy(config.backfill_retry),
            sleeper=sleeper,
            on_retry=partial(self._observability.log_retry, "backfill"),
        )

    @property
    def state(self) -> FeedState:
        return self._state

    def run(self) -> tuple[TickRecord, ...]:
        self.lifecycle.start_bulk()
        self._log_phase()
        self._failures.handle_bulk(self._attempt_bulk, self._bulk_retrier)

        self.lifecycle.start_backfill()
        self._log_phase()
        gaps = self._state.gaps
        while not gaps.is_empty():
            sequence = gaps.next_pending()
            self._failures.handle_backfill(
                sequence, partial(self._attempt_one, sequence), self._backfill_retrier
            )

        records = assemble(self._state.records)
        self.lifecycle.complete()
        self._log_phase()
        self._feed.log_feed_summary()
        return records

    def _attempt_bulk(self, attempt: int) -> bool:
        result = self._session.request_all()
        return self._inspect(result, attempt=attempt)

    def _attempt_one(self, sequence: int, attempt: int) -> bool:
        self._observability.log_request_one(sequence, attempt=attempt)
        try:
            result = self._session.request_one(sequence)
        except SequenceOutOfRangeError as exc:
            self._failures.handle_unaddressable(sequence, exc)
            raise
        return self._inspect(result, attempt=attempt)

    def _inspect(self, result: SessionResult, *, attempt: int) -> bool:
        self._observability.log_session_result(result, attempt=attempt)
        if result.status == SessionStatus.CORRUPTED:
            self._failures.handle_corruption(result)
        return result.completed

    def _log_phase(self) -> None:
        self._observability.log_phase(
            self.lifecycle.phase,
            records=len(self._state.records),
            pending=len(self._state.gaps),
        )
