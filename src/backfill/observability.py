from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from backfill.contracts import SessionResult
from backfill.lifecycle import FeedPhase
from tick_feed.observability import MetricsRecorder, StructuredLogger


@dataclass(frozen=True)
class Observability:
    logger: StructuredLogger
    metrics: MetricsRecorder

    def log_phase(self, phase: FeedPhase, *, records: int, pending: int) -> None:
        self.logger.log(
            logging.INFO,
            "backfill.phase",
            {"phase": phase.value, "records": records, "pending": pending},
        )
        self.metrics.gauge("backfill.pending", float(pending))

    def log_gaps_detected(self, sequences: Sequence[int], *, expected_sequence: int) -> None:
        self.logger.log(
            logging.INFO,
            "backfill.gap_detected",
            {
                "first_missing": sequences[0],
                "last_missing": sequences[-1],
                "missing_count": len(sequences),
                "expected_sequence": expected_sequence,
            },
        )
        self.metrics.increment("backfill.gaps.count", value=len(sequences))

    def log_request_one(self, sequence: int, *, attempt: int) -> None:
        self.logger.log(
            logging.INFO,
            "backfill.request_one",
            {"sequence": sequence, "attempt": attempt},
        )
        self.metrics.increment("backfill.requests.count")

    def log_session_result(self, result: SessionResult, *, attempt: int) -> None:
        fields: dict[str, object] = {
            "mode": result.mode,
            "status": result.status.value,
            "records_received": result.records_received,
            "attempt": attempt,
        }
        if result.requested_sequence is not None:
            fields["sequence"] = result.requested_sequence
        if result.error_detail is not None:
            fields["error_detail"] = result.error_detail
        level = logging.INFO if result.completed else logging.WARNING
        self.logger.log(level, "backfill.session_result", fields)
        self.metrics.increment(
            "backfill.sessions.count",
            tags={"mode": result.mode, "status": result.status.value},
        )

    def log_retry(self, domain: str, attempt: int, delay_ms: int) -> None:
        self.logger.log(
            logging.INFO,
            "backfill.retry",
            {"domain": domain, "attempt": attempt, "delay_ms": delay_ms},
        )
        self.metrics.observe("backfill.retry.delay_ms", float(delay_ms), tags={"domain": domain})

    def log_failure(
        self,
        *,
        domain: str,
        error_kind: str,
        error_detail: str,
        sequence: int | None = None,
    ) -> None:
        fields: dict[str, object] = {
            "failure_domain": domain,
            "error_kind": error_kind,
            "error_detail": error_detail,
        }
        if sequence is not None:
            fields["sequence"] = sequence
        self.logger.log(logging.ERROR, "backfill.failure", fields)
        self.metrics.increment("backfill.failures.count", tags={"domain": domain})
