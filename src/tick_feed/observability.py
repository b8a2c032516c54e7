from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol

from tick_feed.contracts import TickRecord
from tick_feed.validation import ValidationResult


class StructuredLogger(Protocol):
    def log(self, level: int, message: str, fields: Mapping[str, object]) -> None: ...


class MetricsRecorder(Protocol):
    def increment(
        self, name: str, value: int = 1, tags: Mapping[str, str] | None = None
    ) -> None: ...

    def observe(
        self, name: str, value: float, tags: Mapping[str, str] | None = None
    ) -> None: ...

    def gauge(
        self, name: str, value: float, tags: Mapping[str, str] | None = None
    ) -> None: ...


@dataclass(frozen=True)
class StdlibLogger:
    logger: logging.Logger

    def log(self, level: int, message: str, fields: Mapping[str, object]) -> None:
        self.logger.log(level, message, extra={"fields": dict(fields)})


@dataclass(frozen=True)
class NullLogger:
    def log(self, level: int, message: str, fields: Mapping[str, object]) -> None:
        return None


@dataclass(frozen=True)
class NullMetrics:
    def increment(
        self, name: str, value: int = 1, tags: Mapping[str, str] | None = None
    ) -> None:
        return None

    def observe(
        self, name: str, value: float, tags: Mapping[str, str] | None = None
    ) -> None:
        return None

    def gauge(
        self, name: str, value: float, tags: Mapping[str, str] | None = None
    ) -> None:
        return None


@dataclass
class FeedHealthTracker:
    records_accepted: int = 0
    validation_failures: int = 0
    connections_opened: int = 0
    connection_failures: int = 0
    first_sequence: int | None = None
    last_sequence: int | None = None

    def record_accepted(self, record: TickRecord) -> None:
        self.records_accepted += 1
        if self.first_sequence is None or record.sequence < self.first_sequence:
            self.first_sequence = record.sequence
        if self.last_sequence is None or record.sequence > self.last_sequence:
            self.last_sequence = record.sequence

    def record_transport_state(self, state: str) -> None:
        if state == "connected":
            self.connections_opened += 1
        elif state == "failed":
            self.connection_failures += 1

    def snapshot(self) -> dict[str, object]:
        return {
            "records_accepted": self.records_accepted,
            "validation_failures": self.validation_failures,
            "connections_opened": self.connections_opened,
            "connection_failures": self.connection_failures,
            "first_sequence": self.first_sequence,
            "last_sequence": self.last_sequence,
        }


@dataclass(frozen=True)
class Observability:
    logger: StructuredLogger
    metrics: MetricsRecorder
    health: FeedHealthTracker = field(default_factory=FeedHealthTracker)

    def log_transport_state(
        self,
        *,
        endpoint: str,
        mode: str,
        state: str,
        error: str | None = None,
    ) -> None:
        self.health.record_transport_state(state)
        fields: dict[str, object] = {"endpoint": endpoint, "mode": mode, "state": state}
        level = logging.INFO
        if error is not None:
            fields["error_detail"] = error
            level = logging.WARNING
        self.logger.log(level, "tick_feed.transport_state", fields)
        self.metrics.increment(
            "tick_feed.transport.state_changes",
            tags={"mode": mode, "state": state},
        )

    def record_accepted(self, record: TickRecord, *, mode: str) -> None:
        self.health.record_accepted(record)
        self.logger.log(
            logging.DEBUG,
            "tick_feed.record",
            {
                "mode": mode,
                "symbol": record.symbol,
                "side": record.side,
                "quantity": record.quantity,
                "price": record.price,
                "sequence": record.sequence,
            },
        )
        self.metrics.increment("tick_feed.records.count", tags={"mode": mode})

    def log_validation_failure(
        self, record: TickRecord, result: ValidationResult, *, mode: str
    ) -> None:
        self.health.validation_failures += 1
        violation = result.violation.value if result.violation is not None else None
        self.logger.log(
            logging.ERROR,
            "tick_feed.validation_failure",
            {
                "mode": mode,
                "violation": violation,
                "error_detail": result.detail,
                "symbol": record.symbol,
                "side": record.side,
                "quantity": record.quantity,
                "price": record.price,
                "sequence": record.sequence,
            },
        )
        self.metrics.increment(
            "tick_feed.validation_failures.count", tags={"violation": str(violation)}
        )

    def log_trailing_bytes(self, *, mode: str, byte_count: int) -> None:
        self.logger.log(
            logging.WARNING,
            "tick_feed.trailing_bytes",
            {"mode": mode, "byte_count": byte_count},
        )

    def log_feed_summary(self) -> None:
        self.logger.log(logging.INFO, "tick_feed.feed_summary", self.health.snapshot())
