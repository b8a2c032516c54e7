from __future__ import annotations

from dataclasses import dataclass

from tick_feed.contracts import RECORD_SIZE


@dataclass(frozen=True)
class RetryPolicy:
    min_delay_ms: int
    max_delay_ms: int
    max_attempts: int
    max_elapsed_ms: int | None = None


@dataclass(frozen=True)
class EndpointConfig:
    host: str
    port: int


@dataclass(frozen=True)
class OperationalLimits:
    connect_timeout_ms: int
    read_timeout_ms: int
    receive_buffer_bytes: int


@dataclass(frozen=True)
class OutputConfig:
    document_path: str
    log_dir: str


@dataclass(frozen=True)
class TickFeedConfig:
    endpoint: EndpointConfig
    limits: OperationalLimits
    bulk_retry: RetryPolicy
    backfill_retry: RetryPolicy
    output: OutputConfig


def validate_config(config: TickFeedConfig) -> None:
    if not config.endpoint.host:
        raise ValueError("endpoint.host must be set")
    if not 0 < config.endpoint.port < 65536:
        raise ValueError("endpoint.port must be in 1..65535")

    limits = config.limits
    _require_positive(limits.connect_timeout_ms, "limits.connect_timeout_ms")
    _require_positive(limits.read_timeout_ms, "limits.read_timeout_ms")
    if limits.receive_buffer_bytes < RECORD_SIZE:
        raise ValueError(f"limits.receive_buffer_bytes must be >= {RECORD_SIZE}")

    _validate_retry(config.bulk_retry, "bulk_retry")
    _validate_retry(config.backfill_retry, "backfill_retry")

    if not config.output.document_path:
        raise ValueError("output.document_path must be set")
    if not config.output.log_dir:
        raise ValueError("output.log_dir must be set")


def _validate_retry(retry: RetryPolicy, field_name: str) -> None:
    _require_positive(retry.min_delay_ms, f"{field_name}.min_delay_ms")
    _require_positive(retry.max_delay_ms, f"{field_name}.max_delay_ms")
    if retry.max_delay_ms < retry.min_delay_ms:
        raise ValueError(f"{field_name}.max_delay_ms must be >= {field_name}.min_delay_ms")
    if retry.max_attempts <= 0:
        raise ValueError(f"{field_name}.max_attempts must be > 0")
    if retry.max_elapsed_ms is not None:
        _require_positive(retry.max_elapsed_ms, f"{field_name}.max_elapsed_ms")
        if retry.max_elapsed_ms < retry.min_delay_ms:
            raise ValueError(
                f"{field_name}.max_elapsed_ms must be >= {field_name}.min_delay_ms"
            )


def _require_positive(value: int | None, field_name: str) -> None:
    if value is None or value <= 0:
        raise ValueError(f"{field_name} must be > 0")
