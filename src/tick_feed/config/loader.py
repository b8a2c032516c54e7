from __future__ import annotations

import importlib
from collections.abc import Mapping
from dataclasses import replace
from importlib import resources
from pathlib import Path

from tick_feed.config.schema import (
    EndpointConfig,
    OperationalLimits,
    OutputConfig,
    RetryPolicy,
    TickFeedConfig,
    validate_config,
)

_ROOT_KEYS = {"endpoint", "limits", "bulk_retry", "backfill_retry", "output"}
_ENDPOINT_KEYS = {"host", "port"}
_LIMIT_KEYS = {"connect_timeout_ms", "read_timeout_ms", "receive_buffer_bytes"}
_RETRY_KEYS = {"min_delay_ms", "max_delay_ms", "max_attempts", "max_elapsed_ms"}
_OUTPUT_KEYS = {"document_path", "log_dir"}


def load_default_config() -> TickFeedConfig:
    text = (
        resources.files("tick_feed.config")
        .joinpath("default.yaml")
        .read_text(encoding="utf-8")
    )
    config = _parse_config(_parse_yaml(text, "tick_feed default config"))
    validate_config(config)
    return config


def load_config(path: str | Path) -> TickFeedConfig:
    text = Path(path).read_text(encoding="utf-8")
    config = _parse_config(_parse_yaml(text, f"tick_feed config {path}"))
    validate_config(config)
    return config


def with_overrides(
    config: TickFeedConfig,
    *,
    host: str | None = None,
    port: int | None = None,
    document_path: str | None = None,
    log_dir: str | None = None,
) -> TickFeedConfig:
    endpoint = replace(
        config.endpoint,
        host=host if host is not None else config.endpoint.host,
        port=port if port is not None else config.endpoint.port,
    )
    output = replace(
        config.output,
        document_path=document_path if document_path is not None else config.output.document_path,
        log_dir=log_dir if log_dir is not None else config.output.log_dir,
    )
    updated = replace(config, endpoint=endpoint, output=output)
    validate_config(updated)
    return updated


def _parse_yaml(text: str, label: str) -> Mapping[str, object]:
    yaml = importlib.import_module("yaml")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"{label} is not valid YAML: {exc}") from exc
    if not isinstance(data, Mapping):
        raise ValueError(f"{label} must be a mapping")
    return data


def _parse_config(payload: Mapping[str, object]) -> TickFeedConfig:
    _reject_unknown(payload, _ROOT_KEYS, "tick_feed config")
    return TickFeedConfig(
        endpoint=_parse_endpoint(payload.get("endpoint")),
        limits=_parse_limits(payload.get("limits")),
        bulk_retry=_parse_retry(payload.get("bulk_retry"), "bulk_retry"),
        backfill_retry=_parse_retry(payload.get("backfill_retry"), "backfill_retry"),
        output=_parse_output(payload.get("output")),
    )


def _parse_endpoint(data: object) -> EndpointConfig:
    if not isinstance(data, Mapping):
        raise ValueError("endpoint must be a mapping")
    _reject_unknown(data, _ENDPOINT_KEYS, "endpoint")
    host = data.get("host")
    port = data.get("port")
    if not isinstance(host, str) or not host:
        raise ValueError("endpoint.host must be set")
    if not isinstance(port, int) or isinstance(port, bool):
        raise ValueError("endpoint.port must be an int")
    return EndpointConfig(host=host, port=port)


def _parse_limits(data: object) -> OperationalLimits:
    if not isinstance(data, Mapping):
        raise ValueError("limits must be a mapping")
    _reject_unknown(data, _LIMIT_KEYS, "limits")
    values: dict[str, int] = {}
    for key in ("connect_timeout_ms", "read_timeout_ms", "receive_buffer_bytes"):
        value = data.get(key)
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"limits.{key} must be an int")
        values[key] = value
    return OperationalLimits(**values)


def _parse_retry(data: object, label: str) -> RetryPolicy:
    if not isinstance(data, Mapping):
        raise ValueError(f"{label} must be a mapping")
    _reject_unknown(data, _RETRY_KEYS, label)
    min_delay_ms = data.get("min_delay_ms")
    max_delay_ms = data.get("max_delay_ms")
    max_attempts = data.get("max_attempts")
    max_elapsed_ms = data.get("max_elapsed_ms")
    if not isinstance(min_delay_ms, int):
        raise ValueError(f"{label}.min_delay_ms must be an int")
    if not isinstance(max_delay_ms, int):
        raise ValueError(f"{label}.max_delay_ms must be an int")
    if not isinstance(max_attempts, int):
        raise ValueError(f"{label}.max_attempts must be an int")
    if max_elapsed_ms is not None and not isinstance(max_elapsed_ms, int):
        raise ValueError(f"{label}.max_elapsed_ms must be an int")
    return RetryPolicy(
        min_delay_ms=min_delay_ms,
        max_delay_ms=max_delay_ms,
        max_attempts=max_attempts,
        max_elapsed_ms=max_elapsed_ms,
    )


def _parse_output(data: object) -> OutputConfig:
    if not isinstance(data, Mapping):
        raise ValueError("output must be a mapping")
    _reject_unknown(data, _OUTPUT_KEYS, "output")
    document_path = data.get("document_path")
    log_dir = data.get("log_dir")
    if not isinstance(document_path, str) or not document_path:
        raise ValueError("output.document_path must be set")
    if not isinstance(log_dir, str) or not log_dir:
        raise ValueError("output.log_dir must be set")
    return OutputConfig(document_path=document_path, log_dir=log_dir)


def _reject_unknown(payload: Mapping[str, object], allowed: set[str], label: str) -> None:
    unknown = set(payload.keys()) - allowed
    if unknown:
        unknown_list = ", ".join(sorted(str(item) for item in unknown))
        raise ValueError(f"unknown {label} keys: {unknown_list}")
