from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from backfill.observability import Observability as BackfillObservability
from tick_feed.observability import NullMetrics, StdlibLogger
from tick_feed.observability import Observability as FeedObservability

LOG_FILENAME = "client_log.txt"


@dataclass(frozen=True)
class RuntimeObservability:
    logger: logging.Logger

    def log_run_started(self, *, endpoint: str) -> None:
        self.logger.info("runtime.started", extra={"fields": {"endpoint": endpoint}})

    def log_document_written(self, *, path: str, record_count: int) -> None:
        self.logger.info(
            "runtime.document_written",
            extra={"fields": {"path": path, "record_count": record_count}},
        )

    def log_run_aborted(self, *, error_kind: str, error_detail: str, exit_code: int) -> None:
        self.logger.error(
            "runtime.aborted",
            extra={
                "fields": {
                    "error_kind": error_kind,
                    "error_detail": error_detail,
                    "exit_code": exit_code,
                }
            },
        )


@dataclass(frozen=True)
class ObservabilityBundle:
    runtime: RuntimeObservability
    tick_feed: FeedObservability
    backfill: BackfillObservability


class _FieldsFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "fields"):
            record.fields = {}
        return True


def bootstrap_observability(*, log_dir: str, verbose: bool = False) -> ObservabilityBundle:
    _setup_logging(log_dir=log_dir, verbose=verbose)
    runtime_logger = logging.getLogger("runtime")
    feed_logger = logging.getLogger("tick_feed")
    backfill_logger = logging.getLogger("backfill")
    return ObservabilityBundle(
        runtime=RuntimeObservability(logger=runtime_logger),
        tick_feed=FeedObservability(logger=StdlibLogger(feed_logger), metrics=NullMetrics()),
        backfill=BackfillObservability(
            logger=StdlibLogger(backfill_logger), metrics=NullMetrics()
        ),
    )


def _setup_logging(*, log_dir: str, verbose: bool) -> None:
    os.makedirs(log_dir, exist_ok=True)
    fields_filter = _FieldsFilter()
    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s | %(fields)s"
    )
    # append-only so consecutive runs share one log
    file_handler = logging.FileHandler(os.path.join(log_dir, LOG_FILENAME), mode="a")
    file_handler.addFilter(fields_filter)
    file_handler.setFormatter(formatter)
    console_handler = logging.StreamHandler()
    console_handler.addFilter(fields_filter)
    console_handler.setFormatter(logging.Formatter("%(levelname)s %(message)s %(fields)s"))
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logging.basicConfig(
        level=logging.INFO,
        handlers=[file_handler, console_handler],
        force=True,
    )
    logging.getLogger("runtime").setLevel(logging.DEBUG)
    logging.getLogger("backfill").setLevel(logging.DEBUG)
    logging.getLogger("tick_feed").setLevel(logging.DEBUG if verbose else logging.INFO)
