from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from typing import Callable

from backfill.failure_handling import BackfillFailure, BulkTransferFailure, FeedCorruptionError
from backfill.orchestrator import BackfillOrchestrator
from runtime.observability import ObservabilityBundle, bootstrap_observability
from tick_feed.config import TickFeedConfig
from tick_feed.config.loader import load_config, load_default_config, with_overrides
from tick_feed.serialization import write_document
from tick_feed.transport import SocketTransport, Transport

EXIT_OK = 0
EXIT_CORRUPTED = 1
EXIT_INCOMPLETE = 2
EXIT_CONFIG = 3
EXIT_OUTPUT = 4


def build_transport(config: TickFeedConfig) -> SocketTransport:
    return SocketTransport(
        host=config.endpoint.host,
        port=config.endpoint.port,
        connect_timeout_ms=config.limits.connect_timeout_ms,
        read_timeout_ms=config.limits.read_timeout_ms,
    )


def run(
    config: TickFeedConfig,
    *,
    observability: ObservabilityBundle,
    transport: Transport | None = None,
    sleeper: Callable[[int], None] | None = None,
) -> int:
    transport = transport or build_transport(config)
    endpoint = f"{config.endpoint.host}:{config.endpoint.port}"
    observability.runtime.log_run_started(endpoint=endpoint)
    orchestrator = BackfillOrchestrator(
        transport=transport,
        config=config,
        feed_observability=observability.tick_feed,
        observability=observability.backfill,
        sleeper=sleeper,
    )
    try:
        records = orchestrator.run()
    except FeedCorruptionError as exc:
        observability.runtime.log_run_aborted(
            error_kind="feed_corrupted", error_detail=str(exc), exit_code=EXIT_CORRUPTED
        )
        return EXIT_CORRUPTED
    except (BulkTransferFailure, BackfillFailure) as exc:
        observability.runtime.log_run_aborted(
            error_kind="feed_incomplete", error_detail=str(exc), exit_code=EXIT_INCOMPLETE
        )
        return EXIT_INCOMPLETE

    try:
        path = write_document(config.output.document_path, records)
    except OSError as exc:
        observability.runtime.log_run_aborted(
            error_kind="output_unwritable", error_detail=str(exc), exit_code=EXIT_OUTPUT
        )
        return EXIT_OUTPUT
    observability.runtime.log_document_written(path=str(path), record_count=len(records))
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Fetch the full tick feed, backfill missing packets and write a JSON document."
    )
    parser.add_argument("--config", help="YAML config file (defaults to the packaged config)")
    parser.add_argument("--host", help="Exchange host")
    parser.add_argument("--port", type=int, help="Exchange port")
    parser.add_argument("--output", help="Path of the JSON document to write")
    parser.add_argument("--log-dir", help="Directory for the append-only client log")
    parser.add_argument("--verbose", action="store_true", help="Echo progress to the console")
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config) if args.config else load_default_config()
        config = with_overrides(
            config,
            host=args.host,
            port=args.port,
            document_path=args.output,
            log_dir=args.log_dir,
        )
    except (OSError, ValueError) as exc:
        print(f"invalid configuration: {exc}", file=sys.stderr)
        return EXIT_CONFIG

    observability = bootstrap_observability(log_dir=config.output.log_dir, verbose=args.verbose)
    return run(config, observability=observability)


if __name__ == "__main__":
    sys.exit(main())
