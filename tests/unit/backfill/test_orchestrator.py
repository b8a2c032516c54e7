import unittest
from dataclasses import replace

from backfill.failure_handling import BackfillFailure, BulkTransferFailure, FeedCorruptionError
from backfill.lifecycle import FeedPhase
from backfill.observability import Observability
from backfill.orchestrator import BackfillOrchestrator
from feed_fakes import (
    ExchangeStub,
    RecordingLogger,
    RecordingMetrics,
    ScriptedConnection,
    ScriptedTransport,
    frame,
    frames,
    make_config,
    tick,
)
from tick_feed.config import RetryPolicy
from tick_feed.decoder import SequenceOutOfRangeError
from tick_feed.transport import TransportError
from tick_feed.validation import Violation


def _orchestrator(transport, *, slept=None, logger=None, **config_kwargs) -> BackfillOrchestrator:
    sleeper = slept.append if slept is not None else (lambda _: None)
    observability = None
    if logger is not None:
        observability = Observability(logger=logger, metrics=RecordingMetrics())
    return BackfillOrchestrator(
        transport=transport,
        config=make_config(**config_kwargs),
        observability=observability,
        sleeper=sleeper,
    )


class TestBackfillOrchestrator(unittest.TestCase):
    def test_complete_feed_needs_no_backfill(self) -> None:
        transport = ScriptedTransport([ScriptedConnection([frames([1, 2, 3])])])
        orchestrator = _orchestrator(transport)

        records = orchestrator.run()

        self.assertEqual([record.sequence for record in records], [1, 2, 3])
        self.assertTrue(orchestrator.state.gaps.is_empty())
        self.assertEqual(transport.sent, [b"\x01\x00"])
        self.assertEqual(orchestrator.lifecycle.phase, FeedPhase.COMPLETE)

    def test_single_gap_is_backfilled(self) -> None:
        transport = ScriptedTransport(
            [
                ScriptedConnection([frames([1, 3])]),
                ScriptedConnection([frame(2)]),
            ]
        )
        orchestrator = _orchestrator(transport)

        records = orchestrator.run()

        self.assertEqual(records, (tick(1), tick(2), tick(3)))
        self.assertEqual(transport.sent, [b"\x01\x00", b"\x02\x02"])
        self.assertTrue(all(connection.closed for connection in transport.connections))

    def test_bulk_gap_in_middle_is_filled(self) -> None:
        exchange = ExchangeStub([tick(sequence) for sequence in range(1, 6)], dropped={3})

        records = _orchestrator(exchange).run()

        self.assertEqual([record.sequence for record in records], [1, 2, 3, 4, 5])

    def test_many_gaps_drain_to_a_complete_sorted_feed(self) -> None:
        source = [tick(sequence, price=sequence * 10) for sequence in range(1, 41)]
        dropped = {1, 2, 7, 19, 20, 21, 33}
        exchange = ExchangeStub(source, dropped=dropped, records_per_batch=3)
        orchestrator = _orchestrator(exchange)

        records = orchestrator.run()

        self.assertEqual(records, tuple(source))
        self.assertEqual(len({record.sequence for record in records}), len(records))
        single_requests = {command[1] for command in exchange.commands if command[0] == 2}
        self.assertEqual(single_requests, dropped)

    def test_corrupted_bulk_record_stops_the_run(self) -> None:
        payload = frame(1) + frame(2, quantity=0) + frame(3)
        transport = ScriptedTransport([ScriptedConnection([payload]), ScriptedConnection([])])
        orchestrator = _orchestrator(transport)

        with self.assertRaises(FeedCorruptionError) as ctx:
            orchestrator.run()

        self.assertEqual(ctx.exception.result.validation.violation, Violation.QUANTITY)
        self.assertEqual(orchestrator.state.records, [tick(1)])
        self.assertEqual(orchestrator.lifecycle.phase, FeedPhase.FAILED)
        self.assertEqual(transport.open_count, 1)

    def test_corrupted_backfill_record_is_not_retried(self) -> None:
        transport = ScriptedTransport(
            [
                ScriptedConnection([frames([1, 3])]),
                ScriptedConnection([frame(2, symbol="ab12")]),
                ScriptedConnection([frame(2)]),
            ]
        )
        orchestrator = _orchestrator(transport)

        with self.assertRaises(FeedCorruptionError):
            orchestrator.run()
        self.assertEqual(transport.open_count, 2)
        self.assertEqual(orchestrator.state.gaps.pending, frozenset({2}))

    def test_bulk_transfer_retries_until_data_arrives(self) -> None:
        slept = []
        transport = ScriptedTransport(
            [
                TransportError("connection refused"),
                ScriptedConnection([]),
                ScriptedConnection([frames([1, 2])]),
            ]
        )
        orchestrator = _orchestrator(transport, slept=slept, bulk_attempts=3)

        records = orchestrator.run()

        self.assertEqual(len(records), 2)
        self.assertEqual(slept, [10, 20])

    def test_bulk_transfer_gives_up_after_bounded_attempts(self) -> None:
        logger = RecordingLogger()
        transport = ScriptedTransport([])
        orchestrator = _orchestrator(transport, logger=logger, bulk_attempts=4)

        with self.assertRaises(BulkTransferFailure):
            orchestrator.run()

        self.assertEqual(transport.open_count, 4)
        self.assertEqual(orchestrator.lifecycle.phase, FeedPhase.FAILED)
        self.assertIn("backfill.failure", logger.messages())

    def test_tight_elapsed_budget_still_attempts_each_request_once(self) -> None:
        tight = RetryPolicy(
            min_delay_ms=1000, max_delay_ms=5000, max_attempts=5, max_elapsed_ms=500
        )
        config = replace(make_config(), bulk_retry=tight, backfill_retry=tight)
        transport = ScriptedTransport(
            [ScriptedConnection([frames([1, 3])]), ScriptedConnection([frame(2)])]
        )
        orchestrator = BackfillOrchestrator(
            transport=transport, config=config, sleeper=lambda _: None
        )

        records = orchestrator.run()

        self.assertEqual([record.sequence for record in records], [1, 2, 3])
        self.assertEqual(transport.open_count, 2)

    def test_backfill_retries_failed_request(self) -> None:
        transport = ScriptedTransport(
            [
                ScriptedConnection([frames([1, 3])]),
                ScriptedConnection([TransportError("read timeout")]),
                ScriptedConnection([frame(2)]),
            ]
        )

        records = _orchestrator(transport).run()

        self.assertEqual([record.sequence for record in records], [1, 2, 3])
        self.assertEqual(transport.sent, [b"\x01\x00", b"\x02\x02", b"\x02\x02"])

    def test_backfill_gives_up_and_keeps_sequence_pending(self) -> None:
        transport = ScriptedTransport([ScriptedConnection([frames([1, 3])])])
        orchestrator = _orchestrator(transport, backfill_attempts=2)

        with self.assertRaises(BackfillFailure) as ctx:
            orchestrator.run()

        self.assertEqual(ctx.exception.sequence, 2)
        self.assertEqual(orchestrator.state.gaps.pending, frozenset({2}))
        self.assertEqual(transport.open_count, 3)

    def test_gap_beyond_one_byte_parameter_fails(self) -> None:
        transport = ScriptedTransport([ScriptedConnection([frames([299, 301])])])
        orchestrator = _orchestrator(transport)

        with self.assertRaises(BackfillFailure) as ctx:
            orchestrator.run()

        self.assertEqual(ctx.exception.sequence, 300)
        self.assertIsInstance(ctx.exception.__cause__, SequenceOutOfRangeError)
        self.assertEqual(orchestrator.lifecycle.phase, FeedPhase.FAILED)
        self.assertEqual(transport.open_count, 1)

    def test_phase_logging(self) -> None:
        logger = RecordingLogger()
        transport = ScriptedTransport([ScriptedConnection([frames([1])])])

        _orchestrator(transport, logger=logger).run()

        phases = [fields["phase"] for _, message, fields in logger.entries if message == "backfill.phase"]
        self.assertEqual(phases, ["bulk_transfer", "backfill", "complete"])


if __name__ == "__main__":
    unittest.main()
