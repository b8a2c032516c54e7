from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from backfill.contracts import (
    MODE_REQUEST_ALL,
    MODE_REQUEST_ONE,
    SessionResult,
    SessionStatus,
)
from backfill.observability import Observability
from backfill.state import FeedState
from tick_feed.contracts import RECORD_SIZE
from tick_feed.decoder import (
    decode_record,
    encode_request_all,
    encode_request_one,
    iter_record_windows,
    split_remainder,
)
from tick_feed.observability import NullLogger, NullMetrics
from tick_feed.observability import Observability as FeedObservability
from tick_feed.transport import Connection, Transport, TransportError
from tick_feed.validation import validate_record

DEFAULT_RECEIVE_BUFFER_BYTES = 170


class SessionController:
    """Runs one protocol request per call over a freshly opened connection.

    Accepted records and gap bookkeeping go into the shared ``FeedState``.
    Transport failures are reported as ``ABORTED`` results and corrupted
    records as ``CORRUPTED`` results; deciding what to do about either is
    left to the caller.
    """

    def __init__(
        self,
        *,
        transport: Transport,
        state: FeedState,
        feed_observability: FeedObservability | None = None,
        observability: Observability | None = None,
        receive_buffer_bytes: int = DEFAULT_RECEIVE_BUFFER_BYTES,
    ) -> None:
        if receive_buffer_bytes < RECORD_SIZE:
            raise ValueError(f"receive_buffer_bytes must be >= {RECORD_SIZE}")
        self._transport = transport
        self._state = state
        self._feed = feed_observability or FeedObservability(
            logger=NullLogger(), metrics=NullMetrics()
        )
        self._observability = observability or Observability(
            logger=NullLogger(), metrics=NullMetrics()
        )
        self._receive_buffer_bytes = receive_buffer_bytes

    @property
    def endpoint(self) -> str:
        return str(getattr(self._transport, "endpoint", "unknown"))

    def request_all(self) -> SessionResult:
        try:
            with self._connection(MODE_REQUEST_ALL) as connection:
                connection.send(encode_request_all())
                return self._stream_all(connection)
        except TransportError as exc:
            self._log_transport_failure(MODE_REQUEST_ALL, exc)
            return SessionResult(
                mode=MODE_REQUEST_ALL,
                status=SessionStatus.ABORTED,
                error_detail=str(exc),
            )

    def request_one(self, sequence: int) -> SessionResult:
        command = encode_request_one(sequence)
        try:
            with self._connection(MODE_REQUEST_ONE) as connection:
                connection.send(command)
                payload = _receive_exact(connection, RECORD_SIZE)
        except TransportError as exc:
            self._log_transport_failure(MODE_REQUEST_ONE, exc)
            return SessionResult(
                mode=MODE_REQUEST_ONE,
                status=SessionStatus.ABORTED,
                requested_sequence=sequence,
                error_detail=str(exc),
            )

        record = decode_record(payload)
        validation = validate_record(record)
        if not validation.valid:
            self._feed.log_validation_failure(record, validation, mode=MODE_REQUEST_ONE)
            return SessionResult(
                mode=MODE_REQUEST_ONE,
                status=SessionStatus.CORRUPTED,
                requested_sequence=sequence,
                error_detail=validation.detail,
                validation=validation,
                record=record,
            )
        if record.sequence != sequence:
            return SessionResult(
                mode=MODE_REQUEST_ONE,
                status=SessionStatus.ABORTED,
                requested_sequence=sequence,
                error_detail=f"requested sequence {sequence}, received {record.sequence}",
                record=record,
            )

        self._state.accept(record)
        self._state.gaps.resolve(sequence)
        self._feed.record_accepted(record, mode=MODE_REQUEST_ONE)
        return SessionResult(
            mode=MODE_REQUEST_ONE,
            status=SessionStatus.COMPLETED,
            records_received=1,
            requested_sequence=sequence,
        )

    def _stream_all(self, connection: Connection) -> SessionResult:
        received = 0
        carry = b""
        read_error: str | None = None
        while True:
            try:
                chunk = connection.receive(self._receive_buffer_bytes)
            except TransportError as exc:
                read_error = str(exc)
                break
            if not chunk:
                break
            whole, carry = split_remainder(carry + chunk)
            for offset in iter_record_windows(whole):
                record = decode_record(whole, offset)
                validation = validate_record(record)
                if not validation.valid:
                    self._feed.log_validation_failure(record, validation, mode=MODE_REQUEST_ALL)
                    return SessionResult(
                        mode=MODE_REQUEST_ALL,
                        status=SessionStatus.CORRUPTED,
                        records_received=received,
                        error_detail=validation.detail,
                        validation=validation,
                        record=record,
                    )
                missing = self._state.gaps.observe(record.sequence)
                if missing:
                    self._observability.log_gaps_detected(
                        missing, expected_sequence=self._state.gaps.expected_sequence
                    )
                self._state.accept(record)
                self._feed.record_accepted(record, mode=MODE_REQUEST_ALL)
                received += 1

        if carry:
            self._feed.log_trailing_bytes(mode=MODE_REQUEST_ALL, byte_count=len(carry))
        if read_error is not None:
            self._log_transport_failure(MODE_REQUEST_ALL, TransportError(read_error))

        # a feed that already produced records is done once the peer stops sending
        if self._state.has_records:
            return SessionResult(
                mode=MODE_REQUEST_ALL,
                status=SessionStatus.COMPLETED,
                records_received=received,
                error_detail=read_error,
            )
        return SessionResult(
            mode=MODE_REQUEST_ALL,
            status=SessionStatus.ABORTED,
            records_received=received,
            error_detail=read_error or "connection closed before any record was received",
        )

    @contextmanager
    def _connection(self, mode: str) -> Iterator[Connection]:
        self._feed.log_transport_state(endpoint=self.endpoint, mode=mode, state="connecting")
        connection = self._transport.open()
        self._feed.log_transport_state(endpoint=self.endpoint, mode=mode, state="connected")
        try:
            yield connection
        finally:
            connection.close()
            self._feed.log_transport_state(endpoint=self.endpoint, mode=mode, state="closed")

    def _log_transport_failure(self, mode: str, exc: TransportError) -> None:
        self._feed.log_transport_state(
            endpoint=self.endpoint, mode=mode, state="failed", error=str(exc)
        )


def _receive_exact(connection: Connection, size: int) -> bytes:
    payload = b""
    while len(payload) < size:
        chunk = connection.receive(size - len(payload))
        if not chunk:
            raise TransportError(
                f"connection closed after {len(payload)} of {size} bytes"
            )
        payload += chunk
    return payload
