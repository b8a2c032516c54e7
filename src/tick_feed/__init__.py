"""tick_feed wire contracts, decoding and validation."""

from tick_feed.contracts import (
    MAX_REQUESTABLE_SEQUENCE,
    RECORD_SIZE,
    RequestType,
    TickRecord,
)
from tick_feed.decoder import (
    SequenceOutOfRangeError,
    decode_record,
    encode_record,
    encode_request_all,
    encode_request_one,
)
from tick_feed.observability import NullLogger, NullMetrics, Observability, StdlibLogger
from tick_feed.serialization import serialize_document, write_document
from tick_feed.transport import Connection, SocketTransport, Transport, TransportError
from tick_feed.validation import ValidationResult, Violation, is_valid, validate_record

__all__ = [
    "MAX_REQUESTABLE_SEQUENCE",
    "RECORD_SIZE",
    "RequestType",
    "TickRecord",
    "SequenceOutOfRangeError",
    "decode_record",
    "encode_record",
    "encode_request_all",
    "encode_request_one",
    "NullLogger",
    "NullMetrics",
    "Observability",
    "StdlibLogger",
    "serialize_document",
    "write_document",
    "Connection",
    "SocketTransport",
    "Transport",
    "TransportError",
    "ValidationResult",
    "Violation",
    "is_valid",
    "validate_record",
]
