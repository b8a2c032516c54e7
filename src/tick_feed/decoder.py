from __future__ import annotations

import struct
from collections.abc import Iterator

from tick_feed.contracts import (
    MAX_REQUESTABLE_SEQUENCE,
    RECORD_SIZE,
    RequestType,
    TickRecord,
)

_RECORD_FORMAT = struct.Struct(">4sciii")
_COMMAND_FORMAT = struct.Struct(">BB")


class SequenceOutOfRangeError(ValueError):
    """Raised when a sequence number cannot be carried by the one-byte request parameter."""


def decode_record(buffer: bytes, offset: int = 0) -> TickRecord:
    if len(buffer) - offset < RECORD_SIZE:
        raise ValueError(f"record window at offset {offset} is shorter than {RECORD_SIZE} bytes")
    symbol, side, quantity, price, sequence = _RECORD_FORMAT.unpack_from(buffer, offset)
    # latin-1 maps every byte to one character so content errors surface in validation
    return TickRecord(
        symbol=symbol.decode("latin-1"),
        side=side.decode("latin-1"),
        quantity=quantity,
        price=price,
        sequence=sequence,
    )


def encode_record(record: TickRecord) -> bytes:
    return _RECORD_FORMAT.pack(
        record.symbol.encode("latin-1"),
        record.side.encode("latin-1"),
        record.quantity,
        record.price,
        record.sequence,
    )


def iter_record_windows(buffer: bytes) -> Iterator[int]:
    """Yield the offset of every whole record in ``buffer``."""
    for offset in range(0, len(buffer) - RECORD_SIZE + 1, RECORD_SIZE):
        yield offset


def split_remainder(buffer: bytes) -> tuple[bytes, bytes]:
    whole = len(buffer) - (len(buffer) % RECORD_SIZE)
    return buffer[:whole], buffer[whole:]


def encode_request_all() -> bytes:
    return _COMMAND_FORMAT.pack(RequestType.ALL_PACKETS, 0)


def encode_request_one(sequence: int) -> bytes:
    if not 1 <= sequence <= MAX_REQUESTABLE_SEQUENCE:
        raise SequenceOutOfRangeError(
            f"sequence {sequence} cannot be requested individually; "
            f"the request parameter is one byte (1..{MAX_REQUESTABLE_SEQUENCE})"
        )
    return _COMMAND_FORMAT.pack(RequestType.ONE_PACKET, sequence)
