from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

RECORD_SIZE = 17
SYMBOL_WIDTH = 4

MAX_REQUESTABLE_SEQUENCE = 255

SIDES: frozenset[str] = frozenset({"B", "S"})


class RequestType(IntEnum):
    ALL_PACKETS = 1
    ONE_PACKET = 2


@dataclass(frozen=True)
class TickRecord:
    symbol: str
    side: str
    quantity: int
    price: int
    sequence: int
