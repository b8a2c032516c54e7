from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from tick_feed.contracts import SIDES, SYMBOL_WIDTH, TickRecord


class Violation(str, Enum):
    SYMBOL = "symbol"
    SIDE = "side"
    QUANTITY = "quantity"
    PRICE = "price"
    SEQUENCE = "sequence"


@dataclass(frozen=True)
class ValidationResult:
    violation: Violation | None = None
    detail: str = ""

    @property
    def valid(self) -> bool:
        return self.violation is None


VALID = ValidationResult()


def validate_record(record: TickRecord) -> ValidationResult:
    if len(record.symbol) != SYMBOL_WIDTH or not all("A" <= ch <= "Z" for ch in record.symbol):
        return ValidationResult(Violation.SYMBOL, "symbol should be uppercase english letters")
    if record.side not in SIDES:
        return ValidationResult(Violation.SIDE, "buy/sell indicator should be either B or S")
    if record.quantity <= 0:
        return ValidationResult(
            Violation.QUANTITY, "quantity should be a non-zero positive integer"
        )
    if record.price <= 0:
        return ValidationResult(Violation.PRICE, "price should be a non-zero positive integer")
    if record.sequence <= 0:
        return ValidationResult(
            Violation.SEQUENCE, "sequence number should be a non-zero positive integer"
        )
    return VALID


def is_valid(record: TickRecord) -> bool:
    return validate_record(record).valid
