from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from tick_feed.contracts import TickRecord
from tick_feed.validation import ValidationResult

MODE_REQUEST_ALL = "request_all"
MODE_REQUEST_ONE = "request_one"


class SessionStatus(str, Enum):
    COMPLETED = "completed"
    ABORTED = "aborted"
    CORRUPTED = "corrupted"


@dataclass(frozen=True)
class SessionResult:
    mode: str
    status: SessionStatus
    records_received: int = 0
    requested_sequence: int | None = None
    error_detail: str | None = None
    validation: ValidationResult | None = None
    record: TickRecord | None = None

    @property
    def completed(self) -> bool:
        return self.status == SessionStatus.COMPLETED
