from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class GapTracker:
    expected_sequence: int = 1
    _pending: set[int] = field(default_factory=set)

    def observe(self, sequence: int) -> tuple[int, ...]:
        if sequence < self.expected_sequence:
            # late arrival of a sequence already counted as missing
            self._pending.discard(sequence)
            return ()
        missing: list[int] = []
        while self.expected_sequence < sequence:
            missing.append(self.expected_sequence)
            self._pending.add(self.expected_sequence)
            self.expected_sequence += 1
        self.expected_sequence = sequence + 1
        return tuple(missing)

    def resolve(self, sequence: int) -> None:
        self._pending.discard(sequence)

    def is_empty(self) -> bool:
        return not self._pending

    def next_pending(self) -> int:
        if not self._pending:
            raise LookupError("no pending sequence numbers")
        return max(self._pending)

    @property
    def pending(self) -> frozenset[int]:
        return frozenset(self._pending)

    def __len__(self) -> int:
        return len(self._pending)
