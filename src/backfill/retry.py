from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from tick_feed.config import RetryPolicy


@dataclass(frozen=True)
class RetrySchedule:
    min_delay_ms: int
    max_delay_ms: int
    max_attempts: int
    max_elapsed_ms: int | None = None

    @classmethod
    def from_policy(cls, policy: RetryPolicy) -> "RetrySchedule":
        return cls(
            min_delay_ms=policy.min_delay_ms,
            max_delay_ms=policy.max_delay_ms,
            max_attempts=policy.max_attempts,
            max_elapsed_ms=policy.max_elapsed_ms,
        )

    def delays(self) -> tuple[int, ...]:
        delays: list[int] = []
        delay = self.min_delay_ms
        elapsed = 0
        for _ in range(self.max_attempts):
            if self.max_elapsed_ms is not None and (elapsed + delay) > self.max_elapsed_ms:
                break
            delays.append(delay)
            elapsed += delay
            delay = min(delay * 2, self.max_delay_ms)
        return tuple(delays)


def sleep_ms(delay_ms: int) -> None:
    time.sleep(delay_ms / 1000)


@dataclass
class Retrier:
    schedule: RetrySchedule
    sleeper: Callable[[int], None]
    on_retry: Callable[[int, int], None] | None

    def __init__(
        self,
        schedule: RetrySchedule,
        sleeper: Callable[[int], None] | None = None,
        on_retry: Callable[[int, int], None] | None = None,
    ) -> None:
        self.schedule = schedule
        self.sleeper = sleeper or sleep_ms
        self.on_retry = on_retry

    def run(self, action: Callable[[int], bool]) -> bool:
        """Call ``action(attempt)`` until it returns True or the schedule is exhausted.

        The first attempt always runs; the schedule only bounds the retries.
        Exceptions raised by ``action`` are not retried.
        """
        delays = self.schedule.delays()
        attempts = max(len(delays), 1)
        for attempt in range(1, attempts + 1):
            if action(attempt):
                return True
            if attempt == attempts:
                break
            delay_ms = delays[attempt - 1]
            if self.on_retry is not None:
                self.on_retry(attempt, delay_ms)
            self.sleeper(delay_ms)
        return False
