"""Bounded polling of an external source."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, TypeVar

from action_engine.core.config.execute_config import RetryConfig

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]
Clock = Callable[[], float]


@dataclass(frozen=True, slots=True)
class PollOutcome(Generic[T]):
    """Result of a poll: value is None when the source never produced one."""

    value: T | None
    attempts: int

    @property
    def found(self) -> bool:
        return self.value is not None


@dataclass(slots=True)
class RetryPolicy:
    """Poll until found, max_attempts is reached, or the deadline passes.

    sleep and clock are injectable so tests never wait on wall time.
    """

    max_attempts: int | None = 30
    interval_seconds: float = 1.0
    deadline_seconds: float | None = None
    sleep: Sleep = field(default=asyncio.sleep)
    clock: Clock = field(default=time.monotonic)

    @classmethod
    def from_config(
        cls,
        cfg: RetryConfig,
        *,
        sleep: Sleep | None = None,
        clock: Clock | None = None,
    ) -> RetryPolicy:
        return cls(
            max_attempts=cfg.max_attempts,
            interval_seconds=cfg.interval_seconds,
            deadline_seconds=cfg.deadline_seconds,
            sleep=sleep or asyncio.sleep,
            clock=clock or time.monotonic,
        )

    def _exhausted(self, attempts: int, started: float) -> bool:
        if self.max_attempts is not None and attempts >= self.max_attempts:
            return True
        if self.deadline_seconds is not None:
            return self.clock() - started >= self.deadline_seconds
        return False

    async def poll(self, fetch: Callable[[], Awaitable[T | None]]) -> PollOutcome[T]:
        started = self.clock()
        attempts = 0
        while True:
            attempts += 1
            value = await fetch()
            if value is not None:
                return PollOutcome(value=value, attempts=attempts)
            if self._exhausted(attempts, started):
                LOGGER.warning(
                    "poll exhausted",
                    extra={"attempts": attempts, "deadline_seconds": self.deadline_seconds},
                )
                return PollOutcome(value=None, attempts=attempts)
            await self.sleep(self.interval_seconds)
