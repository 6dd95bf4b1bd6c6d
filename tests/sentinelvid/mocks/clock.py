"""Deterministic clock for polling tests."""

from __future__ import annotations


class FakeClock:
    """Clock whose sleep() advances time instantly.

    `step_s` is added on every now() call to simulate slow status fetches.
    """

    def __init__(self, start: float = 0.0, step_s: float = 0.0) -> None:
        self.current = start
        self.step_s = step_s
        self.sleeps: list[float] = []

    def now(self) -> float:
        value = self.current
        self.current += self.step_s
        return value

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += seconds
