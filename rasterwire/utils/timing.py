"""Timing helper used to report how long a conversion took."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator, Optional


class Elapsed:
    """Milliseconds since ``start``; frozen once the timed block exits."""

    def __init__(self) -> None:
        self._start = time.perf_counter()
        self._stop: Optional[float] = None

    @property
    def ms(self) -> float:
        end = self._stop if self._stop is not None else time.perf_counter()
        return (end - self._start) * 1000.0

    def header_value(self) -> str:
        return f"{self.ms:.2f}"


@contextmanager
def record_elapsed() -> Iterator[Elapsed]:
    elapsed = Elapsed()
    try:
        yield elapsed
    finally:
        elapsed._stop = time.perf_counter()
