from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now_ms(self) -> int: ...


class SystemClock:
    """Wall clock in epoch milliseconds, the unit every outbound timestamp uses."""

    def now_ms(self) -> int:
        return time.time_ns() // 1_000_000
