from __future__ import annotations

from typing import Protocol


class Endpoint(Protocol):
    """One client's open, message-framed connection as the relay sees it."""

    @property
    def label(self) -> str: ...

    @property
    def is_open(self) -> bool: ...

    async def send_text(self, data: str) -> None: ...

    async def close(self, code: int = 1000, reason: str = "") -> None: ...
