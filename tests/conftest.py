"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, AsyncIterator

import pytest
import pytest_asyncio

from relay_service.services.peer import Peer
from relay_service.services.relay import Relay

NOW_MS = 1_700_000_000_000


@dataclass
class FixedClock:
    value: int = NOW_MS

    def now_ms(self) -> int:
        return self.value


@dataclass
class FakeEndpoint:
    """In-memory Endpoint recording every frame and the close call."""

    label: str = "fake:0"
    sent: list[str] = field(default_factory=list)
    open: bool = True
    fail_sends: bool = False
    close_code: int | None = None
    close_reason: str | None = None
    gate: asyncio.Event | None = None

    @property
    def is_open(self) -> bool:
        return self.open

    async def send_text(self, data: str) -> None:
        if self.fail_sends:
            raise ConnectionResetError("peer went away")
        if self.gate is not None:
            await self.gate.wait()
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.open = False
        self.close_code = code
        self.close_reason = reason

    def frames(self, type_: str | None = None) -> list[dict[str, Any]]:
        decoded = [json.loads(raw) for raw in self.sent]
        if type_ is None:
            return decoded
        return [frame for frame in decoded if frame["type"] == type_]


async def settle(*peers: Peer) -> None:
    for peer in peers:
        await peer.flush()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest_asyncio.fixture
async def relay(clock: FixedClock) -> AsyncIterator[Relay]:
    relay = Relay(clock)
    yield relay
    await relay.shutdown()
