from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from relay_service.application.dto.messages import Frame
from relay_service.application.exceptions import INTERNAL_ERROR
from relay_service.application.ports.endpoint import Endpoint
from relay_service.domain.value_objects.enums import Role

logger = logging.getLogger(__name__)

DEFAULT_MAX_PENDING = 256


class Peer:
    """An admitted endpoint plus its ordered outbound queue.

    ``post`` never waits on the network, so the relay can call it while
    holding its state lock. A single writer task drains the queue, which
    keeps frames to one endpoint in the order they were posted.

    A failed send or a full queue breaks the peer: its endpoint is closed
    with 1011 and ``on_broken`` is awaited so the owner can release it.
    """

    def __init__(
        self,
        endpoint: Endpoint,
        role: Role,
        *,
        on_broken: Callable[[Peer], Awaitable[None]] | None = None,
        max_pending: int = DEFAULT_MAX_PENDING,
    ) -> None:
        self.endpoint = endpoint
        self.role = role
        self._on_broken = on_broken
        self._outbox: asyncio.Queue[str | None] = asyncio.Queue(maxsize=max_pending)
        self._writer: asyncio.Task[None] | None = None
        self._failure: asyncio.Task[None] | None = None

    def __repr__(self) -> str:
        return f"Peer(role={self.role}, endpoint={self.endpoint.label})"

    @property
    def is_broken(self) -> bool:
        return self._failure is not None

    @property
    def is_open(self) -> bool:
        return not self.is_broken and self.endpoint.is_open

    def start(self) -> None:
        if self._writer is None:
            self._writer = asyncio.create_task(
                self._drain(), name=f"relay-writer-{self.role}-{self.endpoint.label}",
            )

    def post(self, frame: Frame) -> bool:
        """Queue ``frame``; False if the peer is broken or just overflowed."""
        if self.is_broken:
            return False
        try:
            self._outbox.put_nowait(frame.to_frame())
        except asyncio.QueueFull:
            logger.warning("%r is %d frames behind; dropping it", self, self._outbox.maxsize)
            self._trip()
            return False
        return True

    async def flush(self) -> None:
        """Wait until every posted frame is sent, or the peer has been released."""
        await self._outbox.join()
        if self._failure is not None:
            await self._failure

    async def stop(self) -> None:
        if self._writer is not None:
            if self.is_broken or self._outbox.full():
                self._writer.cancel()
            else:
                self._outbox.put_nowait(None)
            await asyncio.gather(self._writer, return_exceptions=True)
            self._writer = None
        if self._failure is not None:
            await self._failure

    def _trip(self) -> None:
        if self._failure is None:
            self._failure = asyncio.create_task(
                self._fail(), name=f"relay-release-{self.role}-{self.endpoint.label}",
            )

    async def _fail(self) -> None:
        try:
            await self.endpoint.close(code=INTERNAL_ERROR, reason="Relay could not deliver frames")
        except Exception:
            logger.debug("Closing broken %r failed", self, exc_info=True)
        if self._on_broken is not None:
            await self._on_broken(self)

    async def _drain(self) -> None:
        while True:
            raw = await self._outbox.get()
            try:
                if raw is None:
                    return
                if not self.is_broken:
                    await self.endpoint.send_text(raw)
            except Exception:
                logger.warning("Send to %r failed; releasing it", self, exc_info=True)
                self._trip()
            finally:
                self._outbox.task_done()
