"""One controller, one display, and the frames between them."""
from __future__ import annotations

import asyncio
import logging

from relay_service.application.dto.messages import (
    ErrorNotification,
    InboundMessage,
    RelayedMessage,
    StatusNotification,
    WelcomeNotification,
)
from relay_service.application.exceptions import (
    POLICY_VIOLATION,
    AdmissionConflictError,
    UnknownRoleError,
)
from relay_service.application.policies.routing import route_target
from relay_service.application.ports.clock import Clock, SystemClock
from relay_service.application.ports.endpoint import Endpoint
from relay_service.domain.value_objects.enums import Role, RouteResult, SlotState
from relay_service.services.peer import DEFAULT_MAX_PENDING, Peer

logger = logging.getLogger(__name__)


class Relay:
    """Owns the controller and display slots.

    Every read or write of slot occupancy happens under ``_lock``. Frames
    are only queued on peers inside the lock; the network writes happen on
    each peer's writer task.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        *,
        allow_unknown: bool = True,
        notify_display_route_failure: bool = False,
        max_pending: int = DEFAULT_MAX_PENDING,
    ) -> None:
        self._clock = clock or SystemClock()
        self._allow_unknown = allow_unknown
        self._notify_display_route_failure = notify_display_route_failure
        self._max_pending = max_pending
        self._lock = asyncio.Lock()
        self._slots: dict[Role, Peer | None] = {Role.CONTROLLER: None, Role.DISPLAY: None}
        self._unrouted: set[Peer] = set()

    async def admit(self, endpoint: Endpoint, role: Role) -> Peer:
        """Bind ``endpoint`` to ``role``.

        On conflict the candidate gets one error frame and is closed, then
        the error is re-raised so the caller stops handling it.
        """
        try:
            async with self._lock:
                peer = self._bind(endpoint, role)
        except (AdmissionConflictError, UnknownRoleError) as exc:
            logger.warning("Rejected %s connection from %s: %s", role, endpoint.label, exc.detail)
            await self._reject(endpoint, exc)
            raise
        logger.info("Client %s registered as %s (%s)", endpoint.label, role, self.describe())
        return peer

    def _bind(self, endpoint: Endpoint, role: Role) -> Peer:
        if not role.is_routable:
            if not self._allow_unknown:
                raise UnknownRoleError()
            peer = self._new_peer(endpoint, role)
            self._unrouted.add(peer)
            peer.start()
            peer.post(self._welcome(role))
            return peer

        if self._slots[role] is not None:
            raise AdmissionConflictError(role)
        peer = self._new_peer(endpoint, role)
        self._slots[role] = peer
        peer.start()
        peer.post(self._welcome(role))
        self._broadcast_status()
        return peer

    def _new_peer(self, endpoint: Endpoint, role: Role) -> Peer:
        return Peer(endpoint, role, on_broken=self._release, max_pending=self._max_pending)

    async def _reject(
        self,
        endpoint: Endpoint,
        exc: AdmissionConflictError | UnknownRoleError,
    ) -> None:
        notice = ErrorNotification(message=exc.detail, code=exc.code)
        try:
            await endpoint.send_text(notice.to_frame())
            await endpoint.close(code=POLICY_VIOLATION, reason=exc.close_reason)
        except Exception:
            logger.debug("Rejected endpoint %s went away early", endpoint.label, exc_info=True)

    async def route(self, peer: Peer, message: InboundMessage) -> RouteResult:
        target_role = route_target(peer.role, message.type)
        if target_role is None:
            return RouteResult.NOT_ROUTED

        async with self._lock:
            target = self._slots[target_role]
            relayed = RelayedMessage.from_inbound(message, self._clock.now_ms())
            if target is None or not target.is_open or not target.post(relayed):
                if self._reports_failures_to(peer.role):
                    peer.post(
                        ErrorNotification(
                            message=f"{target_role.capitalize()} is not connected",
                            timestamp=self._clock.now_ms(),
                        ),
                    )
                logger.info("Cannot forward %s -> %s: not connected", peer.role, target_role)
                return RouteResult.UNAVAILABLE

        logger.debug("Forwarded %s -> %s: %s", peer.role, target_role, message.type)
        return RouteResult.FORWARDED

    def _reports_failures_to(self, source: Role) -> bool:
        if source is Role.CONTROLLER:
            return True
        return source is Role.DISPLAY and self._notify_display_route_failure

    async def on_close(self, peer: Peer) -> None:
        """Release ``peer``'s slot if it still holds it, then stop its writer."""
        await self._release(peer)
        await peer.stop()

    async def _release(self, peer: Peer) -> None:
        # Also reached from a broken peer's release task, before its read loop ends.
        async with self._lock:
            if not peer.role.is_routable:
                self._unrouted.discard(peer)
            elif self._slots.get(peer.role) is peer:
                self._slots[peer.role] = None
                self._broadcast_status()
                logger.info("%s slot released (%s)", peer.role.capitalize(), self.describe())
            else:
                logger.debug("Ignoring close of unbound %r", peer)

    async def shutdown(self) -> None:
        """Drop every peer and stop its writer; used on application shutdown."""
        async with self._lock:
            peers = [peer for peer in self._slots.values() if peer is not None]
            peers.extend(self._unrouted)
            self._slots = dict.fromkeys(self._slots)
            self._unrouted.clear()
        for peer in peers:
            await peer.stop()

    def occupancy(self) -> dict[Role, SlotState]:
        return {
            role: SlotState.CONNECTED if peer is not None else SlotState.DISCONNECTED
            for role, peer in self._slots.items()
        }

    @property
    def connected_clients(self) -> int:
        return sum(1 for peer in self._slots.values() if peer is not None)

    @property
    def unrouted_clients(self) -> int:
        return len(self._unrouted)

    def _broadcast_status(self) -> None:
        slots = self.occupancy()
        status = StatusNotification(
            controller=slots[Role.CONTROLLER],
            display=slots[Role.DISPLAY],
            timestamp=self._clock.now_ms(),
        )
        for peer in self._slots.values():
            if peer is not None and peer.is_open:
                peer.post(status)

    def _welcome(self, role: Role) -> WelcomeNotification:
        return WelcomeNotification(
            message=f"Connected as {role}",
            role=role,
            timestamp=self._clock.now_ms(),
        )

    def describe(self) -> str:
        return ", ".join(f"{role}={state}" for role, state in self.occupancy().items())
