from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from relay_service.api.deps import RelayDep
from relay_service.application.dto.messages import parse_inbound
from relay_service.application.exceptions import INTERNAL_ERROR, AppError, MalformedMessageError
from relay_service.application.policies.roles import resolve_role
from relay_service.infrastructure.ws.transport import WebSocketTransport
from relay_service.services.peer import Peer
from relay_service.services.relay import Relay

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])


@router.websocket("/{path:path}")
async def relay_socket(websocket: WebSocket, path: str, relay: RelayDep) -> None:
    role = resolve_role(websocket.query_params)
    await websocket.accept()
    transport = WebSocketTransport(websocket)
    logger.info("WS connection from %s (%s) as %s", transport.label, path or "/", role)

    try:
        peer = await relay.admit(transport, role)
    except AppError:
        return

    try:
        await _read_loop(transport, peer, relay)
    except WebSocketDisconnect as exc:
        logger.info("%s client %s disconnected: %s - %s", role, transport.label, exc.code, exc.reason)
    except Exception:
        logger.exception("WS error for %s client %s", role, transport.label)
        await _close_after_fault(transport)
    finally:
        await relay.on_close(peer)


async def _read_loop(transport: WebSocketTransport, peer: Peer, relay: Relay) -> None:
    while True:
        raw = await transport.receive_frame()
        try:
            message = parse_inbound(raw)
        except MalformedMessageError as exc:
            logger.warning("Dropping malformed frame from %s: %s", peer.role, exc.detail)
            continue

        logger.debug("Received %s from %s", message.type, peer.role)
        await relay.route(peer, message)


async def _close_after_fault(transport: WebSocketTransport) -> None:
    if not transport.is_open:
        return
    try:
        await transport.close(code=INTERNAL_ERROR, reason="Relay error")
    except Exception:
        logger.debug("Close after fault failed for %s", transport.label, exc_info=True)
