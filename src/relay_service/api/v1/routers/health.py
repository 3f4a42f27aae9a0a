from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from relay_service.api.deps import EnvironmentDep, RelayDep

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/status")
async def status(relay: RelayDep, environment: EnvironmentDep) -> dict[str, Any]:
    return {
        "environment": environment,
        "mode": "one-to-one",
        "slots": relay.occupancy(),
        "connected_clients": relay.connected_clients,
        "unrouted_clients": relay.unrouted_clients,
    }
