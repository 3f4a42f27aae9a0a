"""Human-facing landing page served next to the WebSocket endpoint."""
from __future__ import annotations

from html import escape

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from relay_service.api.deps import EnvironmentDep, RelayDep
from relay_service.config import settings
from relay_service.domain.value_objects.enums import Environment
from relay_service.infrastructure.net import lan_address

router = APIRouter(tags=["pages"])

_PAGE = """<!DOCTYPE html>
<html>
  <head>
    <title>Teleprompter Relay</title>
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
  </head>
  <body>
    <h1>Teleprompter Relay is Running</h1>
    <p>Server: {server}</p>
    <p>Environment: {environment}</p>
    <p>Port: {port}</p>
    <p>Mode: one-to-one</p>
    <p>Connected clients: {connected}</p>
{extra}  </body>
</html>
"""

_LOCAL_LINKS = """    <p>LAN address: http://{address}:{port}</p>
    <p>
      <a href="/display.html">Display</a>
      <a href="/controller.html">Controller</a>
    </p>
"""


@router.get("/", response_class=HTMLResponse)
async def index(relay: RelayDep, environment: EnvironmentDep) -> str:
    extra = ""
    if environment is Environment.LOCAL:
        extra = _LOCAL_LINKS.format(address=escape(lan_address()), port=settings.PORT)
    return _PAGE.format(
        server=escape(settings.server_name),
        environment=environment,
        port=settings.PORT,
        connected=relay.connected_clients,
        extra=extra,
    )
