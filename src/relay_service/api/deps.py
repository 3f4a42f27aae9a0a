"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from starlette.requests import HTTPConnection

from relay_service.domain.value_objects.enums import Environment
from relay_service.services.relay import Relay


def get_relay(conn: HTTPConnection) -> Relay:
    return conn.app.state.relay


def get_environment(conn: HTTPConnection) -> Environment:
    return conn.app.state.environment


RelayDep = Annotated[Relay, Depends(get_relay)]
EnvironmentDep = Annotated[Environment, Depends(get_environment)]
