from __future__ import annotations

from enum import StrEnum


class Role(StrEnum):
    CONTROLLER = "controller"
    DISPLAY = "display"
    UNKNOWN = "unknown"

    @property
    def is_routable(self) -> bool:
        return self is not Role.UNKNOWN


class SlotState(StrEnum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class RouteResult(StrEnum):
    FORWARDED = "forwarded"
    UNAVAILABLE = "unavailable"
    NOT_ROUTED = "not_routed"


class Environment(StrEnum):
    LOCAL = "local"
    PRODUCTION = "production"
