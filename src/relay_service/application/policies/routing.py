from __future__ import annotations

from relay_service.domain.value_objects.enums import Role

POSITION_UPDATE = "positionUpdate"


def route_target(source: Role, message_type: str) -> Role | None:
    """Fixed routing table.

    Controller messages of any type go to the display; the display only
    reports ``positionUpdate`` back to the controller. Everything else
    stays where it is.
    """
    if source is Role.CONTROLLER:
        return Role.DISPLAY
    if source is Role.DISPLAY and message_type == POSITION_UPDATE:
        return Role.CONTROLLER
    return None
