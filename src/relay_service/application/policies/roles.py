from __future__ import annotations

from collections.abc import Mapping

from relay_service.domain.value_objects.enums import Role

ROLE_PARAM = "type"


def resolve_role(params: Mapping[str, str]) -> Role:
    """Map the upgrade request's query parameters to a role.

    Anything other than an exact ``type=controller`` or ``type=display``
    resolves to ``Role.UNKNOWN``.
    """
    value = params.get(ROLE_PARAM)
    if value in (Role.CONTROLLER, Role.DISPLAY):
        return Role(value)
    return Role.UNKNOWN
