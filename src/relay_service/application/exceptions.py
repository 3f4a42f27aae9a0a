from __future__ import annotations

from relay_service.domain.value_objects.enums import Role

POLICY_VIOLATION = 1008
INTERNAL_ERROR = 1011


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class ConflictError(AppError):
    pass


class ValidationError(AppError):
    pass


class AdmissionConflictError(ConflictError):
    """The requested role's slot is already held by another endpoint."""

    code = "ALREADY_CONNECTED"

    def __init__(self, role: Role) -> None:
        self.role = role
        super().__init__(
            f"A {role} device is already connected; disconnect it before retrying",
        )

    @property
    def close_reason(self) -> str:
        return f"{self.role.capitalize()} already connected"


class UnknownRoleError(ValidationError):
    code = "UNKNOWN_ROLE"
    close_reason = "Unknown client type"

    def __init__(self) -> None:
        super().__init__("Connect with ?type=controller or ?type=display")


class MalformedMessageError(ValidationError):
    pass
