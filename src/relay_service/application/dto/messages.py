"""Relay wire frames."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, StrictStr
from pydantic import ValidationError as SchemaError

from relay_service.application.exceptions import MalformedMessageError
from relay_service.domain.value_objects.enums import Role, SlotState

ONE_TO_ONE = "one-to-one"


class Frame(BaseModel):
    def to_frame(self) -> str:
        return self.model_dump_json()


class InboundMessage(Frame):
    """Client → Server. Only ``type`` is checked; other fields pass through."""

    model_config = ConfigDict(extra="allow")

    type: StrictStr


class RelayedMessage(InboundMessage):
    """An inbound message as delivered to the opposite role."""

    forwarded: Literal[True] = True
    timestamp: int

    @classmethod
    def from_inbound(cls, message: InboundMessage, timestamp: int) -> RelayedMessage:
        return cls.model_validate(
            {**message.model_dump(), "forwarded": True, "timestamp": timestamp},
        )


class WelcomeNotification(Frame):
    type: Literal["welcome"] = "welcome"
    message: str
    role: Role
    timestamp: int
    mode: str = ONE_TO_ONE


class StatusNotification(Frame):
    type: Literal["connectionStatus"] = "connectionStatus"
    controller: SlotState
    display: SlotState
    timestamp: int
    mode: str = ONE_TO_ONE


class ErrorNotification(Frame):
    type: Literal["error"] = "error"
    message: str
    code: str | None = None
    timestamp: int | None = None

    def to_frame(self) -> str:
        return self.model_dump_json(exclude_none=True)


def parse_inbound(raw: str | bytes) -> InboundMessage:
    """Parse one client frame, raising MalformedMessageError on bad input."""
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedMessageError("frame is not valid UTF-8") from exc
    try:
        return InboundMessage.model_validate_json(raw)
    except SchemaError as exc:
        raise MalformedMessageError(exc.errors()[0]["msg"]) from exc
