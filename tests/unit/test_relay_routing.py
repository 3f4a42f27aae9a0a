from __future__ import annotations

import pytest

from relay_service.application.dto.messages import parse_inbound
from relay_service.domain.value_objects.enums import Role, RouteResult
from relay_service.services.relay import Relay
from tests.conftest import NOW_MS, FakeEndpoint, settle


@pytest.mark.asyncio
async def test_controller_message_reaches_display(relay):
    controller_ep, display_ep = FakeEndpoint(), FakeEndpoint()
    controller = await relay.admit(controller_ep, Role.CONTROLLER)
    display = await relay.admit(display_ep, Role.DISPLAY)
    await settle(controller, display)
    display_ep.sent.clear()

    result = await relay.route(controller, parse_inbound('{"type": "cue", "text": "go"}'))
    await settle(display)

    assert result is RouteResult.FORWARDED
    assert display_ep.frames() == [
        {"type": "cue", "text": "go", "forwarded": True, "timestamp": NOW_MS},
    ]


@pytest.mark.asyncio
async def test_display_only_forwards_position_updates(relay):
    controller_ep, display_ep = FakeEndpoint(), FakeEndpoint()
    controller = await relay.admit(controller_ep, Role.CONTROLLER)
    display = await relay.admit(display_ep, Role.DISPLAY)
    await settle(controller, display)
    controller_ep.sent.clear()

    ignored = await relay.route(display, parse_inbound('{"type": "cue"}'))
    forwarded = await relay.route(display, parse_inbound('{"type": "positionUpdate", "pos": 42}'))
    await settle(controller)

    assert ignored is RouteResult.NOT_ROUTED
    assert forwarded is RouteResult.FORWARDED
    assert controller_ep.frames() == [
        {"type": "positionUpdate", "pos": 42, "forwarded": True, "timestamp": NOW_MS},
    ]


@pytest.mark.asyncio
async def test_relay_fields_override_client_fields(relay):
    display_ep = FakeEndpoint()
    controller = await relay.admit(FakeEndpoint(), Role.CONTROLLER)
    display = await relay.admit(display_ep, Role.DISPLAY)
    await settle(display)
    display_ep.sent.clear()

    message = parse_inbound('{"type": "speed", "forwarded": false, "timestamp": 1, "value": null}')
    await relay.route(controller, message)
    await settle(display)

    assert display_ep.frames() == [
        {"type": "speed", "forwarded": True, "timestamp": NOW_MS, "value": None},
    ]
    assert message.model_dump()["timestamp"] == 1


@pytest.mark.asyncio
async def test_controller_told_when_display_missing(relay):
    controller_ep = FakeEndpoint()
    controller = await relay.admit(controller_ep, Role.CONTROLLER)
    await settle(controller)
    controller_ep.sent.clear()

    result = await relay.route(controller, parse_inbound('{"type": "play"}'))
    await settle(controller)

    assert result is RouteResult.UNAVAILABLE
    assert controller_ep.frames() == [
        {"type": "error", "message": "Display is not connected", "timestamp": NOW_MS},
    ]


@pytest.mark.asyncio
async def test_display_not_told_when_controller_missing(relay):
    display_ep = FakeEndpoint()
    display = await relay.admit(display_ep, Role.DISPLAY)
    await settle(display)
    display_ep.sent.clear()

    result = await relay.route(display, parse_inbound('{"type": "positionUpdate", "pos": 1}'))
    await settle(display)

    assert result is RouteResult.UNAVAILABLE
    assert display_ep.sent == []


@pytest.mark.asyncio
async def test_display_told_when_configured(clock):
    relay = Relay(clock, notify_display_route_failure=True)
    display_ep = FakeEndpoint()
    display = await relay.admit(display_ep, Role.DISPLAY)
    await settle(display)
    display_ep.sent.clear()

    await relay.route(display, parse_inbound('{"type": "positionUpdate"}'))
    await settle(display)

    assert display_ep.frames("error")[0]["message"] == "Controller is not connected"
    await relay.shutdown()


@pytest.mark.asyncio
async def test_bound_but_closed_target_counts_as_missing(relay):
    controller_ep, display_ep = FakeEndpoint(), FakeEndpoint()
    controller = await relay.admit(controller_ep, Role.CONTROLLER)
    await relay.admit(display_ep, Role.DISPLAY)
    await settle(controller)
    controller_ep.sent.clear()
    display_ep.open = False

    result = await relay.route(controller, parse_inbound('{"type": "cue"}'))
    await settle(controller)

    assert result is RouteResult.UNAVAILABLE
    assert controller_ep.frames("error")


@pytest.mark.asyncio
async def test_unknown_role_messages_are_not_routed(relay):
    display_ep = FakeEndpoint()
    display = await relay.admit(display_ep, Role.DISPLAY)
    observer = await relay.admit(FakeEndpoint(), Role.UNKNOWN)
    await settle(display)
    display_ep.sent.clear()

    result = await relay.route(observer, parse_inbound('{"type": "cue"}'))
    await settle(display)

    assert result is RouteResult.NOT_ROUTED
    assert display_ep.sent == []
