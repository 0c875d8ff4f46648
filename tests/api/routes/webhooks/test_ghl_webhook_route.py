"""Testes do endpoint de webhook da Platform."""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any

import pytest

from api.routes.webhooks import ghl, runtime
from tests.fakes.defaults import TENANT_KEY
from tests.fakes.requests import build_request


@pytest.fixture
def dispatched(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, Any]]:
    captured: list[dict[str, Any]] = []

    async def _fake_dispatch(event: Any, correlation_id: str, mode: str) -> None:
        captured.append({"event": event, "correlation_id": correlation_id, "mode": mode})

    monkeypatch.setattr(runtime, "dispatch_platform_event", _fake_dispatch)
    monkeypatch.setattr(
        ghl, "get_evolution_settings", lambda: SimpleNamespace(webhook_processing_mode="inline")
    )
    return captured


async def test_agent_message_is_acked_and_dispatched(dispatched: list[dict[str, Any]]) -> None:
    body = json.dumps(
        {"locationId": TENANT_KEY, "contactId": "c-1", "message": "Hi", "messageId": "m-1"}
    ).encode("utf-8")

    response = await ghl.receive_ghl_webhook(build_request(body=body))

    assert response.status_code == 200
    assert response.body == b"Webhook received"
    event = dispatched[0]["event"]
    assert event.location_id == TENANT_KEY
    assert event.message == "Hi"
    assert dispatched[0]["mode"] == "inline"


async def test_location_header_completes_payload(dispatched: list[dict[str, Any]]) -> None:
    body = json.dumps({"contactId": "c-1", "message": "Hi"}).encode("utf-8")

    await ghl.receive_ghl_webhook(
        build_request(body=body, headers={"x-location-id": TENANT_KEY})
    )

    assert dispatched[0]["event"].location_id == TENANT_KEY


@pytest.mark.parametrize("body", [b"{broken", b"[1, 2]", b""])
async def test_unreadable_payload_is_acked_without_dispatch(
    dispatched: list[dict[str, Any]], body: bytes
) -> None:
    response = await ghl.receive_ghl_webhook(build_request(body=body))

    assert response.status_code == 200
    assert dispatched == []
