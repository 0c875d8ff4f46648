"""Testes da resolução de tenant pelo header de contexto cifrado."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from api.routes.instances import context
from app.infra.crypto import encrypt_context
from tests.fakes.defaults import SHARED_SECRET, TENANT_KEY


def test_active_location_is_tenant() -> None:
    header = encrypt_context({"userId": "u1", "activeLocation": TENANT_KEY}, SHARED_SECRET)

    assert context.resolve_tenant_key(header, SHARED_SECRET) == TENANT_KEY


def test_location_id_is_fallback() -> None:
    header = encrypt_context({"locationId": TENANT_KEY}, SHARED_SECRET)

    assert context.resolve_tenant_key(header, SHARED_SECRET) == TENANT_KEY


@pytest.mark.parametrize(
    ("header", "detail"),
    [
        (None, "No GHL context provided"),
        ("", "No GHL context provided"),
        ("bm90LWNpcGhlcnRleHQ=", "Invalid GHL context"),
    ],
)
def test_missing_or_invalid_context_is_401(header: str | None, detail: str) -> None:
    with pytest.raises(HTTPException) as exc_info:
        context.resolve_tenant_key(header, SHARED_SECRET)

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == detail


def test_wrong_secret_is_401() -> None:
    header = encrypt_context({"activeLocation": TENANT_KEY}, SHARED_SECRET)

    with pytest.raises(HTTPException) as exc_info:
        context.resolve_tenant_key(header, "another-secret")

    assert exc_info.value.status_code == 401


def test_context_without_location_is_401() -> None:
    header = encrypt_context({"userId": "u1"}, SHARED_SECRET)

    with pytest.raises(HTTPException) as exc_info:
        context.resolve_tenant_key(header, SHARED_SECRET)

    assert exc_info.value.detail == "No active location ID in user context"


async def test_dependency_uses_configured_secret(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        context, "get_ghl_settings", lambda: SimpleNamespace(shared_secret=SHARED_SECRET)
    )
    header = encrypt_context({"activeLocation": TENANT_KEY}, SHARED_SECRET)

    assert await context.get_tenant_key(header) == TENANT_KEY
