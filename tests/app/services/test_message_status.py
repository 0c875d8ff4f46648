"""Testes do reporte de status de mensagens na Platform."""

from __future__ import annotations

from app.services.message_status import MessageStatusReporter
from tests.fakes.defaults import TENANT_KEY
from tests.fakes.fake_platform import FakePlatform
from utils.errors import HttpError

PROVIDER_ID = "provider-abc"


async def test_without_provider_nothing_is_sent(platform: FakePlatform) -> None:
    result = await MessageStatusReporter(platform, "").report(TENANT_KEY, "m1", "delivered")

    assert result.skipped is True
    assert result.error == "provider_not_configured"
    assert platform.calls == []


async def test_put_by_message_id(platform: FakePlatform) -> None:
    result = await MessageStatusReporter(platform, PROVIDER_ID).report(
        TENANT_KEY, "m1", "delivered"
    )

    assert result.ok is True
    assert result.value == "put"
    message_id, body = platform.statuses[0]
    assert message_id == "m1"
    assert body["status"] == "delivered"
    assert body["conversationProviderId"] == PROVIDER_ID
    assert platform.calls_to("post_message_status") == []


async def test_failed_status_carries_error_message(platform: FakePlatform) -> None:
    await MessageStatusReporter(platform, PROVIDER_ID).report(
        TENANT_KEY, "m1", "failed", {"error": {"message": "boom"}}
    )

    _, body = platform.statuses[0]
    assert body["status"] == "failed"
    assert body["error"] == {"message": "boom"}


async def test_provider_rejection_is_skipped_without_fallback(platform: FakePlatform) -> None:
    platform.failures["put_message_status"] = HttpError(
        "forbidden",
        status_code=403,
        body={"message": "No conversation provider found for this location"},
    )

    result = await MessageStatusReporter(platform, PROVIDER_ID).report(
        TENANT_KEY, "m1", "delivered"
    )

    assert result.skipped is True
    assert result.error == "provider_rejected"
    assert platform.calls_to("post_message_status") == []


async def test_put_failure_falls_back_to_post(platform: FakePlatform) -> None:
    platform.failures["put_message_status"] = HttpError("not found", status_code=404)

    result = await MessageStatusReporter(platform, PROVIDER_ID).report(
        TENANT_KEY, "m1", "delivered"
    )

    assert result.ok is True
    assert result.value == "post"
    posted = platform.calls_to("post_message_status")[0]["body"]
    assert posted["messageId"] == "m1"
    assert posted["status"] == "delivered"


async def test_every_strategy_failing_is_reported_not_raised(platform: FakePlatform) -> None:
    platform.failures["put_message_status"] = HttpError("down", status_code=500)
    platform.failures["post_message_status"] = HttpError("down", status_code=500)

    result = await MessageStatusReporter(platform, PROVIDER_ID).report(
        TENANT_KEY, "m1", "delivered"
    )

    assert result.ok is False
