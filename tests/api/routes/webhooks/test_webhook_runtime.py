"""Testes do runtime de processamento dos webhooks."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from api.routes.webhooks import runtime, runtime_tasks
from utils.errors import IntegrationError, RedisConnectionError


@pytest.fixture(autouse=True)
async def _drain_tasks() -> None:
    yield
    await runtime.drain_background_tasks(timeout_seconds=0.5)


async def test_domain_errors_end_the_event_quietly(caplog: pytest.LogCaptureFixture) -> None:
    async def _fail() -> None:
        raise IntegrationError("platform down")

    with caplog.at_level("WARNING"):
        await runtime.run_processing_safe(channel="evolution", correlation_id="c1", call=_fail)

    assert "webhook_processing_aborted" in caplog.text


async def test_infrastructure_errors_propagate() -> None:
    async def _fail() -> None:
        raise RedisConnectionError("redis down")

    with pytest.raises(RedisConnectionError):
        await runtime.run_processing_safe(channel="evolution", correlation_id="c1", call=_fail)


async def test_unexpected_errors_propagate() -> None:
    async def _fail() -> None:
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        await runtime.run_processing_safe(channel="ghl", correlation_id="c1", call=_fail)


async def test_inline_mode_runs_before_returning() -> None:
    done: list[str] = []

    async def _work() -> None:
        done.append("ok")

    await runtime.dispatch_processing(
        channel="ghl", correlation_id="c1", mode="inline", call=_work
    )

    assert done == ["ok"]
    assert runtime_tasks.active_task_count() == 0


async def test_inline_mode_swallows_unexpected_errors(caplog: pytest.LogCaptureFixture) -> None:
    async def _fail() -> None:
        raise RuntimeError("boom")

    with caplog.at_level("ERROR"):
        await runtime.dispatch_processing(
            channel="ghl", correlation_id="c1", mode="INLINE", call=_fail
        )

    assert "webhook_inline_processing_failed" in caplog.text


async def test_async_mode_schedules_background_task() -> None:
    gate = asyncio.Event()
    done: list[str] = []

    async def _work() -> None:
        await gate.wait()
        done.append("ok")

    await runtime.dispatch_processing(
        channel="evolution", correlation_id="c1", mode="async", call=_work
    )

    assert done == []
    assert runtime_tasks.active_task_count() == 1
    gate.set()
    await runtime.drain_background_tasks(timeout_seconds=1.0)
    assert done == ["ok"]


async def test_gateway_dispatch_uses_bootstrap_singletons(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    import app.bootstrap as bootstrap

    captured: dict[str, Any] = {}
    lifecycle, inbound = object(), object()
    monkeypatch.setattr(bootstrap, "get_lifecycle_service", lambda: lifecycle)
    monkeypatch.setattr(bootstrap, "get_inbound_relay", lambda: inbound)

    async def _fake_process(event: Any, correlation_id: str, **kwargs: Any) -> str:
        captured.update(event=event, correlation_id=correlation_id, **kwargs)
        return "ignored"

    monkeypatch.setattr(runtime, "process_gateway_event", _fake_process)

    await runtime.dispatch_gateway_event("evt", "c9", "inline")

    assert captured == {
        "event": "evt",
        "correlation_id": "c9",
        "lifecycle": lifecycle,
        "inbound_relay": inbound,
    }


async def test_platform_dispatch_uses_outbound_relay(monkeypatch: pytest.MonkeyPatch) -> None:
    import app.bootstrap as bootstrap

    captured: list[tuple[Any, ...]] = []
    relay = object()
    monkeypatch.setattr(bootstrap, "get_outbound_relay", lambda: relay)

    async def _fake_process(event: Any, correlation_id: str, use_case: Any) -> None:
        captured.append((event, correlation_id, use_case))

    monkeypatch.setattr(runtime, "process_platform_event", _fake_process)

    await runtime.dispatch_platform_event("evt", "c9", "inline")

    assert captured == [("evt", "c9", relay)]
