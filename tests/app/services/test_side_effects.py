"""Testes de efeitos best-effort."""

from __future__ import annotations

import logging

import pytest

from app.services.side_effects import SideEffectResult, best_effort

logger = logging.getLogger("tests.side_effects")


async def test_best_effort_returns_value_on_success() -> None:
    async def _call() -> str:
        return "done"

    result = await best_effort("sync", _call, logger=logger)

    assert result == SideEffectResult(name="sync", ok=True, value="done")


async def test_best_effort_captures_failure_and_logs(caplog: pytest.LogCaptureFixture) -> None:
    async def _call() -> str:
        raise ConnectionError("offline")

    with caplog.at_level("WARNING"):
        result = await best_effort("sync", _call, logger=logger, instance="bot1")

    assert result.ok is False
    assert result.error == "ConnectionError"
    record = next(r for r in caplog.records if r.getMessage() == "side_effect_failed")
    assert record.side_effect == "sync"
    assert record.instance == "bot1"


def test_skip_is_ok_and_flagged() -> None:
    result = SideEffectResult.skip("status", "provider_not_configured")

    assert result.ok is True
    assert result.skipped is True
    assert result.error == "provider_not_configured"
