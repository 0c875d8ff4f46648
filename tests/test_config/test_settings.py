"""Testes de carga e validação das settings."""

from __future__ import annotations

import pytest

import app.bootstrap as bootstrap
from config.settings import (
    BaseSettings,
    EvolutionSettings,
    GhlSettings,
    StoreSettings,
    get_base_settings,
    get_evolution_settings,
    get_ghl_settings,
    get_store_settings,
)
from config.settings.base.store import _load_store_from_env
from config.settings.evolution import _load_from_env as load_evolution
from config.settings.ghl import _load_from_env as load_ghl


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> None:
    for getter in (
        get_base_settings,
        get_store_settings,
        get_evolution_settings,
        get_ghl_settings,
    ):
        getter.cache_clear()
    yield
    for getter in (
        get_base_settings,
        get_store_settings,
        get_evolution_settings,
        get_ghl_settings,
    ):
        getter.cache_clear()


class TestBaseSettings:
    def test_webhook_url_derived_from_app_url(self) -> None:
        settings = BaseSettings(app_url="https://bridge.example.com/")

        assert settings.evolution_webhook_url == "https://bridge.example.com/webhooks/evolution"

    def test_without_app_url_there_is_no_webhook_url(self) -> None:
        assert BaseSettings().evolution_webhook_url == ""

    def test_app_url_must_be_http(self) -> None:
        assert BaseSettings(app_url="bridge.example.com").validate() == [
            "APP_URL deve começar com http:// ou https://"
        ]


class TestEvolutionSettings:
    def test_env_loading(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EVOLUTION_API_URL", " https://evo.example.com/ ")
        monkeypatch.setenv("WEBHOOK_PROCESSING_MODE", "INLINE")
        monkeypatch.setenv("EVOLUTION_MAX_RETRIES", "4")

        settings = load_evolution()

        assert settings.api_url == "https://evo.example.com"
        assert settings.webhook_processing_mode == "inline"
        assert settings.max_retries == 4
        assert settings.validate() == []

    def test_validation_errors(self) -> None:
        errors = EvolutionSettings(
            request_timeout_seconds=0, max_retries=-1, webhook_processing_mode="queue"
        ).validate()

        assert len(errors) == 4


class TestGhlSettings:
    def test_env_loading(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GHL_CLIENT_ID", "cid")
        monkeypatch.setenv("GHL_CLIENT_SECRET", "csecret")
        monkeypatch.setenv("GHL_SHARED_SECRET", "shared")
        monkeypatch.setenv("GHL_CONVERSATION_PROVIDER_ID", "prov")

        settings = load_ghl()

        assert settings.provider_configured is True
        assert settings.api_base_url == "https://services.leadconnectorhq.com"
        assert settings.validate() == []

    def test_missing_credentials(self) -> None:
        errors = GhlSettings().validate()

        assert "GHL_CLIENT_ID não configurado" in errors
        assert "GHL_SHARED_SECRET não configurado" in errors


class TestStoreSettings:
    def test_production_defaults_to_redis(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.delenv("STORE_BACKEND", raising=False)

        assert _load_store_from_env().backend == "redis"

    def test_development_defaults_to_memory(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "development")
        monkeypatch.delenv("STORE_BACKEND", raising=False)

        assert _load_store_from_env().backend == "memory"

    def test_redis_requires_url(self) -> None:
        assert StoreSettings(backend="redis").validate() == [
            "REDIS_URL obrigatório quando STORE_BACKEND=redis"
        ]


class TestRuntimeValidation:
    def test_development_only_warns(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        monkeypatch.setenv("ENVIRONMENT", "development")
        for name in ("GHL_CLIENT_ID", "GHL_CLIENT_SECRET", "GHL_SHARED_SECRET", "EVOLUTION_API_URL"):
            monkeypatch.delenv(name, raising=False)

        with caplog.at_level("WARNING"):
            bootstrap.validate_runtime_settings()

        assert "settings_validation_failed" in caplog.text

    def test_production_fails_fast(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.delenv("EVOLUTION_API_URL", raising=False)

        with pytest.raises(RuntimeError, match="production"):
            bootstrap.validate_runtime_settings()
