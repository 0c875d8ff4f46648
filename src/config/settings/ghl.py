"""Settings da Platform (GoHighLevel / LeadConnector)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

GHL_API_BASE_URL: str = "https://services.leadconnectorhq.com"
GHL_API_VERSION: str = "2021-07-28"


@dataclass(frozen=True)
class GhlSettings:
    """Configurações da Platform.

    Attributes:
        client_id: OAuth client id (refresh de token)
        client_secret: OAuth client secret
        conversation_provider_id: Provider registrado na Platform; vazio
            desliga a atualização de status de mensagens
        shared_secret: Segredo do header x-ghl-context (custom page)
        api_base_url: URL base da API
        api_version: Valor do header Version
        request_timeout_seconds: Timeout por requisição HTTP
        token_refresh_window_seconds: Antecedência do refresh antes do expiry
    """

    client_id: str = ""
    client_secret: str = ""
    conversation_provider_id: str = ""
    shared_secret: str = ""
    api_base_url: str = GHL_API_BASE_URL
    api_version: str = GHL_API_VERSION
    request_timeout_seconds: float = 30.0
    token_refresh_window_seconds: int = 300

    @property
    def provider_configured(self) -> bool:
        return bool(self.conversation_provider_id)

    def validate(self) -> list[str]:
        errors: list[str] = []

        if not self.client_id:
            errors.append("GHL_CLIENT_ID não configurado")

        if not self.client_secret:
            errors.append("GHL_CLIENT_SECRET não configurado")

        if not self.shared_secret:
            errors.append("GHL_SHARED_SECRET não configurado")

        if self.request_timeout_seconds <= 0:
            errors.append("GHL_REQUEST_TIMEOUT_SECONDS deve ser > 0")

        if self.token_refresh_window_seconds < 0:
            errors.append("GHL_TOKEN_REFRESH_WINDOW_SECONDS deve ser >= 0")

        return errors


def _load_from_env() -> GhlSettings:
    return GhlSettings(
        client_id=os.getenv("GHL_CLIENT_ID", ""),
        client_secret=os.getenv("GHL_CLIENT_SECRET", ""),
        conversation_provider_id=os.getenv("GHL_CONVERSATION_PROVIDER_ID", ""),
        shared_secret=os.getenv("GHL_SHARED_SECRET", ""),
        api_base_url=os.getenv("GHL_API_BASE_URL", GHL_API_BASE_URL).rstrip("/"),
        api_version=os.getenv("GHL_API_VERSION", GHL_API_VERSION),
        request_timeout_seconds=float(os.getenv("GHL_REQUEST_TIMEOUT_SECONDS", "30")),
        token_refresh_window_seconds=int(
            os.getenv("GHL_TOKEN_REFRESH_WINDOW_SECONDS", "300")
        ),
    )


@lru_cache(maxsize=1)
def get_ghl_settings() -> GhlSettings:
    """Retorna instância cacheada de GhlSettings."""
    return _load_from_env()
