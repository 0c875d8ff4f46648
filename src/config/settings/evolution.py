"""Settings do Gateway WhatsApp (Evolution API)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class EvolutionSettings:
    """Configurações do Gateway.

    Attributes:
        api_url: URL base da Evolution API (sem barra final)
        request_timeout_seconds: Timeout por requisição HTTP
        max_retries: Tentativas extras para erros transitórios (5xx/429/rede)
        send_delay_ms: Delay de "digitando" enviado com cada mensagem
        webhook_processing_mode: async (ack + task) ou inline
    """

    api_url: str = ""
    request_timeout_seconds: float = 30.0
    max_retries: int = 2
    send_delay_ms: int = 1200
    webhook_processing_mode: str = "async"

    def validate(self) -> list[str]:
        """Valida configurações mínimas do Gateway.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if not self.api_url:
            errors.append("EVOLUTION_API_URL não configurado")

        if self.request_timeout_seconds <= 0:
            errors.append("EVOLUTION_REQUEST_TIMEOUT_SECONDS deve ser > 0")

        if self.max_retries < 0:
            errors.append("EVOLUTION_MAX_RETRIES deve ser >= 0")

        if self.webhook_processing_mode not in ("async", "inline"):
            errors.append("WEBHOOK_PROCESSING_MODE deve ser 'async' ou 'inline'")

        return errors


def _load_from_env() -> EvolutionSettings:
    return EvolutionSettings(
        api_url=os.getenv("EVOLUTION_API_URL", "").strip().rstrip("/"),
        request_timeout_seconds=float(
            os.getenv("EVOLUTION_REQUEST_TIMEOUT_SECONDS", "30")
        ),
        max_retries=int(os.getenv("EVOLUTION_MAX_RETRIES", "2")),
        send_delay_ms=int(os.getenv("EVOLUTION_SEND_DELAY_MS", "1200")),
        webhook_processing_mode=os.getenv("WEBHOOK_PROCESSING_MODE", "async").lower(),
    )


@lru_cache(maxsize=1)
def get_evolution_settings() -> EvolutionSettings:
    """Retorna instância cacheada de EvolutionSettings."""
    return _load_from_env()
