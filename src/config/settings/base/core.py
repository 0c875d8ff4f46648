"""Settings base do wlink_bridge.

Configurações comuns a todos os módulos.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

Environment = Literal["development", "staging", "production"]


@dataclass(frozen=True)
class BaseSettings:
    """Configurações base do sistema.

    Attributes:
        environment: Ambiente de execução (development|staging|production)
        service_name: Nome do serviço para logs
        debug: Modo debug ativo
        app_url: URL pública do serviço (base do callback de webhook)
        redis_url: URL de conexão Redis
    """

    environment: Environment = "development"
    service_name: str = "wlink-bridge"
    debug: bool = False
    app_url: str = ""
    redis_url: str = ""

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def evolution_webhook_url(self) -> str:
        """URL de callback registrada no Gateway (vazia se APP_URL ausente)."""
        if not self.app_url:
            return ""
        return f"{self.app_url.rstrip('/')}/webhooks/evolution"

    def validate(self) -> list[str]:
        """Valida configurações base.

        Returns:
            Lista de erros (vazia = OK).
        """
        errors: list[str] = []

        if self.environment not in ("development", "staging", "production"):
            errors.append(f"ENVIRONMENT inválido: {self.environment}")

        if not self.service_name:
            errors.append("SERVICE_NAME não pode ser vazio")

        if self.app_url and not self.app_url.startswith(("http://", "https://")):
            errors.append("APP_URL deve começar com http:// ou https://")

        return errors


def _parse_environment(env_str: str) -> Environment:
    env_lower = env_str.lower()
    if env_lower in ("production", "prod"):
        return "production"
    if env_lower in ("staging", "stage"):
        return "staging"
    return "development"


def _load_base_from_env() -> BaseSettings:
    return BaseSettings(
        environment=_parse_environment(os.getenv("ENVIRONMENT", "development")),
        service_name=os.getenv("SERVICE_NAME", "wlink-bridge"),
        debug=os.getenv("DEBUG", "").lower() in ("true", "1", "yes"),
        app_url=os.getenv("APP_URL", "").strip(),
        redis_url=os.getenv("REDIS_URL", ""),
    )


@lru_cache(maxsize=1)
def get_base_settings() -> BaseSettings:
    """Retorna instância cacheada de BaseSettings."""
    return _load_base_from_env()
