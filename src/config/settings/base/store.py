"""Settings de persistência (instâncias e tenants)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

StoreBackend = Literal["memory", "redis"]


@dataclass(frozen=True)
class StoreSettings:
    """Configurações do store de instâncias/tenants.

    Attributes:
        backend: memory (dev/test) ou redis (staging/production)
        key_prefix: Namespace das chaves no Redis
        redis_url: URL do Redis (obrigatória quando backend=redis)
    """

    backend: StoreBackend = "memory"
    key_prefix: str = "wlink"
    redis_url: str = ""

    def validate(self) -> list[str]:
        errors: list[str] = []
        if self.backend not in ("memory", "redis"):
            errors.append(f"STORE_BACKEND inválido: {self.backend}")
        if self.backend == "redis" and not self.redis_url:
            errors.append("REDIS_URL obrigatório quando STORE_BACKEND=redis")
        if not self.key_prefix:
            errors.append("STORE_KEY_PREFIX não pode ser vazio")
        return errors


def _default_backend_for_env(environment: str) -> str:
    return "redis" if environment in ("staging", "production") else "memory"


def _load_store_from_env() -> StoreSettings:
    environment = os.getenv("ENVIRONMENT", "development").lower()
    backend = os.getenv("STORE_BACKEND", _default_backend_for_env(environment)).lower()
    return StoreSettings(
        backend=backend,  # type: ignore[arg-type]
        key_prefix=os.getenv("STORE_KEY_PREFIX", "wlink"),
        redis_url=os.getenv("REDIS_URL", ""),
    )


@lru_cache(maxsize=1)
def get_store_settings() -> StoreSettings:
    """Retorna instância cacheada de StoreSettings."""
    return _load_store_from_env()
