"""Redis Tenant Store: tokens OAuth por tenant."""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.infra.stores.serialization import decode_tenant, encode_tenant
from app.protocols.tenant_store import TenantStoreProtocol
from utils.errors import RedisConnectionError

if TYPE_CHECKING:
    from datetime import datetime

    from redis.asyncio import Redis as AsyncRedis

    from app.domain.tenant import Tenant


class RedisTenantStore(TenantStoreProtocol):
    """Store de tenants usando redis.asyncio (uma chave JSON por tenant)."""

    def __init__(self, redis_client: AsyncRedis[bytes], key_prefix: str = "wlink") -> None:
        self._redis = redis_client
        self._prefix = key_prefix

    def _key(self, tenant_key: str) -> str:
        return f"{self._prefix}:tenant:{tenant_key}"

    async def get(self, tenant_key: str) -> Tenant | None:
        try:
            raw = await self._redis.get(self._key(tenant_key))
        except Exception as exc:
            raise RedisConnectionError("Falha ao ler tenant no Redis") from exc
        if raw is None:
            return None
        return decode_tenant(raw)

    async def save(self, tenant: Tenant) -> None:
        try:
            await self._redis.set(self._key(tenant.tenant_key), encode_tenant(tenant))
        except Exception as exc:
            raise RedisConnectionError("Falha ao gravar tenant no Redis") from exc

    async def update_tokens(
        self,
        tenant_key: str,
        access_token: str,
        refresh_token: str,
        expires_at: datetime,
    ) -> Tenant | None:
        current = await self.get(tenant_key)
        if current is None:
            return None
        updated = current.model_copy(
            update={
                "access_token": access_token,
                "refresh_token": refresh_token,
                "token_expires_at": expires_at,
            }
        )
        await self.save(updated)
        return updated
