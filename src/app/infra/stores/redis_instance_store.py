"""Redis Instance Store: instâncias e índices secundários.

Layout de chaves (prefixo configurável):
    {prefix}:instance:{name}            JSON da instância
    {prefix}:instance:id:{id}           name
    {prefix}:instance:ext:{external_id} name
    {prefix}:tenant:{key}:instances     sorted set de names (score = id)
    {prefix}:instance:seq               contador de ids

Atualizações são read-modify-write por chave, last-write-wins.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from app.domain.instance import Instance
from app.infra.stores.serialization import decode_instance, encode_instance
from app.protocols.instance_store import InstanceStoreProtocol
from utils.errors import RedisConnectionError

if TYPE_CHECKING:
    from redis.asyncio import Redis as AsyncRedis

    from fsm import InstanceState

logger = logging.getLogger(__name__)


def _as_str(value: str | bytes | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class RedisInstanceStore(InstanceStoreProtocol):
    """Store de instâncias usando redis.asyncio.

    Args:
        redis_client: Cliente Redis assíncrono
        key_prefix: Namespace das chaves
    """

    def __init__(self, redis_client: AsyncRedis[bytes], key_prefix: str = "wlink") -> None:
        self._redis = redis_client
        self._prefix = key_prefix

    def _key(self, name: str) -> str:
        return f"{self._prefix}:instance:{name}"

    def _id_key(self, instance_id: int) -> str:
        return f"{self._prefix}:instance:id:{instance_id}"

    def _ext_key(self, external_id: str) -> str:
        return f"{self._prefix}:instance:ext:{external_id}"

    def _tenant_key(self, tenant_key: str) -> str:
        return f"{self._prefix}:tenant:{tenant_key}:instances"

    def _seq_key(self) -> str:
        return f"{self._prefix}:instance:seq"

    async def get(self, name: str) -> Instance | None:
        try:
            raw = await self._redis.get(self._key(name))
        except Exception as exc:
            raise RedisConnectionError("Falha ao ler instância no Redis") from exc
        if raw is None:
            return None
        return decode_instance(raw)

    async def _get_by_pointer(self, pointer_key: str) -> Instance | None:
        try:
            name = _as_str(await self._redis.get(pointer_key))
        except Exception as exc:
            raise RedisConnectionError("Falha ao ler índice de instância no Redis") from exc
        if not name:
            return None
        return await self.get(name)

    async def get_by_id(self, instance_id: int) -> Instance | None:
        return await self._get_by_pointer(self._id_key(instance_id))

    async def get_by_external_id(self, external_id: str) -> Instance | None:
        return await self._get_by_pointer(self._ext_key(external_id))

    async def create(
        self,
        *,
        name: str,
        tenant_key: str,
        credential_token: str,
        state: InstanceState,
        custom_name: str | None = None,
        external_id: str | None = None,
        settings: dict[str, Any] | None = None,
    ) -> Instance:
        try:
            instance_id = int(await self._redis.incr(self._seq_key()))
        except Exception as exc:
            raise RedisConnectionError("Falha ao gerar id de instância no Redis") from exc

        instance = Instance(
            id=instance_id,
            name=name,
            tenant_key=tenant_key,
            credential_token=credential_token,
            state=state,
            custom_name=custom_name,
            external_id=external_id,
            settings=dict(settings or {}),
        )
        try:
            created = await self._redis.set(self._key(name), encode_instance(instance), nx=True)
            if not created:
                msg = f"Instância já existe: {name}"
                raise ValueError(msg)
            pipe = self._redis.pipeline()
            pipe.set(self._id_key(instance_id), name)
            if external_id:
                pipe.set(self._ext_key(external_id), name)
            pipe.zadd(self._tenant_key(tenant_key), {name: instance_id})
            await pipe.execute()
        except ValueError:
            raise
        except Exception as exc:
            raise RedisConnectionError("Falha ao gravar instância no Redis") from exc

        logger.debug("instance_saved", extra={"instance": name, "instance_id": instance_id})
        return instance

    async def _update(self, name: str, **changes: Any) -> Instance | None:
        current = await self.get(name)
        if current is None:
            return None
        updated = current.model_copy(update={**changes, "updated_at": datetime.now(UTC)})
        try:
            await self._redis.set(self._key(name), encode_instance(updated))
        except Exception as exc:
            raise RedisConnectionError("Falha ao atualizar instância no Redis") from exc
        return updated

    async def update_state(self, name: str, state: InstanceState) -> Instance | None:
        return await self._update(name, state=state)

    async def update_settings(self, name: str, settings: dict[str, Any]) -> Instance | None:
        return await self._update(name, settings=dict(settings))

    async def update_custom_name(self, name: str, custom_name: str) -> Instance | None:
        return await self._update(name, custom_name=custom_name)

    async def delete(self, name: str) -> bool:
        current = await self.get(name)
        if current is None:
            return False
        try:
            pipe = self._redis.pipeline()
            pipe.delete(self._key(name))
            pipe.delete(self._id_key(current.id))
            if current.external_id:
                pipe.delete(self._ext_key(current.external_id))
            pipe.zrem(self._tenant_key(current.tenant_key), name)
            await pipe.execute()
        except Exception as exc:
            raise RedisConnectionError("Falha ao remover instância no Redis") from exc
        return True

    async def list_by_tenant(self, tenant_key: str) -> list[Instance]:
        try:
            names = await self._redis.zrange(self._tenant_key(tenant_key), 0, -1)
            if not names:
                return []
            raws = await self._redis.mget([self._key(_as_str(n) or "") for n in names])
        except Exception as exc:
            raise RedisConnectionError("Falha ao listar instâncias no Redis") from exc
        return [decode_instance(raw) for raw in raws if raw is not None]
