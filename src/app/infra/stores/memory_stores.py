"""Stores em memória: apenas para desenvolvimento e testes.

ATENÇÃO: Não usar em staging/production. Sem persistência entre reinícios.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from app.domain.instance import Instance
from app.domain.tenant import Tenant
from app.protocols.instance_store import InstanceStoreProtocol
from app.protocols.tenant_store import TenantStoreProtocol

if TYPE_CHECKING:
    from fsm import InstanceState


class MemoryInstanceStore(InstanceStoreProtocol):
    """Store de instâncias em memória, indexado por name."""

    def __init__(self) -> None:
        self._by_name: dict[str, Instance] = {}
        self._next_id = 1

    async def get(self, name: str) -> Instance | None:
        instance = self._by_name.get(name)
        return instance.model_copy(deep=True) if instance else None

    async def get_by_id(self, instance_id: int) -> Instance | None:
        for instance in self._by_name.values():
            if instance.id == instance_id:
                return instance.model_copy(deep=True)
        return None

    async def get_by_external_id(self, external_id: str) -> Instance | None:
        for instance in self._by_name.values():
            if instance.external_id and instance.external_id == external_id:
                return instance.model_copy(deep=True)
        return None

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
        if name in self._by_name:
            msg = f"Instância já existe: {name}"
            raise ValueError(msg)
        instance = Instance(
            id=self._next_id,
            name=name,
            tenant_key=tenant_key,
            credential_token=credential_token,
            state=state,
            custom_name=custom_name,
            external_id=external_id,
            settings=dict(settings or {}),
        )
        self._next_id += 1
        self._by_name[name] = instance
        return instance.model_copy(deep=True)

    def _update(self, name: str, **changes: Any) -> Instance | None:
        current = self._by_name.get(name)
        if current is None:
            return None
        updated = current.model_copy(update={**changes, "updated_at": datetime.now(UTC)})
        self._by_name[name] = updated
        return updated.model_copy(deep=True)

    async def update_state(self, name: str, state: InstanceState) -> Instance | None:
        return self._update(name, state=state)

    async def update_settings(self, name: str, settings: dict[str, Any]) -> Instance | None:
        return self._update(name, settings=dict(settings))

    async def update_custom_name(self, name: str, custom_name: str) -> Instance | None:
        return self._update(name, custom_name=custom_name)

    async def delete(self, name: str) -> bool:
        return self._by_name.pop(name, None) is not None

    async def list_by_tenant(self, tenant_key: str) -> list[Instance]:
        found = [i for i in self._by_name.values() if i.tenant_key == tenant_key]
        return [i.model_copy(deep=True) for i in sorted(found, key=lambda i: i.id)]


class MemoryTenantStore(TenantStoreProtocol):
    """Store de tenants em memória."""

    def __init__(self) -> None:
        self._store: dict[str, Tenant] = {}

    async def get(self, tenant_key: str) -> Tenant | None:
        tenant = self._store.get(tenant_key)
        return tenant.model_copy() if tenant else None

    async def save(self, tenant: Tenant) -> None:
        self._store[tenant.tenant_key] = tenant.model_copy()

    async def update_tokens(
        self,
        tenant_key: str,
        access_token: str,
        refresh_token: str,
        expires_at: datetime,
    ) -> Tenant | None:
        current = self._store.get(tenant_key)
        if current is None:
            return None
        updated = current.model_copy(
            update={
                "access_token": access_token,
                "refresh_token": refresh_token,
                "token_expires_at": expires_at,
            }
        )
        self._store[tenant_key] = updated
        return updated.model_copy()
