"""Protocolo de persistência de instâncias."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.domain.instance import Instance
    from fsm import InstanceState


class InstanceStoreProtocol(ABC):
    """Contrato assíncrono do store de instâncias.

    Atualizações são por chave (Instance.name) e last-write-wins.
    Métodos de update retornam a instância atualizada ou None se ausente.
    """

    @abstractmethod
    async def get(self, name: str) -> Instance | None: ...

    @abstractmethod
    async def get_by_id(self, instance_id: int) -> Instance | None: ...

    @abstractmethod
    async def get_by_external_id(self, external_id: str) -> Instance | None: ...

    @abstractmethod
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
    ) -> Instance: ...

    @abstractmethod
    async def update_state(self, name: str, state: InstanceState) -> Instance | None: ...

    @abstractmethod
    async def update_settings(
        self, name: str, settings: dict[str, Any]
    ) -> Instance | None: ...

    @abstractmethod
    async def update_custom_name(self, name: str, custom_name: str) -> Instance | None: ...

    @abstractmethod
    async def delete(self, name: str) -> bool: ...

    @abstractmethod
    async def list_by_tenant(self, tenant_key: str) -> list[Instance]: ...
