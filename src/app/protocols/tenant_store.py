"""Protocolo de persistência de tenants (tokens OAuth)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from app.domain.tenant import Tenant


class TenantStoreProtocol(ABC):
    """Contrato assíncrono do store de tenants."""

    @abstractmethod
    async def get(self, tenant_key: str) -> Tenant | None: ...

    @abstractmethod
    async def save(self, tenant: Tenant) -> None: ...

    @abstractmethod
    async def update_tokens(
        self,
        tenant_key: str,
        access_token: str,
        refresh_token: str,
        expires_at: datetime,
    ) -> Tenant | None: ...
