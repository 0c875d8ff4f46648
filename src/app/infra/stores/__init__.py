"""Stores: implementações concretas de persistência.

Módulos disponíveis:
    - memory_stores: instâncias/tenants em memória (dev/test)
    - redis_instance_store: instâncias no Redis
    - redis_tenant_store: tenants no Redis
    - serialization: codec JSON explícito dos registros
"""

from __future__ import annotations

from app.infra.stores.memory_stores import MemoryInstanceStore, MemoryTenantStore
from app.infra.stores.redis_instance_store import RedisInstanceStore
from app.infra.stores.redis_tenant_store import RedisTenantStore

__all__ = [
    "MemoryInstanceStore",
    "MemoryTenantStore",
    "RedisInstanceStore",
    "RedisTenantStore",
]
