"""Factories de stores, clientes e use cases.

Este módulo centraliza a criação de implementações concretas a partir
das configurações de ambiente. Singletons ficam em app.bootstrap.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from api.connectors.evolution import create_evolution_client
from api.connectors.ghl import create_ghl_client
from app.bootstrap.clients import create_async_redis_client
from app.infra.stores import (
    MemoryInstanceStore,
    MemoryTenantStore,
    RedisInstanceStore,
    RedisTenantStore,
)
from app.services.agent_attribution import AgentAttributionService
from app.services.identity import IdentityResolver
from app.services.instance_lifecycle import InstanceLifecycleService
from app.services.message_status import MessageStatusReporter
from app.use_cases.inbound_relay import RelayInboundMessageUseCase
from app.use_cases.outbound_relay import RelayOutboundMessageUseCase
from config.settings import (
    get_base_settings,
    get_evolution_settings,
    get_ghl_settings,
    get_store_settings,
)

if TYPE_CHECKING:
    from app.protocols.gateway import GatewayClientProtocol
    from app.protocols.instance_store import InstanceStoreProtocol
    from app.protocols.platform import PlatformClientProtocol
    from app.protocols.tenant_store import TenantStoreProtocol

logger = logging.getLogger(__name__)


def _warn_memory_backend(store: str) -> None:
    environment = os.getenv("ENVIRONMENT", "development").lower()
    if environment not in ("development", "test"):
        logger.warning(
            "memory_store_in_non_dev",
            extra={"store": store, "backend": "memory", "environment": environment},
        )


# ──────────────────────────────────────────────────────────────────────────────
# Stores
# ──────────────────────────────────────────────────────────────────────────────


def create_instance_store() -> InstanceStoreProtocol:
    """Cria store de instâncias conforme STORE_BACKEND."""
    settings = get_store_settings()
    if settings.backend == "redis":
        store: InstanceStoreProtocol = RedisInstanceStore(
            create_async_redis_client(), key_prefix=settings.key_prefix
        )
    elif settings.backend == "memory":
        _warn_memory_backend("instance")
        store = MemoryInstanceStore()
    else:
        msg = f"STORE_BACKEND inválido: {settings.backend}"
        raise ValueError(msg)
    logger.info("instance_store_created", extra={"backend": settings.backend})
    return store


def create_tenant_store() -> TenantStoreProtocol:
    """Cria store de tenants conforme STORE_BACKEND."""
    settings = get_store_settings()
    if settings.backend == "redis":
        store: TenantStoreProtocol = RedisTenantStore(
            create_async_redis_client(), key_prefix=settings.key_prefix
        )
    elif settings.backend == "memory":
        _warn_memory_backend("tenant")
        store = MemoryTenantStore()
    else:
        msg = f"STORE_BACKEND inválido: {settings.backend}"
        raise ValueError(msg)
    logger.info("tenant_store_created", extra={"backend": settings.backend})
    return store


# ──────────────────────────────────────────────────────────────────────────────
# Clients
# ──────────────────────────────────────────────────────────────────────────────


def create_gateway_client() -> GatewayClientProtocol:
    return create_evolution_client(get_evolution_settings())


def create_platform_client(tenant_store: TenantStoreProtocol) -> PlatformClientProtocol:
    return create_ghl_client(get_ghl_settings(), tenant_store)


# ──────────────────────────────────────────────────────────────────────────────
# Services e use cases
# ──────────────────────────────────────────────────────────────────────────────


def create_lifecycle_service(
    instance_store: InstanceStoreProtocol,
    gateway: GatewayClientProtocol,
    platform: PlatformClientProtocol,
) -> InstanceLifecycleService:
    return InstanceLifecycleService(
        instance_store,
        gateway,
        AgentAttributionService(platform, instance_store),
        webhook_url=get_base_settings().evolution_webhook_url,
    )


def create_inbound_relay(
    instance_store: InstanceStoreProtocol,
    gateway: GatewayClientProtocol,
    platform: PlatformClientProtocol,
) -> RelayInboundMessageUseCase:
    return RelayInboundMessageUseCase(
        instance_store=instance_store,
        gateway=gateway,
        platform=platform,
        identity=IdentityResolver(platform),
        attribution=AgentAttributionService(platform, instance_store),
        conversation_provider_id=get_ghl_settings().conversation_provider_id,
    )


def create_outbound_relay(
    instance_store: InstanceStoreProtocol,
    gateway: GatewayClientProtocol,
    platform: PlatformClientProtocol,
) -> RelayOutboundMessageUseCase:
    provider_id = get_ghl_settings().conversation_provider_id
    return RelayOutboundMessageUseCase(
        instance_store=instance_store,
        gateway=gateway,
        platform=platform,
        identity=IdentityResolver(platform),
        attribution=AgentAttributionService(platform, instance_store),
        status_reporter=MessageStatusReporter(platform, provider_id),
        conversation_provider_id=provider_id,
    )
