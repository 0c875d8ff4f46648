"""Bootstrap da aplicação: inicialização e wiring.

Este módulo é o composition root: configura logging, valida settings e
conecta implementações concretas aos protocolos.

Uso:
    from app.bootstrap import initialize_app, get_instance_store, get_lifecycle_service

    # Na inicialização do serviço
    initialize_app()

    # Obter dependências (singletons)
    store = get_instance_store()
    lifecycle = get_lifecycle_service()
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import TYPE_CHECKING

from app.observability import get_correlation_id
from config.logging import configure_logging
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
    from app.services.instance_lifecycle import InstanceLifecycleService
    from app.use_cases.inbound_relay import RelayInboundMessageUseCase
    from app.use_cases.outbound_relay import RelayOutboundMessageUseCase

# Nome do serviço para logs
SERVICE_NAME = "wlink_bridge"

# Nível de log padrão (pode ser sobrescrito por env)
DEFAULT_LOG_LEVEL = "INFO"
STRICT_VALIDATION_ENVS = {"staging", "production"}

logger = logging.getLogger(__name__)


def initialize_app() -> None:
    """Inicializa a aplicação com todas as configurações necessárias.

    Deve ser chamada uma vez no início do serviço.
    """
    log_level = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()

    configure_logging(
        level=log_level,
        service_name=os.getenv("SERVICE_NAME", SERVICE_NAME),
        correlation_id_getter=get_correlation_id,
    )


def initialize_test_app() -> None:
    """Inicializa a aplicação para testes (logging DEBUG)."""
    configure_logging(
        level="DEBUG",
        service_name=f"{SERVICE_NAME}_test",
        correlation_id_getter=get_correlation_id,
    )


def validate_runtime_settings() -> None:
    """Valida settings obrigatórias no startup.

    Em `staging`/`production` falha rápido para impedir boot inválido.
    Em `development`/`test` mantém alerta sem bloquear execução local.
    """
    environment = os.getenv("ENVIRONMENT", "development").lower()
    strict_mode = environment in STRICT_VALIDATION_ENVS
    errors: list[str] = []

    errors.extend(f"base: {error}" for error in get_base_settings().validate())
    errors.extend(f"store: {error}" for error in get_store_settings().validate())
    errors.extend(f"evolution: {error}" for error in get_evolution_settings().validate())
    errors.extend(f"ghl: {error}" for error in get_ghl_settings().validate())

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if strict_mode:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {environment}:\n{details}")


# ──────────────────────────────────────────────────────────────────────────────
# Getters (lazy initialization com cache)
# ──────────────────────────────────────────────────────────────────────────────


@lru_cache(maxsize=1)
def get_instance_store() -> InstanceStoreProtocol:
    from app.bootstrap.dependencies import create_instance_store
    return create_instance_store()


@lru_cache(maxsize=1)
def get_tenant_store() -> TenantStoreProtocol:
    from app.bootstrap.dependencies import create_tenant_store
    return create_tenant_store()


@lru_cache(maxsize=1)
def get_gateway_client() -> GatewayClientProtocol:
    from app.bootstrap.dependencies import create_gateway_client
    return create_gateway_client()


@lru_cache(maxsize=1)
def get_platform_client() -> PlatformClientProtocol:
    from app.bootstrap.dependencies import create_platform_client
    return create_platform_client(get_tenant_store())


@lru_cache(maxsize=1)
def get_lifecycle_service() -> InstanceLifecycleService:
    """Serviço de ciclo de vida das instâncias (singleton)."""
    from app.bootstrap.dependencies import create_lifecycle_service
    return create_lifecycle_service(
        get_instance_store(), get_gateway_client(), get_platform_client()
    )


@lru_cache(maxsize=1)
def get_inbound_relay() -> RelayInboundMessageUseCase:
    """Use case WhatsApp → Platform (singleton)."""
    from app.bootstrap.dependencies import create_inbound_relay
    return create_inbound_relay(
        get_instance_store(), get_gateway_client(), get_platform_client()
    )


@lru_cache(maxsize=1)
def get_outbound_relay() -> RelayOutboundMessageUseCase:
    """Use case Platform → WhatsApp (singleton)."""
    from app.bootstrap.dependencies import create_outbound_relay
    return create_outbound_relay(
        get_instance_store(), get_gateway_client(), get_platform_client()
    )
