"""Despacho de eventos do Gateway por tipo.

Eventos de mensagem e de conexão seguem para seus fluxos; demais tipos
são apenas registrados.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from app.protocols.models import GatewayEvent
    from app.services.instance_lifecycle import InstanceLifecycleService
    from app.use_cases.inbound_relay import RelayInboundMessageUseCase

logger = logging.getLogger(__name__)

GatewayDispatchOutcome = Literal[
    "connection_updated",
    "message_relayed",
    "dropped",
    "ignored",
]


async def process_gateway_event(
    event: GatewayEvent,
    correlation_id: str,
    *,
    lifecycle: InstanceLifecycleService,
    inbound_relay: RelayInboundMessageUseCase,
) -> GatewayDispatchOutcome:
    """Processa um evento já autenticado do Gateway.

    Args:
        event: Evento validado
        correlation_id: ID de correlação para rastreamento
        lifecycle: Serviço de ciclo de vida (connection.update)
        inbound_relay: Use case de relay (messages.upsert)

    Returns:
        Outcome do despacho
    """
    if event.is_connection_update:
        if "state" not in event.data or event.data.get("state") is None:
            logger.error(
                "gateway_connection_update_missing_state",
                extra={"instance": event.instance, "correlation_id": correlation_id},
            )
            return "dropped"
        await lifecycle.apply_connection_update(event.instance, event.data)
        return "connection_updated"

    if event.is_message_upsert:
        if not event.remote_jid:
            logger.warning(
                "gateway_message_missing_remote_jid",
                extra={"instance": event.instance, "correlation_id": correlation_id},
            )
            return "dropped"
        result = await inbound_relay.execute(event)
        logger.info(
            "gateway_message_processed",
            extra={
                "instance": event.instance,
                "status": result.status,
                "reason": result.reason,
                "direction": result.direction,
            },
        )
        return "message_relayed"

    logger.info(
        "gateway_event_ignored",
        extra={"instance": event.instance, "gateway_event": event.event},
    )
    return "ignored"
