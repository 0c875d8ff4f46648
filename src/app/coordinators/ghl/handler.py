"""Processamento de webhooks de mensagens da Platform."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.protocols.models import PlatformEvent
    from app.use_cases.outbound_relay import OutboundRelayResult, RelayOutboundMessageUseCase

logger = logging.getLogger(__name__)


async def process_platform_event(
    event: PlatformEvent,
    correlation_id: str,
    use_case: RelayOutboundMessageUseCase,
) -> OutboundRelayResult:
    """Encaminha a mensagem do agente para o Gateway e registra o resultado."""
    result = await use_case.execute(event)
    logger.info(
        "platform_message_processed",
        extra={
            "correlation_id": correlation_id,
            "message_id": event.message_id,
            "status": result.status,
            "reason": result.reason,
        },
    )
    return result
