"""Runtime de processamento dos webhooks (Gateway e Platform).

O HTTP responde antes do processamento; o trabalho roda em task
rastreada (modo async) ou na própria requisição (modo inline).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from api.routes.webhooks.runtime_tasks import drain_processing_tasks, schedule_processing_task
from app.coordinators.evolution.handler import process_gateway_event
from app.coordinators.ghl.handler import process_platform_event
from utils.errors import BridgeError, RedisConnectionError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from app.protocols.models import GatewayEvent, PlatformEvent

logger = logging.getLogger(__name__)


async def run_processing_safe(
    *,
    channel: str,
    correlation_id: str,
    call: Callable[[], Awaitable[Any]],
) -> None:
    """Executa o processamento com classificação explícita de erros.

    Erros de domínio/integração encerram o evento com log; falhas de
    infraestrutura e erros inesperados são propagados.
    """
    try:
        await call()
    except Exception as exc:
        if _is_domain_error(exc):
            logger.warning(
                "webhook_processing_aborted",
                extra={
                    "channel": channel,
                    "correlation_id": correlation_id,
                    "error_type": type(exc).__name__,
                },
            )
            return
        if _is_infrastructure_error(exc):
            logger.error(
                "webhook_processing_infra_failed",
                extra={
                    "channel": channel,
                    "correlation_id": correlation_id,
                    "error_type": type(exc).__name__,
                },
            )
            raise
        logger.exception(
            "webhook_processing_failed",
            extra={"channel": channel, "correlation_id": correlation_id},
        )
        raise


async def dispatch_processing(
    *,
    channel: str,
    correlation_id: str,
    mode: str,
    call: Callable[[], Awaitable[Any]],
) -> None:
    """Despacha processamento inline ou async conforme configuração."""
    if (mode or "async").lower() == "inline":
        try:
            await run_processing_safe(channel=channel, correlation_id=correlation_id, call=call)
        except Exception as exc:
            logger.error(
                "webhook_inline_processing_failed",
                extra={
                    "channel": channel,
                    "correlation_id": correlation_id,
                    "error_type": type(exc).__name__,
                },
            )
            return
        logger.info(
            "webhook_processing_completed",
            extra={"channel": channel, "correlation_id": correlation_id, "mode": "inline"},
        )
        return

    schedule_processing_task(
        channel=channel,
        correlation_id=correlation_id,
        coroutine=run_processing_safe(channel=channel, correlation_id=correlation_id, call=call),
    )


async def dispatch_gateway_event(event: GatewayEvent, correlation_id: str, mode: str) -> None:
    from app.bootstrap import get_inbound_relay, get_lifecycle_service

    async def _call() -> None:
        await process_gateway_event(
            event,
            correlation_id,
            lifecycle=get_lifecycle_service(),
            inbound_relay=get_inbound_relay(),
        )

    await dispatch_processing(
        channel="evolution", correlation_id=correlation_id, mode=mode, call=_call
    )


async def dispatch_platform_event(event: PlatformEvent, correlation_id: str, mode: str) -> None:
    from app.bootstrap import get_outbound_relay

    async def _call() -> None:
        await process_platform_event(event, correlation_id, get_outbound_relay())

    await dispatch_processing(channel="ghl", correlation_id=correlation_id, mode=mode, call=_call)


async def drain_background_tasks(timeout_seconds: float = 30.0) -> None:
    """Aguarda tasks async pendentes durante shutdown do processo."""
    await drain_processing_tasks(timeout_seconds=timeout_seconds)


def _is_domain_error(exc: Exception) -> bool:
    return isinstance(exc, (BridgeError, ValueError, PydanticValidationError))


def _is_infrastructure_error(exc: Exception) -> bool:
    if isinstance(exc, RedisConnectionError):
        return True
    return type(exc).__module__.startswith("redis.")
