"""Atualização de status de mensagens de saída na Platform."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Literal

from app.services.side_effects import SideEffectResult
from utils.errors import HttpError
from utils.strategies import Strategy, run_strategies

if TYPE_CHECKING:
    from app.protocols.platform import PlatformClientProtocol

logger = logging.getLogger(__name__)

MessageStatus = Literal["delivered", "read", "failed", "sent"]

_PROVIDER_MISSING_MARKER = "No conversation provider"
_SKIPPED = "provider_rejected"


class MessageStatusReporter:
    """Reporta status via PUT por id, com fallback para POST genérico.

    Sem provider configurado nada é enviado. Nunca levanta exceção.
    """

    def __init__(self, platform: PlatformClientProtocol, conversation_provider_id: str) -> None:
        self._platform = platform
        self._provider_id = conversation_provider_id

    async def report(
        self,
        tenant_key: str,
        message_id: str,
        status: MessageStatus,
        meta: dict[str, Any] | None = None,
    ) -> SideEffectResult[str]:
        if not self._provider_id:
            logger.warning(
                "message_status_skipped",
                extra={"reason": "provider_not_configured", "message_id": message_id},
            )
            return SideEffectResult.skip("message_status", "provider_not_configured")

        body: dict[str, Any] = {
            "status": status,
            "conversationProviderId": self._provider_id,
            "providerId": self._provider_id,
            **(meta or {}),
        }

        async def _put() -> str:
            try:
                await self._platform.put_message_status(tenant_key, message_id, body)
            except HttpError as exc:
                if exc.status_code == 403 and _PROVIDER_MISSING_MARKER in exc.body_message:
                    return _SKIPPED
                raise
            return "put"

        async def _post() -> str:
            await self._platform.post_message_status(tenant_key, {"messageId": message_id, **body})
            return "post"

        outcome = await run_strategies(
            [
                Strategy("message_status_put", _put),
                Strategy("message_status_post", _post),
            ],
            component="message_status",
            logger=logger,
        )
        if outcome.value == _SKIPPED:
            logger.warning(
                "message_status_skipped",
                extra={"reason": "provider_rejected", "message_id": message_id},
            )
            return SideEffectResult.skip("message_status", "provider_rejected")
        if not outcome.succeeded:
            logger.error(
                "message_status_failed",
                extra={"message_id": message_id, "status": status},
            )
            return SideEffectResult(name="message_status", ok=False, error="strategies_exhausted")
        logger.info(
            "message_status_updated",
            extra={"message_id": message_id, "status": status, "strategy": outcome.winner},
        )
        return SideEffectResult(name="message_status", ok=True, value=outcome.value)
