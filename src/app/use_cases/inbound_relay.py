"""Use case de relay WhatsApp → Platform.

Cada `messages.upsert` do Gateway vira uma mensagem na conversa do
contato na Platform: recebida (status unread) quando vem do contato,
enviada (atribuída ao agente quando possível) quando `fromMe`.

Não há deduplicação: o mesmo evento reenviado gera um segundo post.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from api.normalizers.evolution import extract_message_body, extract_push_name
from app.services.identity import (
    normalize_e164,
    phone_from_jid,
    phone_suffix,
    placeholder_name,
)
from app.services.side_effects import best_effort
from utils.errors import HttpError, IntegrationError, UnauthorizedError

if TYPE_CHECKING:
    from app.domain.instance import Instance
    from app.protocols.gateway import GatewayClientProtocol
    from app.protocols.instance_store import InstanceStoreProtocol
    from app.protocols.models import Contact, GatewayEvent
    from app.protocols.platform import PlatformClientProtocol
    from app.services.agent_attribution import AgentAttributionService
    from app.services.identity import IdentityResolver

logger = logging.getLogger(__name__)

InboundStatus = Literal["posted", "skipped", "failed"]
Direction = Literal["inbound", "outbound"]


@dataclass(frozen=True, slots=True)
class InboundRelayResult:
    """Resultado do relay de um evento de mensagem."""

    status: InboundStatus
    reason: str | None = None
    contact_id: str | None = None
    conversation_id: str | None = None
    direction: Direction | None = None
    user_id: str | None = None


class RelayInboundMessageUseCase:
    """Espelha mensagens do Gateway na Platform."""

    def __init__(
        self,
        *,
        instance_store: InstanceStoreProtocol,
        gateway: GatewayClientProtocol,
        platform: PlatformClientProtocol,
        identity: IdentityResolver,
        attribution: AgentAttributionService,
        conversation_provider_id: str = "",
    ) -> None:
        self._instances = instance_store
        self._gateway = gateway
        self._platform = platform
        self._identity = identity
        self._attribution = attribution
        self._provider_id = conversation_provider_id

    async def execute(self, event: GatewayEvent) -> InboundRelayResult:
        """Processa um evento `messages.upsert`.

        Raises:
            IntegrationError: conversa ou post da mensagem falharam
        """
        instance = await self._resolve_instance(event)
        if instance is None:
            logger.warning("inbound_unknown_instance", extra={"instance": event.instance})
            return InboundRelayResult(status="skipped", reason="unknown_instance")

        contact_phone = phone_from_jid(event.remote_jid)
        from_me = event.from_me
        direction: Direction = "outbound" if from_me else "inbound"

        body = extract_message_body(event.data.get("message"))
        if not body:
            logger.info(
                "inbound_body_unsupported",
                extra={"instance": instance.name, "message_id": event.message_id},
            )
            return InboundRelayResult(status="skipped", reason="empty_body", direction=direction)

        try:
            contact = await self._resolve_contact(instance, event, contact_phone, from_me)
        except (HttpError, UnauthorizedError) as exc:
            logger.warning(
                "inbound_contact_failed",
                extra={
                    "instance": instance.name,
                    "phone_suffix": phone_suffix(contact_phone),
                    "error_type": type(exc).__name__,
                },
            )
            return InboundRelayResult(status="failed", reason="contact_unavailable", direction=direction)

        tenant_key = instance.tenant_key
        conversation = await self._identity.find_or_create_conversation(tenant_key, contact.id)

        user_id: str | None = None
        if from_me:
            user_id = await self._attribution.resolve(tenant_key, instance, event.sender)

        payload = self._build_payload(
            conversation_id=conversation.id,
            contact_id=contact.id,
            body=body,
            direction=direction,
            user_id=user_id,
        )
        try:
            await self._platform.post_message(tenant_key, payload)
        except (HttpError, UnauthorizedError) as exc:
            logger.error(
                "inbound_post_failed",
                extra={
                    "instance": instance.name,
                    "conversation_id": conversation.id,
                    "direction": direction,
                    "status_code": getattr(exc, "status_code", None),
                },
            )
            raise IntegrationError(f"Failed to post {direction} message to Platform") from exc

        logger.info(
            "inbound_message_posted",
            extra={
                "instance": instance.name,
                "conversation_id": conversation.id,
                "direction": direction,
                "attributed": user_id is not None,
            },
        )
        return InboundRelayResult(
            status="posted",
            contact_id=contact.id,
            conversation_id=conversation.id,
            direction=direction,
            user_id=user_id,
        )

    async def _resolve_instance(self, event: GatewayEvent) -> Instance | None:
        instance = await self._instances.get(event.instance) if event.instance else None
        if instance is not None:
            return instance
        external_id = event.data.get("instanceId")
        if isinstance(external_id, str) and external_id:
            instance = await self._instances.get_by_external_id(external_id)
            if instance is not None:
                logger.info(
                    "inbound_instance_resolved_by_external_id",
                    extra={"instance": instance.name},
                )
        return instance

    async def _resolve_contact(
        self,
        instance: Instance,
        event: GatewayEvent,
        contact_phone: str,
        from_me: bool,
    ) -> Contact:
        tenant_key = instance.tenant_key
        contact = await self._identity.find_contact_by_phone(tenant_key, contact_phone)

        if from_me:
            if contact is not None:
                return contact
            return await self._platform.create_contact(
                tenant_key,
                phone=normalize_e164(contact_phone),
                name=placeholder_name(contact_phone),
            )

        avatar = await best_effort(
            "profile_picture",
            lambda: self._gateway.get_profile_picture(
                instance.credential_token, instance.name, event.remote_jid or ""
            ),
            logger=logger,
            instance=instance.name,
        )
        avatar_url = avatar.value if avatar.ok else None

        if contact is not None:
            if avatar_url:
                updated = await best_effort(
                    "contact_avatar_update",
                    lambda: self._platform.update_contact(
                        tenant_key, contact.id, {"avatarUrl": avatar_url}
                    ),
                    logger=logger,
                    contact_id=contact.id,
                )
                if updated.ok and updated.value is not None:
                    return updated.value
            return contact

        name = extract_push_name(event.data) or placeholder_name(contact_phone)
        return await self._platform.create_contact(
            tenant_key,
            phone=normalize_e164(contact_phone),
            name=name,
            avatar_url=avatar_url,
        )

    def _build_payload(
        self,
        *,
        conversation_id: str,
        contact_id: str,
        body: str,
        direction: Direction,
        user_id: str | None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "type": "Custom" if self._provider_id else "SMS",
            "conversationId": conversation_id,
            "contactId": contact_id,
            "message": body,
            "direction": direction,
        }
        if self._provider_id:
            payload["conversationProviderId"] = self._provider_id
        if direction == "inbound":
            payload["status"] = "unread"
        elif user_id:
            payload["userId"] = user_id
        return payload
