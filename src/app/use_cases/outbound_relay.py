"""Use case de relay Platform → WhatsApp.

Mensagens escritas por agentes na Platform são enviadas pelo Gateway
usando a instância fixada no contato (tag `whatsapp-instance-<name>`)
ou a primeira instância do tenant. O resultado é reportado de volta
como status da mensagem (delivered/failed).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from app.services.identity import normalize_digits, normalize_e164, phone_suffix
from fsm import InstanceState
from utils.errors import BridgeError, HttpError, IntegrationError
from utils.strategies import Strategy, run_strategies

if TYPE_CHECKING:
    from app.domain.instance import Instance
    from app.protocols.gateway import GatewayClientProtocol
    from app.protocols.instance_store import InstanceStoreProtocol
    from app.protocols.models import Contact, PlatformEvent
    from app.protocols.platform import PlatformClientProtocol
    from app.services.agent_attribution import AgentAttributionService
    from app.services.identity import IdentityResolver
    from app.services.message_status import MessageStatusReporter

logger = logging.getLogger(__name__)

OutboundStatus = Literal["delivered", "skipped", "failed"]


@dataclass(frozen=True, slots=True)
class OutboundRelayResult:
    """Resultado do relay de uma mensagem de agente."""

    status: OutboundStatus
    reason: str | None = None
    instance_name: str | None = None
    number: str | None = None


class OutboundRelayError(BridgeError):
    """Falha que encerra o relay e vira status `failed` na Platform."""


class RelayOutboundMessageUseCase:
    """Envia mensagens de agentes pelo Gateway."""

    def __init__(
        self,
        *,
        instance_store: InstanceStoreProtocol,
        gateway: GatewayClientProtocol,
        platform: PlatformClientProtocol,
        identity: IdentityResolver,
        attribution: AgentAttributionService,
        status_reporter: MessageStatusReporter,
        conversation_provider_id: str = "",
    ) -> None:
        self._instances = instance_store
        self._gateway = gateway
        self._platform = platform
        self._identity = identity
        self._attribution = attribution
        self._status = status_reporter
        self._provider_id = conversation_provider_id

    async def execute(self, event: PlatformEvent) -> OutboundRelayResult:
        """Processa um webhook de mensagem da Platform. Nunca levanta exceção
        de integração: falhas viram status `failed`."""
        if (event.conversation_provider_id or "") != self._provider_id:
            logger.info(
                "outbound_provider_mismatch",
                extra={"message_id": event.message_id},
            )
            return OutboundRelayResult(status="skipped", reason="provider_mismatch")

        tenant_key = event.location_id
        if not tenant_key:
            logger.warning("outbound_missing_tenant", extra={"message_id": event.message_id})
            return OutboundRelayResult(status="skipped", reason="missing_tenant")

        text = event.outbound_text()
        if not text:
            logger.info("outbound_empty_message", extra={"message_id": event.message_id})
            return OutboundRelayResult(status="skipped", reason="empty_message")

        try:
            result = await self._relay(tenant_key, event, text)
        except (BridgeError, HttpError) as exc:
            logger.error(
                "outbound_relay_failed",
                extra={
                    "tenant_key": tenant_key,
                    "message_id": event.message_id,
                    "error_type": type(exc).__name__,
                },
            )
            await self._report(tenant_key, event, "failed", str(exc) or type(exc).__name__)
            return OutboundRelayResult(status="failed", reason=type(exc).__name__)

        await self._report(tenant_key, event, "delivered")
        return result

    async def _relay(self, tenant_key: str, event: PlatformEvent, text: str) -> OutboundRelayResult:
        contact = await self._resolve_contact(tenant_key, event)
        phone = (contact.phone if contact else None) or event.phone
        if not phone:
            raise OutboundRelayError("Target phone not found for outbound message")

        instance = await self._select_instance(tenant_key, contact)
        if instance.state != InstanceState.AUTHORIZED:
            logger.warning(
                "outbound_instance_not_authorized",
                extra={"instance": instance.name, "state": instance.state.value},
            )
            raise IntegrationError(f"Instance {instance.name} is not authorized")

        number = await self._send(instance, phone, text)
        logger.info(
            "outbound_message_sent",
            extra={"instance": instance.name, "phone_suffix": phone_suffix(phone)},
        )

        if event.user_id:
            await self._attribution.remember(instance, event.user_id)
        return OutboundRelayResult(status="delivered", instance_name=instance.name, number=number)

    async def _resolve_contact(self, tenant_key: str, event: PlatformEvent) -> Contact | None:
        contact = None
        if event.contact_id:
            contact = await self._platform.get_contact(tenant_key, event.contact_id)
        if contact is None and event.phone:
            contact = await self._identity.find_contact_by_phone(tenant_key, event.phone)
        return contact

    async def _select_instance(self, tenant_key: str, contact: Contact | None) -> Instance:
        pinned = contact.instance_tag() if contact else None
        if pinned:
            instance = await self._instances.get(pinned)
            if instance is not None and instance.tenant_key == tenant_key:
                return instance
            logger.warning(
                "outbound_pinned_instance_unavailable",
                extra={"instance": pinned, "tenant_key": tenant_key},
            )

        instances = await self._instances.list_by_tenant(tenant_key)
        if not instances:
            logger.error("outbound_no_instance", extra={"tenant_key": tenant_key})
            raise OutboundRelayError(f"No instances found for tenant {tenant_key}")
        return instances[0]

    async def _send(self, instance: Instance, phone: str, text: str) -> str:
        """Envia para os dígitos e, em falha, para o E.164. Retorna o número usado."""
        token = instance.credential_token

        def _attempt(label: str, number: str) -> Strategy[str]:
            async def _call() -> str:
                await self._gateway.send_text(token, instance.name, number, text)
                return number

            return Strategy(label, _call)

        outcome = await run_strategies(
            [
                _attempt("send_digits", normalize_digits(phone)),
                _attempt("send_e164", normalize_e164(phone)),
            ],
            component="gateway_send",
            logger=logger,
        )
        if not outcome.succeeded or outcome.value is None:
            raise IntegrationError("Failed to send message via Gateway")
        return outcome.value

    async def _report(
        self,
        tenant_key: str,
        event: PlatformEvent,
        status: Literal["delivered", "failed"],
        error_message: str | None = None,
    ) -> None:
        if not event.message_id:
            return
        meta = {"error": {"message": error_message}} if error_message else None
        await self._status.report(tenant_key, event.message_id, status, meta)
