"""Resolução de identidade: telefone WhatsApp ⇄ contato/conversa da Platform.

Cadeias de fallback são listas ordenadas de estratégias; a primeira que
produz valor vence e cada transição é registrada em log.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from utils.errors import IntegrationError
from utils.strategies import Strategy, run_strategies

if TYPE_CHECKING:
    from app.protocols.models import Contact, Conversation
    from app.protocols.platform import PlatformClientProtocol

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"[^0-9]")

# Endpoints de criação de conversa, em ordem de tentativa
CONVERSATION_CREATE_ENDPOINTS = ("/conversations/", "/conversations", "/conversations/create")

PLACEHOLDER_NAME_PREFIX = "WhatsApp User"


def normalize_digits(phone: str | None) -> str:
    return _NON_DIGITS.sub("", phone or "")


def normalize_e164(phone: str | None) -> str:
    """`+<dígitos>`; entrada que já começa com `+` é devolvida intacta."""
    if not phone:
        return ""
    if phone.startswith("+"):
        return phone
    return f"+{normalize_digits(phone)}"


def phones_match(a: str | None, b: str | None) -> bool:
    """Match por sufixo de dígitos nos dois sentidos; vazio nunca casa."""
    digits_a = normalize_digits(a)
    digits_b = normalize_digits(b)
    if not digits_a or not digits_b:
        return False
    return digits_a.endswith(digits_b) or digits_b.endswith(digits_a)


def phone_suffix(phone: str | None) -> str:
    """Últimos 4 dígitos (para logs e nomes provisórios)."""
    return normalize_digits(phone)[-4:]


def placeholder_name(phone: str | None) -> str:
    return f"{PLACEHOLDER_NAME_PREFIX} {phone_suffix(phone)}"


def phone_from_jid(jid: str | None) -> str:
    """Parte local do JID (`5511999999999@s.whatsapp.net` → `5511999999999`)."""
    if not jid:
        return ""
    return jid.split("@", 1)[0]


class IdentityResolver:
    """Encontra contatos e conversas na Platform."""

    def __init__(self, platform: PlatformClientProtocol) -> None:
        self._platform = platform

    async def find_contact_by_phone(self, tenant_key: str, phone: str) -> Contact | None:
        """Lookup exato por E.164, depois busca ampla por dígitos + sufixo.

        Returns:
            Primeiro contato que casa ou None
        """
        digits = normalize_digits(phone)
        if not digits:
            return None
        e164 = normalize_e164(phone)

        async def _lookup() -> Contact | None:
            contacts = await self._platform.lookup_contacts(tenant_key, e164)
            return contacts[0] if contacts else None

        async def _search() -> Contact | None:
            contacts = await self._platform.search_contacts(tenant_key, digits)
            return next((c for c in contacts if phones_match(c.phone, digits)), None)

        outcome = await run_strategies(
            [
                Strategy("contact_lookup", _lookup),
                Strategy("contact_search", _search),
            ],
            component="contact_resolution",
            logger=logger,
        )
        if outcome.succeeded:
            logger.info(
                "contact_resolved",
                extra={
                    "tenant_key": tenant_key,
                    "strategy": outcome.winner,
                    "phone_suffix": phone_suffix(phone),
                },
            )
        return outcome.value

    async def find_or_create_conversation(
        self, tenant_key: str, contact_id: str
    ) -> Conversation:
        """Conversa existente do contato ou nova via endpoints candidatos.

        Raises:
            IntegrationError: nenhuma estratégia produziu conversa
        """

        async def _search() -> Conversation | None:
            conversations = await self._platform.search_conversations(tenant_key, contact_id)
            return conversations[0] if conversations else None

        def _create(endpoint: str) -> Strategy[Conversation]:
            return Strategy(
                f"conversation_create:{endpoint}",
                lambda: self._platform.create_conversation(tenant_key, contact_id, endpoint),
            )

        outcome = await run_strategies(
            [
                Strategy("conversation_search", _search),
                *(_create(endpoint) for endpoint in CONVERSATION_CREATE_ENDPOINTS),
            ],
            component="conversation_resolution",
            logger=logger,
        )
        if not outcome.succeeded or outcome.value is None:
            raise IntegrationError(
                f"Could not find or create conversation for contact {contact_id}"
            )
        return outcome.value
