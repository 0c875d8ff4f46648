"""Protocolo do cliente da Platform (CRM).

Cada método representa um endpoint; cadeias de fallback entre
endpoints ficam nos serviços (app/services).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.protocols.models import Contact, Conversation, PlatformUser


class PlatformClientProtocol(Protocol):
    async def get_contact(self, tenant_key: str, contact_id: str) -> Contact | None: ...

    async def lookup_contacts(self, tenant_key: str, phone_e164: str) -> list[Contact]: ...

    async def search_contacts(self, tenant_key: str, query: str) -> list[Contact]: ...

    async def create_contact(
        self,
        tenant_key: str,
        *,
        phone: str,
        name: str,
        avatar_url: str | None = None,
    ) -> Contact: ...

    async def update_contact(
        self, tenant_key: str, contact_id: str, changes: dict[str, Any]
    ) -> Contact: ...

    async def search_conversations(
        self, tenant_key: str, contact_id: str
    ) -> list[Conversation]: ...

    async def create_conversation(
        self, tenant_key: str, contact_id: str, endpoint: str
    ) -> Conversation: ...

    async def post_message(self, tenant_key: str, payload: dict[str, Any]) -> dict[str, Any]: ...

    async def list_users(self, tenant_key: str, endpoint: str) -> list[PlatformUser]: ...

    async def put_message_status(
        self, tenant_key: str, message_id: str, body: dict[str, Any]
    ) -> None: ...

    async def post_message_status(self, tenant_key: str, body: dict[str, Any]) -> None: ...
