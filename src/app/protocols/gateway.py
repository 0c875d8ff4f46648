"""Protocolo do cliente do Gateway WhatsApp."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.protocols.models import QrCode, WebhookShape


class GatewayClientProtocol(Protocol):
    """Operações do Gateway endereçadas sempre por Instance.name."""

    async def get_status(self, token: str, instance_name: str) -> dict[str, Any]: ...

    async def validate_credentials(self, token: str, instance_name: str) -> bool: ...

    async def get_qr(
        self, token: str, instance_name: str, number: str | None = None
    ) -> QrCode | None: ...

    async def send_text(
        self, token: str, instance_name: str, number: str, text: str
    ) -> dict[str, Any]: ...

    async def get_profile_picture(
        self, token: str, instance_name: str, jid: str
    ) -> str | None: ...

    async def find_webhook_url(self, token: str, instance_name: str) -> str | None: ...

    async def set_webhook(
        self,
        token: str,
        instance_name: str,
        url: str,
        shape: WebhookShape,
    ) -> None: ...

    async def logout(self, token: str, instance_name: str) -> None: ...

    async def delete(self, token: str, instance_name: str) -> None: ...
