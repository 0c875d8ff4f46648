"""Modelos transientes trocados entre camadas (eventos, recursos externos)."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Prefixo da tag que fixa o contato a uma instância
INSTANCE_TAG_PREFIX = "whatsapp-instance-"

EVENT_CONNECTION_UPDATE = "connection.update"
EVENT_MESSAGES_UPSERT = frozenset({"messages.upsert", "MESSAGES_UPSERT"})


def _first(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value:
            return value
    return None


class Contact(BaseModel):
    """Contato da Platform."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str | None = None
    phone: str | None = None
    tags: list[str] = Field(default_factory=list)
    location_id: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Contact:
        """Converte payload da Platform (camelCase, variações de campo)."""
        name = _first(data, "name", "contactName")
        if not name:
            parts = [data.get("firstName"), data.get("lastName")]
            name = " ".join(p for p in parts if p) or None
        tags = data.get("tags") or []
        return cls(
            id=str(data["id"]),
            name=name,
            phone=_first(data, "phone", "phoneNumber"),
            tags=[str(tag) for tag in tags if tag],
            location_id=data.get("locationId"),
        )

    def instance_tag(self) -> str | None:
        """Nome da instância fixada via tag `whatsapp-instance-<name>`."""
        for tag in self.tags:
            if tag.startswith(INSTANCE_TAG_PREFIX) and len(tag) > len(INSTANCE_TAG_PREFIX):
                return tag[len(INSTANCE_TAG_PREFIX):]
        return None


class Conversation(BaseModel):
    """Conversa da Platform."""

    id: str
    contact_id: str | None = None

    @classmethod
    def from_api(cls, data: Any) -> Conversation | None:
        """Extrai id de `id`, `conversationId` ou `conversation.id`."""
        if not isinstance(data, dict):
            return None
        nested = data.get("conversation")
        conversation_id = _first(data, "id", "conversationId")
        if not conversation_id and isinstance(nested, dict):
            conversation_id = nested.get("id")
        if not conversation_id:
            return None
        return cls(id=str(conversation_id), contact_id=data.get("contactId"))


class PlatformUser(BaseModel):
    """Usuário (agente) do diretório da Platform."""

    model_config = ConfigDict(extra="ignore")

    id: str
    phone: str | None = None
    first_name: str | None = None
    last_name: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> PlatformUser:
        return cls(
            id=str(data.get("id", "")),
            phone=data.get("phone"),
            first_name=data.get("firstName"),
            last_name=data.get("lastName"),
        )


class QrCode(BaseModel):
    """QR (base64) ou pairing code para conectar a instância."""

    type: Literal["qr", "code"]
    data: str


class WebhookShape(StrEnum):
    """Formatos aceitos pelo Gateway para registrar o webhook."""

    FULL = "full"
    URL_BODY = "url_body"
    URL_QUERY = "url_query"


class GatewayEvent(BaseModel):
    """Evento de webhook do Gateway."""

    model_config = ConfigDict(extra="ignore")

    event: str = ""
    instance: str = ""
    data: dict[str, Any] = Field(default_factory=dict)
    sender: str | None = None
    destination: str | None = None
    timestamp: str | int | float | None = None

    @property
    def is_connection_update(self) -> bool:
        return self.event == EVENT_CONNECTION_UPDATE

    @property
    def is_message_upsert(self) -> bool:
        return self.event in EVENT_MESSAGES_UPSERT

    @property
    def message_key(self) -> dict[str, Any]:
        key = self.data.get("key")
        return key if isinstance(key, dict) else {}

    @property
    def remote_jid(self) -> str | None:
        value = self.message_key.get("remoteJid")
        return value if isinstance(value, str) and value else None

    @property
    def from_me(self) -> bool:
        return self.message_key.get("fromMe") is True

    @property
    def message_id(self) -> str | None:
        value = self.message_key.get("id")
        return str(value) if value else None


class Attachment(BaseModel):
    """Anexo de mensagem da Platform."""

    model_config = ConfigDict(extra="ignore")

    url: str
    file_name: str | None = Field(None, alias="fileName")
    type: str | None = None


class PlatformEvent(BaseModel):
    """Evento de webhook da Platform (mensagem de agente)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    location_id: str | None = Field(None, alias="locationId")
    contact_id: str | None = Field(None, alias="contactId")
    phone: str | None = None
    message: str | None = None
    message_id: str | None = Field(None, alias="messageId")
    conversation_provider_id: str | None = Field(None, alias="conversationProviderId")
    user_id: str | None = Field(None, alias="userId")
    attachments: list[Attachment] = Field(default_factory=list)
    type: str | None = None

    @field_validator("attachments", mode="before")
    @classmethod
    def _coerce_attachments(cls, value: Any) -> list[Any]:
        """Aceita URLs soltas e descarta anexos sem URL."""
        if not isinstance(value, list):
            return []
        items: list[Any] = []
        for item in value:
            if isinstance(item, str) and item.strip():
                items.append({"url": item.strip()})
            elif isinstance(item, dict) and item.get("url"):
                items.append(item)
        return items

    def outbound_text(self) -> str:
        """Texto a enviar: mensagem seguida das URLs de anexos, uma por linha."""
        parts = [self.message.strip()] if self.message and self.message.strip() else []
        parts.extend(attachment.url for attachment in self.attachments if attachment.url)
        return "\n".join(parts)
