"""Instance - uma conexão WhatsApp pertencente a um tenant.

`name` é o único identificador usado para endereçar o Gateway;
`custom_name` e `external_id` nunca são usados para isso.
"""
from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from fsm import DEFAULT_INITIAL_STATE, InstanceState

# Chaves de atribuição de agente dentro de settings
SETTINGS_AGENT_PHONE = "agentPhone"
SETTINGS_AGENT_USER_ID = "agentUserId"
SETTINGS_AGENT_AVATAR_URL = "agentAvatarUrl"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Instance(BaseModel):
    """Instância persistida no store."""

    id: int = Field(..., ge=1, description="ID numérico atribuído pelo store")
    name: str = Field(..., min_length=1, description="Nome imutável no Gateway")
    external_id: str | None = Field(None, description="GUID atribuído pelo Gateway")
    custom_name: str | None = None
    credential_token: str = Field(..., min_length=1, repr=False)
    state: InstanceState = DEFAULT_INITIAL_STATE
    settings: dict[str, Any] = Field(default_factory=dict)
    tenant_key: str = Field(..., min_length=1)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def agent_phone(self) -> str | None:
        value = self.settings.get(SETTINGS_AGENT_PHONE)
        return str(value) if value else None

    @property
    def agent_user_id(self) -> str | None:
        value = self.settings.get(SETTINGS_AGENT_USER_ID)
        return str(value) if value else None

    def to_public_dict(self) -> dict[str, Any]:
        """Representação exposta na API de gerenciamento (sem token)."""
        return {
            "id": self.id,
            "instanceName": self.name,
            "instanceId": self.external_id,
            "customName": self.custom_name,
            "state": self.state.value,
            "createdAt": self.created_at.isoformat(),
        }
