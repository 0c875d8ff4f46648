"""Tenant - um workspace (location) da Platform e seus tokens OAuth."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, Field


class Tenant(BaseModel):
    """Tenant identificado pela tenant_key (locationId da Platform)."""

    tenant_key: str = Field(..., min_length=1)
    company_id: str | None = None
    access_token: str | None = Field(None, repr=False)
    refresh_token: str | None = Field(None, repr=False)
    token_expires_at: datetime | None = None

    @property
    def has_tokens(self) -> bool:
        return bool(self.access_token and self.refresh_token)

    def token_expires_within(self, seconds: int, now: datetime | None = None) -> bool:
        """True se o token expira dentro da janela (ou não tem expiração conhecida)."""
        if self.token_expires_at is None:
            return False
        current = now or datetime.now(UTC)
        expires_at = self.token_expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return expires_at - current <= timedelta(seconds=seconds)
