"""Dependência de tenant para a API de gerenciamento.

A custom page da Platform envia o contexto do usuário cifrado no header
`x-ghl-context`; o tenant é lido do JSON decifrado.
"""

from __future__ import annotations

import logging

from fastapi import Header, HTTPException, status

from app.infra.crypto import ContextCryptoError, decrypt_context, tenant_key_from_context
from config.settings import get_ghl_settings

logger = logging.getLogger(__name__)

CONTEXT_HEADER = "x-ghl-context"


def resolve_tenant_key(encrypted_context: str | None, shared_secret: str) -> str:
    """Decifra o contexto e retorna o tenant.

    Raises:
        HTTPException: 401 se o header faltar, não decifrar ou não
            trouxer location
    """
    if not encrypted_context:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No GHL context provided",
        )
    try:
        context = decrypt_context(encrypted_context, shared_secret)
    except ContextCryptoError as exc:
        logger.warning("tenant_context_invalid", extra={"error": str(exc)})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid GHL context",
        ) from exc

    tenant_key = tenant_key_from_context(context)
    if not tenant_key:
        logger.warning("tenant_context_missing_location")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No active location ID in user context",
        )
    return tenant_key


async def get_tenant_key(
    x_ghl_context: str | None = Header(default=None, alias=CONTEXT_HEADER),
) -> str:
    """Dependência FastAPI: tenant do usuário autenticado na custom page."""
    return resolve_tenant_key(x_ghl_context, get_ghl_settings().shared_secret)
