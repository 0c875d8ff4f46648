"""Extração estrutural de eventos do Gateway.

Não faz validação de negócio; apenas lê campos do payload bruto.
Tipos de mensagem sem texto (áudio, sticker, localização...) resultam
em corpo vazio.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from app.protocols.models import GatewayEvent
from utils.errors import MalformedPayloadError

logger = logging.getLogger(__name__)


def _dig(data: Any, *path: str) -> Any:
    current = data
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


# Ordem de prioridade dos campos que carregam texto
_BODY_PATHS: tuple[tuple[str, ...], ...] = (
    ("conversation",),
    ("extendedTextMessage", "text"),
    ("imageMessage", "caption"),
    ("videoMessage", "caption"),
    ("buttonsResponseMessage", "selectedDisplayText"),
    ("listResponseMessage", "title"),
    ("listResponseMessage", "singleSelectReply", "selectedRowId"),
)


def extract_message_body(message: dict[str, Any] | None) -> str:
    """Primeiro texto não vazio do objeto `data.message`.

    Texto só com espaços conta como vazio.
    """
    if not isinstance(message, dict):
        return ""
    for path in _BODY_PATHS:
        value = _dig(message, *path)
        if isinstance(value, str) and value.strip():
            return value
    return ""


def extract_push_name(data: dict[str, Any]) -> str | None:
    value = data.get("pushName")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_gateway_event(payload: Any) -> GatewayEvent:
    """Valida o envelope do webhook do Gateway.

    Raises:
        MalformedPayloadError: payload não é objeto ou campos com tipo inválido
    """
    if not isinstance(payload, dict):
        raise MalformedPayloadError("Gateway payload must be a JSON object")
    try:
        return GatewayEvent.model_validate(payload)
    except ValidationError as exc:
        logger.warning(
            "gateway_event_invalid",
            extra={"error_count": exc.error_count()},
        )
        raise MalformedPayloadError("Gateway payload has invalid fields") from exc
