"""Endpoint de webhook do Gateway WhatsApp.

Endpoint:
- POST /webhooks/evolution: eventos connection.update e messages.upsert

Segurança:
- O Gateway envia `Authorization: Bearer <token da instância>`
- O token é comparado em tempo constante com o credential_token da
  instância nomeada no payload; qualquer falha responde 401 sem
  nenhuma chamada downstream
"""

from __future__ import annotations

import hmac
import json
import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Depends, Request, Response, status

from api.normalizers.evolution import parse_gateway_event
from api.routes.webhooks import runtime
from app.bootstrap import get_instance_store
from app.observability import CORRELATION_HEADER, correlation_scope
from app.protocols.instance_store import InstanceStoreProtocol
from config.settings import get_evolution_settings
from utils.errors import MalformedPayloadError, UnauthorizedError

if TYPE_CHECKING:
    from app.domain.instance import Instance

logger = logging.getLogger(__name__)

router = APIRouter()

ACK_BODY = "Webhook received"
_BEARER_PREFIX = "bearer "


def extract_bearer_token(authorization: str | None) -> str | None:
    """Token do header `Authorization: Bearer <token>` (None se ausente/vazio)."""
    if not authorization or not authorization.lower().startswith(_BEARER_PREFIX):
        return None
    token = authorization[len(_BEARER_PREFIX):].strip()
    return token or None


async def authenticate_gateway_webhook(
    payload: Any,
    authorization: str | None,
    instance_store: InstanceStoreProtocol,
) -> Instance:
    """Valida o bearer do webhook contra o token da instância.

    Raises:
        UnauthorizedError: payload sem instância, token ausente, instância
            desconhecida ou token divergente
    """
    instance_name = payload.get("instance") if isinstance(payload, dict) else None
    if not isinstance(instance_name, str) or not instance_name:
        raise UnauthorizedError("missing_instance")

    token = extract_bearer_token(authorization)
    if token is None:
        raise UnauthorizedError("missing_bearer")

    instance = await instance_store.get(instance_name)
    if instance is None:
        raise UnauthorizedError("unknown_instance")

    if not hmac.compare_digest(
        token.encode("utf-8"), instance.credential_token.encode("utf-8")
    ):
        raise UnauthorizedError("token_mismatch")
    return instance


def _decode_json(raw_body: bytes) -> Any:
    try:
        return json.loads(raw_body) if raw_body else None
    except (ValueError, UnicodeDecodeError):
        return None


@router.post("/evolution")
async def receive_evolution_webhook(
    request: Request,
    instance_store: InstanceStoreProtocol = Depends(get_instance_store),
) -> Response:
    """Recebe eventos do Gateway.

    Returns:
        200 "Webhook received" (text/plain) ou 401 se o guard falhar.
    """
    with correlation_scope(request.headers.get(CORRELATION_HEADER)) as correlation_id:
        payload = _decode_json(await request.body())

        try:
            instance = await authenticate_gateway_webhook(
                payload, request.headers.get("authorization"), instance_store
            )
        except UnauthorizedError as exc:
            logger.warning(
                "webhook_unauthorized",
                extra={
                    "channel": "evolution",
                    "correlation_id": correlation_id,
                    "reason": str(exc),
                },
            )
            return Response(
                content="Unauthorized",
                media_type="text/plain",
                status_code=status.HTTP_401_UNAUTHORIZED,
            )

        try:
            event = parse_gateway_event(payload)
        except MalformedPayloadError as exc:
            logger.warning(
                "webhook_payload_invalid",
                extra={
                    "channel": "evolution",
                    "correlation_id": correlation_id,
                    "error": str(exc),
                },
            )
            return Response(content=ACK_BODY, media_type="text/plain")

        logger.info(
            "webhook_received",
            extra={
                "channel": "evolution",
                "correlation_id": correlation_id,
                "instance": instance.name,
                "gateway_event": event.event,
            },
        )
        await runtime.dispatch_gateway_event(
            event,
            correlation_id,
            get_evolution_settings().webhook_processing_mode,
        )
        return Response(content=ACK_BODY, media_type="text/plain")
