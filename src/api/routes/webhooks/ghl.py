"""Endpoint de webhook da Platform (mensagens escritas por agentes).

Endpoint:
- POST /webhooks/ghl: sempre 200 "Webhook received"; o envio pelo
  Gateway acontece depois da resposta
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Request, Response

from api.normalizers.ghl import parse_platform_event
from api.routes.webhooks import runtime
from app.observability import CORRELATION_HEADER, correlation_scope
from config.settings import get_evolution_settings
from utils.errors import MalformedPayloadError

logger = logging.getLogger(__name__)

router = APIRouter()

ACK_BODY = "Webhook received"


@router.post("/ghl")
async def receive_ghl_webhook(request: Request) -> Response:
    """Recebe mensagens de saída da Platform."""
    with correlation_scope(request.headers.get(CORRELATION_HEADER)) as correlation_id:
        raw_body = await request.body()
        try:
            payload = json.loads(raw_body) if raw_body else None
            event = parse_platform_event(payload, request.headers.get("x-location-id"))
        except (ValueError, MalformedPayloadError) as exc:
            logger.warning(
                "webhook_payload_invalid",
                extra={
                    "channel": "ghl",
                    "correlation_id": correlation_id,
                    "error_type": type(exc).__name__,
                },
            )
            return Response(content=ACK_BODY, media_type="text/plain")

        logger.info(
            "webhook_received",
            extra={
                "channel": "ghl",
                "correlation_id": correlation_id,
                "tenant_key": event.location_id,
                "message_id": event.message_id,
            },
        )
        await runtime.dispatch_platform_event(
            event,
            correlation_id,
            get_evolution_settings().webhook_processing_mode,
        )
        return Response(content=ACK_BODY, media_type="text/plain")
