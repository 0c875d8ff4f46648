"""Extração do webhook da Platform."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from app.protocols.models import PlatformEvent
from utils.errors import MalformedPayloadError


def parse_platform_event(payload: Any, location_header: str | None = None) -> PlatformEvent:
    """Converte o payload em PlatformEvent.

    `locationId` ausente no corpo é completado pelo header `x-location-id`.
    """
    if not isinstance(payload, dict):
        raise MalformedPayloadError("Platform payload must be a JSON object")
    try:
        event = PlatformEvent.model_validate(payload)
    except ValidationError as exc:
        raise MalformedPayloadError("Platform payload has invalid fields") from exc
    if not event.location_id and location_header and location_header.strip():
        event = event.model_copy(update={"location_id": location_header.strip()})
    return event
