"""Normalizers por integração: conversão de payloads externos para modelos internos.

Estrutura:
- evolution/: eventos de webhook do Gateway WhatsApp
- ghl/: eventos de webhook da Platform
"""

from .evolution import extract_message_body, extract_push_name, parse_gateway_event
from .ghl import parse_platform_event

__all__ = [
    "extract_message_body",
    "extract_push_name",
    "parse_gateway_event",
    "parse_platform_event",
]
