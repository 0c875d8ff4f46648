"""Normalizer do Gateway (Evolution API)."""

from .extractor import (
    extract_message_body,
    extract_push_name,
    parse_gateway_event,
)

__all__ = [
    "extract_message_body",
    "extract_push_name",
    "parse_gateway_event",
]
