"""Normalizer da Platform (webhooks de mensagens de agentes)."""

from .extractor import parse_platform_event

__all__ = ["parse_platform_event"]
