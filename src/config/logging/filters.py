"""Filters de logging para injeção de contexto (service, correlation_id)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

# Campos de `extra` que nunca saem em claro (tokens de instância/OAuth)
REDACTED_FIELDS = frozenset(
    {"token", "credential_token", "access_token", "refresh_token", "authorization", "apikey"}
)
REDACTED_VALUE = "[redacted]"


class CorrelationIdFilter(logging.Filter):
    """Injeta correlation_id e service em cada record de log.

    Um correlation_id passado explicitamente via `extra` é preservado.
    Campos sensíveis em `extra` são mascarados.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or (lambda: "")

    def filter(self, record: logging.LogRecord) -> bool:
        existing = getattr(record, "correlation_id", None)
        record.correlation_id = existing if existing else self._get_correlation_id()
        record.service = self._service_name
        for field in REDACTED_FIELDS.intersection(record.__dict__):
            if getattr(record, field):
                setattr(record, field, REDACTED_VALUE)
        return True
