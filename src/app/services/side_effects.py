"""Efeitos colaterais best-effort.

Um efeito best-effort nunca interrompe o fluxo principal: a falha é
registrada em log e devolvida como resultado tipado para quem quiser
inspecioná-la (testes, respostas da API).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class SideEffectResult(Generic[T]):
    """Resultado de um efeito best-effort."""

    name: str
    ok: bool
    value: T | None = None
    error: str | None = None
    skipped: bool = False

    @classmethod
    def skip(cls, name: str, reason: str) -> SideEffectResult[Any]:
        return cls(name=name, ok=True, error=reason, skipped=True)


async def best_effort(
    name: str,
    call: Callable[[], Awaitable[T]],
    *,
    logger: logging.Logger,
    **log_extra: Any,
) -> SideEffectResult[T]:
    """Executa `call` capturando qualquer falha como SideEffectResult."""
    try:
        value = await call()
    except Exception as exc:
        logger.warning(
            "side_effect_failed",
            extra={"side_effect": name, "error_type": type(exc).__name__, **log_extra},
        )
        return SideEffectResult(name=name, ok=False, error=type(exc).__name__)
    return SideEffectResult(name=name, ok=True, value=value)
