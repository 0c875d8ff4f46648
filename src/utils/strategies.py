"""Execução de cadeias de fallback declaradas como dados.

Uma cadeia é uma lista ordenada de `Strategy(name, call)`. Cada call
retorna um valor (sucesso), None (falha "esperada", ex: não encontrado)
ou levanta exceção (falha). A primeira estratégia com valor vence.

Uso:
    outcome = await run_strategies(
        [
            Strategy("contact_lookup", lambda: client.lookup(...)),
            Strategy("contact_search", lambda: client.search(...)),
        ],
        component="contact_resolution",
        logger=logger,
    )
    if outcome.succeeded:
        contact = outcome.value
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from config.logging import log_fallback

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Strategy(Generic[T]):
    """Uma tentativa nomeada dentro de uma cadeia."""

    name: str
    call: Callable[[], Awaitable[T | None]]


@dataclass(frozen=True, slots=True)
class StrategyFailure:
    """Motivo pelo qual uma estratégia não produziu valor."""

    name: str
    reason: str
    error: BaseException | None = None


@dataclass(slots=True)
class StrategyOutcome(Generic[T]):
    """Resultado de uma cadeia: valor da estratégia vencedora ou falhas."""

    value: T | None = None
    winner: str | None = None
    failures: list[StrategyFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.winner is not None

    @property
    def last_error(self) -> BaseException | None:
        for failure in reversed(self.failures):
            if failure.error is not None:
                return failure.error
        return None


def _describe(exc: BaseException) -> str:
    status_code = getattr(exc, "status_code", None)
    if status_code is not None:
        return f"http_{status_code}"
    return type(exc).__name__


async def run_strategies(
    strategies: Sequence[Strategy[T]],
    *,
    component: str,
    logger: logging.Logger,
    accept: Callable[[Any], bool] | None = None,
) -> StrategyOutcome[T]:
    """Executa as estratégias em ordem até a primeira com valor aceito.

    Args:
        strategies: Lista ordenada de tentativas.
        component: Nome da cadeia (para logs de fallback).
        logger: Logger do chamador.
        accept: Predicado opcional sobre o valor; default é `is not None`.

    Returns:
        StrategyOutcome com o valor vencedor ou a lista de falhas.
    """
    is_accepted = accept or (lambda value: value is not None)
    outcome: StrategyOutcome[T] = StrategyOutcome()

    for index, strategy in enumerate(strategies):
        try:
            value = await strategy.call()
        except Exception as exc:
            failure = StrategyFailure(strategy.name, _describe(exc), exc)
        else:
            if is_accepted(value):
                outcome.value = value
                outcome.winner = strategy.name
                return outcome
            failure = StrategyFailure(strategy.name, "no_result")

        outcome.failures.append(failure)
        next_name = strategies[index + 1].name if index + 1 < len(strategies) else None
        log_fallback(
            logger,
            component,
            reason=f"{failure.name}:{failure.reason}",
            next_strategy=next_name,
        )

    logger.warning(
        "strategies_exhausted",
        extra={
            "component": component,
            "attempts": [failure.name for failure in outcome.failures],
        },
    )
    return outcome
