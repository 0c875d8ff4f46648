"""
Máquina de estados de uma instância WhatsApp.

Não valida ordem de eventos: toda observação mapeada é aplicada
(last-write-wins). Um evento atrasado pode regredir o estado.
"""

from __future__ import annotations

from typing import Any

from fsm.states.instance import DEFAULT_INITIAL_STATE, InstanceState
from fsm.transitions.mapping import map_external_state
from fsm.types.transition import StateTransition, TransitionResult


class InstanceStateMachine:
    """
    Estado local de uma instância e seu histórico em memória.

    Attributes:
        current_state: Estado atual
        history: Transições efetivas desta máquina
    """

    __slots__ = ("_current_state", "_history", "_instance_name")

    def __init__(
        self,
        instance_name: str,
        initial_state: InstanceState | None = None,
    ) -> None:
        self._instance_name = instance_name
        self._current_state = initial_state or DEFAULT_INITIAL_STATE
        self._history: list[StateTransition] = []

    @property
    def current_state(self) -> InstanceState:
        return self._current_state

    @property
    def instance_name(self) -> str:
        return self._instance_name

    @property
    def history(self) -> list[StateTransition]:
        """Histórico de transições (cópia)."""
        return list(self._history)

    def observe(self, external_state: Any, trigger: str) -> TransitionResult:
        """
        Aplica um estado reportado pelo Gateway.

        Estado externo desconhecido não altera nada e retorna ignored=True.

        Args:
            external_state: Valor cru do Gateway (ex: 'open', 'close')
            trigger: Origem ('webhook', 'poll', 'create')

        Returns:
            TransitionResult com estado anterior e atual
        """
        target = map_external_state(external_state)
        if target is None:
            return TransitionResult(
                previous=self._current_state,
                current=self._current_state,
                trigger=trigger,
                ignored=True,
            )
        return self._apply(target, trigger, str(external_state))

    def force(self, target: InstanceState, trigger: str) -> TransitionResult:
        """Transição local incondicional (pedido de QR, logout)."""
        return self._apply(target, trigger, None)

    def _apply(
        self,
        target: InstanceState,
        trigger: str,
        external_state: str | None,
    ) -> TransitionResult:
        previous = self._current_state
        if previous == target:
            return TransitionResult(previous=previous, current=target, trigger=trigger)

        transition = StateTransition(
            from_state=previous,
            to_state=target,
            trigger=trigger,
            external_state=external_state,
        )
        self._current_state = target
        self._history.append(transition)
        return TransitionResult(
            previous=previous,
            current=target,
            trigger=trigger,
            transition=transition,
        )

    def get_state_summary(self) -> dict[str, Any]:
        """Resumo seguro para logs."""
        return {
            "instance": self._instance_name,
            "current_state": self._current_state.value,
            "transition_count": len(self._history),
        }
