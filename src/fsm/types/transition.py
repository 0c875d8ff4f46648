"""
Tipos para registro de transições de estado de instância.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from fsm.states.instance import InstanceState


@dataclass(frozen=True, slots=True)
class StateTransition:
    """
    Registro imutável de uma mudança de estado.

    Attributes:
        from_state: Estado anterior
        to_state: Estado resultante
        trigger: Origem da transição (ex: 'webhook', 'poll', 'qr_request')
        external_state: Estado cru do Gateway (quando observado)
        timestamp: Momento da transição (UTC)
    """

    from_state: InstanceState
    to_state: InstanceState
    trigger: str
    external_state: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.trigger or not self.trigger.strip():
            raise ValueError("trigger não pode ser vazio")

    def to_log_dict(self) -> dict[str, Any]:
        return {
            "from_state": self.from_state.value,
            "to_state": self.to_state.value,
            "trigger": self.trigger,
            "external_state": self.external_state,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class TransitionResult:
    """
    Resultado de uma observação/forçamento de estado.

    Attributes:
        previous: Estado antes da operação
        current: Estado após a operação
        trigger: Origem da operação
        ignored: True quando o estado externo não foi reconhecido
        transition: Registro da transição (None se nada mudou)
    """

    previous: InstanceState
    current: InstanceState
    trigger: str
    ignored: bool = False
    transition: StateTransition | None = None

    @property
    def changed(self) -> bool:
        return self.previous != self.current
