"""
Módulo FSM: estado de conexão das instâncias WhatsApp.

Estrutura:
    - states/: InstanceState e defaults
    - transitions/: mapeamento estado externo -> estado local
    - manager/: InstanceStateMachine (observe/force)
    - types/: StateTransition, TransitionResult
"""

from fsm.manager import InstanceStateMachine
from fsm.states import (
    DEFAULT_INITIAL_STATE,
    REST_STATE,
    InstanceState,
    is_valid_state,
    parse_state,
)
from fsm.transitions import (
    EXTERNAL_STATE_MAP,
    extract_external_state,
    map_external_state,
)
from fsm.types import StateTransition, TransitionResult

__all__ = [
    "DEFAULT_INITIAL_STATE",
    "EXTERNAL_STATE_MAP",
    "REST_STATE",
    "InstanceState",
    "InstanceStateMachine",
    "StateTransition",
    "TransitionResult",
    "extract_external_state",
    "is_valid_state",
    "map_external_state",
    "parse_state",
]
