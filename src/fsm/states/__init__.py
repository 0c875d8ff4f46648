"""
Exports públicos do módulo fsm/states.
"""

from fsm.states.instance import (
    DEFAULT_INITIAL_STATE,
    REST_STATE,
    InstanceState,
    is_valid_state,
    parse_state,
)

__all__ = [
    "DEFAULT_INITIAL_STATE",
    "REST_STATE",
    "InstanceState",
    "is_valid_state",
    "parse_state",
]
