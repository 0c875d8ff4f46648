"""
Exports públicos do módulo fsm/transitions.
"""

from fsm.transitions.mapping import (
    EXTERNAL_STATE_MAP,
    extract_external_state,
    map_external_state,
)

__all__ = [
    "EXTERNAL_STATE_MAP",
    "extract_external_state",
    "map_external_state",
]
