"""
Exports públicos do módulo fsm/manager.
"""

from fsm.manager.machine import InstanceStateMachine

__all__ = [
    "InstanceStateMachine",
]
