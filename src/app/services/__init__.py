"""Serviços de aplicação.

Unidades reutilizáveis de orquestração sobre os protocolos de
Gateway, Platform e stores. Implementações concretas de IO ficam em
app/infra/ e api/connectors/.
"""

from app.services.agent_attribution import AgentAttributionService, is_valid_user_id
from app.services.identity import (
    IdentityResolver,
    normalize_digits,
    normalize_e164,
    phone_from_jid,
    phones_match,
    placeholder_name,
)
from app.services.instance_lifecycle import InstanceLifecycleService
from app.services.message_status import MessageStatusReporter
from app.services.side_effects import SideEffectResult, best_effort

__all__ = [
    "AgentAttributionService",
    "IdentityResolver",
    "InstanceLifecycleService",
    "MessageStatusReporter",
    "SideEffectResult",
    "best_effort",
    "is_valid_user_id",
    "normalize_digits",
    "normalize_e164",
    "phone_from_jid",
    "phones_match",
    "placeholder_name",
]
