"""
Mapeamento de estado externo (Gateway) para estado local.

Aplicado de forma uniforme em toda observação do Gateway:
leituras de status (polling) e eventos connection.update.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any

from fsm.states.instance import InstanceState

EXTERNAL_STATE_MAP: MappingProxyType[str, InstanceState] = MappingProxyType(
    {
        "open": InstanceState.AUTHORIZED,
        "connecting": InstanceState.STARTING,
        "qrcode": InstanceState.QR_CODE,
        "close": InstanceState.NOT_AUTHORIZED,
    }
)


def map_external_state(external_state: Any) -> InstanceState | None:
    """Retorna o estado local para o estado do Gateway, ou None se desconhecido."""
    if not isinstance(external_state, str):
        return None
    return EXTERNAL_STATE_MAP.get(external_state)


def extract_external_state(status_payload: Any) -> str | None:
    """Lê o estado cru de uma resposta de connectionState.

    Formato atual: {"instance": {"state": "open"}}; formatos antigos
    trazem `state` ou `status` na raiz.
    """
    if not isinstance(status_payload, dict):
        return None
    instance = status_payload.get("instance")
    if isinstance(instance, dict) and instance.get("state"):
        return str(instance["state"])
    for key in ("state", "status"):
        value = status_payload.get(key)
        if isinstance(value, str) and value:
            return value
    return None
