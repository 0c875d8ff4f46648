"""
Estados de conexão de uma instância WhatsApp.

Não há estado terminal: NOT_AUTHORIZED é o estado de repouso após
logout ou desconexão; deleção remove o registro em vez de transitar.
"""

from enum import StrEnum


class InstanceState(StrEnum):
    """
    Estados canônicos de uma instância.

    Os valores são os gravados no store e expostos na API.
    """

    STARTING = "starting"
    QR_CODE = "qr_code"
    AUTHORIZED = "authorized"
    NOT_AUTHORIZED = "notAuthorized"
    YELLOW_CARD = "yellowCard"
    BLOCKED = "blocked"

    def __str__(self) -> str:
        return self.value


# Estado usado quando o probe inicial no Gateway é inconclusivo
DEFAULT_INITIAL_STATE: InstanceState = InstanceState.NOT_AUTHORIZED

# Estado de repouso após logout
REST_STATE: InstanceState = InstanceState.NOT_AUTHORIZED


def is_valid_state(value: str) -> bool:
    """Verifica se a string corresponde a um InstanceState."""
    return value in InstanceState._value2member_map_


def parse_state(value: str | None) -> InstanceState:
    """Converte valor persistido em InstanceState (default se ausente/inválido)."""
    if value and is_valid_state(value):
        return InstanceState(value)
    return DEFAULT_INITIAL_STATE
