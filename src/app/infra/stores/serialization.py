"""Codec explícito de Instance/Tenant para o store.

Registros são gravados como JSON (pydantic): ids inteiros como números,
datas em ISO-8601, estado como valor do enum. Nenhum hook global de
serialização é instalado; todo acesso ao store passa por aqui.
"""

from __future__ import annotations

from app.domain.instance import Instance
from app.domain.tenant import Tenant


def encode_instance(instance: Instance) -> str:
    return instance.model_dump_json()


def decode_instance(raw: str | bytes) -> Instance:
    return Instance.model_validate_json(raw)


def encode_tenant(tenant: Tenant) -> str:
    return tenant.model_dump_json()


def decode_tenant(raw: str | bytes) -> Tenant:
    return Tenant.model_validate_json(raw)
