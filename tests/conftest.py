"""Configuração do pytest para o projeto wlink_bridge."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Adiciona src/ (imports absolutos) e a raiz (tests.fakes) ao PYTHONPATH
root_path = Path(__file__).parent.parent
for path in (root_path / "src", root_path):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from app.domain.instance import Instance  # noqa: E402
from app.domain.tenant import Tenant  # noqa: E402
from app.infra.stores import MemoryInstanceStore, MemoryTenantStore  # noqa: E402
from fsm import InstanceState  # noqa: E402
from tests.fakes.defaults import INSTANCE_NAME, INSTANCE_TOKEN, TENANT_KEY  # noqa: E402
from tests.fakes.fake_gateway import FakeGateway  # noqa: E402
from tests.fakes.fake_platform import FakePlatform  # noqa: E402


@pytest.fixture
def instance_store() -> MemoryInstanceStore:
    return MemoryInstanceStore()


@pytest.fixture
def tenant_store() -> MemoryTenantStore:
    return MemoryTenantStore()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
async def instance(instance_store: MemoryInstanceStore) -> Instance:
    """Instância autorizada `bot1` do tenant padrão."""
    return await instance_store.create(
        name=INSTANCE_NAME,
        tenant_key=TENANT_KEY,
        credential_token=INSTANCE_TOKEN,
        state=InstanceState.AUTHORIZED,
        custom_name="Vendas",
    )


@pytest.fixture
def tenant() -> Tenant:
    return Tenant(
        tenant_key=TENANT_KEY,
        access_token="access-1",
        refresh_token="refresh-1",
    )
