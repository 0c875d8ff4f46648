"""Testes da API de gerenciamento de instâncias."""

from __future__ import annotations

import pytest
from fastapi import HTTPException

from api.routes.instances import router as instances
from app.infra.stores import MemoryInstanceStore
from app.services.agent_attribution import AgentAttributionService
from app.services.instance_lifecycle import InstanceLifecycleService
from tests.fakes.defaults import INSTANCE_NAME, INSTANCE_TOKEN, OTHER_TENANT_KEY, TENANT_KEY
from tests.fakes.fake_gateway import FakeGateway
from tests.fakes.fake_platform import FakePlatform
from utils.errors import BridgeError


@pytest.fixture
def lifecycle(
    instance_store: MemoryInstanceStore,
    gateway: FakeGateway,
    platform: FakePlatform,
) -> InstanceLifecycleService:
    return InstanceLifecycleService(
        instance_store, gateway, AgentAttributionService(platform, instance_store)
    )


async def test_list_returns_public_fields(lifecycle: InstanceLifecycleService, instance) -> None:
    response = await instances.list_instances(TENANT_KEY, lifecycle)

    assert response["success"] is True
    [item] = response["instances"]
    assert item["instanceName"] == INSTANCE_NAME
    assert item["customName"] == "Vendas"
    assert item["state"] == "authorized"
    assert "credential_token" not in item
    assert INSTANCE_TOKEN not in str(item)


async def test_create_registers_instance(lifecycle: InstanceLifecycleService) -> None:
    body = instances.CreateInstanceRequest.model_validate(
        {"instanceName": "bot9", "token": "tok-9", "instanceId": "guid-9"}
    )

    response = await instances.create_instance(body, TENANT_KEY, lifecycle)

    assert response["instance"]["instanceName"] == "bot9"
    assert response["instance"]["instanceId"] == "guid-9"
    assert response["instance"]["customName"] == "Instance bot9"


async def test_create_duplicate_is_409(lifecycle: InstanceLifecycleService, instance) -> None:
    body = instances.CreateInstanceRequest(instance_name=INSTANCE_NAME, token="x")

    with pytest.raises(HTTPException) as exc_info:
        await instances.create_instance(body, TENANT_KEY, lifecycle)

    assert exc_info.value.status_code == 409


async def test_create_with_bad_token_is_400(
    lifecycle: InstanceLifecycleService, gateway: FakeGateway
) -> None:
    gateway.valid_tokens = {}
    body = instances.CreateInstanceRequest(instance_name="bot9", token="bad")

    with pytest.raises(HTTPException) as exc_info:
        await instances.create_instance(body, TENANT_KEY, lifecycle)

    assert exc_info.value.status_code == 400


async def test_logout(lifecycle: InstanceLifecycleService, instance) -> None:
    response = await instances.logout_instance(instance.id, TENANT_KEY, lifecycle)

    assert response == {"success": True, "message": "Logout command sent successfully."}


async def test_delete_other_tenant_is_403(lifecycle: InstanceLifecycleService, instance) -> None:
    with pytest.raises(HTTPException) as exc_info:
        await instances.delete_instance(instance.id, OTHER_TENANT_KEY, lifecycle)

    assert exc_info.value.status_code == 403


async def test_delete(
    lifecycle: InstanceLifecycleService, instance_store: MemoryInstanceStore, instance
) -> None:
    response = await instances.delete_instance(instance.id, TENANT_KEY, lifecycle)

    assert response["message"] == "Instance deleted successfully"
    assert await instance_store.get(INSTANCE_NAME) is None


async def test_rename(lifecycle: InstanceLifecycleService, instance) -> None:
    body = instances.UpdateInstanceRequest(custom_name="Suporte")

    response = await instances.update_instance(instance.id, body, TENANT_KEY, lifecycle)

    assert response["instance"]["customName"] == "Suporte"


async def test_qr_unknown_id_is_404(lifecycle: InstanceLifecycleService) -> None:
    with pytest.raises(HTTPException) as exc_info:
        await instances.get_qr_code(404, None, TENANT_KEY, lifecycle)

    assert exc_info.value.status_code == 404


async def test_qr_returns_type_and_data(
    lifecycle: InstanceLifecycleService, gateway: FakeGateway, instance
) -> None:
    response = await instances.get_qr_code(instance.id, None, TENANT_KEY, lifecycle)

    assert response == {"type": gateway.qr.type, "data": gateway.qr.data}


def test_unmapped_domain_error_is_500() -> None:
    assert instances.to_http_error(BridgeError("x")).status_code == 500
