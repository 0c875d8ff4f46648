"""Testes do ciclo de vida das instâncias."""

from __future__ import annotations

import pytest

from app.domain.instance import SETTINGS_AGENT_AVATAR_URL, SETTINGS_AGENT_PHONE
from app.infra.stores import MemoryInstanceStore
from app.protocols.models import PlatformUser, WebhookShape
from app.services.agent_attribution import AgentAttributionService
from app.services.instance_lifecycle import InstanceLifecycleService
from fsm import InstanceState
from tests.fakes.defaults import AGENT_USER_ID, OTHER_TENANT_KEY, TENANT_KEY
from tests.fakes.fake_gateway import FakeGateway
from tests.fakes.fake_platform import FakePlatform
from utils.errors import (
    ConflictError,
    ForbiddenError,
    HttpError,
    IntegrationError,
    InvalidCredentialsError,
    NotFoundError,
)

WEBHOOK_URL = "https://bridge.test/webhooks/evolution"


@pytest.fixture
def lifecycle(
    instance_store: MemoryInstanceStore,
    gateway: FakeGateway,
    platform: FakePlatform,
) -> InstanceLifecycleService:
    return InstanceLifecycleService(
        instance_store,
        gateway,
        AgentAttributionService(platform, instance_store),
        webhook_url=WEBHOOK_URL,
    )


class TestCreateInstance:
    async def test_create_probes_state_and_registers_webhook(
        self, lifecycle: InstanceLifecycleService, gateway: FakeGateway
    ) -> None:
        instance = await lifecycle.create_instance(TENANT_KEY, "bot1", "tok")

        assert instance.state is InstanceState.AUTHORIZED
        assert instance.custom_name == "Instance bot1"
        assert instance.tenant_key == TENANT_KEY
        set_calls = gateway.calls_to("set_webhook")
        assert set_calls[0]["url"] == WEBHOOK_URL
        assert set_calls[0]["shape"] is WebhookShape.FULL

    async def test_inconclusive_probe_defaults_to_not_authorized(
        self, lifecycle: InstanceLifecycleService, gateway: FakeGateway
    ) -> None:
        gateway.state = "weird"

        instance = await lifecycle.create_instance(
            TENANT_KEY, "bot1", "tok", custom_name="Vendas", external_id="guid-1"
        )

        assert instance.state is InstanceState.NOT_AUTHORIZED
        assert instance.custom_name == "Vendas"
        assert instance.external_id == "guid-1"

    async def test_duplicate_name_is_conflict(
        self, lifecycle: InstanceLifecycleService, instance
    ) -> None:
        with pytest.raises(ConflictError):
            await lifecycle.create_instance(TENANT_KEY, instance.name, "tok")

    async def test_invalid_credentials_persist_nothing(
        self,
        lifecycle: InstanceLifecycleService,
        gateway: FakeGateway,
        instance_store: MemoryInstanceStore,
    ) -> None:
        gateway.valid_tokens = {"bot1": "right"}

        with pytest.raises(InvalidCredentialsError):
            await lifecycle.create_instance(TENANT_KEY, "bot1", "wrong")

        assert await instance_store.get("bot1") is None


class TestReconcile:
    async def test_list_applies_polled_state(
        self, lifecycle: InstanceLifecycleService, gateway: FakeGateway, instance
    ) -> None:
        gateway.state = "close"

        instances = await lifecycle.list_instances(TENANT_KEY)

        assert [i.state for i in instances] == [InstanceState.NOT_AUTHORIZED]

    async def test_poll_failure_keeps_last_known_state(
        self, lifecycle: InstanceLifecycleService, gateway: FakeGateway, instance
    ) -> None:
        gateway.failures["get_status"] = HttpError("down", status_code=502)

        instances = await lifecycle.list_instances(TENANT_KEY)

        assert [i.state for i in instances] == [InstanceState.AUTHORIZED]

    async def test_list_is_scoped_to_tenant(
        self, lifecycle: InstanceLifecycleService, instance
    ) -> None:
        assert await lifecycle.list_instances(OTHER_TENANT_KEY) == []


class TestOwnership:
    async def test_unknown_id_is_not_found(self, lifecycle: InstanceLifecycleService) -> None:
        with pytest.raises(NotFoundError):
            await lifecycle.request_qr(TENANT_KEY, 999)

    async def test_other_tenant_is_forbidden(
        self, lifecycle: InstanceLifecycleService, gateway: FakeGateway, instance
    ) -> None:
        with pytest.raises(ForbiddenError):
            await lifecycle.delete(OTHER_TENANT_KEY, instance.id)
        assert gateway.calls_to("delete") == []


class TestQrLogoutDeleteRename:
    async def test_request_qr_marks_qr_code(
        self,
        lifecycle: InstanceLifecycleService,
        gateway: FakeGateway,
        instance_store: MemoryInstanceStore,
        instance,
    ) -> None:
        qr = await lifecycle.request_qr(TENANT_KEY, instance.id, number="5511999998888")

        assert qr == gateway.qr
        assert gateway.calls_to("get_qr")[0]["number"] == "5511999998888"
        assert (await instance_store.get(instance.name)).state is InstanceState.QR_CODE

    async def test_request_qr_unexpected_shape_is_integration_error(
        self, lifecycle: InstanceLifecycleService, gateway: FakeGateway, instance
    ) -> None:
        gateway.qr = None

        with pytest.raises(IntegrationError):
            await lifecycle.request_qr(TENANT_KEY, instance.id)

    async def test_logout_success_sets_not_authorized(
        self,
        lifecycle: InstanceLifecycleService,
        instance_store: MemoryInstanceStore,
        instance,
    ) -> None:
        updated = await lifecycle.logout(TENANT_KEY, instance.id)

        assert updated.state is InstanceState.NOT_AUTHORIZED
        assert (await instance_store.get(instance.name)).state is InstanceState.NOT_AUTHORIZED

    async def test_logout_failure_keeps_state(
        self,
        lifecycle: InstanceLifecycleService,
        gateway: FakeGateway,
        instance_store: MemoryInstanceStore,
        instance,
    ) -> None:
        gateway.failures["logout"] = HttpError("down", status_code=500)

        with pytest.raises(IntegrationError):
            await lifecycle.logout(TENANT_KEY, instance.id)

        assert (await instance_store.get(instance.name)).state is InstanceState.AUTHORIZED

    async def test_delete_removes_locally_even_when_remote_fails(
        self,
        lifecycle: InstanceLifecycleService,
        gateway: FakeGateway,
        instance_store: MemoryInstanceStore,
        instance,
    ) -> None:
        gateway.failures["delete"] = HttpError("gone", status_code=404)

        remote = await lifecycle.delete(TENANT_KEY, instance.id)

        assert remote.ok is False
        assert await instance_store.get(instance.name) is None

    async def test_rename(
        self, lifecycle: InstanceLifecycleService, instance
    ) -> None:
        renamed = await lifecycle.rename(TENANT_KEY, instance.id, "Suporte")

        assert renamed.custom_name == "Suporte"
        assert renamed.name == instance.name


class TestConnectionUpdate:
    async def test_open_captures_agent_profile_and_maps_user(
        self,
        lifecycle: InstanceLifecycleService,
        instance_store: MemoryInstanceStore,
        platform: FakePlatform,
        instance,
    ) -> None:
        await instance_store.update_state(instance.name, InstanceState.QR_CODE)
        platform.users = [PlatformUser(id=AGENT_USER_ID, phone="+5511977776666")]

        updated = await lifecycle.apply_connection_update(
            instance.name,
            {
                "state": "open",
                "wuid": "5511977776666@s.whatsapp.net",
                "profilePictureUrl": "https://pic",
            },
        )

        stored = await instance_store.get(instance.name)
        assert updated is not None
        assert stored.state is InstanceState.AUTHORIZED
        assert stored.settings[SETTINGS_AGENT_PHONE] == "5511977776666"
        assert stored.settings[SETTINGS_AGENT_AVATAR_URL] == "https://pic"
        assert stored.agent_user_id == AGENT_USER_ID

    async def test_unknown_state_changes_nothing(
        self,
        lifecycle: InstanceLifecycleService,
        gateway: FakeGateway,
        instance_store: MemoryInstanceStore,
        instance,
    ) -> None:
        assert await lifecycle.apply_connection_update(instance.name, {"state": "refused"}) is None
        assert (await instance_store.get(instance.name)).state is InstanceState.AUTHORIZED
        assert gateway.calls == []

    async def test_unknown_instance_is_ignored(self, lifecycle: InstanceLifecycleService) -> None:
        assert await lifecycle.apply_connection_update("ghost", {"state": "open"}) is None

    async def test_agent_lookup_failure_does_not_block_state(
        self,
        lifecycle: InstanceLifecycleService,
        instance_store: MemoryInstanceStore,
        platform: FakePlatform,
        instance,
    ) -> None:
        await instance_store.update_state(instance.name, InstanceState.STARTING)
        platform.failures["list_users"] = HttpError("down", status_code=500)

        await lifecycle.apply_connection_update(
            instance.name, {"state": "open", "wuid": "5511977776666@s.whatsapp.net"}
        )

        assert (await instance_store.get(instance.name)).state is InstanceState.AUTHORIZED


class TestEnsureWebhook:
    async def test_matching_url_skips_write(
        self, lifecycle: InstanceLifecycleService, gateway: FakeGateway, instance
    ) -> None:
        gateway.webhook_url = WEBHOOK_URL

        result = await lifecycle.ensure_webhook(instance)

        assert result.skipped is True
        assert gateway.calls_to("set_webhook") == []

    async def test_shapes_are_tried_in_order(
        self, lifecycle: InstanceLifecycleService, gateway: FakeGateway, instance
    ) -> None:
        gateway.rejected_shapes = {WebhookShape.FULL, WebhookShape.URL_BODY}

        result = await lifecycle.ensure_webhook(instance)

        assert result.ok is True
        assert result.value is WebhookShape.URL_QUERY
        assert [c["shape"] for c in gateway.calls_to("set_webhook")] == [
            WebhookShape.FULL,
            WebhookShape.URL_BODY,
            WebhookShape.URL_QUERY,
        ]

    async def test_all_shapes_failing_is_reported_not_raised(
        self, lifecycle: InstanceLifecycleService, gateway: FakeGateway, instance
    ) -> None:
        gateway.rejected_shapes = set(WebhookShape)

        result = await lifecycle.ensure_webhook(instance)

        assert result.ok is False

    async def test_without_webhook_url_nothing_is_written(
        self,
        instance_store: MemoryInstanceStore,
        gateway: FakeGateway,
        platform: FakePlatform,
        instance,
    ) -> None:
        service = InstanceLifecycleService(
            instance_store, gateway, AgentAttributionService(platform, instance_store)
        )

        result = await service.ensure_webhook(instance)

        assert result.skipped is True
        assert gateway.calls == []
