"""Testes do cache de atribuição de agente."""

from __future__ import annotations

from app.domain.instance import SETTINGS_AGENT_PHONE, SETTINGS_AGENT_USER_ID
from app.infra.stores import MemoryInstanceStore
from app.protocols.models import PlatformUser
from app.services.agent_attribution import (
    USER_DIRECTORY_ENDPOINTS,
    AgentAttributionService,
    is_valid_user_id,
    merge_instance_settings,
)
from tests.fakes.defaults import AGENT_USER_ID, TENANT_KEY
from tests.fakes.fake_platform import FakePlatform
from utils.errors import HttpError

AGENT_JID = "5511977776666@s.whatsapp.net"


def test_is_valid_user_id() -> None:
    assert is_valid_user_id(AGENT_USER_ID, TENANT_KEY) is True
    assert is_valid_user_id("short", TENANT_KEY) is False
    assert is_valid_user_id("user-with-dash-000", TENANT_KEY) is False
    assert is_valid_user_id(TENANT_KEY.replace("_", ""), TENANT_KEY.replace("_", "")) is False
    assert is_valid_user_id(None, TENANT_KEY) is False


async def test_merge_instance_settings_keeps_existing_keys(instance_store: MemoryInstanceStore, instance) -> None:
    await instance_store.update_settings(instance.name, {"keep": 1})

    merged = await merge_instance_settings(instance_store, instance.name, {"new": 2})

    assert merged.settings == {"keep": 1, "new": 2}
    assert await merge_instance_settings(instance_store, "missing", {"x": 1}) is None


class TestResolve:
    async def test_live_lookup_matches_suffix_and_caches(
        self, platform: FakePlatform, instance_store: MemoryInstanceStore, instance
    ) -> None:
        platform.users = [
            PlatformUser(id="user0000000000009", phone="+5511900000000"),
            PlatformUser(id=AGENT_USER_ID, phone="(11) 97777-6666"),
        ]
        service = AgentAttributionService(platform, instance_store)

        user_id = await service.resolve(TENANT_KEY, instance, AGENT_JID)

        assert user_id == AGENT_USER_ID
        stored = await instance_store.get(instance.name)
        assert stored.settings[SETTINGS_AGENT_USER_ID] == AGENT_USER_ID
        assert stored.settings[SETTINGS_AGENT_PHONE] == "5511977776666"

    async def test_live_lookup_overrides_stale_cache(
        self, platform: FakePlatform, instance_store: MemoryInstanceStore, instance
    ) -> None:
        instance = await instance_store.update_settings(
            instance.name, {SETTINGS_AGENT_USER_ID: "user0000000000OLD"}
        )
        platform.users = [PlatformUser(id=AGENT_USER_ID, phone="5511977776666")]

        user_id = await AgentAttributionService(platform, instance_store).resolve(
            TENANT_KEY, instance, AGENT_JID
        )

        assert user_id == AGENT_USER_ID
        assert (await instance_store.get(instance.name)).agent_user_id == AGENT_USER_ID

    async def test_directory_endpoints_fall_back_in_order(
        self, platform: FakePlatform, instance_store: MemoryInstanceStore, instance
    ) -> None:
        platform.failing_endpoints.add(USER_DIRECTORY_ENDPOINTS[0])
        platform.users = [PlatformUser(id=AGENT_USER_ID, phone="5511977776666")]

        user_id = await AgentAttributionService(platform, instance_store).resolve(
            TENANT_KEY, instance, AGENT_JID
        )

        assert user_id == AGENT_USER_ID
        assert [c["endpoint"] for c in platform.calls_to("list_users")] == list(USER_DIRECTORY_ENDPOINTS)

    async def test_falls_back_to_cache_when_lookup_fails(
        self, platform: FakePlatform, instance_store: MemoryInstanceStore, instance
    ) -> None:
        instance = await instance_store.update_settings(
            instance.name, {SETTINGS_AGENT_USER_ID: AGENT_USER_ID}
        )
        platform.failures["list_users"] = HttpError("down", status_code=503)

        user_id = await AgentAttributionService(platform, instance_store).resolve(
            TENANT_KEY, instance, AGENT_JID
        )

        assert user_id == AGENT_USER_ID

    async def test_unresolved_returns_none(
        self, platform: FakePlatform, instance_store: MemoryInstanceStore, instance
    ) -> None:
        assert (
            await AgentAttributionService(platform, instance_store).resolve(
                TENANT_KEY, instance, None
            )
            is None
        )

    async def test_invalid_cached_value_is_ignored(
        self, platform: FakePlatform, instance_store: MemoryInstanceStore, instance
    ) -> None:
        instance = await instance_store.update_settings(
            instance.name, {SETTINGS_AGENT_USER_ID: TENANT_KEY}
        )

        assert (
            await AgentAttributionService(platform, instance_store).resolve(
                TENANT_KEY, instance, AGENT_JID
            )
            is None
        )


class TestRemember:
    async def test_remember_requires_known_agent_phone(
        self, platform: FakePlatform, instance_store: MemoryInstanceStore, instance
    ) -> None:
        service = AgentAttributionService(platform, instance_store)

        assert await service.remember(instance, AGENT_USER_ID) is False

        instance = await instance_store.update_settings(
            instance.name, {SETTINGS_AGENT_PHONE: "5511977776666"}
        )
        assert await service.remember(instance, AGENT_USER_ID) is True
        assert (await instance_store.get(instance.name)).agent_user_id == AGENT_USER_ID

    async def test_remember_skips_invalid_or_unchanged(
        self, platform: FakePlatform, instance_store: MemoryInstanceStore, instance
    ) -> None:
        instance = await instance_store.update_settings(
            instance.name,
            {SETTINGS_AGENT_PHONE: "5511977776666", SETTINGS_AGENT_USER_ID: AGENT_USER_ID},
        )
        service = AgentAttributionService(platform, instance_store)

        assert await service.remember(instance, AGENT_USER_ID) is False
        assert await service.remember(instance, "bad") is False


async def test_map_agent_by_phone(
    platform: FakePlatform, instance_store: MemoryInstanceStore, instance
) -> None:
    platform.users = [PlatformUser(id=AGENT_USER_ID, phone="+5511977776666")]
    service = AgentAttributionService(platform, instance_store)

    assert await service.map_agent_by_phone(instance, "5511977776666") == AGENT_USER_ID
    assert await service.map_agent_by_phone(instance, "") is None
    assert (await instance_store.get(instance.name)).agent_phone == "5511977776666"
