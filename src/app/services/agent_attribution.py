"""Cache de atribuição de agente por instância.

Mensagens enviadas pelo próprio telefone da instância (fromMe) são
atribuídas a um usuário da Platform. O vínculo telefone → userId fica
em `Instance.settings` e é reescrito sempre que uma busca ao vivo no
diretório de usuários encontra o agente.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

from app.domain.instance import SETTINGS_AGENT_PHONE, SETTINGS_AGENT_USER_ID
from app.services.identity import normalize_digits, phone_from_jid, phone_suffix, phones_match
from utils.strategies import Strategy, run_strategies

if TYPE_CHECKING:
    from app.domain.instance import Instance
    from app.protocols.instance_store import InstanceStoreProtocol
    from app.protocols.models import PlatformUser
    from app.protocols.platform import PlatformClientProtocol

logger = logging.getLogger(__name__)

# Endpoints do diretório de usuários, em ordem de tentativa
USER_DIRECTORY_ENDPOINTS = ("/users/", "/users")

_USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9]{15,}$")


def is_valid_user_id(value: Any, tenant_key: str | None) -> bool:
    """userId plausível: alfanumérico com 15+ chars e diferente do tenant."""
    if not isinstance(value, str) or not value:
        return False
    if value == tenant_key:
        return False
    return bool(_USER_ID_PATTERN.match(value))


async def merge_instance_settings(
    store: InstanceStoreProtocol,
    instance_name: str,
    changes: dict[str, Any],
) -> Instance | None:
    """Lê settings atuais do store e grava a mescla com `changes`."""
    current = await store.get(instance_name)
    if current is None:
        return None
    return await store.update_settings(instance_name, {**current.settings, **changes})


class AgentAttributionService:
    """Resolve e memoriza o userId do agente de cada instância."""

    def __init__(
        self,
        platform: PlatformClientProtocol,
        instance_store: InstanceStoreProtocol,
    ) -> None:
        self._platform = platform
        self._instances = instance_store

    async def _list_users(self, tenant_key: str) -> list[PlatformUser]:
        def _attempt(endpoint: str) -> Strategy[list[PlatformUser]]:
            return Strategy(
                f"users:{endpoint}",
                lambda: self._platform.list_users(tenant_key, endpoint),
            )

        outcome = await run_strategies(
            [_attempt(endpoint) for endpoint in USER_DIRECTORY_ENDPOINTS],
            component="user_directory",
            logger=logger,
        )
        return outcome.value or []

    async def _find_user(self, tenant_key: str, digits: str) -> PlatformUser | None:
        users = await self._list_users(tenant_key)
        return next(
            (
                user
                for user in users
                if phones_match(user.phone, digits) and is_valid_user_id(user.id, tenant_key)
            ),
            None,
        )

    async def _cache(self, instance: Instance, user_id: str, digits: str) -> None:
        await merge_instance_settings(
            self._instances,
            instance.name,
            {SETTINGS_AGENT_USER_ID: user_id, SETTINGS_AGENT_PHONE: digits},
        )

    async def resolve(
        self,
        tenant_key: str,
        instance: Instance,
        sender_jid: str | None,
    ) -> str | None:
        """userId do agente para uma mensagem fromMe; None se desconhecido.

        Ordem: busca ao vivo pelo telefone do remetente (ou agentPhone
        em cache), depois agentUserId em cache. Nunca levanta exceção.
        """
        digits = normalize_digits(phone_from_jid(sender_jid)) or normalize_digits(
            instance.agent_phone
        )
        if digits:
            try:
                user = await self._find_user(tenant_key, digits)
                if user is not None:
                    await self._cache(instance, user.id, digits)
                    logger.info(
                        "agent_resolved",
                        extra={
                            "instance": instance.name,
                            "source": "directory",
                            "phone_suffix": phone_suffix(digits),
                        },
                    )
                    return user.id
            except Exception as exc:
                logger.warning(
                    "agent_lookup_failed",
                    extra={"instance": instance.name, "error_type": type(exc).__name__},
                )

        cached = instance.agent_user_id
        if is_valid_user_id(cached, tenant_key):
            logger.info(
                "agent_resolved",
                extra={"instance": instance.name, "source": "cache"},
            )
            return cached

        logger.info("agent_unresolved", extra={"instance": instance.name})
        return None

    async def map_agent_by_phone(self, instance: Instance, digits: str) -> str | None:
        """Busca ao vivo do agente pelo telefone da instância; grava no cache."""
        digits = normalize_digits(digits)
        if not digits:
            return None
        user = await self._find_user(instance.tenant_key, digits)
        if user is None:
            logger.info(
                "agent_not_mapped",
                extra={"instance": instance.name, "phone_suffix": phone_suffix(digits)},
            )
            return None
        await self._cache(instance, user.id, digits)
        logger.info("agent_mapped", extra={"instance": instance.name})
        return user.id

    async def remember(self, instance: Instance, user_id: str | None) -> bool:
        """Memoriza o userId visto em um evento de saída da Platform.

        Só grava quando o userId é válido e a instância já conhece o
        telefone do agente.
        """
        if not is_valid_user_id(user_id, instance.tenant_key) or not instance.agent_phone:
            return False
        if instance.agent_user_id == user_id:
            return False
        await merge_instance_settings(
            self._instances, instance.name, {SETTINGS_AGENT_USER_ID: user_id}
        )
        logger.info("agent_remembered", extra={"instance": instance.name})
        return True
