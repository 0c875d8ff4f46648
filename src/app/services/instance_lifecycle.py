"""Ciclo de vida das instâncias: cadastro, reconciliação de estado, QR,
logout, remoção e registro do webhook no Gateway.

Estado local é eventualmente consistente com o Gateway: cada observação
mapeada é gravada (last-write-wins) e falhas de reconciliação mantêm o
último estado conhecido.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from app.domain.instance import SETTINGS_AGENT_AVATAR_URL, SETTINGS_AGENT_PHONE
from app.protocols.models import WebhookShape
from app.services.agent_attribution import merge_instance_settings
from app.services.identity import normalize_digits
from app.services.side_effects import SideEffectResult, best_effort
from fsm import (
    DEFAULT_INITIAL_STATE,
    InstanceState,
    InstanceStateMachine,
    extract_external_state,
    map_external_state,
)
from utils.errors import (
    ConflictError,
    ForbiddenError,
    HttpError,
    IntegrationError,
    InvalidCredentialsError,
    NotFoundError,
)
from utils.strategies import Strategy, run_strategies

if TYPE_CHECKING:
    from app.domain.instance import Instance
    from app.protocols.gateway import GatewayClientProtocol
    from app.protocols.instance_store import InstanceStoreProtocol
    from app.protocols.models import QrCode
    from app.services.agent_attribution import AgentAttributionService
    from fsm import TransitionResult

logger = logging.getLogger(__name__)

# Ordem de formatos tentados ao registrar o webhook
WEBHOOK_SHAPES = (WebhookShape.FULL, WebhookShape.URL_BODY, WebhookShape.URL_QUERY)


def default_custom_name(name: str) -> str:
    return f"Instance {name}"


class InstanceLifecycleService:
    """Operações de ciclo de vida endereçadas por tenant.

    Args:
        instance_store: Persistência de instâncias
        gateway: Cliente do Gateway
        attribution: Cache de agente (mapeamento por telefone)
        webhook_url: URL pública do webhook; vazia desliga o registro
    """

    def __init__(
        self,
        instance_store: InstanceStoreProtocol,
        gateway: GatewayClientProtocol,
        attribution: AgentAttributionService,
        webhook_url: str = "",
    ) -> None:
        self._instances = instance_store
        self._gateway = gateway
        self._attribution = attribution
        self._webhook_url = webhook_url

    async def _owned(self, tenant_key: str, instance_id: int) -> Instance:
        instance = await self._instances.get_by_id(instance_id)
        if instance is None:
            raise NotFoundError(f"Instance {instance_id} not found")
        if instance.tenant_key != tenant_key:
            logger.warning(
                "instance_tenant_mismatch",
                extra={"instance_id": instance_id, "tenant_key": tenant_key},
            )
            raise ForbiddenError(f"Instance {instance_id} belongs to another tenant")
        return instance

    async def _persist_transition(
        self, instance: Instance, result: TransitionResult
    ) -> Instance:
        if not result.changed:
            return instance
        updated = await self._instances.update_state(instance.name, result.current)
        logger.info(
            "instance_state_updated",
            extra={
                "instance": instance.name,
                "from_state": result.previous.value,
                "to_state": result.current.value,
                "trigger": result.trigger,
            },
        )
        return updated or instance.model_copy(update={"state": result.current})

    async def create_instance(
        self,
        tenant_key: str,
        name: str,
        token: str,
        custom_name: str | None = None,
        external_id: str | None = None,
    ) -> Instance:
        """Cadastra uma instância existente no Gateway após validar o token.

        Raises:
            ConflictError: nome já cadastrado
            InvalidCredentialsError: Gateway não reconheceu nome/token
        """
        if await self._instances.get(name) is not None:
            raise ConflictError(f"Instance {name} is already registered")

        if not await self._gateway.validate_credentials(token, name):
            raise InvalidCredentialsError(f"Invalid credentials for instance {name}")

        status: dict[str, Any] = {}
        try:
            status = await self._gateway.get_status(token, name)
        except HttpError as exc:
            logger.warning(
                "instance_initial_status_unavailable",
                extra={"instance": name, "status_code": exc.status_code},
            )
        state = map_external_state(extract_external_state(status)) or DEFAULT_INITIAL_STATE
        probe = status.get("instance") if isinstance(status.get("instance"), dict) else {}

        try:
            instance = await self._instances.create(
                name=name,
                tenant_key=tenant_key,
                credential_token=token,
                state=state,
                custom_name=custom_name or default_custom_name(name),
                external_id=external_id or probe.get("instanceId"),
                settings={},
            )
        except ValueError as exc:
            raise ConflictError(f"Instance {name} is already registered") from exc

        logger.info(
            "instance_created",
            extra={"instance": name, "tenant_key": tenant_key, "state": state.value},
        )
        await self.ensure_webhook(instance)
        return instance

    async def list_instances(self, tenant_key: str) -> list[Instance]:
        """Instâncias do tenant com estado reconciliado em paralelo."""
        instances = await self._instances.list_by_tenant(tenant_key)
        return list(await asyncio.gather(*(self._reconcile(i) for i in instances)))

    async def _reconcile(self, instance: Instance) -> Instance:
        try:
            status = await self._gateway.get_status(instance.credential_token, instance.name)
            machine = InstanceStateMachine(instance.name, instance.state)
            result = machine.observe(extract_external_state(status), trigger="poll")
            if result.ignored:
                logger.info(
                    "instance_state_unrecognized",
                    extra={"instance": instance.name, "trigger": "poll"},
                )
            instance = await self._persist_transition(instance, result)
        except Exception as exc:
            logger.warning(
                "instance_reconcile_failed",
                extra={"instance": instance.name, "error_type": type(exc).__name__},
            )
            return instance
        await self.ensure_webhook(instance)
        return instance

    async def request_qr(
        self, tenant_key: str, instance_id: int, number: str | None = None
    ) -> QrCode:
        """Marca a instância como `qr_code` e busca QR ou pairing code.

        Raises:
            IntegrationError: Gateway falhou ou respondeu formato inesperado
        """
        instance = await self._owned(tenant_key, instance_id)
        machine = InstanceStateMachine(instance.name, instance.state)
        await self._persist_transition(
            instance, machine.force(InstanceState.QR_CODE, trigger="qr_request")
        )
        try:
            qr = await self._gateway.get_qr(instance.credential_token, instance.name, number)
        except HttpError as exc:
            logger.error(
                "instance_qr_failed",
                extra={"instance": instance.name, "status_code": exc.status_code},
            )
            raise IntegrationError(f"Could not fetch QR for instance {instance.name}") from exc
        if qr is None:
            logger.error("instance_qr_unexpected_shape", extra={"instance": instance.name})
            raise IntegrationError(f"Unexpected QR response for instance {instance.name}")
        return qr

    async def logout(self, tenant_key: str, instance_id: int) -> Instance:
        """Desconecta no Gateway; só então marca `notAuthorized`."""
        instance = await self._owned(tenant_key, instance_id)
        try:
            await self._gateway.logout(instance.credential_token, instance.name)
        except HttpError as exc:
            logger.error(
                "instance_logout_failed",
                extra={"instance": instance.name, "status_code": exc.status_code},
            )
            raise IntegrationError(f"Could not logout instance {instance.name}") from exc
        machine = InstanceStateMachine(instance.name, instance.state)
        return await self._persist_transition(
            instance, machine.force(InstanceState.NOT_AUTHORIZED, trigger="logout")
        )

    async def delete(self, tenant_key: str, instance_id: int) -> SideEffectResult[None]:
        """Remove no Gateway (best-effort) e sempre remove localmente."""
        instance = await self._owned(tenant_key, instance_id)
        remote = await best_effort(
            "gateway_delete",
            lambda: self._gateway.delete(instance.credential_token, instance.name),
            logger=logger,
            instance=instance.name,
        )
        await self._instances.delete(instance.name)
        logger.info(
            "instance_deleted",
            extra={"instance": instance.name, "remote_deleted": remote.ok},
        )
        return remote

    async def rename(self, tenant_key: str, instance_id: int, custom_name: str) -> Instance:
        instance = await self._owned(tenant_key, instance_id)
        updated = await self._instances.update_custom_name(instance.name, custom_name)
        if updated is None:
            raise NotFoundError(f"Instance {instance_id} not found")
        return updated

    async def apply_connection_update(
        self, instance_name: str, data: dict[str, Any]
    ) -> Instance | None:
        """Aplica `connection.update` do Gateway.

        Estado desconhecido não altera nada. Ao conectar (`authorized`),
        grava telefone e avatar do agente e tenta mapear o userId.

        Returns:
            Instância atualizada ou None se desconhecida/ignorada
        """
        instance = await self._instances.get(instance_name)
        if instance is None:
            logger.warning("connection_update_unknown_instance", extra={"instance": instance_name})
            return None

        machine = InstanceStateMachine(instance.name, instance.state)
        result = machine.observe(data.get("state"), trigger="webhook")
        if result.ignored:
            logger.warning(
                "instance_state_unrecognized",
                extra={"instance": instance_name, "external_state": str(data.get("state"))},
            )
            return None
        instance = await self._persist_transition(instance, result)

        if result.current == InstanceState.AUTHORIZED:
            instance = await self._capture_agent_profile(instance, data)
        await self.ensure_webhook(instance)
        return instance

    async def _capture_agent_profile(self, instance: Instance, data: dict[str, Any]) -> Instance:
        digits = normalize_digits(data.get("wuid") if isinstance(data.get("wuid"), str) else "")
        avatar = data.get("profilePictureUrl")
        changes: dict[str, Any] = {}
        if digits:
            changes[SETTINGS_AGENT_PHONE] = digits
        if isinstance(avatar, str) and avatar:
            changes[SETTINGS_AGENT_AVATAR_URL] = avatar
        if not changes:
            return instance

        updated = await merge_instance_settings(self._instances, instance.name, changes)
        instance = updated or instance
        if digits:
            await best_effort(
                "agent_map_by_phone",
                lambda: self._attribution.map_agent_by_phone(instance, digits),
                logger=logger,
                instance=instance.name,
            )
        return instance

    async def ensure_webhook(self, instance: Instance) -> SideEffectResult[WebhookShape | None]:
        """Garante que o Gateway aponte o webhook para este serviço.

        Só escreve quando a URL atual difere; formatos são tentados em
        ordem. Nunca levanta exceção.
        """
        if not self._webhook_url:
            return SideEffectResult.skip("ensure_webhook", "webhook_url_not_configured")

        token = instance.credential_token
        try:
            current = await self._gateway.find_webhook_url(token, instance.name)
        except Exception as exc:
            logger.info(
                "webhook_find_failed",
                extra={"instance": instance.name, "error_type": type(exc).__name__},
            )
            current = None
        if current == self._webhook_url:
            return SideEffectResult(name="ensure_webhook", ok=True, skipped=True)

        def _shape(shape: WebhookShape) -> Strategy[WebhookShape]:
            async def _set() -> WebhookShape:
                await self._gateway.set_webhook(token, instance.name, self._webhook_url, shape)
                return shape

            return Strategy(f"webhook_set:{shape.value}", _set)

        outcome = await run_strategies(
            [_shape(shape) for shape in WEBHOOK_SHAPES],
            component="webhook_registration",
            logger=logger,
        )
        if not outcome.succeeded:
            return SideEffectResult(
                name="ensure_webhook",
                ok=False,
                error=outcome.failures[-1].reason if outcome.failures else None,
            )
        logger.info(
            "webhook_ensured",
            extra={"instance": instance.name, "shape": outcome.winner},
        )
        return SideEffectResult(name="ensure_webhook", ok=True, value=outcome.value)
