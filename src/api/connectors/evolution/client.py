"""Cliente do Gateway WhatsApp (Evolution API).

Toda chamada é autenticada pelo header `apikey` com o token da
instância e endereçada pelo nome da instância. Variações de payload
aceitas por diferentes versões do Gateway são tentadas em ordem.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from api.connectors.http_base import HttpClient, HttpClientConfig, ensure_success
from app.protocols.models import QrCode, WebhookShape
from fsm import extract_external_state
from utils.errors import HttpError
from utils.strategies import Strategy, run_strategies

if TYPE_CHECKING:
    from config.settings import EvolutionSettings

logger = logging.getLogger(__name__)

# Eventos assinados no webhook registrado
WEBHOOK_EVENTS = ("MESSAGES_UPSERT", "CONNECTION_UPDATE")


def _segment(value: str) -> str:
    return quote(value, safe="")


def _first_str(data: Any, *keys: str) -> str | None:
    if not isinstance(data, dict):
        return None
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def parse_qr_response(data: Any) -> QrCode | None:
    """QR em base64 tem prioridade sobre pairing code."""
    qr = _first_str(data, "base64", "qr", "qrCode")
    if qr:
        return QrCode(type="qr", data=qr)
    pairing = data.get("pairingCode") if isinstance(data, dict) else None
    code = _first_str(pairing, "code") or _first_str(data, "code")
    if code:
        return QrCode(type="code", data=code)
    return None


class EvolutionClient:
    """Cliente HTTP do Gateway.

    Args:
        http: HttpClient configurado com a URL base do Gateway
        send_delay_ms: Delay de "digitando" enviado com cada mensagem
    """

    def __init__(self, http: HttpClient, send_delay_ms: int = 1200) -> None:
        self._http = http
        self._send_delay_ms = send_delay_ms

    @staticmethod
    def _auth(token: str) -> dict[str, str]:
        return {"apikey": token}

    async def get_status(self, token: str, instance_name: str) -> dict[str, Any]:
        response = await self._http.get(
            f"/instance/connectionState/{_segment(instance_name)}",
            headers=self._auth(token),
        )
        body = ensure_success(response, "gateway_connection_state")
        return body if isinstance(body, dict) else {}

    async def validate_credentials(self, token: str, instance_name: str) -> bool:
        """Credenciais válidas quando o Gateway responde com `instance.state`."""
        try:
            status = await self.get_status(token, instance_name)
        except HttpError as exc:
            logger.warning(
                "gateway_credentials_invalid",
                extra={"instance": instance_name, "status_code": exc.status_code},
            )
            return False
        instance = status.get("instance")
        valid = isinstance(instance, dict) and bool(instance.get("state"))
        if not valid:
            logger.warning(
                "gateway_credentials_unexpected_status",
                extra={"instance": instance_name, "external_state": extract_external_state(status)},
            )
        return valid

    async def get_qr(
        self, token: str, instance_name: str, number: str | None = None
    ) -> QrCode | None:
        params = {"number": number} if number else None
        response = await self._http.get(
            f"/instance/connect/{_segment(instance_name)}",
            params=params,
            headers=self._auth(token),
        )
        return parse_qr_response(ensure_success(response, "gateway_connect"))

    async def send_text(
        self, token: str, instance_name: str, number: str, text: str
    ) -> dict[str, Any]:
        """Envia texto; payload plano primeiro, depois `textMessage` aninhado."""
        path = f"/message/sendText/{_segment(instance_name)}"
        options = {"delay": self._send_delay_ms, "presence": "composing"}

        async def _post(payload: dict[str, Any]) -> dict[str, Any]:
            response = await self._http.post(path, json=payload, headers=self._auth(token))
            body = ensure_success(response, "gateway_send_text")
            return body if isinstance(body, dict) else {"response": body}

        outcome = await run_strategies(
            [
                Strategy(
                    "send_text_flat",
                    lambda: _post({"number": number, "options": options, "text": text}),
                ),
                Strategy(
                    "send_text_nested",
                    lambda: _post(
                        {"number": number, "options": options, "textMessage": {"text": text}}
                    ),
                ),
            ],
            component="gateway_send_text",
            logger=logger,
        )
        if not outcome.succeeded:
            error = outcome.last_error
            raise HttpError(
                "gateway_send_text_failed",
                status_code=getattr(error, "status_code", None),
            ) from error
        return outcome.value or {}

    async def get_profile_picture(
        self, token: str, instance_name: str, jid: str
    ) -> str | None:
        """URL da foto de perfil do contato; None se indisponível."""

        async def _by_instance() -> str | None:
            response = await self._http.post(
                f"/chat/profile-pic/{_segment(instance_name)}",
                json={"jid": jid},
                headers=self._auth(token),
            )
            return _first_str(ensure_success(response, "gateway_profile_pic"), "profilePicUrl", "url")

        async def _by_jid() -> str | None:
            response = await self._http.get(
                f"/chat/profile-pic/{_segment(jid)}",
                headers=self._auth(token),
            )
            return _first_str(ensure_success(response, "gateway_profile_pic"), "profilePicUrl", "url")

        outcome = await run_strategies(
            [
                Strategy("profile_pic_post", _by_instance),
                Strategy("profile_pic_get", _by_jid),
            ],
            component="gateway_profile_picture",
            logger=logger,
        )
        return outcome.value

    async def find_webhook_url(self, token: str, instance_name: str) -> str | None:
        response = await self._http.get(
            f"/webhook/find/{_segment(instance_name)}",
            headers=self._auth(token),
        )
        body = ensure_success(response, "gateway_find_webhook")
        webhook = body.get("webhook") if isinstance(body, dict) else None
        return _first_str(webhook, "url") or _first_str(body, "url")

    async def set_webhook(
        self,
        token: str,
        instance_name: str,
        url: str,
        shape: WebhookShape,
    ) -> None:
        """Registra o webhook usando um dos formatos aceitos pelo Gateway."""
        path = f"/webhook/set/{_segment(instance_name)}"
        headers = self._auth(token)
        if shape is WebhookShape.FULL:
            payload: dict[str, Any] = {
                "webhook": {
                    "url": url,
                    "headers": {"Authorization": f"Bearer {token}"},
                    "events": list(WEBHOOK_EVENTS),
                    "enabled": True,
                }
            }
            response = await self._http.post(path, json=payload, headers=headers)
        elif shape is WebhookShape.URL_BODY:
            response = await self._http.post(path, json={"url": url}, headers=headers)
        else:
            response = await self._http.post(path, params={"url": url}, json={}, headers=headers)
        ensure_success(response, "gateway_set_webhook")

    async def logout(self, token: str, instance_name: str) -> None:
        response = await self._http.delete(
            f"/instance/logout/{_segment(instance_name)}",
            headers=self._auth(token),
        )
        ensure_success(response, "gateway_logout")

    async def delete(self, token: str, instance_name: str) -> None:
        response = await self._http.delete(
            f"/instance/delete/{_segment(instance_name)}",
            headers=self._auth(token),
        )
        ensure_success(response, "gateway_delete")


def create_evolution_client(settings: EvolutionSettings) -> EvolutionClient:
    """Factory a partir de EvolutionSettings."""
    http = HttpClient(
        HttpClientConfig(
            base_url=settings.api_url,
            timeout_seconds=settings.request_timeout_seconds,
            max_retries=settings.max_retries,
            default_headers={"Content-Type": "application/json"},
        )
    )
    return EvolutionClient(http, send_delay_ms=settings.send_delay_ms)
