"""Cliente HTTP da Platform (GoHighLevel / LeadConnector).

Cada método representa um único endpoint. Cadeias de fallback entre
endpoints são montadas pelos serviços em app/services.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from api.connectors.ghl.auth import GhlTokenProvider
from api.connectors.http_base import HttpClient, HttpClientConfig, ensure_success
from app.protocols.models import Contact, Conversation, PlatformUser
from utils.errors import HttpError

if TYPE_CHECKING:
    import httpx

    from app.protocols.tenant_store import TenantStoreProtocol
    from config.settings import GhlSettings

logger = logging.getLogger(__name__)

# Status tratados como "não encontrado" no lookup exato de contato
LOOKUP_MISS_STATUSES = frozenset({400, 404})

CONTACT_SOURCE = "WhatsApp WLink"


def _as_list(body: Any, *keys: str) -> list[dict[str, Any]]:
    if isinstance(body, dict):
        for key in keys:
            value = body.get(key)
            if isinstance(value, list):
                return [item for item in value if isinstance(item, dict)]
        return []
    if isinstance(body, list):
        return [item for item in body if isinstance(item, dict)]
    return []


def _as_object(body: Any, *keys: str) -> dict[str, Any]:
    if isinstance(body, dict):
        for key in keys:
            value = body.get(key)
            if isinstance(value, dict):
                return value
        return body
    return {}


class GhlClient:
    """Cliente da Platform com token por tenant.

    Args:
        http: HttpClient com base_url da Platform
        tokens: Provedor de tokens OAuth por tenant
        api_version: Valor do header Version
    """

    def __init__(self, http: HttpClient, tokens: GhlTokenProvider, api_version: str) -> None:
        self._http = http
        self._tokens = tokens
        self._api_version = api_version

    async def _request(
        self,
        tenant_key: str,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Executa a chamada autenticada; em 401 renova o token e tenta uma vez."""
        token = await self._tokens.get_token(tenant_key)
        response = await self._http.request(
            method, path, headers=self._headers(token), **kwargs
        )
        if response.status_code != 401:
            return response

        logger.warning(
            "platform_unauthorized_retry",
            extra={"tenant_key": tenant_key, "path": path},
        )
        token = await self._tokens.get_token(tenant_key, force_refresh=True)
        return await self._http.request(method, path, headers=self._headers(token), **kwargs)

    def _headers(self, token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}", "Version": self._api_version}

    async def get_contact(self, tenant_key: str, contact_id: str) -> Contact | None:
        response = await self._request(tenant_key, "GET", f"/contacts/{quote(contact_id, safe='')}")
        if response.status_code == 404:
            return None
        body = _as_object(ensure_success(response, "platform_get_contact"), "contact", "data")
        if not body.get("id"):
            return None
        return Contact.from_api(body)

    async def lookup_contacts(self, tenant_key: str, phone_e164: str) -> list[Contact]:
        """Lookup exato por telefone E.164; 400/404 significam ausência."""
        response = await self._request(
            tenant_key,
            "GET",
            "/contacts/lookup",
            params={"phone": phone_e164, "locationId": tenant_key},
        )
        if response.status_code in LOOKUP_MISS_STATUSES:
            return []
        body = ensure_success(response, "platform_lookup_contact")
        return [Contact.from_api(item) for item in _as_list(body, "contacts") if item.get("id")]

    async def search_contacts(self, tenant_key: str, query: str) -> list[Contact]:
        response = await self._request(
            tenant_key,
            "GET",
            "/contacts",
            params={"locationId": tenant_key, "query": query},
        )
        body = ensure_success(response, "platform_search_contacts")
        return [Contact.from_api(item) for item in _as_list(body, "contacts") if item.get("id")]

    async def create_contact(
        self,
        tenant_key: str,
        *,
        phone: str,
        name: str,
        avatar_url: str | None = None,
    ) -> Contact:
        payload: dict[str, Any] = {
            "locationId": tenant_key,
            "phone": phone,
            "name": name,
            "source": CONTACT_SOURCE,
        }
        if avatar_url:
            payload["avatarUrl"] = avatar_url
        response = await self._request(tenant_key, "POST", "/contacts/", json=payload)
        body = _as_object(ensure_success(response, "platform_create_contact"), "contact")
        if not body.get("id"):
            raise HttpError(
                "platform_create_contact_missing_id",
                status_code=response.status_code,
                body=body,
            )
        return Contact.from_api(body)

    async def update_contact(
        self, tenant_key: str, contact_id: str, changes: dict[str, Any]
    ) -> Contact:
        response = await self._request(
            tenant_key, "PUT", f"/contacts/{quote(contact_id, safe='')}", json=changes
        )
        body = _as_object(ensure_success(response, "platform_update_contact"), "contact")
        if not body.get("id"):
            raise HttpError(
                "platform_update_contact_missing_id",
                status_code=response.status_code,
                body=body,
            )
        return Contact.from_api(body)

    async def search_conversations(
        self, tenant_key: str, contact_id: str
    ) -> list[Conversation]:
        response = await self._request(
            tenant_key,
            "GET",
            "/conversations/search",
            params={"locationId": tenant_key, "contactId": contact_id},
        )
        body = ensure_success(response, "platform_search_conversations")
        conversations = (Conversation.from_api(item) for item in _as_list(body, "conversations", "data"))
        return [conversation for conversation in conversations if conversation is not None]

    async def create_conversation(
        self, tenant_key: str, contact_id: str, endpoint: str
    ) -> Conversation:
        response = await self._request(
            tenant_key,
            "POST",
            endpoint,
            json={"locationId": tenant_key, "contactId": contact_id},
        )
        body = ensure_success(response, "platform_create_conversation")
        conversation = None
        if isinstance(body, dict):
            for key in ("conversation", "data", "body"):
                conversation = Conversation.from_api(body.get(key))
                if conversation is not None:
                    break
            if conversation is None:
                conversation = Conversation.from_api(body)
        if conversation is None:
            raise HttpError(
                "platform_create_conversation_missing_id",
                status_code=response.status_code,
                body=body,
            )
        return conversation

    async def post_message(self, tenant_key: str, payload: dict[str, Any]) -> dict[str, Any]:
        response = await self._request(
            tenant_key, "POST", "/conversations/messages/inbound", json=payload
        )
        body = ensure_success(response, "platform_post_message")
        return body if isinstance(body, dict) else {"response": body}

    async def list_users(self, tenant_key: str, endpoint: str) -> list[PlatformUser]:
        response = await self._request(
            tenant_key, "GET", endpoint, params={"locationId": tenant_key}
        )
        body = ensure_success(response, "platform_list_users")
        return [PlatformUser.from_api(item) for item in _as_list(body, "users", "data")]

    async def put_message_status(
        self, tenant_key: str, message_id: str, body: dict[str, Any]
    ) -> None:
        response = await self._request(
            tenant_key,
            "PUT",
            f"/conversations/messages/{quote(message_id, safe='')}/status",
            json=body,
        )
        ensure_success(response, "platform_put_message_status")

    async def post_message_status(self, tenant_key: str, body: dict[str, Any]) -> None:
        response = await self._request(
            tenant_key, "POST", "/conversations/messages/status", json=body
        )
        ensure_success(response, "platform_post_message_status")


def create_ghl_client(settings: GhlSettings, tenant_store: TenantStoreProtocol) -> GhlClient:
    """Factory a partir de GhlSettings e do store de tenants."""
    http = HttpClient(
        HttpClientConfig(
            base_url=settings.api_base_url,
            timeout_seconds=settings.request_timeout_seconds,
            default_headers={"Accept": "application/json"},
        )
    )
    tokens = GhlTokenProvider(
        tenant_store,
        http,
        client_id=settings.client_id,
        client_secret=settings.client_secret,
        refresh_window_seconds=settings.token_refresh_window_seconds,
    )
    return GhlClient(http, tokens, settings.api_version)
