"""Exceções tipadas do relay.

Hierarquia:
- BridgeError: base de erros de domínio/integração
- InfrastructureError: falhas transitórias de infraestrutura (store)
- HttpError: resposta não-2xx ou falha de transporte de um conector
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base para erros de domínio e integração."""


class NotFoundError(BridgeError):
    """Instance/Tenant/Contact referenciado não existe."""


class IntegrationError(BridgeError):
    """Chamada downstream (Gateway ou Platform) falhou após todos os fallbacks."""


class UnauthorizedError(BridgeError):
    """Credencial ausente, inválida ou expirada sem possibilidade de refresh."""


class ForbiddenError(BridgeError):
    """Recurso existe mas pertence a outro tenant."""


class MalformedPayloadError(BridgeError):
    """Payload de webhook sem sub-campos obrigatórios."""


class ConflictError(BridgeError):
    """Instância já registrada para o tenant."""


class InvalidCredentialsError(BridgeError):
    """Gateway rejeitou as credenciais da instância."""


class InfrastructureError(RuntimeError):
    """Base para falhas de infraestrutura transitórias."""


class RedisConnectionError(InfrastructureError):
    """Falha de conexão/timeout ao acessar Redis."""


class HttpError(Exception):
    """Erro de requisição HTTP downstream, sem dados sensíveis."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        is_retryable: bool = False,
        body: object = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.is_retryable = is_retryable
        self.body = body

    @property
    def body_message(self) -> str:
        """Campo `message` do corpo de erro (string vazia se ausente)."""
        if isinstance(self.body, dict):
            return str(self.body.get("message") or "")
        if isinstance(self.body, str):
            return self.body
        return ""
