"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    BridgeError,
    ConflictError,
    ForbiddenError,
    HttpError,
    InfrastructureError,
    IntegrationError,
    InvalidCredentialsError,
    MalformedPayloadError,
    NotFoundError,
    RedisConnectionError,
    UnauthorizedError,
)

__all__ = [
    "BridgeError",
    "ConflictError",
    "ForbiddenError",
    "HttpError",
    "InfrastructureError",
    "IntegrationError",
    "InvalidCredentialsError",
    "MalformedPayloadError",
    "NotFoundError",
    "RedisConnectionError",
    "UnauthorizedError",
]
