"""Criptografia do contexto enviado pela custom page da Platform.

Localizado em app/infra para que rotas e bootstrap compartilhem a
mesma implementação sem depender de api/.
"""

from .context_cipher import (
    decrypt_context,
    derive_key_and_iv,
    encrypt_context,
    tenant_key_from_context,
)
from .errors import ContextCryptoError

__all__ = [
    "ContextCryptoError",
    "decrypt_context",
    "derive_key_and_iv",
    "encrypt_context",
    "tenant_key_from_context",
]
