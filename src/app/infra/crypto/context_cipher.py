"""Descriptografia do header `x-ghl-context`.

A custom page da Platform envia o contexto do usuário cifrado com
`CryptoJS.AES.encrypt(json, sharedSecret)`: base64 de
`Salted__ + salt(8) + ciphertext`, AES-256-CBC com PKCS7, chave e IV
derivados por EVP_BytesToKey (MD5, uma iteração).
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import os
from typing import Any

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .constants import AES_KEY_SIZE, BLOCK_SIZE_BITS, IV_SIZE, SALT_SIZE, SALTED_MAGIC
from .errors import ContextCryptoError


def derive_key_and_iv(passphrase: bytes, salt: bytes) -> tuple[bytes, bytes]:
    """EVP_BytesToKey com MD5, compatível com OpenSSL/CryptoJS."""
    derived = b""
    block = b""
    while len(derived) < AES_KEY_SIZE + IV_SIZE:
        block = hashlib.md5(block + passphrase + salt).digest()  # noqa: S324
        derived += block
    return derived[:AES_KEY_SIZE], derived[AES_KEY_SIZE : AES_KEY_SIZE + IV_SIZE]


def decrypt_context(encrypted: str, shared_secret: str) -> dict[str, Any]:
    """Descriptografa o contexto e retorna o JSON como dict.

    Raises:
        ContextCryptoError: formato inválido, segredo errado ou JSON inválido
    """
    if not encrypted or not shared_secret:
        raise ContextCryptoError("Missing context or shared secret")

    try:
        raw = base64.b64decode(encrypted.strip(), validate=True)
    except (ValueError, binascii.Error) as exc:
        raise ContextCryptoError("Context is not valid base64") from exc

    header_size = len(SALTED_MAGIC) + SALT_SIZE
    if len(raw) <= header_size or not raw.startswith(SALTED_MAGIC):
        raise ContextCryptoError("Context is not in salted passphrase format")

    salt = raw[len(SALTED_MAGIC) : header_size]
    ciphertext = raw[header_size:]
    if len(ciphertext) % (BLOCK_SIZE_BITS // 8):
        raise ContextCryptoError("Ciphertext length is not a multiple of the block size")

    key, iv = derive_key_and_iv(shared_secret.encode("utf-8"), salt)
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
    try:
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        plaintext = unpadder.update(padded) + unpadder.finalize()
        payload = json.loads(plaintext.decode("utf-8"))
    except (ValueError, UnicodeDecodeError) as exc:
        raise ContextCryptoError("Context decryption failed") from exc

    if not isinstance(payload, dict):
        raise ContextCryptoError("Context payload must be a JSON object")
    return payload


def encrypt_context(payload: dict[str, Any], shared_secret: str) -> str:
    """Operação inversa de `decrypt_context` (mesmo formato do CryptoJS)."""
    salt = os.urandom(SALT_SIZE)
    key, iv = derive_key_and_iv(shared_secret.encode("utf-8"), salt)
    padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
    plaintext = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    return base64.b64encode(SALTED_MAGIC + salt + ciphertext).decode("ascii")


def tenant_key_from_context(context: dict[str, Any]) -> str | None:
    """Tenant do contexto: `activeLocation`, senão `locationId`."""
    for key in ("activeLocation", "locationId"):
        value = context.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None
