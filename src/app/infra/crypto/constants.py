"""Constantes do formato passphrase do CryptoJS (OpenSSL Salted__)."""

SALTED_MAGIC = b"Salted__"
SALT_SIZE = 8
AES_KEY_SIZE = 32  # AES-256
IV_SIZE = 16
BLOCK_SIZE_BITS = 128
