"""Erros de criptografia do contexto da custom page."""


class ContextCryptoError(Exception):
    """Header de contexto ausente, malformado ou não descriptografável."""
