"""Connectors: adapters de borda para APIs externas.

Estrutura:
- http_base: cliente HTTP com retry/backoff compartilhado
- evolution/: Gateway WhatsApp (Evolution API)
- ghl/: Platform CRM (GoHighLevel / LeadConnector)
"""

__all__: list[str] = []
