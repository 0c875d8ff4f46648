"""Connector da Platform (GoHighLevel / LeadConnector)."""

from api.connectors.ghl.auth import GhlTokenProvider
from api.connectors.ghl.client import GhlClient, create_ghl_client

__all__ = ["GhlClient", "GhlTokenProvider", "create_ghl_client"]
