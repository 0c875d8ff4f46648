"""Connector do Gateway WhatsApp (Evolution API)."""

from api.connectors.evolution.client import EvolutionClient, create_evolution_client

__all__ = ["EvolutionClient", "create_evolution_client"]
