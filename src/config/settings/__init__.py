"""Agregador de settings do wlink_bridge.

Re-exporta settings e accessors de cada módulo.
"""

from __future__ import annotations

from config.settings.base import (
    BaseSettings,
    Environment,
    StoreBackend,
    StoreSettings,
    get_base_settings,
    get_store_settings,
)
from config.settings.evolution import EvolutionSettings, get_evolution_settings
from config.settings.ghl import (
    GHL_API_BASE_URL,
    GHL_API_VERSION,
    GhlSettings,
    get_ghl_settings,
)

__all__ = [
    "GHL_API_BASE_URL",
    "GHL_API_VERSION",
    "BaseSettings",
    "Environment",
    "EvolutionSettings",
    "GhlSettings",
    "StoreBackend",
    "StoreSettings",
    "get_base_settings",
    "get_evolution_settings",
    "get_ghl_settings",
    "get_store_settings",
]
