"""Agregador de settings base."""

from __future__ import annotations

from config.settings.base.core import (
    BaseSettings,
    Environment,
    get_base_settings,
)
from config.settings.base.store import (
    StoreBackend,
    StoreSettings,
    get_store_settings,
)

__all__ = [
    "BaseSettings",
    "Environment",
    "StoreBackend",
    "StoreSettings",
    "get_base_settings",
    "get_store_settings",
]
