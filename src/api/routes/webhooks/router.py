"""Router de webhooks: Gateway e Platform."""

from __future__ import annotations

from fastapi import APIRouter

from api.routes.webhooks.evolution import router as evolution_router
from api.routes.webhooks.ghl import router as ghl_router

router = APIRouter()

router.include_router(evolution_router)
router.include_router(ghl_router)
