"""API de gerenciamento de instâncias (custom page da Platform).

Endpoints (todos exigem `x-ghl-context`):
- GET    /api/instances
- POST   /api/instances
- DELETE /api/instances/{id}/logout
- DELETE /api/instances/{id}
- PATCH  /api/instances/{id}
- GET    /api/qr/{id}
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field

from api.routes.instances.context import get_tenant_key
from app.bootstrap import get_lifecycle_service
from app.services.instance_lifecycle import InstanceLifecycleService
from utils.errors import (
    BridgeError,
    ConflictError,
    ForbiddenError,
    IntegrationError,
    InvalidCredentialsError,
    NotFoundError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_STATUS_BY_ERROR: tuple[tuple[type[BridgeError], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (UnauthorizedError, status.HTTP_401_UNAUTHORIZED),
    (ConflictError, status.HTTP_409_CONFLICT),
    (InvalidCredentialsError, status.HTTP_400_BAD_REQUEST),
    (IntegrationError, status.HTTP_502_BAD_GATEWAY),
)


class CreateInstanceRequest(BaseModel):
    """Corpo do POST /api/instances."""

    model_config = ConfigDict(populate_by_name=True)

    instance_name: str = Field(..., alias="instanceName", min_length=1)
    token: str = Field(..., min_length=1)
    custom_name: str | None = Field(None, alias="customName")
    instance_id: str | None = Field(None, alias="instanceId")


class UpdateInstanceRequest(BaseModel):
    """Corpo do PATCH /api/instances/{id}."""

    model_config = ConfigDict(populate_by_name=True)

    custom_name: str = Field(..., alias="customName", min_length=1)


def to_http_error(exc: BridgeError) -> HTTPException:
    """Converte erro de domínio em resposta `{"detail": ...}`."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get("/instances")
async def list_instances(
    tenant_key: str = Depends(get_tenant_key),
    lifecycle: InstanceLifecycleService = Depends(get_lifecycle_service),
) -> dict[str, Any]:
    """Lista instâncias do tenant com estado reconciliado no Gateway."""
    instances = await lifecycle.list_instances(tenant_key)
    return {
        "success": True,
        "instances": [instance.to_public_dict() for instance in instances],
    }


@router.post("/instances")
async def create_instance(
    body: CreateInstanceRequest,
    tenant_key: str = Depends(get_tenant_key),
    lifecycle: InstanceLifecycleService = Depends(get_lifecycle_service),
) -> dict[str, Any]:
    try:
        instance = await lifecycle.create_instance(
            tenant_key,
            body.instance_name,
            body.token,
            custom_name=body.custom_name,
            external_id=body.instance_id,
        )
    except BridgeError as exc:
        logger.warning(
            "instance_create_rejected",
            extra={
                "tenant_key": tenant_key,
                "instance": body.instance_name,
                "error_type": type(exc).__name__,
            },
        )
        raise to_http_error(exc) from exc
    return {"success": True, "instance": instance.to_public_dict()}


@router.delete("/instances/{instance_id}/logout")
async def logout_instance(
    instance_id: int,
    tenant_key: str = Depends(get_tenant_key),
    lifecycle: InstanceLifecycleService = Depends(get_lifecycle_service),
) -> dict[str, Any]:
    try:
        await lifecycle.logout(tenant_key, instance_id)
    except BridgeError as exc:
        raise to_http_error(exc) from exc
    return {"success": True, "message": "Logout command sent successfully."}


@router.delete("/instances/{instance_id}")
async def delete_instance(
    instance_id: int,
    tenant_key: str = Depends(get_tenant_key),
    lifecycle: InstanceLifecycleService = Depends(get_lifecycle_service),
) -> dict[str, Any]:
    try:
        await lifecycle.delete(tenant_key, instance_id)
    except BridgeError as exc:
        raise to_http_error(exc) from exc
    return {"success": True, "message": "Instance deleted successfully"}


@router.patch("/instances/{instance_id}")
async def update_instance(
    instance_id: int,
    body: UpdateInstanceRequest,
    tenant_key: str = Depends(get_tenant_key),
    lifecycle: InstanceLifecycleService = Depends(get_lifecycle_service),
) -> dict[str, Any]:
    try:
        instance = await lifecycle.rename(tenant_key, instance_id, body.custom_name)
    except BridgeError as exc:
        raise to_http_error(exc) from exc
    return {"success": True, "instance": instance.to_public_dict()}


@router.get("/qr/{instance_id}")
async def get_qr_code(
    instance_id: int,
    number: str | None = Query(default=None),
    tenant_key: str = Depends(get_tenant_key),
    lifecycle: InstanceLifecycleService = Depends(get_lifecycle_service),
) -> dict[str, str]:
    """QR (base64) ou pairing code quando `number` é informado."""
    try:
        qr = await lifecycle.request_qr(tenant_key, instance_id, number)
    except BridgeError as exc:
        raise to_http_error(exc) from exc
    return {"type": qr.type, "data": qr.data}
