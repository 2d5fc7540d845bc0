"""Device and lab integration endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from bloom.dependencies import AppServices, CurrentUser
from bloom.models.content import (
    ConnectRequest,
    GenomicUpload,
    GenomicUploadRequest,
    IntegrationConnection,
)

router = APIRouter(prefix="/integrations", tags=["integrations"])


@router.get("", response_model=list[IntegrationConnection])
async def list_connections(user: CurrentUser, services: AppServices) -> Any:
    return await services.integrations.list(user.user_id)


@router.post("", response_model=IntegrationConnection)
async def connect(user: CurrentUser, body: ConnectRequest, services: AppServices) -> Any:
    return await services.integrations.connect(user.user_id, body.source_type)


@router.post("/{connection_id}/disconnect", response_model=IntegrationConnection)
async def disconnect(connection_id: str, user: CurrentUser, services: AppServices) -> Any:
    return await services.integrations.disconnect(user.user_id, connection_id)


# ---------- Genomics ----------

@router.get("/genomics", response_model=list[GenomicUpload])
async def list_uploads(user: CurrentUser, services: AppServices) -> Any:
    return await services.integrations.list_genomic_uploads(user.user_id)


@router.post("/genomics", response_model=GenomicUpload, status_code=201)
async def upload_genomics(
    user: CurrentUser, body: GenomicUploadRequest, services: AppServices
) -> Any:
    return await services.integrations.upload_genomic_data(
        user.user_id, body.provider, body.file_name
    )
