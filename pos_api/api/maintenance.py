"""Maintenance endpoints (backups)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from pos_api.dependencies import get_services
from pos_api.schemas.maintenance import (
    BackupCreateRequest,
    BackupEntry,
    BackupListResponse,
    RestoreResponse,
)
from pos_core import backup_manager
from pos_core.bootstrap import ShopServices

router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@router.get("/backups", response_model=BackupListResponse)
def list_backups(services: ShopServices = Depends(get_services)):
    entries = []
    for meta in backup_manager.list_backups(services.settings.backup_dir):
        ok, details = backup_manager.check_backup_integrity(meta)
        entries.append(
            BackupEntry(
                name=meta.name,
                size_bytes=meta.size_bytes,
                created_at=meta.created_at,
                ok=ok,
                details=details,
            )
        )
    return BackupListResponse(backups=entries)


@router.post("/backups", response_model=BackupEntry, status_code=status.HTTP_201_CREATED)
def create_backup(
    payload: BackupCreateRequest | None = None,
    services: ShopServices = Depends(get_services),
):
    try:
        metadata = backup_manager.create_backup(
            services.db,
            label=payload.label if payload else None,
            backup_dir=services.settings.backup_dir,
        )
    except backup_manager.BackupError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return BackupEntry(name=metadata.name, size_bytes=metadata.size_bytes, created_at=metadata.created_at)


@router.post("/backups/{name}/restore", response_model=RestoreResponse)
def restore_backup(name: str, services: ShopServices = Depends(get_services)):
    try:
        backup_manager.restore_backup(services.db, name, backup_dir=services.settings.backup_dir)
    except backup_manager.BackupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return RestoreResponse(restored=name)
