"""Schemas for maintenance endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class BackupEntry(BaseModel):
    name: str
    size_bytes: int
    created_at: datetime
    ok: bool = True
    details: str = "OK"


class BackupListResponse(BaseModel):
    backups: List[BackupEntry]


class BackupCreateRequest(BaseModel):
    label: Optional[str] = None


class RestoreResponse(BaseModel):
    restored: str


__all__ = ["BackupCreateRequest", "BackupEntry", "BackupListResponse", "RestoreResponse"]
