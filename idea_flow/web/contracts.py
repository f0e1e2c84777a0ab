"""Contracts module.

This module belongs to `idea_flow.web` in the idea-flow codebase.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class APIError(BaseModel):
    success: bool = False
    error: str


class BackupSaveResponse(BaseModel):
    success: bool = True
    filename: str


class BackupEntry(BaseModel):
    filename: str
    size: int
    created: str


class BackupListResponse(BaseModel):
    success: bool = True
    backups: list[BackupEntry] = Field(default_factory=list)


class BackupLatestResponse(BaseModel):
    success: bool = True
    data: Any = None
    filename: str | None = None
    backupTime: str | None = None
    message: str | None = None


class BackupDataResponse(BaseModel):
    success: bool = True
    data: Any = None
