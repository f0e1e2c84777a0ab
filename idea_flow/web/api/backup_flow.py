"""Backup Flow module.

This module belongs to `idea_flow.web.api` in the idea-flow codebase.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from idea_flow.web.services.backup_service import BackupService

router = APIRouter()


def get_backup_service(request: Request) -> BackupService:
    state = request.app.state
    return BackupService(state.store, max_body_bytes=state.settings.max_body_bytes)


async def save_backup(request: Request, service: BackupService) -> dict:
    return await service.save(request)


def list_backups(service: BackupService) -> dict:
    return service.list_backups()


def latest_backup(service: BackupService) -> dict:
    return service.latest()


def get_backup(filename: str, service: BackupService) -> dict:
    return service.get(filename)


@router.post("/api/backup")
async def save_backup_flow(request: Request, service: BackupService = Depends(get_backup_service)) -> dict:
    return await save_backup(request, service)


@router.get("/api/backups")
def list_backups_flow(service: BackupService = Depends(get_backup_service)) -> dict:
    return list_backups(service)


# Must stay registered before the `{filename}` route so "latest" is never looked up as a file.
@router.get("/api/backup/latest")
def latest_backup_flow(service: BackupService = Depends(get_backup_service)) -> dict:
    return latest_backup(service)


@router.get("/api/backup/{filename}")
def get_backup_flow(filename: str, service: BackupService = Depends(get_backup_service)) -> dict:
    return get_backup(filename, service)
