"""Backup Service module.

This module belongs to `idea_flow.web.services` in the idea-flow codebase.
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import HTTPException, Request
from starlette.concurrency import run_in_threadpool

from idea_flow.storage import SnapshotStore, format_timestamp
from idea_flow.web.contracts import (
    BackupDataResponse,
    BackupEntry,
    BackupLatestResponse,
    BackupListResponse,
    BackupSaveResponse,
)


class BackupService:
    """Translate HTTP requests into snapshot store calls.

    Store errors propagate unchanged; the app-level handler renders them.
    """

    def __init__(self, store: SnapshotStore, *, max_body_bytes: int) -> None:
        self.store = store
        self.max_body_bytes = int(max_body_bytes)

    async def _read_payload(self, request: Request) -> Any:
        declared = str(request.headers.get("content-length") or "").strip()
        if declared.isdigit() and int(declared) > self.max_body_bytes:
            raise HTTPException(status_code=413, detail="request body too large")
        # Chunked uploads carry no content-length; stop reading once over the ceiling.
        chunks: list[bytes] = []
        total = 0
        async for chunk in request.stream():
            total += len(chunk)
            if total > self.max_body_bytes:
                raise HTTPException(status_code=413, detail="request body too large")
            chunks.append(chunk)
        body = b"".join(chunks)
        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise HTTPException(status_code=400, detail=f"invalid JSON body: {exc}") from exc

    async def save(self, request: Request) -> dict:
        payload = await self._read_payload(request)
        filename = await run_in_threadpool(self.store.save, payload)
        return BackupSaveResponse(filename=filename).model_dump()

    def list_backups(self) -> dict:
        entries = [
            BackupEntry(filename=info.filename, size=info.size, created=format_timestamp(info.created_at))
            for info in self.store.list_snapshots()
        ]
        return BackupListResponse(backups=entries).model_dump()

    def latest(self) -> dict:
        found = self.store.latest()
        if found is None:
            empty = BackupLatestResponse(data=None, message="No backups found")
            return empty.model_dump(exclude={"filename", "backupTime"})
        info, data = found
        resp = BackupLatestResponse(
            data=data,
            filename=info.filename,
            backupTime=format_timestamp(info.created_at),
        )
        return resp.model_dump(exclude={"message"})

    def get(self, filename: str) -> dict:
        return BackupDataResponse(data=self.store.get(filename)).model_dump()
