"""Storage module.

This module belongs to `idea_flow` in the idea-flow codebase.
"""

from __future__ import annotations

import json
import logging
import os
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

logger = logging.getLogger(__name__)

LATEST_TOKEN = "latest"
DEFAULT_KEEP_COUNT = 20

_SNAPSHOT_NAME = re.compile(r"backup-[0-9TZ-]+(?:_\d{2,})?\.json")


class SnapshotStoreError(Exception):
    """Base class for every failure surfaced by the snapshot store."""


class StoreIOError(SnapshotStoreError):
    pass


class SerializationError(SnapshotStoreError):
    pass


class SnapshotNotFoundError(SnapshotStoreError):
    pass


class CorruptSnapshotError(SnapshotStoreError):
    pass


@dataclass(frozen=True)
class SnapshotInfo:
    filename: str
    size: int
    created_at: float  # mtime, seconds since epoch


def format_timestamp(ts: float) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. 2024-05-01T08:30:00.123Z"""
    dt = datetime.fromtimestamp(float(ts), tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def snapshot_filename(ts: float) -> str:
    stamp = format_timestamp(ts).replace(":", "-").replace(".", "-")
    return f"backup-{stamp}.json"


def is_snapshot_name(name: str) -> bool:
    return bool(_SNAPSHOT_NAME.fullmatch(str(name or "")))


class SnapshotStore:
    """Bounded directory of timestamped JSON snapshots.

    Every `save` writes one new file and then evicts the oldest files (by
    modification time) until at most `keep_count` remain. Files are never
    rewritten: a name clash within the same millisecond gets a `_NN` suffix.
    """

    def __init__(
        self,
        root: str | Path = "backups",
        *,
        keep_count: int = DEFAULT_KEEP_COUNT,
        time_fn: Callable[[], float] | None = None,
    ) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.keep_count = max(1, int(keep_count))
        self._time_fn = time_fn or time.time

    def _path(self, filename: str) -> Path:
        return self.root / filename

    def _resolve(self, filename: str) -> Path:
        name = str(filename or "")
        if name == LATEST_TOKEN or not is_snapshot_name(name):
            raise SnapshotNotFoundError(f"invalid backup name: {name!r}")
        path = self._path(name)
        root = self.root.resolve()
        if path.resolve().parent != root:
            raise SnapshotNotFoundError(f"invalid backup name: {name!r}")
        return path

    @staticmethod
    def _discard_partial(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.warning("[backup] could not remove partial file %s", path.name)

    @staticmethod
    def _encode(payload: Any) -> bytes:
        try:
            return json.dumps(payload, ensure_ascii=False, indent=2, allow_nan=False).encode("utf-8")
        except (TypeError, ValueError) as exc:
            # UnicodeEncodeError (lone surrogates) is a ValueError too.
            raise SerializationError(f"payload is not JSON serializable: {exc}") from exc

    def _create_exclusive(self, ts: float, data: bytes) -> Path:
        base = snapshot_filename(ts)
        candidates = [base] + [f"{base[:-len('.json')]}_{n:02d}.json" for n in range(1, 100)]
        for name in candidates:
            path = self._path(name)
            try:
                fh = path.open("xb")
            except FileExistsError:
                continue
            except OSError as exc:
                raise StoreIOError(f"failed to create {name}: {exc}") from exc
            try:
                with fh:
                    fh.write(data)
            except OSError as exc:
                self._discard_partial(path)
                raise StoreIOError(f"failed to write {name}: {exc}") from exc
            except BaseException:
                self._discard_partial(path)
                raise
            return path
        raise StoreIOError(f"too many backups share the timestamp of {base}")

    def save(self, payload: Any) -> str:
        data = self._encode(payload)
        ts = float(self._time_fn())
        path = self._create_exclusive(ts, data)
        try:
            os.utime(path, (ts, ts))
        except OSError as exc:
            logger.warning("[backup] could not stamp mtime on %s: %s", path.name, exc)
        logger.info("[backup] saved: %s", path.name)
        self.evict(self.keep_count)
        return path.name

    def list_snapshots(self) -> list[SnapshotInfo]:
        try:
            names = [entry.name for entry in os.scandir(self.root) if entry.is_file()]
        except OSError as exc:
            raise StoreIOError(f"failed to read backups directory: {exc}") from exc
        items: list[SnapshotInfo] = []
        for name in names:
            if not is_snapshot_name(name):
                continue
            try:
                st = self._path(name).stat()
            except FileNotFoundError:
                continue
            except OSError as exc:
                raise StoreIOError(f"failed to stat {name}: {exc}") from exc
            items.append(SnapshotInfo(filename=name, size=int(st.st_size), created_at=float(st.st_mtime)))
        items.sort(key=lambda item: (item.created_at, item.filename), reverse=True)
        return items

    def _read(self, path: Path) -> Any:
        try:
            raw = path.read_bytes()
        except FileNotFoundError as exc:
            raise SnapshotNotFoundError(f"backup not found: {path.name}") from exc
        except OSError as exc:
            raise StoreIOError(f"failed to read {path.name}: {exc}") from exc
        try:
            return json.loads(raw.decode("utf-8"))
        except ValueError as exc:
            raise CorruptSnapshotError(f"backup {path.name} is not valid JSON: {exc}") from exc

    def latest(self) -> tuple[SnapshotInfo, Any] | None:
        """Return (info, payload) of the newest snapshot, or None for an empty store."""
        items = self.list_snapshots()
        if not items:
            return None
        info = items[0]
        data = self._read(self._path(info.filename))
        logger.info("[backup] loaded latest: %s", info.filename)
        return info, data

    def get(self, filename: str) -> Any:
        return self._read(self._resolve(filename))

    def evict(self, keep_count: int) -> int:
        # Best-effort: the snapshot that triggered this is already on disk.
        try:
            items = self.list_snapshots()
        except StoreIOError as exc:
            logger.warning("[backup] eviction skipped: %s", exc)
            return 0
        removed = 0
        for info in items[max(0, int(keep_count)) :]:
            try:
                self._path(info.filename).unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("[backup] failed to delete %s: %s", info.filename, exc)
                continue
            removed += 1
            logger.info("[backup] deleted old: %s", info.filename)
        return removed
