"""Settings module.

This module belongs to `idea_flow` in the idea-flow codebase.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from idea_flow.storage import DEFAULT_KEEP_COUNT

DEFAULT_PORT = 3001
DEFAULT_MAX_BODY_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True)
class ServerSettings:
    backups_dir: Path
    keep_count: int
    max_body_bytes: int
    host: str
    port: int
    static_dir: Path | None


def _int_env(name: str, default: int) -> int:
    raw = str(os.environ.get(name, "")).strip()
    if not raw:
        return int(default)
    try:
        return int(raw)
    except ValueError:
        return int(default)


def get_server_settings() -> ServerSettings:
    backups_dir = Path(os.environ.get("IDEA_FLOW_BACKUPS_DIR", "").strip() or "backups").resolve()
    keep_count = max(1, _int_env("IDEA_FLOW_KEEP_COUNT", DEFAULT_KEEP_COUNT))
    max_body_bytes = max(1, _int_env("IDEA_FLOW_MAX_BODY_BYTES", DEFAULT_MAX_BODY_BYTES))
    host = os.environ.get("IDEA_FLOW_HOST", "127.0.0.1").strip() or "127.0.0.1"
    port = _int_env("IDEA_FLOW_PORT", DEFAULT_PORT)

    # Unset means "serve the working directory"; an empty value turns static serving off.
    static_raw = os.environ.get("IDEA_FLOW_STATIC_DIR")
    if static_raw is None:
        static_dir: Path | None = Path.cwd()
    elif static_raw.strip():
        static_dir = Path(static_raw.strip()).resolve()
    else:
        static_dir = None

    return ServerSettings(
        backups_dir=backups_dir,
        keep_count=keep_count,
        max_body_bytes=max_body_bytes,
        host=host,
        port=port,
        static_dir=static_dir,
    )
