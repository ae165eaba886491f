# ambience_backend/app/services/data_stores/snapshots.py
from __future__ import annotations

import logging
import re
from pathlib import Path
from threading import RLock
from typing import TYPE_CHECKING, Any, Dict, List

from ambience_backend.app.config.paths import ensure_data_dir_exists, path_under_data
from ambience_backend.app.utils.storage import read_json, write_json

if TYPE_CHECKING:
    from ambience_backend.app.services.engine import EngineState, MoodEngine

# Purpose:
# Store engine export blobs as JSON under DATA_DIR/snapshots/<name>.json.
# The blob itself stays opaque here; MoodEngine.import_state validates it.

log = logging.getLogger("ambience.snapshots")

SNAPSHOT_SUBDIR = "snapshots"
_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]{0,63}$")
_IO_LOCK = RLock()


class SnapshotNotFound(FileNotFoundError):
    """No snapshot with that name exists under DATA_DIR."""


def snapshot_path(name: str) -> Path:
    if not _NAME_RE.match(name or "") or ".." in name:
        raise ValueError(f"invalid snapshot name {name!r}")
    return path_under_data(SNAPSHOT_SUBDIR, f"{name}.json")

def save_snapshot(engine: "MoodEngine", name: str) -> Path:
    path = snapshot_path(name)
    blob = engine.export_state()
    with _IO_LOCK:
        write_json(path, blob)
    log.info("saved snapshot %s (%d records)", path.name, len(blob.get("history") or []))
    return path

def load_snapshot(engine: "MoodEngine", name: str) -> "EngineState":
    path = snapshot_path(name)
    with _IO_LOCK:
        blob: Any = read_json(path, default=None)
    if blob is None:
        raise SnapshotNotFound(f"snapshot {name!r} not found")
    return engine.import_state(blob)

def list_snapshots() -> List[Dict[str, Any]]:
    root = ensure_data_dir_exists(SNAPSHOT_SUBDIR)
    return [
        {"name": p.stem, "bytes": p.stat().st_size, "modified": p.stat().st_mtime}
        for p in sorted(root.glob("*.json"))
    ]
