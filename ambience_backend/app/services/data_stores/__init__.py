# ambience_backend/app/services/data_stores/__init__.py
"""
Export surface for data store helpers.

    from ambience_backend.app.services.data_stores import (
        SNAPSHOT_SUBDIR, save_snapshot, load_snapshot, list_snapshots,
    )
"""

from __future__ import annotations

# ---- Engine snapshots ----
from .snapshots import (  # noqa: F401
    SNAPSHOT_SUBDIR,
    SnapshotNotFound,
    snapshot_path,
    save_snapshot,
    load_snapshot,
    list_snapshots,
)

__all__ = [
    "SNAPSHOT_SUBDIR", "SnapshotNotFound", "snapshot_path",
    "save_snapshot", "load_snapshot", "list_snapshots",
]
