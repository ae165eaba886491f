# ambience_backend/app/utils/storage.py
from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Union

Pathish = Union[str, Path]

def _as_path(p: Pathish) -> Path:
    return p if isinstance(p, Path) else Path(p)

def ensure_dir(p: Pathish) -> Path:
    path = _as_path(p)
    target = (path.parent if path.suffix else path)
    target.mkdir(parents=True, exist_ok=True)
    return target

def read_json(path: Pathish, default: Any = None, *, encoding: str = "utf-8") -> Any:
    """Return parsed JSON, or `default` when the file is missing or unreadable."""
    p = _as_path(path)
    if not (p.exists() and p.is_file()):
        return default
    try:
        return json.loads(p.read_text(encoding=encoding))
    except (OSError, ValueError):
        return default

def write_json(path: Pathish, obj: Any, *, encoding: str = "utf-8", indent: int = 2) -> None:
    # tmp + replace keeps readers from seeing half-written snapshots
    p = _as_path(path)
    ensure_dir(p)
    tmp = p.with_suffix(p.suffix + ".tmp")
    tmp.write_text(json.dumps(obj, ensure_ascii=False, indent=indent), encoding=encoding)
    tmp.replace(p)
