# ambience_backend/app/routers/state.py
from __future__ import annotations
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError

from ambience_backend.app.schemas import StateBlob
from ambience_backend.app.services.data_stores import (
    SnapshotNotFound, list_snapshots, load_snapshot, save_snapshot,
)
from ambience_backend.app.services.engine import MoodEngine
from .deps import get_engine

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/state", tags=["state"])

# What it does:
# Full learning state as a JSON blob (history, patterns, A/B results, model).
@router.get("/export", response_model=dict)
def export_state(engine: MoodEngine = Depends(get_engine)):
    return engine.export_state()

# What it does:
# Replace the learning state with a previously exported blob.
@router.post("/import", response_model=dict)
def import_state(blob: StateBlob, engine: MoodEngine = Depends(get_engine)):
    try:
        state = engine.import_state(blob.model_dump(exclude_none=True))
        return {"ok": True, "history": len(state.history), "patterns": len(engine.patterns)}
    except (ValidationError, ValueError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"invalid state: {e}")
    except Exception as e:
        logger.exception("import failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"import failed: {e}")

@router.get("/snapshots", response_model=dict)
def snapshots():
    return {"snapshots": list_snapshots()}

# What it does:
# Persist the current state under DATA_DIR/snapshots/<name>.json.
@router.post("/save/{name}", response_model=dict)
def save(name: str, engine: MoodEngine = Depends(get_engine)):
    try:
        path = save_snapshot(engine, name)
        return {"ok": True, "name": name, "path": str(path)}
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception("save snapshot failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"save failed: {e}")

# What it does:
# Restore a saved snapshot into the running engine.
@router.post("/load/{name}", response_model=dict)
def load(name: str, engine: MoodEngine = Depends(get_engine)):
    try:
        state = load_snapshot(engine, name)
        return {"ok": True, "name": name, "history": len(state.history)}
    except SnapshotNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except (ValidationError, ValueError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception("load snapshot failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"load failed: {e}")
