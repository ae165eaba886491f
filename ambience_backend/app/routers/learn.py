# ambience_backend/app/routers/learn.py
from __future__ import annotations
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from ambience_backend.app.models.mood import InvalidMoodError
from ambience_backend.app.schemas import OutcomeIn, ResetIn
from ambience_backend.app.services.engine import MoodEngine
from ambience_backend.app.services.learning.feedback_flow import summarize
from .deps import get_engine

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/learn", tags=["learn"])

# What it does:
# Fold one observed outcome into history, predictor and patterns.
@router.post("/outcome", response_model=dict)
def outcome(body: OutcomeIn, engine: MoodEngine = Depends(get_engine)):
    try:
        record = engine.record_outcome(body.context, body.applied_mood, body.outcome)
        return summarize(record)
    except InvalidMoodError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception("record outcome failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"record outcome failed: {e}")

# What it does:
# Aggregate learning metrics (accuracy, per-mood effectiveness, time preferences).
@router.get("/metrics", response_model=dict)
def learning_metrics(engine: MoodEngine = Depends(get_engine)):
    try:
        return engine.learning_metrics()
    except Exception as e:
        logger.exception("metrics failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"metrics failed: {e}")

# What it does:
# Small status card: is the engine learning, how much experience, last update.
@router.get("/status", response_model=dict)
def learning_status(engine: MoodEngine = Depends(get_engine)):
    return engine.system_status()

# What it does:
# Current learned patterns with a readable description each.
@router.get("/patterns", response_model=dict)
def patterns(engine: MoodEngine = Depends(get_engine)):
    rows = engine.list_patterns()
    return {
        "count": len(rows),
        "patterns": [{**p.model_dump(mode="json"), "description": p.describe()} for p in rows],
    }

# What it does:
# Forget everything learned; optionally re-apply the seed patterns.
@router.post("/reset", response_model=dict)
def reset(body: Optional[ResetIn] = None, engine: MoodEngine = Depends(get_engine)):
    try:
        engine.reset_learning(reseed=bool(body and body.reseed))
        return {"ok": True, "patterns": len(engine.patterns)}
    except Exception as e:
        logger.exception("reset failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"reset failed: {e}")
