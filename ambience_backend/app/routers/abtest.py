# ambience_backend/app/routers/abtest.py
from __future__ import annotations
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ambience_backend.app.schemas import ABResultIn, ABStartIn
from ambience_backend.app.services.engine import MoodEngine
from ambience_backend.app.services.learning.ab_testing import ABTestActiveError
from .deps import get_engine

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/abtest", tags=["abtest"])

# What it does:
# Start a paired test between two moods (409 while another is active).
@router.post("/start", response_model=dict)
def start(body: ABStartIn, engine: MoodEngine = Depends(get_engine)):
    try:
        return engine.start_test(body.mood_a, body.mood_b, body.context).model_dump(mode="json")
    except ABTestActiveError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception("start test failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"start test failed: {e}")

# What it does:
# Record one engagement sample; returns the result when the threshold completes the test.
@router.post("/{test_id}/result", response_model=dict)
def record_result(test_id: str, body: ABResultIn, engine: MoodEngine = Depends(get_engine)):
    try:
        result = engine.record_test_result(test_id, body.mood, body.engagement)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception("record result failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"record result failed: {e}")
    active = engine.active_test()
    return {
        "completed": result is not None,
        "result": result.model_dump(mode="json") if result else None,
        "sample_count": active.sample_count if active else None,
    }

# What it does:
# Close the active test now and report the winner.
@router.post("/complete", response_model=dict)
def complete(engine: MoodEngine = Depends(get_engine)):
    result = engine.complete_test()
    return {"result": result.model_dump(mode="json") if result else None}

# What it does:
# Drop the active test without a result.
@router.post("/abandon", response_model=dict)
def abandon(engine: MoodEngine = Depends(get_engine)):
    dropped = engine.abandon_test()
    return {"abandoned": dropped.test_id if dropped else None}

@router.get("/active", response_model=dict)
def active(engine: MoodEngine = Depends(get_engine)):
    test = engine.active_test()
    return {"test": test.model_dump(mode="json") if test else None}

@router.get("/history", response_model=dict)
def history(engine: MoodEngine = Depends(get_engine)):
    rows = engine.test_history()
    return {"count": len(rows), "results": [r.model_dump(mode="json") for r in rows]}
