# ambience_backend/app/routers/mood.py
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from ambience_backend.app.models.context import Context
from ambience_backend.app.models.mood import InvalidMoodError, vocabulary
from ambience_backend.app.observability.decision_trace import DecisionTrace
from ambience_backend.app.schemas import PredictIn, PredictOut
from ambience_backend.app.services.engine import MoodEngine
from ambience_backend.app.utils.req_id import new_request_id
from .deps import get_engine

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/mood", tags=["mood"])

# What it does:
# Recommend a mood for one context; debug=true also returns the decision trace.
@router.post("/predict", response_model=PredictOut)
def predict(body: PredictIn, engine: MoodEngine = Depends(get_engine)):
    trace = DecisionTrace(new_request_id("mood")) if body.debug else None
    try:
        prediction = engine.predict_optimal_mood(body.context, trace=trace)
    except Exception as e:
        logger.exception("predict failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"predict failed: {e}")
    return PredictOut(prediction=prediction, trace=trace.to_public() if trace else None)

# What it does:
# Last recommendation produced by this engine, if any.
@router.get("/current", response_model=dict)
def current(engine: MoodEngine = Depends(get_engine)):
    pred = engine.current_prediction
    return {"prediction": pred.model_dump(mode="json") if pred else None}

# What it does:
# Feed one sensor context into the rolling window used for trends.
@router.post("/observe", response_model=dict)
def observe(context: Context, engine: MoodEngine = Depends(get_engine)):
    try:
        engine.observe(context)
        return {"ok": True, "window": len(engine.window)}
    except Exception as e:
        logger.exception("observe failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"observe failed: {e}")

# What it does:
# Flow trends plus a summary of the last ten observations, with mood stability.
@router.get("/trends", response_model=dict)
def trends(engine: MoodEngine = Depends(get_engine)):
    t = engine.trends()
    return {
        "people_flow": t.people_flow,
        "energy_flow": t.energy_flow,
        "current": engine.current_conditions().to_public(),
    }

# What it does:
# Mood vocabulary with template parameters.
@router.get("/vocabulary", response_model=List[Dict[str, Any]])
def list_vocabulary():
    return vocabulary()

# What it does:
# Abstract show-control intent for a mood (defaults to the current recommendation).
@router.get("/intent", response_model=dict)
def intent(mood: Optional[str] = None, engine: MoodEngine = Depends(get_engine)):
    try:
        return engine.intent_for(mood).model_dump(mode="json")
    except InvalidMoodError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
