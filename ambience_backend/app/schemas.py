# schemas.py  (request/response bodies for the HTTP layer)

from __future__ import annotations
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ambience_backend.app.models.context import Context
from ambience_backend.app.models.outcome import MoodPrediction, Outcome


# ===================== /mood =====================

class PredictIn(BaseModel):
    context: Context
    debug: bool = False

class PredictOut(BaseModel):
    prediction: MoodPrediction
    trace: Optional[Dict[str, Any]] = None


# ===================== /learn =====================

class OutcomeIn(BaseModel):
    context: Context
    applied_mood: str = Field(..., min_length=1)
    outcome: Outcome

class ResetIn(BaseModel):
    reseed: bool = False


# ===================== /abtest =====================

class ABStartIn(BaseModel):
    mood_a: str = Field(..., min_length=1)
    mood_b: str = Field(..., min_length=1)
    context: str = ""

class ABResultIn(BaseModel):
    mood: str = Field(..., min_length=1)
    engagement: float = Field(..., ge=0.0, le=1.0)


# ===================== /state =====================

class StateBlob(BaseModel):
    # passthrough; MoodEngine.import_state does the real validation
    model_config = ConfigDict(extra="allow")

    schema_version: Optional[str] = None
    history: List[Dict[str, Any]] = Field(default_factory=list)
    patterns: List[Dict[str, Any]] = Field(default_factory=list)
    ab_tests: List[Dict[str, Any]] = Field(default_factory=list)
    model: Optional[Dict[str, Any]] = None


__all__ = [
    "PredictIn", "PredictOut", "OutcomeIn", "ResetIn",
    "ABStartIn", "ABResultIn", "StateBlob",
]
