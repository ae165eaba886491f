# ambience_backend/app/models/outcome.py
from __future__ import annotations

import time
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from .context import Context
from .mood import Mood


class Outcome(BaseModel):
    """Observed audience response after a mood was applied."""
    engagement: float = Field(..., ge=0.0, le=1.0)
    duration: float = Field(..., gt=0.0)           # seconds
    audience_growth: float = 0.0                   # signed delta
    feedback: float = Field(0.5, ge=0.0, le=1.0)

    model_config = ConfigDict(frozen=True)


class LearningRecord(BaseModel):
    context: Context
    applied_mood: Mood
    outcome: Outcome
    timestamp: float = Field(default_factory=time.time)

    model_config = ConfigDict(frozen=True)


class MoodParameters(BaseModel):
    energy: float = Field(..., ge=0.0, le=1.0)
    valence: float = Field(..., ge=0.0, le=1.0)
    arousal: float = Field(..., ge=0.0, le=1.0)


class AlternativeMood(BaseModel):
    mood: Mood
    probability: float = Field(..., ge=0.0, le=1.0)
    reasoning: str


class ExpectedOutcome(BaseModel):
    engagement_score: float = Field(..., ge=0.0, le=1.0)
    audience_retention: float = Field(..., ge=0.0, le=1.0)
    energy_level: float = Field(..., ge=0.0, le=1.0)


class MoodPrediction(BaseModel):
    recommended_mood: Mood
    confidence: float = Field(..., ge=0.0, le=1.0)
    probability: float = Field(..., ge=0.0, le=1.0)
    alternative_moods: List[AlternativeMood] = Field(default_factory=list)
    reasoning: List[str] = Field(..., min_length=1)
    predicted_duration: float = Field(..., gt=0.0)
    expected_outcome: ExpectedOutcome
    parameters: MoodParameters
    timestamp: float = Field(default_factory=time.time)


__all__ = [
    "Outcome", "LearningRecord", "MoodParameters", "AlternativeMood",
    "ExpectedOutcome", "MoodPrediction",
]
