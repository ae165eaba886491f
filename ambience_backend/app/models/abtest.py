# ambience_backend/app/models/abtest.py
from __future__ import annotations

import time
from typing import List, Optional

from pydantic import BaseModel, Field

from .mood import Mood


class ABTest(BaseModel):
    """The single active paired-mood experiment."""
    test_id: str
    mood_a: Mood
    mood_b: Mood
    context: str = ""
    sample_count: int = 0
    results_a: List[float] = Field(default_factory=list)
    results_b: List[float] = Field(default_factory=list)
    started_at: float = Field(default_factory=time.time)


class ABTestResult(BaseModel):
    test_id: str
    mood_a: Mood
    mood_b: Mood
    context: str = ""
    winner_mood: Mood
    mean_a: float = 0.0
    mean_b: float = 0.0
    confidence_level: float = Field(..., ge=0.0, le=1.0)
    engagement_diff: float = Field(..., ge=0.0)
    sample_size: int
    started_at: float
    ended_at: float = Field(default_factory=time.time)
    reason: Optional[str] = None   # "threshold" | "manual"


__all__ = ["ABTest", "ABTestResult"]
