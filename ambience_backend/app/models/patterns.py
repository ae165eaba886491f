# ambience_backend/app/models/patterns.py
from __future__ import annotations

import time
from typing import Any, List, Literal

from pydantic import BaseModel, Field

from .mood import Mood

ConditionOp = Literal["gt", "lt", "eq", "between", "contains"]


class Condition(BaseModel):
    # dotted path into a Context, e.g. "vision.people_count"
    field: str
    op: ConditionOp
    value: Any = None

    def describe(self) -> str:
        if self.op == "between" and isinstance(self.value, (list, tuple)) and len(self.value) == 2:
            return f"{self.field} in [{self.value[0]}, {self.value[1]}]"
        sym = {"gt": ">", "lt": "<", "eq": "==", "between": "between", "contains": "contains"}[self.op]
        return f"{self.field} {sym} {self.value}"


class Pattern(BaseModel):
    """Condition → mood rule with an empirically tracked success rate."""
    id: str
    conditions: List[Condition] = Field(default_factory=list)
    mood: Mood
    confidence: float = Field(0.6, ge=0.0, le=1.0)
    success_rate: float = Field(0.5, ge=0.0, le=1.0)
    fires: int = 0
    created_at: float = Field(default_factory=time.time)
    updated_at: float = Field(default_factory=time.time)

    def describe(self) -> str:
        return " AND ".join(c.describe() for c in self.conditions) or "always"


__all__ = ["ConditionOp", "Condition", "Pattern"]
