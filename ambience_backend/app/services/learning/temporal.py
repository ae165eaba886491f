# ambience_backend/app/services/learning/temporal.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from ambience_backend.app.models.context import Context
from ambience_backend.app.models.mood import MOODS, Mood, normalize, parse_mood

# Purpose:
# Fixed time-of-day / day-type nudges (not learned) read from
# rules/temporal_policy.yaml. Nudges are added onto a uniform base and the
# result is renormalized into a distribution.

Nudges = Dict[str, Dict[Mood, float]]

def _parse_block(block: Optional[Mapping[str, Any]]) -> Nudges:
    out: Nudges = {}
    for bucket, moods in (block or {}).items():
        out[str(bucket)] = {parse_mood(m): float(v) for m, v in (moods or {}).items()}
    return out

@dataclass
class TemporalPolicy:
    time_of_day: Nudges = field(default_factory=dict)
    day_of_week: Nudges = field(default_factory=dict)

    @classmethod
    def from_rules(cls, data: Optional[Mapping[str, Any]]) -> "TemporalPolicy":
        data = data or {}
        return cls(
            time_of_day=_parse_block(data.get("time_of_day")),
            day_of_week=_parse_block(data.get("day_of_week")),
        )

    @classmethod
    def load(cls, filename: str = "temporal_policy.yaml") -> "TemporalPolicy":
        from ambience_backend.app.services.rules_loader import load_yaml_rules
        return cls.from_rules(load_yaml_rules(filename))

    def nudges(self, context: Context) -> Dict[Mood, float]:
        env = context.environmental
        out = {m: 0.0 for m in MOODS}
        for m, v in self.time_of_day.get(env.time_of_day.value, {}).items():
            out[m] += v
        for m, v in self.day_of_week.get(env.day_of_week.value, {}).items():
            out[m] += v
        return out

    def distribution(self, context: Context) -> Dict[Mood, float]:
        base = 1.0 / len(MOODS)
        n = self.nudges(context)
        return normalize({m: base + n[m] for m in MOODS})

    def favours_time(self, context: Context, mood: Mood) -> bool:
        return self.time_of_day.get(context.environmental.time_of_day.value, {}).get(mood, 0.0) > 0.0

__all__ = ["TemporalPolicy"]
