# ambience_backend/app/services/learning/metrics.py
from __future__ import annotations
from collections import defaultdict
from statistics import mean
from typing import Dict, List, Optional, Sequence

from ambience_backend.app.models.abtest import ABTestResult
from ambience_backend.app.models.context import TimeOfDay
from ambience_backend.app.models.mood import MOODS
from ambience_backend.app.models.outcome import LearningRecord
from ambience_backend.app.models.patterns import Pattern

# Purpose:
# Read-only aggregates over the learning state:
# - accuracy = share of outcomes with engagement > SUCCESS_ENGAGEMENT
#   (DEFAULT_ACCURACY before any outcome arrives)
# - per-mood usage / engagement / duration
# - time-of-day preference = best mean engagement per bucket
# - accuracy trend over consecutive windows of TREND_WINDOW outcomes
# Nothing here mutates or persists.

SUCCESS_ENGAGEMENT = 0.7
DEFAULT_ACCURACY = 0.7
TREND_WINDOW = 10
TREND_POINTS = 10
LEARNING_MIN_RECORDS = 10

def accuracy(records: Sequence[LearningRecord]) -> float:
    if not records:
        return DEFAULT_ACCURACY
    hits = sum(1 for r in records if r.outcome.engagement > SUCCESS_ENGAGEMENT)
    return hits / len(records)

def mood_effectiveness(records: Sequence[LearningRecord]) -> Dict[str, Dict[str, float]]:
    out: Dict[str, Dict[str, float]] = {}
    for m in MOODS:
        rows = [r for r in records if r.applied_mood is m]
        out[m.value] = {
            "usage": len(rows),
            "avg_engagement": mean(r.outcome.engagement for r in rows) if rows else 0.0,
            "avg_duration": mean(r.outcome.duration for r in rows) if rows else 0.0,
        }
    return out

def best_mood(effectiveness: Dict[str, Dict[str, float]]) -> Optional[str]:
    used = [(name, v["avg_engagement"]) for name, v in effectiveness.items() if v["usage"] > 0]
    if not used:
        return None
    # max() keeps the first maximum, which is vocabulary order
    return max(used, key=lambda kv: kv[1])[0]

def time_preferences(records: Sequence[LearningRecord]) -> List[Dict[str, object]]:
    # Purpose:
    # Per time bucket with data: mood with the highest mean engagement.
    buckets: Dict[TimeOfDay, Dict[str, List[float]]] = defaultdict(lambda: defaultdict(list))
    for r in records:
        buckets[r.context.environmental.time_of_day][r.applied_mood.value].append(r.outcome.engagement)

    prefs: List[Dict[str, object]] = []
    for tod in TimeOfDay:
        per_mood = buckets.get(tod)
        if not per_mood:
            continue
        ranked = sorted(
            ((name, mean(vals), len(vals)) for name, vals in per_mood.items()),
            key=lambda x: (-x[1], [m.value for m in MOODS].index(x[0])),
        )
        name, avg, n = ranked[0]
        prefs.append({"time_of_day": tod.value, "preferred_mood": name, "success": avg, "samples": n})
    return prefs

def accuracy_trend(records: Sequence[LearningRecord], window: int = TREND_WINDOW,
                   points: int = TREND_POINTS) -> List[float]:
    rows = list(records)
    chunks = [rows[i:i + window] for i in range(0, len(rows), window)]
    return [accuracy(c) for c in chunks][-points:]

def learning_metrics(records: Sequence[LearningRecord], patterns: Sequence[Pattern],
                     ab_history: Sequence[ABTestResult]) -> Dict[str, object]:
    eff = mood_effectiveness(records)
    return {
        "total_sessions": len(records),
        "average_accuracy": accuracy(records),
        "mood_effectiveness": eff,
        "best_mood": best_mood(eff),
        "time_preferences": time_preferences(records),
        "accuracy_trend": accuracy_trend(records),
        "pattern_count": len(patterns),
        "completed_ab_tests": len(ab_history),
    }

def system_status(records: Sequence[LearningRecord]) -> Dict[str, object]:
    return {
        "is_learning": len(records) > LEARNING_MIN_RECORDS,
        "total_experience": len(records),
        "confidence": accuracy(records),
        "last_learning_update": records[-1].timestamp if records else 0.0,
    }


__all__ = [
    "accuracy", "mood_effectiveness", "best_mood", "time_preferences",
    "accuracy_trend", "learning_metrics", "system_status",
]
