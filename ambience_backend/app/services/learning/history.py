# ambience_backend/app/services/learning/history.py
from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from statistics import mean
from typing import Any, Deque, Dict, Iterable, List, Optional, Tuple

from ambience_backend.app.models.context import Context
from ambience_backend.app.models.mood import MOODS, Mood, MoodLike, parse_mood, uniform_distribution
from ambience_backend.app.models.outcome import LearningRecord

# Purpose:
# Append-only, capacity-bounded log of (context, applied mood, outcome) plus
# nearest-context retrieval.
# similarity() blends three channels and renormalizes over the ones both
# contexts actually carry:
#   vision 0.4 (people count on a /50 scale, movement)
#   audio  0.3 (energy, volume)
#   env    0.3 (exact time bucket, exact day type)

PEOPLE_SCALE = 50.0
W_VISION, W_AUDIO, W_ENV = 0.4, 0.3, 0.3

@dataclass
class HistoryConfig:
    cap: int = 1000
    similarity_threshold: float = 0.7
    limit: int = 10
    min_similar: int = 3

@dataclass
class MoodSummary:
    mood: Mood
    count: int
    avg_engagement: float
    avg_duration: float
    avg_audience_growth: float
    avg_feedback: float

def _closeness(a: float, b: float, scale: float = 1.0) -> float:
    return max(0.0, 1.0 - min(1.0, abs(float(a) - float(b)) / scale))

def similarity(a: Context, b: Context) -> float:
    total_w = 0.0
    acc = 0.0

    if a.vision is not None and b.vision is not None:
        people = _closeness(a.vision.people_count, b.vision.people_count, PEOPLE_SCALE)
        movement = _closeness(a.vision.avg_movement, b.vision.avg_movement)
        acc += W_VISION * (people + movement) / 2.0
        total_w += W_VISION

    if a.audio is not None and b.audio is not None:
        energy = _closeness(a.audio.energy, b.audio.energy)
        volume = _closeness(a.audio.volume, b.audio.volume)
        acc += W_AUDIO * (energy + volume) / 2.0
        total_w += W_AUDIO

    ea, eb = a.environmental, b.environmental
    same_time = 1.0 if ea.time_of_day == eb.time_of_day else 0.0
    same_day = 1.0 if ea.day_of_week == eb.day_of_week else 0.0
    acc += W_ENV * (same_time + same_day) / 2.0
    total_w += W_ENV

    return min(1.0, max(0.0, acc / total_w)) if total_w > 0 else 0.0


class HistoryStore:
    def __init__(self, cfg: Optional[HistoryConfig] = None, records: Optional[Iterable[LearningRecord]] = None):
        self.cfg = cfg or HistoryConfig()
        # deque(maxlen) drops the oldest entry on overflow
        self._records: Deque[LearningRecord] = deque(records or [], maxlen=max(1, self.cfg.cap))

    def __len__(self) -> int:
        return len(self._records)

    def append(self, record: LearningRecord) -> None:
        self._records.append(record)

    def records(self) -> List[LearningRecord]:
        return list(self._records)

    def snapshot(self) -> "HistoryStore":
        # records are frozen, a shallow copy of the deque is enough
        snap = HistoryStore.__new__(HistoryStore)
        snap.cfg = self.cfg
        snap._records = deque(self._records, maxlen=self._records.maxlen)
        return snap

    def find_similar(self, context: Context, threshold: Optional[float] = None,
                     limit: Optional[int] = None) -> List[Tuple[float, LearningRecord]]:
        thr = self.cfg.similarity_threshold if threshold is None else float(threshold)
        lim = self.cfg.limit if limit is None else int(limit)
        scored = [(similarity(context, r.context), r) for r in self._records]
        scored = [(s, r) for (s, r) in scored if s >= thr]
        scored.sort(key=lambda x: (x[0], x[1].timestamp), reverse=True)
        return scored[: max(0, lim)]

    def distribution(self, context: Context) -> Tuple[Dict[Mood, float], float]:
        """
        Similarity-weighted mean engagement per applied mood, normalized.
        Fewer than min_similar neighbours -> uniform and zero confidence.
        """
        return self.distribution_from(self.find_similar(context))

    def distribution_from(self, similar: List[Tuple[float, LearningRecord]]) -> Tuple[Dict[Mood, float], float]:
        if len(similar) < self.cfg.min_similar:
            return uniform_distribution(), 0.0

        weighted: Dict[Mood, float] = {m: 0.0 for m in MOODS}
        weights: Dict[Mood, float] = {m: 0.0 for m in MOODS}
        for s, r in similar:
            weighted[r.applied_mood] += s * r.outcome.engagement
            weights[r.applied_mood] += s
        means = {m: (weighted[m] / weights[m]) if weights[m] > 0 else 0.0 for m in MOODS}
        total = sum(means.values())
        if total <= 0.0:
            return uniform_distribution(), 0.0

        coverage = min(1.0, len(similar) / float(max(1, self.cfg.limit)))
        conf = mean(s for s, _ in similar) * coverage
        return {m: v / total for m, v in means.items()}, min(1.0, conf)

    def mood_summary(self, mood: MoodLike) -> Optional[MoodSummary]:
        m = parse_mood(mood)
        rows = [r for r in self._records if r.applied_mood is m]
        if not rows:
            return None
        return MoodSummary(
            mood=m,
            count=len(rows),
            avg_engagement=mean(r.outcome.engagement for r in rows),
            avg_duration=mean(r.outcome.duration for r in rows),
            avg_audience_growth=mean(r.outcome.audience_growth for r in rows),
            avg_feedback=mean(r.outcome.feedback for r in rows),
        )

    # ---------------- persistence ----------------

    def to_state(self) -> List[Dict[str, Any]]:
        return [r.model_dump(mode="json") for r in self._records]

    def load_state(self, rows: Iterable[Any]) -> None:
        recs = [r if isinstance(r, LearningRecord) else LearningRecord.model_validate(r) for r in rows]
        # oldest first, so deque(maxlen) keeps the most recent `cap` records
        recs.sort(key=lambda r: r.timestamp)
        self._records = deque(recs, maxlen=max(1, self.cfg.cap))

    def clear(self) -> None:
        self._records.clear()


__all__ = ["HistoryConfig", "HistoryStore", "MoodSummary", "similarity"]
