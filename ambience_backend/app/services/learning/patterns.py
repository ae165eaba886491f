# ambience_backend/app/services/learning/patterns.py
from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ambience_backend.app.models.context import Context
from ambience_backend.app.models.mood import MOODS, Mood, MoodLike, parse_mood, uniform_distribution
from ambience_backend.app.models.patterns import Condition, Pattern
from ambience_backend.app.utils.req_id import new_request_id

# Purpose:
# Growable set of condition -> mood rules with EMA success rates.
#   - matches(): AND over dotted-path comparisons; missing paths never match
#   - update(): EMA the success rate of every firing pattern for the applied
#     mood; on a strong outcome (> 0.8) with no covering rule, synthesize one
#     from the salient features of the context
#   - prune(): keep top-N by success rate, then recency

log = logging.getLogger("ambience.patterns")

_MISSING = object()

@dataclass
class PatternStoreConfig:
    cap: int = 50
    ema_alpha: float = 0.1
    create_threshold: float = 0.8
    initial_confidence: float = 0.6
    crowd_high: int = 15
    crowd_low: int = 5
    audio_high: float = 0.7
    audio_low: float = 0.2

def _unit(v: float) -> float:
    return 0.0 if v < 0.0 else (1.0 if v > 1.0 else float(v))

# ---------------- condition evaluation ----------------

def resolve_path(obj: Any, path: str) -> Any:
    cur = obj
    for part in path.split("."):
        if cur is None:
            return _MISSING
        if isinstance(cur, dict):
            cur = cur.get(part, _MISSING)
        else:
            cur = getattr(cur, part, _MISSING)
        if cur is _MISSING:
            return _MISSING
    return cur

def _plain(v: Any) -> Any:
    return v.value if isinstance(v, Enum) else v

def _as_number(v: Any) -> Optional[float]:
    if isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        return float(v)
    return None

def evaluate(cond: Condition, context: Context) -> bool:
    raw = resolve_path(context, cond.field)
    if raw is _MISSING or raw is None:
        return False
    value = _plain(raw)
    target = _plain(cond.value)

    if cond.op in ("gt", "lt"):
        a, b = _as_number(value), _as_number(target)
        if a is None or b is None:
            return False
        return a > b if cond.op == "gt" else a < b
    if cond.op == "eq":
        return value == target
    if cond.op == "between":
        if not isinstance(target, (list, tuple)) or len(target) != 2:
            return False
        a, lo, hi = _as_number(value), _as_number(target[0]), _as_number(target[1])
        if a is None or lo is None or hi is None:
            return False
        return lo <= a <= hi
    if cond.op == "contains":
        needle = str(target)
        if isinstance(value, (list, tuple, set)):
            return any(needle in str(_plain(v)) for v in value)
        return needle in str(value)
    return False

def matches(pattern: Pattern, context: Context) -> bool:
    return all(evaluate(c, context) for c in pattern.conditions)

# ---------------- store ----------------

class PatternStore:
    def __init__(self, cfg: Optional[PatternStoreConfig] = None, patterns: Optional[Iterable[Pattern]] = None):
        self.cfg = cfg or PatternStoreConfig()
        self._patterns: List[Pattern] = list(patterns or [])
        self.prune()

    def __len__(self) -> int:
        return len(self._patterns)

    def all(self) -> List[Pattern]:
        return list(self._patterns)

    def snapshot(self) -> "PatternStore":
        # Deep copies so a concurrent update() never shows through a decision.
        snap = PatternStore.__new__(PatternStore)
        snap.cfg = self.cfg
        snap._patterns = [p.model_copy(deep=True) for p in self._patterns]
        return snap

    def add(self, pattern: Pattern) -> Pattern:
        self._patterns = [p for p in self._patterns if p.id != pattern.id]
        self._patterns.append(pattern)
        self.prune()
        return pattern

    def matching(self, context: Context) -> List[Pattern]:
        return [p for p in self._patterns if matches(p, context)]

    def distribution(self, context: Context) -> Tuple[Dict[Mood, float], float]:
        """
        Votes = success_rate * confidence per matched pattern, normalized.
        No matches -> uniform distribution and zero confidence.
        """
        hits = self.matching(context)
        if not hits:
            return uniform_distribution(), 0.0
        votes = {m: 0.0 for m in MOODS}
        for p in hits:
            votes[p.mood] += p.success_rate * p.confidence
        total = sum(votes.values())
        if total <= 0.0:
            return uniform_distribution(), 0.0
        return {m: v / total for m, v in votes.items()}, min(1.0, total)

    def update(self, context: Context, applied_mood: MoodLike, engagement: float) -> List[Pattern]:
        """Returns the patterns touched (updated or created)."""
        mood = parse_mood(applied_mood)
        engagement = _unit(engagement)
        now = time.time()
        a = self.cfg.ema_alpha

        touched: List[Pattern] = []
        for p in self._patterns:
            if p.mood is not mood or not matches(p, context):
                continue
            p.success_rate = _unit((1 - a) * p.success_rate + a * engagement)
            p.fires += 1
            p.updated_at = now
            touched.append(p)

        if engagement > self.cfg.create_threshold and not touched:
            created = self._synthesize(context, mood, engagement, now)
            self._patterns.append(created)
            touched.append(created)
            log.info("created pattern %s for %s: %s", created.id, mood.value, created.describe())

        self.prune()
        return touched

    def _synthesize(self, context: Context, mood: Mood, engagement: float, now: float) -> Pattern:
        conds: List[Condition] = []
        if context.vision is not None:
            n = context.vision.people_count
            if n > self.cfg.crowd_high:
                conds.append(Condition(field="vision.people_count", op="gt", value=self.cfg.crowd_high))
            elif n < self.cfg.crowd_low:
                conds.append(Condition(field="vision.people_count", op="lt", value=self.cfg.crowd_low))
        if context.audio is not None:
            e = context.audio.energy
            if e > self.cfg.audio_high:
                conds.append(Condition(field="audio.energy", op="gt", value=self.cfg.audio_high))
            elif e < self.cfg.audio_low:
                conds.append(Condition(field="audio.energy", op="lt", value=self.cfg.audio_low))
        conds.append(Condition(
            field="environmental.time_of_day", op="eq", value=context.environmental.time_of_day.value,
        ))
        return Pattern(
            id=new_request_id("pat"),
            conditions=conds,
            mood=mood,
            confidence=self.cfg.initial_confidence,
            success_rate=engagement,
            fires=1,
            created_at=now,
            updated_at=now,
        )

    def prune(self) -> List[str]:
        if len(self._patterns) <= self.cfg.cap:
            return []
        ranked = sorted(self._patterns, key=lambda p: (p.success_rate, p.updated_at), reverse=True)
        kept, removed = ranked[: self.cfg.cap], ranked[self.cfg.cap:]
        self._patterns = kept
        return [p.id for p in removed]

    # ---------------- persistence ----------------

    def to_state(self) -> List[Dict[str, Any]]:
        return [p.model_dump(mode="json") for p in self._patterns]

    def load_state(self, rows: Iterable[Any]) -> None:
        self._patterns = [r if isinstance(r, Pattern) else Pattern.model_validate(r) for r in rows]
        self.prune()

    def clear(self) -> None:
        self._patterns = []


def load_seed_patterns(filename: str = "seed_patterns.yaml") -> List[Pattern]:
    from ambience_backend.app.services.rules_loader import load_yaml_rules

    data = load_yaml_rules(filename) or {}
    out: List[Pattern] = []
    for row in data.get("patterns") or []:
        row = dict(row)
        row["mood"] = parse_mood(row.get("mood", ""))
        out.append(Pattern.model_validate(row))
    return out


__all__ = [
    "PatternStoreConfig", "PatternStore", "resolve_path", "evaluate", "matches",
    "load_seed_patterns",
]
