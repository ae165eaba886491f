# ambience_backend/app/services/learning/trends.py
from __future__ import annotations
from collections import Counter, deque
from dataclasses import asdict, dataclass
from statistics import mean
from typing import Deque, Dict, Iterable, List, Optional, Sequence

from ambience_backend.app.models.context import Context

# Purpose:
# Rolling window of recently observed contexts, used for:
#   - flow trends (last 5 vs previous 5): people increasing/decreasing,
#     energy building/declining
#   - a "current conditions" summary over the last 10 observations, including
#     how often consecutive mood picks agree (mood stability)
# Trends only shape mood parameters; they never pick the mood.

PEOPLE_DELTA = 2.0
ENERGY_DELTA = 0.2
STABILITY_MIN_SAMPLES = 5

@dataclass
class Trends:
    people_flow: str = "stable"     # increasing | decreasing | stable
    energy_flow: str = "steady"     # building | declining | steady

@dataclass
class CurrentConditions:
    samples: int = 0
    avg_people_count: float = 0.0
    avg_energy_level: float = 0.0
    dominant_audio_context: str = "silent"
    mood_stability: float = 1.0

    def to_public(self) -> Dict:
        return asdict(self)

def _energy(c: Context) -> float:
    v = c.vision.energy_level if c.vision else 0.0
    a = c.audio.energy if c.audio else 0.0
    return (v + a) / 2.0

def _people(c: Context) -> float:
    return float(c.vision.people_count) if c.vision else 0.0

def mood_stability(picks: Sequence[object]) -> float:
    """Share of consecutive picks that repeat the previous one; 1.0 below five picks."""
    if len(picks) < STABILITY_MIN_SAMPLES:
        return 1.0
    same = sum(1 for prev, cur in zip(picks, picks[1:]) if prev == cur)
    return same / (len(picks) - 1)

def audio_context(c: Context) -> str:
    audio = c.audio
    if audio is None or audio.volume < 0.1:
        return "silent"
    if audio.conversational > 0.6:
        return "conversational"
    if audio.musicality > 0.7:
        return "musical"
    if audio.ambient_noise > 0.7:
        return "ambient"
    return "mixed"

class SensorWindow:
    def __init__(self, cap: int = 50, contexts: Optional[Iterable[Context]] = None):
        self._items: Deque[Context] = deque(contexts or [], maxlen=max(10, cap))

    def __len__(self) -> int:
        return len(self._items)

    def observe(self, context: Context) -> None:
        self._items.append(context)

    def items(self) -> List[Context]:
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()

    def analyze_trends(self) -> Trends:
        if len(self._items) < 10:
            return Trends()
        items = list(self._items)
        recent, older = items[-5:], items[-10:-5]

        people_change = mean(_people(c) for c in recent) - mean(_people(c) for c in older)
        energy_change = mean(_energy(c) for c in recent) - mean(_energy(c) for c in older)

        people_flow = "increasing" if people_change > PEOPLE_DELTA else (
            "decreasing" if people_change < -PEOPLE_DELTA else "stable")
        energy_flow = "building" if energy_change > ENERGY_DELTA else (
            "declining" if energy_change < -ENERGY_DELTA else "steady")
        return Trends(people_flow=people_flow, energy_flow=energy_flow)

    def recent(self, n: int = 10) -> List[Context]:
        return list(self._items)[-n:]

    def current_conditions(self) -> CurrentConditions:
        """Stability is left at 1.0; only the engine can replay mood picks."""
        if not self._items:
            return CurrentConditions()
        recent = self.recent()
        counts = Counter(audio_context(c) for c in recent)
        # most_common keeps first-seen order on ties
        dominant = counts.most_common(1)[0][0]
        return CurrentConditions(
            samples=len(recent),
            avg_people_count=mean(_people(c) for c in recent),
            avg_energy_level=mean(_energy(c) for c in recent),
            dominant_audio_context=dominant,
        )

__all__ = ["Trends", "CurrentConditions", "SensorWindow", "audio_context", "mood_stability"]
