# ambience_backend/app/models/mood.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Union


class Mood(str, Enum):
    # declaration order == predictor output order
    ENERGETIC = "Energetic"
    SOCIAL = "Social"
    CONTEMPLATIVE = "Contemplative"
    MYSTERIOUS = "Mysterious"
    PEACEFUL = "Peaceful"


class InvalidMoodError(ValueError):
    """Raised when a caller names a mood outside the fixed vocabulary."""


@dataclass(frozen=True)
class MoodProfile:
    energy: float
    valence: float
    arousal: float
    color: str
    description: str
    duration_factor: float = 1.0


MOOD_PROFILES: Dict[Mood, MoodProfile] = {
    Mood.ENERGETIC: MoodProfile(0.9, 0.8, 0.9, "#EF4444", "High energy and excitement", 0.8),
    Mood.SOCIAL: MoodProfile(0.7, 0.9, 0.6, "#10B981", "Interactive and collaborative atmosphere", 1.2),
    Mood.CONTEMPLATIVE: MoodProfile(0.3, 0.6, 0.2, "#8B5CF6", "Quiet reflection and thoughtful observation", 1.5),
    Mood.MYSTERIOUS: MoodProfile(0.5, 0.3, 0.7, "#6366F1", "Intriguing and thought-provoking", 1.0),
    Mood.PEACEFUL: MoodProfile(0.2, 0.8, 0.1, "#06B6D4", "Calm and serene environment", 1.3),
}

MOODS: List[Mood] = list(Mood)

MoodLike = Union[Mood, str]


def parse_mood(name: MoodLike) -> Mood:
    if isinstance(name, Mood):
        return name
    try:
        return Mood(name)
    except ValueError:
        allowed = ", ".join(m.value for m in MOODS)
        raise InvalidMoodError(f"Unknown mood {name!r}; expected one of: {allowed}") from None


def mood_index(mood: MoodLike) -> int:
    return MOODS.index(parse_mood(mood))


def uniform_distribution() -> Dict[Mood, float]:
    p = 1.0 / len(MOODS)
    return {m: p for m in MOODS}


def normalize(scores: Dict[Mood, float]) -> Dict[Mood, float]:
    # Negative entries count as zero; an all-zero input falls back to uniform.
    pos = {m: max(0.0, float(scores.get(m, 0.0))) for m in MOODS}
    total = sum(pos.values())
    if total <= 0.0:
        return uniform_distribution()
    return {m: v / total for m, v in pos.items()}


def vocabulary() -> List[Dict[str, object]]:
    return [
        {
            "name": m.value,
            "energy": p.energy,
            "valence": p.valence,
            "arousal": p.arousal,
            "color": p.color,
            "description": p.description,
            "duration_factor": p.duration_factor,
        }
        for m, p in MOOD_PROFILES.items()
    ]


__all__ = [
    "Mood", "MoodProfile", "MOOD_PROFILES", "MOODS", "MoodLike", "InvalidMoodError",
    "parse_mood", "mood_index", "uniform_distribution", "normalize", "vocabulary",
]
