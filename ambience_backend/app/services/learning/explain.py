# ambience_backend/app/services/learning/explain.py
from __future__ import annotations
from typing import List, Optional

from ambience_backend.app.models.context import Context
from ambience_backend.app.models.mood import Mood
from ambience_backend.app.models.patterns import Pattern

# Purpose:
# Human-readable "why" strings for a decision. Each sentence is triggered by
# a threshold crossing in the context or by a learned source that voted
# (patterns, history); the list is never empty.

CROWD_HIGH = 15
CROWD_LOW = 5
MOVEMENT_HIGH = 0.6
CONVERSATION_HIGH = 0.6
MUSIC_HIGH = 0.7
AUDIO_HIGH = 0.6
AUDIO_QUIET = 0.2

def _pct(v: float) -> str:
    return f"{round(v * 100)}%"

def compose(context: Context, mood: Mood, *,
            temporal_favours: bool = False,
            patterns: Optional[List[Pattern]] = None,
            history_hits: int = 0,
            history_engagement: Optional[float] = None) -> List[str]:
    name = mood.value
    vision, audio = context.vision, context.audio
    reasons: List[str] = []

    if vision is not None:
        if vision.people_count > CROWD_HIGH and vision.avg_movement > MOVEMENT_HIGH:
            reasons.append(
                f"High crowd energy ({vision.people_count} people, movement {_pct(vision.avg_movement)}) supports a {name} mood."
            )
        elif vision.people_count > CROWD_HIGH:
            reasons.append(f"A large crowd ({vision.people_count} people) is present.")
        elif vision.people_count < CROWD_LOW:
            reasons.append(f"Low crowd density ({vision.people_count} people) aligns with a {name} mood.")

    if audio is not None:
        if vision is not None and audio.energy < AUDIO_QUIET and vision.avg_movement > 0.5:
            reasons.append(f"Detected quiet activity (movement without much sound), suggesting a {name} mood.")
        elif audio.energy > AUDIO_HIGH:
            reasons.append(f"High audio energy ({_pct(audio.energy)}) matches {name} characteristics.")
        if audio.conversational > CONVERSATION_HIGH:
            reasons.append(f"Active conversation detected ({_pct(audio.conversational)} likelihood).")
        if audio.musicality > MUSIC_HIGH:
            reasons.append(f"Musical content detected ({_pct(audio.musicality)} likelihood).")

    if temporal_favours:
        reasons.append(f"The {context.environmental.time_of_day.value} period often favors a {name} mood.")

    if patterns:
        backing = [p for p in patterns if p.mood is mood]
        if backing:
            best = max(backing, key=lambda p: p.success_rate)
            reasons.append(
                f"{len(backing)} learned pattern(s) back {name} (best: {best.describe()}, success {_pct(best.success_rate)})."
            )

    if history_hits and history_engagement is not None:
        reasons.append(
            f"{name} averaged {_pct(history_engagement)} engagement across {history_hits} similar past context(s)."
        )

    return reasons or [f"Recommending {name} based on the current context."]

# Purpose:
# Short rationale for an alternative, pointing at the feature that most
# distinguishes that mood.
def alternative_rationale(context: Context, mood: Mood) -> str:
    vision, audio = context.vision, context.audio
    tod = context.environmental.time_of_day.value
    if mood is Mood.ENERGETIC:
        mv = vision.avg_movement if vision else 0.0
        return f"Energetic fits movement at {_pct(mv)}"
    if mood is Mood.SOCIAL:
        conv = audio.conversational if audio else 0.0
        return f"Social fits conversation likelihood at {_pct(conv)}"
    if mood is Mood.CONTEMPLATIVE:
        en = audio.energy if audio else 0.0
        return f"Contemplative fits audio energy at {_pct(en)}"
    if mood is Mood.MYSTERIOUS:
        return f"Mysterious fits the {tod} ambience"
    n = vision.people_count if vision else 0
    return f"Peaceful fits {n} people present"

__all__ = ["compose", "alternative_rationale"]
