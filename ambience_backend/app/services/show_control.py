# ambience_backend/app/services/show_control.py
from __future__ import annotations
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field

from ambience_backend.app.models.context import Context
from ambience_backend.app.models.mood import MOOD_PROFILES, Mood, MoodLike, parse_mood
from ambience_backend.app.models.outcome import MoodParameters
from ambience_backend.app.services.learning.trends import Trends

# Purpose:
# Turn a chosen mood into an abstract "apply this mood" intent:
#   - continuous parameters (energy/valence/arousal) from the mood template,
#     nudged by live sensor readings and the energy trend
#   - cue suggestions per output (audio, video, lighting) from
#     rules/show_control.yaml
# Nothing here talks to show-control software; a dispatcher does that.

class MoodIntent(BaseModel):
    mood: Mood
    parameters: MoodParameters
    cues: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


def _unit(v: float) -> float:
    return 0.0 if v < 0.0 else (1.0 if v > 1.0 else float(v))


def mood_parameters(mood: MoodLike, context: Optional[Context] = None,
                    trends: Optional[Trends] = None) -> MoodParameters:
    p = MOOD_PROFILES[parse_mood(mood)]
    energy, valence, arousal = p.energy, p.valence, p.arousal

    if context is not None and context.vision is not None:
        energy = min(1.0, energy + context.vision.avg_movement * 0.2)
        arousal = min(1.0, arousal + context.vision.crowd_density * 0.1)

    if context is not None and context.audio is not None:
        energy = (energy + context.audio.energy) / 2.0
        if context.audio.conversational > 0.6:
            valence = min(1.0, valence + 0.1)

    if trends is not None:
        if trends.energy_flow == "building":
            energy, arousal = energy + 0.1, arousal + 0.1
        elif trends.energy_flow == "declining":
            energy, arousal = energy - 0.1, arousal - 0.1

    return MoodParameters(energy=_unit(energy), valence=_unit(valence), arousal=_unit(arousal))


def cues_for(mood: MoodLike, rules: Optional[Mapping[str, Any]] = None) -> Dict[str, Dict[str, Any]]:
    if rules is None:
        from ambience_backend.app.services.rules_loader import load_yaml_rules
        rules = load_yaml_rules("show_control.yaml") or {}
    m = parse_mood(mood)
    default = dict(rules.get("default") or {})
    per_mood = dict((rules.get("moods") or {}).get(m.value) or {})
    out: Dict[str, Dict[str, Any]] = {}
    for output in set(default) | set(per_mood):
        merged = dict(default.get(output) or {})
        merged.update(per_mood.get(output) or {})
        out[output] = merged
    return out


def build_intent(mood: MoodLike, parameters: MoodParameters,
                 rules: Optional[Mapping[str, Any]] = None) -> MoodIntent:
    m = parse_mood(mood)
    return MoodIntent(mood=m, parameters=parameters, cues=cues_for(m, rules))


__all__ = ["MoodIntent", "mood_parameters", "cues_for", "build_intent"]
