# ambience_backend/app/services/learning/features.py
from __future__ import annotations
from typing import Dict, List, Optional

from ambience_backend.app.models.context import Context, Season, TimeOfDay, Weather

# Purpose:
# Fuse partial vision/audio/environment readings into a small, bounded feature
# vector for the predictor. Raw features are collinear and noisy, so the model
# sees blended indices instead:
#   - overall_energy  : crowd size, movement and audio energy (0.2/0.4/0.4)
#   - quiet_activity  : movement with little sound (an interaction term)
#   - social_index    : crowd size and conversation (0.5/0.5)
#   - time/weather/season encoded as single scalars
# Missing sensors contribute 0 to their raw inputs; pure function.

PEOPLE_SCALE = 50.0
NEUTRAL = 0.5

FEATURE_NAMES: List[str] = [
    "overall_energy",
    "quiet_activity",
    "social_index",
    "time_value",
    "weather_value",
    "season_value",
]

TIME_VALUES: Dict[TimeOfDay, float] = {
    TimeOfDay.MORNING: 0.2,
    TimeOfDay.AFTERNOON: 0.5,
    TimeOfDay.EVENING: 0.8,
    TimeOfDay.NIGHT: 0.1,
}

WEATHER_VALUES: Dict[Weather, float] = {
    Weather.SUNNY: 0.8,
    Weather.CLOUDY: 0.5,
    Weather.RAINY: 0.2,
    Weather.STORMY: 0.1,
}

SEASON_VALUES: Dict[Season, float] = {
    Season.SPRING: 0.6,
    Season.SUMMER: 0.8,
    Season.FALL: 0.4,
    Season.WINTER: 0.2,
}

def _unit(v: float) -> float:
    return 0.0 if v < 0.0 else (1.0 if v > 1.0 else float(v))

def people_norm(context: Context) -> float:
    count = context.vision.people_count if context.vision else 0
    return _unit(count / PEOPLE_SCALE)

def time_value(tod: Optional[TimeOfDay]) -> float:
    return TIME_VALUES.get(tod, NEUTRAL) if tod is not None else NEUTRAL

def weather_value(weather: Optional[Weather]) -> float:
    return WEATHER_VALUES.get(weather, NEUTRAL) if weather is not None else NEUTRAL

def season_value(season: Optional[Season]) -> float:
    return SEASON_VALUES.get(season, NEUTRAL) if season is not None else NEUTRAL

def fused_features(context: Context) -> Dict[str, float]:
    people = people_norm(context)
    movement = _unit(context.vision.avg_movement) if context.vision else 0.0
    audio_energy = _unit(context.audio.energy) if context.audio else 0.0
    conversational = _unit(context.audio.conversational) if context.audio else 0.0
    env = context.environmental

    return {
        "overall_energy": _unit(people * 0.2 + movement * 0.4 + audio_energy * 0.4),
        "quiet_activity": _unit(movement * (1.0 - audio_energy)),
        "social_index": _unit(people * 0.5 + conversational * 0.5),
        "time_value": time_value(env.time_of_day),
        "weather_value": weather_value(env.weather),
        "season_value": season_value(env.season),
    }

def to_feature_vector(context: Context) -> List[float]:
    f = fused_features(context)
    return [f[name] for name in FEATURE_NAMES]

__all__ = [
    "FEATURE_NAMES", "PEOPLE_SCALE", "TIME_VALUES", "WEATHER_VALUES", "SEASON_VALUES",
    "people_norm", "time_value", "weather_value", "season_value",
    "fused_features", "to_feature_vector",
]
