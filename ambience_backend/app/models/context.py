# ambience_backend/app/models/context.py
from __future__ import annotations

import time
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ===================== Enums =====================

class TimeOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"

class DayType(str, Enum):
    WEEKDAY = "weekday"
    WEEKEND = "weekend"

class Season(str, Enum):
    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"
    WINTER = "winter"

class Weather(str, Enum):
    SUNNY = "sunny"
    CLOUDY = "cloudy"
    RAINY = "rainy"
    STORMY = "stormy"


# ===================== Sensor features =====================

class VisionFeatures(BaseModel):
    """Upstream camera features, already normalized."""
    people_count: int = Field(0, ge=0)
    avg_movement: float = Field(0.0, ge=0.0, le=1.0)
    crowd_density: float = Field(0.0, ge=0.0, le=1.0)
    energy_level: float = Field(0.0, ge=0.0, le=1.0)
    confidence: float = Field(1.0, ge=0.0, le=1.0)

    model_config = ConfigDict(frozen=True, extra="allow")


class AudioFeatures(BaseModel):
    """Upstream microphone features; spectral descriptors stay in Hz."""
    volume: float = Field(0.0, ge=0.0, le=1.0)
    energy: float = Field(0.0, ge=0.0, le=1.0)
    conversational: float = Field(0.0, ge=0.0, le=1.0)
    musicality: float = Field(0.0, ge=0.0, le=1.0)
    ambient_noise: float = Field(0.0, ge=0.0, le=1.0)
    zero_crossing_rate: float = Field(0.0, ge=0.0, le=1.0)
    frequency: Optional[float] = Field(None, ge=0.0)
    spectral_centroid: Optional[float] = Field(None, ge=0.0)
    spectral_rolloff: Optional[float] = Field(None, ge=0.0)

    model_config = ConfigDict(frozen=True, extra="allow")


def _bucket_for_hour(hour: int) -> TimeOfDay:
    if 5 <= hour < 12:
        return TimeOfDay.MORNING
    if 12 <= hour < 17:
        return TimeOfDay.AFTERNOON
    if 17 <= hour < 22:
        return TimeOfDay.EVENING
    return TimeOfDay.NIGHT


class Environment(BaseModel):
    time_of_day: TimeOfDay
    day_of_week: DayType = DayType.WEEKDAY
    season: Optional[Season] = None
    weather: Optional[Weather] = None
    special_events: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="allow")

    @classmethod
    def from_datetime(cls, dt: datetime, season: Optional[Season] = None,
                      weather: Optional[Weather] = None,
                      special_events: Optional[List[str]] = None) -> "Environment":
        return cls(
            time_of_day=_bucket_for_hour(dt.hour),
            day_of_week=DayType.WEEKEND if dt.weekday() >= 5 else DayType.WEEKDAY,
            season=season,
            weather=weather,
            special_events=list(special_events or []),
        )


class Context(BaseModel):
    """
    One timestamped snapshot of the space. Vision or audio may be None when
    the corresponding sensor is offline; every consumer treats that as neutral.
    """
    vision: Optional[VisionFeatures] = None
    audio: Optional[AudioFeatures] = None
    environmental: Environment
    timestamp: float = Field(default_factory=time.time)

    model_config = ConfigDict(frozen=True)


__all__ = [
    "TimeOfDay", "DayType", "Season", "Weather",
    "VisionFeatures", "AudioFeatures", "Environment", "Context",
]
