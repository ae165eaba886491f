import pytest

from ambience_backend.app.models.context import Context
from ambience_backend.app.services.learning.features import (
    FEATURE_NAMES, fused_features, people_norm, season_value, time_value, to_feature_vector, weather_value,
)

def test_missing_sensors_fall_back_to_neutral_defaults():
    ctx = Context.model_validate({"environmental": {"time_of_day": "evening"}})
    f = fused_features(ctx)
    assert f["overall_energy"] == 0.0
    assert f["quiet_activity"] == 0.0
    assert f["social_index"] == 0.0
    assert f["time_value"] == pytest.approx(0.8)
    # absent weather / season encode as the neutral midpoint
    assert f["weather_value"] == pytest.approx(0.5)
    assert f["season_value"] == pytest.approx(0.5)

def test_blended_indices(make_context):
    ctx = make_context(people=25, movement=0.5, audio_energy=0.5, conversational=0.4)
    f = fused_features(ctx)
    assert f["overall_energy"] == pytest.approx(0.5 * 0.2 + 0.5 * 0.4 + 0.5 * 0.4)
    assert f["quiet_activity"] == pytest.approx(0.5 * (1 - 0.5))
    assert f["social_index"] == pytest.approx(0.5 * 0.5 + 0.4 * 0.5)

def test_people_scale_clamps(make_context):
    assert people_norm(make_context(people=500)) == 1.0
    assert people_norm(make_context(people=None)) == 0.0

def test_encoding_maps():
    from ambience_backend.app.models.context import Season, TimeOfDay, Weather
    assert time_value(TimeOfDay.NIGHT) == pytest.approx(0.1)
    assert weather_value(Weather.STORMY) == pytest.approx(0.1)
    assert season_value(Season.SUMMER) == pytest.approx(0.8)
    assert weather_value(None) == pytest.approx(0.5)

def test_vector_follows_feature_names(make_context):
    ctx = make_context(time_of_day="morning", weather="rainy", season="winter")
    vec = to_feature_vector(ctx)
    f = fused_features(ctx)
    assert len(vec) == len(FEATURE_NAMES) == 6
    assert vec == [f[n] for n in FEATURE_NAMES]
    assert all(0.0 <= v <= 1.0 for v in vec)

def test_environment_from_clock():
    from datetime import datetime
    from ambience_backend.app.models.context import DayType, Environment, TimeOfDay
    sat_evening = Environment.from_datetime(datetime(2026, 10, 17, 19, 30))
    assert sat_evening.time_of_day is TimeOfDay.EVENING
    assert sat_evening.day_of_week is DayType.WEEKEND
    tue_dawn = Environment.from_datetime(datetime(2026, 10, 13, 3, 0))
    assert (tue_dawn.time_of_day, tue_dawn.day_of_week) == (TimeOfDay.NIGHT, DayType.WEEKDAY)
