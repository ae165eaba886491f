import pytest

from ambience_backend.app.models.mood import MOOD_PROFILES, Mood
from ambience_backend.app.services.learning.trends import Trends
from ambience_backend.app.services.show_control import build_intent, cues_for, mood_parameters

def test_template_parameters_without_context():
    p = mood_parameters(Mood.MYSTERIOUS)
    prof = MOOD_PROFILES[Mood.MYSTERIOUS]
    assert (p.energy, p.valence, p.arousal) == (prof.energy, prof.valence, prof.arousal)

def test_live_readings_adjust_parameters(make_context):
    ctx = make_context(movement=0.5, crowd_density=0.5, audio_energy=0.5, conversational=0.7)
    p = mood_parameters(Mood.PEACEFUL, ctx)
    assert p.energy == pytest.approx(((0.2 + 0.5 * 0.2) + 0.5) / 2)
    assert p.arousal == pytest.approx(0.1 + 0.5 * 0.1)
    assert p.valence == pytest.approx(0.9)

def test_energy_trend_nudges_and_clamps(make_context):
    ctx = make_context(movement=1.0, audio_energy=None)
    building = mood_parameters(Mood.ENERGETIC, ctx, Trends(energy_flow="building"))
    assert building.energy == 1.0
    declining = mood_parameters(Mood.PEACEFUL, None, Trends(energy_flow="declining"))
    assert declining.arousal == pytest.approx(0.0)
    assert declining.energy == pytest.approx(0.1)

def test_cues_merge_mood_over_default():
    rules = {
        "default": {"audio": {"volume": 0.5, "fade_time": 5}, "lighting": {"intensity": 0.7}},
        "moods": {"Social": {"audio": {"volume": 0.6}}},
    }
    cues = cues_for("Social", rules)
    assert cues["audio"] == {"volume": 0.6, "fade_time": 5}
    assert cues["lighting"] == {"intensity": 0.7}

def test_rulebook_intent_covers_every_output():
    intent = build_intent("Energetic", mood_parameters("Energetic"))
    assert intent.mood is Mood.ENERGETIC
    assert set(intent.cues) == {"audio", "video", "lighting"}
    assert intent.cues["lighting"]["color"] == "#FF6B6B"

def test_engine_intent_defaults_to_current_prediction(engine, make_context):
    with pytest.raises(LookupError):
        engine.intent_for()
    pred = engine.predict_optimal_mood(make_context())
    intent = engine.intent_for()
    assert intent.mood is pred.recommended_mood
    assert engine.intent_for("Peaceful").mood is Mood.PEACEFUL
