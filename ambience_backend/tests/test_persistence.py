import json

import pytest
from pydantic import ValidationError

from ambience_backend.app.models.mood import Mood
from ambience_backend.app.models.outcome import Outcome
from ambience_backend.app.services.data_stores import (
    SnapshotNotFound, list_snapshots, load_snapshot, save_snapshot, snapshot_path,
)
from ambience_backend.app.services.engine import EngineConfig, MoodEngine

def _train(engine, make_context, n=6):
    for i in range(n):
        ctx = make_context(people=20 + i, audio_energy=0.85, time_of_day="evening")
        engine.record_outcome(ctx, Mood.ENERGETIC, Outcome(engagement=0.9, duration=120))
    test = engine.start_test("Social", "Peaceful")
    engine.record_test_result(test.test_id, "Social", 0.7)
    engine.complete_test()

def test_export_is_json_safe(engine, make_context):
    _train(engine, make_context)
    blob = engine.export_state()
    assert set(blob) >= {"schema_version", "history", "patterns", "ab_tests", "model"}
    json.dumps(blob)

def test_round_trip_restores_behaviour(engine, make_context):
    _train(engine, make_context)
    other = MoodEngine(EngineConfig.build(seed=999))
    other.import_state(engine.export_state())

    assert len(other.history) == len(engine.history)
    assert [p.id for p in other.patterns.all()] == [p.id for p in engine.patterns.all()]
    assert [r.test_id for r in other.test_history()] == [r.test_id for r in engine.test_history()]

    ctx = make_context(people=22, audio_energy=0.85, time_of_day="evening")
    a, b = engine.predict_optimal_mood(ctx), other.predict_optimal_mood(ctx)
    assert a.recommended_mood is b.recommended_mood
    assert a.confidence == pytest.approx(b.confidence)

def test_import_keeps_most_recent_records(engine, make_context):
    _train(engine, make_context, n=8)
    small = MoodEngine(EngineConfig.build(history_cap=3))
    small.import_state(engine.export_state())
    assert [r.timestamp for r in small.history.records()] == [r.timestamp for r in engine.history.records()[-3:]]

def test_import_orders_history_by_timestamp(engine, make_context):
    _train(engine, make_context, n=5)
    blob = engine.export_state()
    for i, row in enumerate(blob["history"]):
        row["timestamp"] = 1_000.0 + i
    blob["history"].reverse()

    small = MoodEngine(EngineConfig.build(history_cap=2))
    small.import_state(blob)
    assert [r.timestamp for r in small.history.records()] == [1_003.0, 1_004.0]

def test_missing_model_keeps_current_predictor(engine, make_context):
    _train(engine, make_context)
    blob = engine.export_state()
    blob.pop("model")
    target = MoodEngine(EngineConfig.build(seed=5))
    learner = target.learner
    target.import_state(blob)
    assert target.learner is learner

def test_malformed_blob_leaves_state_intact(engine, make_context):
    _train(engine, make_context)
    with pytest.raises(ValidationError):
        engine.import_state({"history": [{"applied_mood": "Nope"}]})
    with pytest.raises(ValueError):
        engine.import_state({"model": {"weights": [], "biases": []}})
    assert len(engine.history) == 6

def test_reset_learning_clears_everything(engine, make_context):
    _train(engine, make_context)
    engine.reset_learning()
    assert len(engine.history) == 0
    assert len(engine.patterns) == 0
    assert engine.test_history() == []
    assert engine.current_prediction is None
    engine.reset_learning(reseed=True)
    assert len(engine.patterns) == 4

def test_snapshot_save_and_load(engine, make_context, tmp_data_dir):
    _train(engine, make_context)
    path = save_snapshot(engine, "evening-run")
    assert path.parent == (tmp_data_dir / "snapshots").resolve()
    assert path.exists()
    assert [s["name"] for s in list_snapshots()] == ["evening-run"]

    fresh = MoodEngine(EngineConfig.build(seed=1))
    state = load_snapshot(fresh, "evening-run")
    assert len(state.history) == 6
    assert len(fresh.history) == 6

def test_snapshot_errors(engine):
    with pytest.raises(SnapshotNotFound):
        load_snapshot(engine, "never-saved")
    with pytest.raises(ValueError):
        snapshot_path("../escape")
