import pytest

from ambience_backend.app.models.mood import MOODS, Mood
from ambience_backend.app.models.patterns import Condition, Pattern
from ambience_backend.app.services.learning.patterns import (
    PatternStore, PatternStoreConfig, evaluate, load_seed_patterns, matches,
)

def _pattern(pid, mood, *conds, success=0.5, conf=0.6):
    return Pattern(id=pid, mood=mood, conditions=list(conds), success_rate=success, confidence=conf)

def test_seed_rulebook_loads():
    seeds = load_seed_patterns()
    assert {p.id for p in seeds} >= {"seed-crowd-conversation", "seed-night-quiet"}
    assert all(isinstance(p.mood, Mood) for p in seeds)

def test_condition_ops(make_context):
    ctx = make_context(people=12, musicality=0.8, time_of_day="night", special_events=["opening gala"])
    assert evaluate(Condition(field="vision.people_count", op="between", value=[6, 20]), ctx)
    assert evaluate(Condition(field="audio.musicality", op="gt", value=0.7), ctx)
    assert evaluate(Condition(field="environmental.time_of_day", op="eq", value="night"), ctx)
    assert evaluate(Condition(field="environmental.special_events", op="contains", value="gala"), ctx)
    assert not evaluate(Condition(field="vision.people_count", op="lt", value=5), ctx)

def test_missing_sensor_never_matches(make_context):
    ctx = make_context(people=None)
    p = _pattern("p", Mood.SOCIAL, Condition(field="vision.people_count", op="gt", value=1))
    assert not matches(p, ctx)
    assert not evaluate(Condition(field="vision.nope", op="eq", value=1), make_context())

def test_no_match_gives_uniform_and_zero_confidence(make_context):
    store = PatternStore()
    dist, conf = store.distribution(make_context())
    assert conf == 0.0
    assert all(v == pytest.approx(1 / len(MOODS)) for v in dist.values())

def test_matching_patterns_vote(make_context):
    crowd = Condition(field="vision.people_count", op="gt", value=15)
    store = PatternStore(patterns=[
        _pattern("a", Mood.SOCIAL, crowd, success=0.9),
        _pattern("b", Mood.PEACEFUL, Condition(field="vision.people_count", op="lt", value=5)),
    ])
    dist, conf = store.distribution(make_context(people=30))
    assert dist[Mood.SOCIAL] == pytest.approx(1.0)
    assert conf == pytest.approx(0.9 * 0.6)

def test_success_rate_converges_to_observed_engagement(make_context):
    ctx = make_context(people=30)
    store = PatternStore(patterns=[
        _pattern("a", Mood.SOCIAL, Condition(field="vision.people_count", op="gt", value=15), success=0.5),
    ])
    for _ in range(120):
        store.update(ctx, Mood.SOCIAL, 0.9)
    assert store.all()[0].success_rate == pytest.approx(0.9, abs=1e-3)
    assert store.all()[0].fires == 120

def test_perfect_outcomes_approach_one_without_overshoot(make_context):
    ctx = make_context(people=30)
    store = PatternStore(patterns=[
        _pattern("a", Mood.SOCIAL, Condition(field="vision.people_count", op="gt", value=15), success=0.2),
    ])
    prev = store.all()[0].success_rate
    for _ in range(200):
        store.update(ctx, Mood.SOCIAL, 1.0)
        rate = store.all()[0].success_rate
        assert prev <= rate <= 1.0
        prev = rate
    assert prev == pytest.approx(1.0, abs=1e-3)

def test_other_moods_do_not_move_a_pattern(make_context):
    ctx = make_context(people=30)
    store = PatternStore(patterns=[
        _pattern("a", Mood.SOCIAL, Condition(field="vision.people_count", op="gt", value=15), success=0.5),
    ])
    store.update(ctx, Mood.PEACEFUL, 0.1)
    assert store.all()[0].success_rate == 0.5

def test_strong_outcome_synthesizes_pattern(make_context):
    store = PatternStore()
    ctx = make_context(people=25, audio_energy=0.85, time_of_day="evening")
    touched = store.update(ctx, "Energetic", 0.95)
    assert len(store) == 1 and len(touched) == 1
    p = store.all()[0]
    assert p.mood is Mood.ENERGETIC
    assert p.confidence == pytest.approx(0.6)
    fields = {(c.field, c.op) for c in p.conditions}
    assert ("vision.people_count", "gt") in fields
    assert ("audio.energy", "gt") in fields
    assert ("environmental.time_of_day", "eq") in fields
    assert matches(p, ctx)

def test_ordinary_outcome_does_not_synthesize(make_context):
    store = PatternStore()
    store.update(make_context(), Mood.SOCIAL, 0.8)
    assert len(store) == 0

def test_prune_keeps_best(make_context):
    store = PatternStore(PatternStoreConfig(cap=3))
    for i, s in enumerate([0.1, 0.9, 0.5, 0.7, 0.3]):
        store.add(_pattern(f"p{i}", Mood.SOCIAL, success=s))
    assert len(store) == 3
    assert sorted(p.success_rate for p in store.all()) == [0.5, 0.7, 0.9]

def test_snapshot_is_isolated(make_context):
    ctx = make_context(people=30)
    store = PatternStore(patterns=[
        _pattern("a", Mood.SOCIAL, Condition(field="vision.people_count", op="gt", value=15)),
    ])
    snap = store.snapshot()
    store.update(ctx, Mood.SOCIAL, 1.0)
    assert snap.all()[0].success_rate == 0.5

def test_unknown_mood_leaves_store_untouched(make_context):
    from ambience_backend.app.models.mood import InvalidMoodError
    store = PatternStore(patterns=[_pattern("a", Mood.SOCIAL)])
    with pytest.raises(InvalidMoodError):
        store.update(make_context(), "Bogus", 0.95)
    assert len(store) == 1 and store.all()[0].fires == 0
