import itertools

import pytest

from ambience_backend.app.models.mood import MOODS, Mood
from ambience_backend.app.models.outcome import LearningRecord, Outcome
from ambience_backend.app.services.learning.history import HistoryConfig, HistoryStore, similarity

def _record(ctx, mood=Mood.SOCIAL, engagement=0.6, ts=None, **out):
    kw = {"timestamp": ts} if ts is not None else {}
    return LearningRecord(context=ctx, applied_mood=mood,
                          outcome=Outcome(engagement=engagement, duration=out.pop("duration", 200.0), **out), **kw)

def test_similarity_is_symmetric_and_bounded(make_context):
    ctxs = [
        make_context(),
        make_context(people=40, movement=0.9, audio_energy=0.9, time_of_day="night"),
        make_context(people=None),
        make_context(audio_energy=None, day_of_week="weekend"),
    ]
    for a, b in itertools.product(ctxs, repeat=2):
        s = similarity(a, b)
        assert 0.0 <= s <= 1.0
        assert s == pytest.approx(similarity(b, a))

def test_identical_contexts_are_fully_similar(make_context):
    assert similarity(make_context(), make_context()) == pytest.approx(1.0)

def test_missing_channels_renormalize(make_context):
    a = make_context(people=None, audio_energy=None, time_of_day="evening")
    b = make_context(people=None, audio_energy=None, time_of_day="evening")
    c = make_context(people=None, audio_energy=None, time_of_day="morning")
    assert similarity(a, b) == pytest.approx(1.0)
    assert similarity(a, c) == pytest.approx(0.5)

def test_capacity_evicts_oldest(make_context):
    store = HistoryStore(HistoryConfig(cap=3))
    for i in range(5):
        store.append(_record(make_context(), ts=float(i)))
    assert len(store) == 3
    assert [r.timestamp for r in store.records()] == [2.0, 3.0, 4.0]

def test_too_few_neighbours_is_uniform(make_context):
    store = HistoryStore()
    store.append(_record(make_context()))
    store.append(_record(make_context()))
    dist, conf = store.distribution(make_context())
    assert conf == 0.0
    assert all(v == pytest.approx(1 / len(MOODS)) for v in dist.values())

def test_distribution_prefers_engaging_mood(make_context):
    store = HistoryStore()
    ctx = make_context()
    store.append(_record(ctx, Mood.SOCIAL, 0.9))
    store.append(_record(ctx, Mood.SOCIAL, 0.8))
    store.append(_record(ctx, Mood.PEACEFUL, 0.2))
    dist, conf = store.distribution(ctx)
    assert max(dist, key=dist.get) is Mood.SOCIAL
    # mean similarity 1.0, three of ten neighbours
    assert conf == pytest.approx(0.3)

def test_dissimilar_records_are_ignored(make_context):
    store = HistoryStore()
    far = make_context(people=50, movement=1.0, audio_energy=1.0, volume=1.0,
                       time_of_day="night", day_of_week="weekend")
    for _ in range(5):
        store.append(_record(far))
    near = make_context(people=0, movement=0.0, audio_energy=0.0, volume=0.0)
    assert store.find_similar(near) == []

def test_mood_summary(make_context):
    store = HistoryStore()
    assert store.mood_summary("Energetic") is None
    store.append(_record(make_context(), Mood.ENERGETIC, 0.8, duration=100.0, audience_growth=0.2))
    store.append(_record(make_context(), Mood.ENERGETIC, 0.6, duration=300.0, audience_growth=0.0))
    s = store.mood_summary(Mood.ENERGETIC)
    assert s.count == 2
    assert s.avg_engagement == pytest.approx(0.7)
    assert s.avg_duration == pytest.approx(200.0)
    assert s.avg_audience_growth == pytest.approx(0.1)
