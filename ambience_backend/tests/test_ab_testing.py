import pytest

from ambience_backend.app.models.mood import InvalidMoodError, Mood
from ambience_backend.app.services.learning.ab_testing import (
    ABTestActiveError, ABTestConfig, ABTestController,
)

def test_lifecycle_completes_at_threshold():
    ab = ABTestController()
    test = ab.start_test("Energetic", "Social", "lobby")
    results = [ab.record_result(test.test_id, "Energetic", 0.9) for _ in range(30)]
    results += [ab.record_result(test.test_id, "Social", 0.5) for _ in range(20)]

    assert all(r is None for r in results[:-1])
    final = results[-1]
    assert final is not None
    assert final.winner_mood is Mood.ENERGETIC
    assert final.mean_a == pytest.approx(0.9)
    assert final.mean_b == pytest.approx(0.5)
    assert final.engagement_diff == pytest.approx(0.4)
    assert final.confidence_level == pytest.approx(0.4 / 0.9)
    assert final.sample_size == 50
    assert final.reason == "threshold"
    assert final.context == "lobby"
    assert ab.active is None
    assert ab.history() == [final]
    # a 51st sample after completion is a no-op
    assert ab.record_result(test.test_id, "Energetic", 0.9) is None
    assert ab.history() == [final]

def test_start_while_active_is_rejected():
    ab = ABTestController()
    first = ab.start_test(Mood.SOCIAL, Mood.MYSTERIOUS)
    with pytest.raises(ABTestActiveError):
        ab.start_test(Mood.ENERGETIC, Mood.PEACEFUL)
    assert ab.active.test_id == first.test_id
    ab.abandon_test()
    assert ab.start_test(Mood.ENERGETIC, Mood.PEACEFUL).test_id != first.test_id
    assert ab.history() == []

def test_arms_must_be_distinct_known_moods():
    ab = ABTestController()
    with pytest.raises(ValueError):
        ab.start_test("Social", "Social")
    with pytest.raises(InvalidMoodError):
        ab.start_test("Social", "Gloomy")
    assert ab.active is None

def test_stale_results_are_ignored():
    ab = ABTestController()
    test = ab.start_test("Social", "Peaceful")
    assert ab.record_result("ab-0-deadbeef", "Social", 0.9) is None
    assert ab.active.sample_count == 0
    ab.complete_test()
    assert ab.record_result(test.test_id, "Social", 0.9) is None
    assert len(ab.history()) == 1

def test_invalid_mood_raises_even_when_idle():
    ab = ABTestController()
    with pytest.raises(InvalidMoodError):
        ab.record_result("whatever", "Bouncy", 0.5)

def test_mood_outside_the_arms_is_not_counted():
    ab = ABTestController()
    test = ab.start_test("Social", "Peaceful")
    assert ab.record_result(test.test_id, "Energetic", 0.9) is None
    assert ab.active.sample_count == 0

def test_non_finite_engagement_is_rejected():
    ab = ABTestController(ABTestConfig(sample_threshold=2))
    test = ab.start_test("Social", "Peaceful")
    for bad in (float("nan"), float("inf")):
        with pytest.raises(ValueError):
            ab.record_result(test.test_id, "Social", bad)
    assert ab.active.sample_count == 0

    assert ab.record_result(test.test_id, "Social", 0.8) is None
    final = ab.record_result(test.test_id, "Peaceful", 0.5)
    assert final is not None and final.winner_mood is Mood.SOCIAL
    assert ab.active is None

def test_manual_completion_with_empty_arm():
    ab = ABTestController()
    test = ab.start_test("Contemplative", "Mysterious")
    ab.record_result(test.test_id, "Mysterious", 0.4)
    res = ab.complete_test()
    assert res.mean_a == 0.0
    assert res.winner_mood is Mood.MYSTERIOUS
    assert res.confidence_level == pytest.approx(1.0)
    assert res.reason == "manual"

def test_tie_goes_to_arm_a_with_zero_confidence():
    ab = ABTestController()
    ab.start_test("Social", "Peaceful")
    res = ab.complete_test()
    assert res.winner_mood is Mood.SOCIAL
    assert res.confidence_level == 0.0
    assert ab.complete_test() is None

def test_custom_threshold_and_state_round_trip():
    ab = ABTestController(ABTestConfig(sample_threshold=4))
    test = ab.start_test("Energetic", "Social")
    for mood, e in [("Energetic", 0.9), ("Social", 0.4), ("Energetic", 0.7)]:
        assert ab.record_result(test.test_id, mood, e) is None
    assert ab.record_result(test.test_id, "Social", 0.6) is not None

    other = ABTestController()
    other.load_state(ab.to_state())
    assert [r.test_id for r in other.history()] == [test.test_id]
    assert other.active is None
