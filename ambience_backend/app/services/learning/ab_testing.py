# ambience_backend/app/services/learning/ab_testing.py
from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from statistics import mean
from typing import Any, Dict, Iterable, List, Optional

from ambience_backend.app.models.abtest import ABTest, ABTestResult
from ambience_backend.app.models.mood import MoodLike, parse_mood
from ambience_backend.app.utils.req_id import new_request_id

# Purpose:
# Single-slot paired experiment between two moods.
#   idle -> start_test -> active -> (threshold reached | complete_test) -> idle
# Results for a stale or unknown test id are dropped without error so a late
# sensor callback can never corrupt the next experiment.

log = logging.getLogger("ambience.abtest")

class ABTestActiveError(RuntimeError):
    """Raised when a test is started while another is still collecting samples."""

@dataclass
class ABTestConfig:
    sample_threshold: int = 50
    history_cap: int = 200

def _unit(v: float) -> float:
    return 0.0 if v < 0.0 else (1.0 if v > 1.0 else float(v))


class ABTestController:
    def __init__(self, cfg: Optional[ABTestConfig] = None):
        self.cfg = cfg or ABTestConfig()
        self._active: Optional[ABTest] = None
        self._history: List[ABTestResult] = []

    @property
    def active(self) -> Optional[ABTest]:
        return self._active

    def history(self) -> List[ABTestResult]:
        return list(self._history)

    def start_test(self, mood_a: MoodLike, mood_b: MoodLike, label: str = "") -> ABTest:
        a, b = parse_mood(mood_a), parse_mood(mood_b)
        if a is b:
            raise ValueError("A/B test needs two different moods")
        if self._active is not None:
            raise ABTestActiveError(f"test {self._active.test_id} is still active")
        self._active = ABTest(test_id=new_request_id("ab"), mood_a=a, mood_b=b, context=label or "")
        log.info("ab test %s started: %s vs %s", self._active.test_id, a.value, b.value)
        return self._active

    def record_result(self, test_id: str, mood: MoodLike, engagement: float) -> Optional[ABTestResult]:
        m = parse_mood(mood)
        if not math.isfinite(float(engagement)):
            raise ValueError(f"engagement must be a finite number, got {engagement!r}")
        test = self._active
        if test is None or test.test_id != test_id:
            log.debug("ignoring result for inactive test %s", test_id)
            return None

        value = _unit(float(engagement))
        if m is test.mood_a:
            test.results_a.append(value)
        elif m is test.mood_b:
            test.results_b.append(value)
        else:
            log.debug("ignoring %s for test %s (not an arm)", m.value, test_id)
            return None

        test.sample_count += 1
        if test.sample_count >= self.cfg.sample_threshold:
            return self._finish(test, "threshold")
        return None

    def complete_test(self) -> Optional[ABTestResult]:
        if self._active is None:
            return None
        return self._finish(self._active, "manual")

    def abandon_test(self) -> Optional[ABTest]:
        test, self._active = self._active, None
        if test is not None:
            log.info("ab test %s abandoned after %d samples", test.test_id, test.sample_count)
        return test

    def _finish(self, test: ABTest, reason: str) -> ABTestResult:
        mean_a = mean(test.results_a) if test.results_a else 0.0
        mean_b = mean(test.results_b) if test.results_b else 0.0
        winner = test.mood_a if mean_a >= mean_b else test.mood_b
        top = max(mean_a, mean_b)
        diff = abs(mean_a - mean_b)
        result = ABTestResult(
            test_id=test.test_id,
            mood_a=test.mood_a,
            mood_b=test.mood_b,
            context=test.context,
            winner_mood=winner,
            mean_a=mean_a,
            mean_b=mean_b,
            confidence_level=_unit(diff / top) if top > 0 else 0.0,
            engagement_diff=diff,
            sample_size=test.sample_count,
            started_at=test.started_at,
            reason=reason,
        )
        self._history.append(result)
        if len(self._history) > self.cfg.history_cap:
            self._history = self._history[-self.cfg.history_cap:]
        self._active = None
        log.info("ab test %s completed (%s): winner=%s conf=%.3f",
                 result.test_id, reason, winner.value, result.confidence_level)
        return result

    # ---------------- persistence ----------------

    def to_state(self) -> List[Dict[str, Any]]:
        return [r.model_dump(mode="json") for r in self._history]

    def load_state(self, rows: Iterable[Any]) -> None:
        recs = [r if isinstance(r, ABTestResult) else ABTestResult.model_validate(r) for r in rows]
        self._history = recs[-self.cfg.history_cap:]
        self._active = None

    def clear(self) -> None:
        self._history = []
        self._active = None


__all__ = ["ABTestConfig", "ABTestController", "ABTestActiveError"]
