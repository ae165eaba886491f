# ambience_backend/app/services/learning/feedback_flow.py
from __future__ import annotations
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Union

from ambience_backend.app.models.context import Context
from ambience_backend.app.models.mood import MOODS, Mood, MoodLike, mood_index, parse_mood
from ambience_backend.app.models.outcome import LearningRecord, Outcome
from .features import to_feature_vector

if TYPE_CHECKING:
    from ambience_backend.app.services.engine import MoodEngine

# Purpose:
# One observed outcome -> every learner, atomically:
#   history append -> predictor step -> pattern EMA / synthesis
# All validation happens before the engine lock is taken, so a bad payload
# leaves every store untouched.

log = logging.getLogger("ambience.learning")

BASELINE_TARGET = 0.1

# ---------------- derivation ----------------

def target_vector(applied_mood: MoodLike, engagement: float) -> List[float]:
    # Purpose:
    # 0.1 for every mood, observed engagement in the applied mood's slot.
    targets = [BASELINE_TARGET] * len(MOODS)
    targets[mood_index(applied_mood)] = float(engagement)
    return targets

def _as_outcome(outcome: Union[Outcome, Mapping[str, Any]]) -> Outcome:
    return outcome if isinstance(outcome, Outcome) else Outcome.model_validate(outcome)

def _as_context(context: Union[Context, Mapping[str, Any]]) -> Context:
    return context if isinstance(context, Context) else Context.model_validate(context)

# ---------------- main entrypoint ----------------

def record_outcome(engine: "MoodEngine", context: Union[Context, Mapping[str, Any]],
                   applied_mood: MoodLike, outcome: Union[Outcome, Mapping[str, Any]]) -> LearningRecord:
    """
    Validate, then fold one outcome into history, predictor and patterns under
    the engine's write lock. Raises InvalidMoodError / ValidationError before
    anything is mutated.
    """
    mood: Mood = parse_mood(applied_mood)
    ctx = _as_context(context)
    out = _as_outcome(outcome)

    record = LearningRecord(context=ctx, applied_mood=mood, outcome=out)
    features = to_feature_vector(ctx)
    targets = target_vector(mood, out.engagement)

    with engine.lock:
        engine.history.append(record)
        engine.learner.train(features, targets)
        touched = engine.patterns.update(ctx, mood, out.engagement)

    log.debug("outcome %s engagement=%.3f patterns_touched=%d",
              mood.value, out.engagement, len(touched))
    return record

def summarize(record: LearningRecord) -> Dict[str, Any]:
    return {
        "ok": True,
        "applied_mood": record.applied_mood.value,
        "engagement": record.outcome.engagement,
        "timestamp": record.timestamp,
    }


__all__ = ["record_outcome", "target_vector", "summarize", "BASELINE_TARGET"]
