# ambience_backend/app/services/learning/decision.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from statistics import mean
from typing import Dict, List, Optional, Tuple

from ambience_backend.app.models.context import Context
from ambience_backend.app.models.mood import MOOD_PROFILES, MOODS, Mood, normalize
from ambience_backend.app.models.outcome import (
    AlternativeMood, ExpectedOutcome, MoodPrediction,
)
from ambience_backend.app.observability.decision_trace import DecisionTrace
from ambience_backend.app.services.show_control import mood_parameters

from . import explain
from .features import FEATURE_NAMES, to_feature_vector
from .history import HistoryStore
from .patterns import PatternStore
from .predictor import OnlineLearner, scores_by_mood
from .temporal import TemporalPolicy
from .trends import Trends

# Purpose:
# One ranked recommendation out of four signals:
#   neural   : predictor propensities, normalized          (fixed weight 0.4)
#   pattern  : learned rule votes      x pattern confidence (0.3 * conf)
#   history  : similar-context outcomes x history confidence (0.2 * conf)
#   temporal : fixed time/day nudges                      (fixed weight 0.1)
# Empty stores report zero confidence, so they drop out of the average.
# Every lookup degrades to a fallback; predict() does not raise for a valid Context.

log = logging.getLogger("ambience.decision")

Distribution = Dict[Mood, float]

@dataclass
class DecisionConfig:
    neural_weight: float = 0.4
    pattern_weight: float = 0.3
    history_weight: float = 0.2
    temporal_weight: float = 0.1
    n_alternatives: int = 2
    default_engagement: float = 0.7
    default_retention: float = 0.6
    default_duration: float = 300.0

def _unit(v: float) -> float:
    return 0.0 if v < 0.0 else (1.0 if v > 1.0 else float(v))

def combine(signals: List[Tuple[Distribution, float]]) -> Distribution:
    total_w = sum(max(0.0, w) for _, w in signals)
    if total_w <= 0.0:
        return normalize({})
    out = {m: 0.0 for m in MOODS}
    for dist, w in signals:
        w = max(0.0, w)
        for m in MOODS:
            out[m] += w * dist.get(m, 0.0)
    return normalize({m: v / total_w for m, v in out.items()})

def rank(dist: Distribution) -> List[Mood]:
    # ties resolve in vocabulary order
    return sorted(MOODS, key=lambda m: (-dist[m], MOODS.index(m)))


class DecisionEngine:
    def __init__(self, cfg: Optional[DecisionConfig] = None, policy: Optional[TemporalPolicy] = None):
        self.cfg = cfg or DecisionConfig()
        self.policy = policy if policy is not None else TemporalPolicy.load()

    def predict(self, context: Context, learner: OnlineLearner, patterns: PatternStore,
                history: HistoryStore, trends: Optional[Trends] = None,
                trace: Optional[DecisionTrace] = None) -> MoodPrediction:
        cfg = self.cfg

        # 1) neural
        features = to_feature_vector(context)
        neural = normalize(scores_by_mood(learner, features))

        # 2) patterns
        matched = patterns.matching(context)
        pattern_dist, pattern_conf = patterns.distribution(context)

        # 3) history
        similar = history.find_similar(context)
        history_dist, history_conf = history.distribution_from(similar)

        # 4) temporal
        temporal = self.policy.distribution(context)

        # 5) combine
        weights = {
            "neural": cfg.neural_weight,
            "pattern": cfg.pattern_weight * pattern_conf,
            "history": cfg.history_weight * history_conf,
            "temporal": cfg.temporal_weight,
        }
        combined = combine([
            (neural, weights["neural"]),
            (pattern_dist, weights["pattern"]),
            (history_dist, weights["history"]),
            (temporal, weights["temporal"]),
        ])

        # 6) pick + alternatives
        ranked = rank(combined)
        best = ranked[0]
        confidence = _unit(combined[best])
        alternatives = [
            AlternativeMood(
                mood=m,
                probability=_unit(combined[m]),
                reasoning=explain.alternative_rationale(context, m),
            )
            for m in ranked[1: 1 + cfg.n_alternatives]
        ]

        # 7) reasoning
        hits_for_best = [r for _, r in similar if r.applied_mood is best] if history_conf > 0 else []
        reasoning = explain.compose(
            context, best,
            temporal_favours=self.policy.favours_time(context, best),
            patterns=matched,
            history_hits=len(hits_for_best),
            history_engagement=mean(r.outcome.engagement for r in hits_for_best) if hits_for_best else None,
        )

        # 8) forecast
        expected, duration = self._forecast(best, history)
        params = mood_parameters(best, context, trends)

        prediction = MoodPrediction(
            recommended_mood=best,
            confidence=confidence,
            probability=confidence,
            alternative_moods=alternatives,
            reasoning=reasoning,
            predicted_duration=duration,
            expected_outcome=expected,
            parameters=params,
        )

        if trace is not None:
            trace.set_features(dict(zip(FEATURE_NAMES, features)))
            trace.add_signal("neural", neural, weights["neural"])
            trace.add_signal("pattern", pattern_dist, weights["pattern"], pattern_conf)
            trace.add_signal("history", history_dist, weights["history"], history_conf)
            trace.add_signal("temporal", temporal, weights["temporal"])
            trace.add_signal("combined", combined, sum(weights.values()))
            trace.add_step("patterns", matched=[p.id for p in matched])
            trace.add_step("history", similar=len(similar))
            trace.set_outputs(recommended_mood=best.value, confidence=confidence)

        log.debug("decision %s conf=%.3f weights=%s", best.value, confidence, weights)
        return prediction

    def _forecast(self, mood: Mood, history: HistoryStore) -> Tuple[ExpectedOutcome, float]:
        cfg = self.cfg
        summary = history.mood_summary(mood)
        profile = MOOD_PROFILES[mood]
        energy = profile.energy
        if summary is None:
            return ExpectedOutcome(
                engagement_score=cfg.default_engagement,
                audience_retention=cfg.default_retention,
                energy_level=energy,
            ), cfg.default_duration * profile.duration_factor
        return ExpectedOutcome(
            engagement_score=_unit(summary.avg_engagement),
            # retention starts at the default and moves with observed audience growth
            audience_retention=_unit(cfg.default_retention + summary.avg_audience_growth),
            energy_level=energy,
        ), max(1.0, summary.avg_duration)


__all__ = ["DecisionConfig", "DecisionEngine", "combine", "rank"]
