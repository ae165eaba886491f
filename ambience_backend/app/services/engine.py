# ambience_backend/app/services/engine.py
from __future__ import annotations
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, Field

from ambience_backend.app.models.abtest import ABTest, ABTestResult
from ambience_backend.app.models.context import Context
from ambience_backend.app.models.mood import MoodLike, parse_mood
from ambience_backend.app.models.outcome import LearningRecord, MoodPrediction, Outcome
from ambience_backend.app.models.patterns import Pattern
from ambience_backend.app.observability.decision_trace import DecisionTrace
from ambience_backend.app.services.learning import feedback_flow, metrics
from ambience_backend.app.services.learning.ab_testing import ABTestConfig, ABTestController
from ambience_backend.app.services.learning.decision import DecisionConfig, DecisionEngine
from ambience_backend.app.services.learning.history import HistoryConfig, HistoryStore
from ambience_backend.app.services.learning.patterns import (
    PatternStore, PatternStoreConfig, load_seed_patterns,
)
from ambience_backend.app.services.learning.predictor import (
    MoodNetwork, OnlineLearner, PredictorConfig,
)
from ambience_backend.app.services.learning.temporal import TemporalPolicy
from ambience_backend.app.services.learning.trends import (
    STABILITY_MIN_SAMPLES, CurrentConditions, SensorWindow, Trends, mood_stability,
)
from ambience_backend.app.services.show_control import MoodIntent, build_intent, mood_parameters

# Purpose:
# Facade over every learner and store. One instance per deployment (or test);
# there is no module-level engine.
# Locking:
#   - every mutation runs under self.lock (an RLock, so feedback_flow can
#     take it while the caller already holds it)
#   - predictions copy store state under the lock, then compute outside it

log = logging.getLogger("ambience.engine")

SCHEMA_VERSION = "2026-10-01"

@dataclass
class EngineConfig:
    predictor: PredictorConfig = field(default_factory=PredictorConfig)
    patterns: PatternStoreConfig = field(default_factory=PatternStoreConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    decision: DecisionConfig = field(default_factory=DecisionConfig)
    abtest: ABTestConfig = field(default_factory=ABTestConfig)
    window_cap: int = 50

    @classmethod
    def build(cls, *, history_cap: int = 1000, pattern_cap: int = 50,
              ab_sample_threshold: int = 50, similarity_threshold: float = 0.7,
              seed: Optional[int] = None) -> "EngineConfig":
        return cls(
            predictor=PredictorConfig(seed=seed),
            patterns=PatternStoreConfig(cap=pattern_cap),
            history=HistoryConfig(cap=history_cap, similarity_threshold=similarity_threshold),
            abtest=ABTestConfig(sample_threshold=ab_sample_threshold),
        )


class EngineState(BaseModel):
    """Opaque persistence blob; the host decides where it is stored."""
    schema_version: str = SCHEMA_VERSION
    history: List[LearningRecord] = Field(default_factory=list)
    patterns: List[Pattern] = Field(default_factory=list)
    ab_tests: List[ABTestResult] = Field(default_factory=list)
    model: Optional[Dict[str, Any]] = None


class MoodEngine:
    def __init__(self, cfg: Optional[EngineConfig] = None, learner: Optional[OnlineLearner] = None,
                 policy: Optional[TemporalPolicy] = None):
        self.cfg = cfg or EngineConfig()
        self.lock = threading.RLock()
        self.learner: OnlineLearner = learner if learner is not None else MoodNetwork(self.cfg.predictor)
        self.patterns = PatternStore(self.cfg.patterns)
        self.history = HistoryStore(self.cfg.history)
        self.ab = ABTestController(self.cfg.abtest)
        self.window = SensorWindow(self.cfg.window_cap)
        self.decider = DecisionEngine(self.cfg.decision, policy)
        self.current_prediction: Optional[MoodPrediction] = None

    # ---------------- decisions ----------------

    def predict_optimal_mood(self, context: Union[Context, Mapping[str, Any]],
                             trace: Optional[DecisionTrace] = None) -> MoodPrediction:
        ctx = context if isinstance(context, Context) else Context.model_validate(context)
        with self.lock:
            learner = self.learner.copy()
            patterns = self.patterns.snapshot()
            history = self.history.snapshot()
            trends = self.window.analyze_trends()
            window_n = len(self.window)

        if trace is not None:
            trace.set_meta(history=len(history), patterns=len(patterns), window=window_n)
        prediction = self.decider.predict(ctx, learner, patterns, history, trends, trace)

        with self.lock:
            self.current_prediction = prediction
        log.info("predicted %s (confidence %.3f)", prediction.recommended_mood.value, prediction.confidence)
        return prediction

    def record_outcome(self, context: Union[Context, Mapping[str, Any]], applied_mood: MoodLike,
                       outcome: Union[Outcome, Mapping[str, Any]]) -> LearningRecord:
        return feedback_flow.record_outcome(self, context, applied_mood, outcome)

    # ---------------- sensor window ----------------

    def observe(self, context: Union[Context, Mapping[str, Any]]) -> Context:
        ctx = context if isinstance(context, Context) else Context.model_validate(context)
        with self.lock:
            self.window.observe(ctx)
        return ctx

    def trends(self) -> Trends:
        with self.lock:
            return self.window.analyze_trends()

    def current_conditions(self) -> CurrentConditions:
        """Window summary plus how steady the mood pick is over the same observations."""
        with self.lock:
            conditions = self.window.current_conditions()
            recent = self.window.recent()
            if len(recent) < STABILITY_MIN_SAMPLES:
                return conditions
            learner = self.learner.copy()
            patterns = self.patterns.snapshot()
            history = self.history.snapshot()
            trends = self.window.analyze_trends()

        picks = [self.decider.predict(ctx, learner, patterns, history, trends).recommended_mood
                 for ctx in recent]
        conditions.mood_stability = mood_stability(picks)
        return conditions

    # ---------------- A/B ----------------

    def start_test(self, mood_a: MoodLike, mood_b: MoodLike, label: str = "") -> ABTest:
        with self.lock:
            return self.ab.start_test(mood_a, mood_b, label).model_copy(deep=True)

    def record_test_result(self, test_id: str, mood: MoodLike, engagement: float) -> Optional[ABTestResult]:
        with self.lock:
            return self.ab.record_result(test_id, mood, engagement)

    def complete_test(self) -> Optional[ABTestResult]:
        with self.lock:
            return self.ab.complete_test()

    def abandon_test(self) -> Optional[ABTest]:
        with self.lock:
            return self.ab.abandon_test()

    def active_test(self) -> Optional[ABTest]:
        with self.lock:
            active = self.ab.active
            return active.model_copy(deep=True) if active is not None else None

    def test_history(self) -> List[ABTestResult]:
        with self.lock:
            return self.ab.history()

    # ---------------- metrics ----------------

    def learning_metrics(self) -> Dict[str, object]:
        with self.lock:
            records, patterns, ab = self.history.records(), self.patterns.all(), self.ab.history()
        return metrics.learning_metrics(records, patterns, ab)

    def system_status(self) -> Dict[str, object]:
        with self.lock:
            records = self.history.records()
        return metrics.system_status(records)

    def list_patterns(self) -> List[Pattern]:
        with self.lock:
            return [p.model_copy(deep=True) for p in self.patterns.all()]

    # ---------------- show control ----------------

    def intent_for(self, mood: Optional[MoodLike] = None) -> MoodIntent:
        """
        Abstract apply-this-mood intent. Defaults to the cached recommendation;
        parameters follow the latest observed context and trend.
        """
        with self.lock:
            current = self.current_prediction
            latest = self.window.items()[-1] if len(self.window) else None
            trends = self.window.analyze_trends()

        if mood is None:
            if current is None:
                raise LookupError("no prediction yet; pass a mood explicitly")
            return build_intent(current.recommended_mood, current.parameters)
        m = parse_mood(mood)
        if current is not None and current.recommended_mood is m and latest is None:
            return build_intent(m, current.parameters)
        return build_intent(m, mood_parameters(m, latest, trends))

    # ---------------- state ----------------

    def seed_patterns(self, patterns: Optional[List[Pattern]] = None) -> int:
        rows = load_seed_patterns() if patterns is None else list(patterns)
        with self.lock:
            for p in rows:
                self.patterns.add(p.model_copy(deep=True))
        log.info("seeded %d patterns", len(rows))
        return len(rows)

    def export_state(self) -> Dict[str, Any]:
        with self.lock:
            state = EngineState(
                history=self.history.records(),
                patterns=[p.model_copy(deep=True) for p in self.patterns.all()],
                ab_tests=self.ab.history(),
                model=self.learner.to_state(),
            )
        return state.model_dump(mode="json")

    def import_state(self, blob: Union[EngineState, Mapping[str, Any]]) -> EngineState:
        # validate everything before touching the stores
        state = blob if isinstance(blob, EngineState) else EngineState.model_validate(blob)
        learner: Optional[OnlineLearner] = None
        if state.model is not None:
            if isinstance(self.learner, MoodNetwork):
                learner = MoodNetwork.from_state(state.model, self.cfg.predictor)
            else:
                log.warning("ignoring stored model: active learner is %s", type(self.learner).__name__)

        with self.lock:
            self.history.load_state(state.history)
            self.patterns.load_state(state.patterns)
            self.ab.load_state(state.ab_tests)
            if learner is not None:
                self.learner = learner
            self.current_prediction = None
        log.info("imported state: %d records, %d patterns, %d tests",
                 len(state.history), len(state.patterns), len(state.ab_tests))
        return state

    def reset_learning(self, reseed: bool = False) -> None:
        with self.lock:
            self.history.clear()
            self.patterns.clear()
            self.ab.clear()
            self.window.clear()
            if isinstance(self.learner, MoodNetwork):
                self.learner = MoodNetwork(self.cfg.predictor)
            self.current_prediction = None
        if reseed:
            self.seed_patterns()


__all__ = ["EngineConfig", "EngineState", "MoodEngine", "SCHEMA_VERSION"]
