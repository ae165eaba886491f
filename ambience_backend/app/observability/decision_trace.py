# ambience_backend/app/observability/decision_trace.py
from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

from ambience_backend.app.models.mood import Mood

class DecisionTrace:
    """
    Lightweight, structured trace of how one mood decision was produced.
    Collects per-signal distributions, their weights, narrative steps and the
    final pick. Safe to return in API responses.
    """
    def __init__(self, request_id: Optional[str] = None) -> None:
        self._t0 = time.time()
        self.request_id = request_id or f"req-{int(self._t0*1000)}"
        self.meta: Dict[str, Any] = {}
        self.features: Dict[str, float] = {}
        self.signals: Dict[str, Dict[str, float]] = {}
        self.weights: Dict[str, float] = {}
        self.confidences: Dict[str, float] = {}
        self.steps: List[Dict[str, Any]] = []
        self.outputs: Dict[str, Any] = {}

    # -------- meta --------
    def set_meta(self, **kwargs: Any) -> None:
        self.meta.update(kwargs)

    def set_features(self, features: Dict[str, float]) -> None:
        self.features = {k: float(v) for k, v in features.items()}

    # -------- narrative steps (free-form) --------
    def add_step(self, label: str, **detail: Any) -> None:
        self.steps.append({"t": time.time(), "label": label, **detail})

    # -------- signals (source → distribution over moods) --------
    def add_signal(self, name: str, dist: Dict[Mood, float], weight: float, confidence: float = 1.0) -> None:
        self.signals[name] = {m.value: float(v) for m, v in dist.items()}
        self.weights[name] = float(weight)
        self.confidences[name] = float(confidence)

    def signal(self, name: str) -> Dict[str, float]:
        return dict(self.signals.get(name, {}))

    # -------- final outputs snapshot --------
    def set_outputs(self, **kwargs: Any) -> None:
        self.outputs.update(kwargs)

    # -------- export --------
    def to_public(self) -> Dict[str, Any]:
        return {
            "request_id": self.request_id,
            "elapsed_ms": int((time.time() - self._t0) * 1000),
            "meta": self.meta,
            "features": self.features,
            "signals": self.signals,
            "weights": self.weights,
            "confidences": self.confidences,
            "steps": self.steps,
            "outputs": self.outputs,
        }
