# ambience_backend/app/services/learning/predictor.py
from __future__ import annotations
import math
import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

from ambience_backend.app.models.mood import MOODS, Mood
from .features import FEATURE_NAMES

# Purpose:
# Tiny feed-forward network: features -> 8 sigmoid hidden units -> one sigmoid
# propensity per mood (independent, not a softmax).
#
# train() is a crude online step, not backpropagation: only the hidden->output
# weights of outputs whose error exceeds error_threshold move, each by
# learning_rate * error * step_scale. Continuous small adaptation matters more
# here than fitting accuracy. Swap in another OnlineLearner to change that.

@dataclass
class PredictorConfig:
    n_inputs: int = len(FEATURE_NAMES)
    n_hidden: int = 8
    n_outputs: int = len(MOODS)
    learning_rate: float = 0.01
    step_scale: float = 0.1
    error_threshold: float = 0.1
    seed: Optional[int] = None


class OnlineLearner(Protocol):
    def predict(self, features: Sequence[float]) -> List[float]: ...
    def train(self, features: Sequence[float], targets: Sequence[float]) -> None: ...
    def copy(self) -> "OnlineLearner": ...
    def to_state(self) -> Dict[str, Any]: ...


def _sigmoid(x: float) -> float:
    # guard exp overflow for large negative sums
    if x < -60.0:
        return 0.0
    if x > 60.0:
        return 1.0
    return 1.0 / (1.0 + math.exp(-x))


class MoodNetwork:
    def __init__(self, cfg: Optional[PredictorConfig] = None):
        self.cfg = cfg or PredictorConfig()
        rng = random.Random(self.cfg.seed)

        def _matrix(rows: int, cols: int) -> List[List[float]]:
            return [[rng.uniform(-1.0, 1.0) for _ in range(cols)] for _ in range(rows)]

        # weights[layer][input][neuron]
        self.weights: List[List[List[float]]] = [
            _matrix(self.cfg.n_inputs, self.cfg.n_hidden),
            _matrix(self.cfg.n_hidden, self.cfg.n_outputs),
        ]
        self.biases: List[List[float]] = [
            [rng.uniform(-1.0, 1.0) for _ in range(self.cfg.n_hidden)],
            [rng.uniform(-1.0, 1.0) for _ in range(self.cfg.n_outputs)],
        ]
        self.train_steps = 0

    def _check_inputs(self, features: Sequence[float]) -> List[float]:
        if len(features) != self.cfg.n_inputs:
            raise ValueError(f"expected {self.cfg.n_inputs} features, got {len(features)}")
        return [float(v) for v in features]

    def _forward(self, inputs: List[float]) -> List[List[float]]:
        activations = [inputs]
        current = inputs
        for w, b in zip(self.weights, self.biases):
            out = []
            for neuron in range(len(b)):
                s = b[neuron]
                for i, x in enumerate(current):
                    s += x * w[i][neuron]
                out.append(_sigmoid(s))
            activations.append(out)
            current = out
        return activations

    def predict(self, features: Sequence[float]) -> List[float]:
        return self._forward(self._check_inputs(features))[-1]

    def train(self, features: Sequence[float], targets: Sequence[float]) -> None:
        if len(targets) != self.cfg.n_outputs:
            raise ValueError(f"expected {self.cfg.n_outputs} targets, got {len(targets)}")
        predictions = self.predict(features)
        out_w = self.weights[-1]
        for i, target in enumerate(targets):
            error = float(target) - predictions[i]
            if abs(error) <= self.cfg.error_threshold:
                continue
            step = self.cfg.learning_rate * error * self.cfg.step_scale
            for j in range(len(out_w)):
                out_w[j][i] += step
        self.train_steps += 1

    def copy(self) -> "MoodNetwork":
        return MoodNetwork.from_state(self.to_state(), self.cfg)

    def to_state(self) -> Dict[str, Any]:
        return {
            "kind": "mood_network",
            "weights": [[list(row) for row in layer] for layer in self.weights],
            "biases": [list(layer) for layer in self.biases],
            "train_steps": self.train_steps,
        }

    @classmethod
    def from_state(cls, state: Dict[str, Any], cfg: Optional[PredictorConfig] = None) -> "MoodNetwork":
        net = cls(cfg)
        weights = state.get("weights") or []
        biases = state.get("biases") or []
        shape_ok = (
            len(weights) == 2 and len(biases) == 2
            and len(weights[0]) == net.cfg.n_inputs
            and all(len(r) == net.cfg.n_hidden for r in weights[0])
            and len(weights[1]) == net.cfg.n_hidden
            and all(len(r) == net.cfg.n_outputs for r in weights[1])
            and len(biases[0]) == net.cfg.n_hidden
            and len(biases[1]) == net.cfg.n_outputs
        )
        if not shape_ok:
            raise ValueError("model state does not match the network shape")
        net.weights = [[[float(v) for v in row] for row in layer] for layer in weights]
        net.biases = [[float(v) for v in layer] for layer in biases]
        net.train_steps = int(state.get("train_steps", 0))
        return net


def scores_by_mood(learner: OnlineLearner, features: Sequence[float]) -> Dict[Mood, float]:
    raw = learner.predict(features)
    return {m: min(1.0, max(0.0, float(raw[i]))) for i, m in enumerate(MOODS)}


__all__ = ["PredictorConfig", "OnlineLearner", "MoodNetwork", "scores_by_mood"]
