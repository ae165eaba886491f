from __future__ import annotations
from typing import Any, Dict, Optional

import pytest
from fastapi.testclient import TestClient

from ambience_backend.app.main import create_app
from ambience_backend.app.models.context import Context
from ambience_backend.app.services.engine import EngineConfig, MoodEngine
from ambience_backend.app.services.rules_loader import clear_cache

# --- Data tree override: every test writes under its own tmp DATA_DIR ---
@pytest.fixture(autouse=True)
def tmp_data_dir(tmp_path, monkeypatch):
    data = tmp_path / "data"
    monkeypatch.setenv("DATA_DIR", str(data))
    return data

@pytest.fixture(autouse=True)
def fresh_rules_cache():
    clear_cache()
    yield
    clear_cache()

# --- Context factory: flat keyword args -> Context ---
@pytest.fixture
def make_context():
    def _make(people: Optional[int] = 10, movement: float = 0.4, crowd_density: float = 0.3,
              vision_energy: float = 0.4, audio_energy: Optional[float] = 0.4, volume: float = 0.5,
              conversational: float = 0.3, musicality: float = 0.2, ambient_noise: float = 0.2,
              time_of_day: str = "afternoon", day_of_week: str = "weekday",
              **env: Any) -> Context:
        payload: Dict[str, Any] = {
            "environmental": {"time_of_day": time_of_day, "day_of_week": day_of_week, **env},
        }
        if people is not None:
            payload["vision"] = {
                "people_count": people,
                "avg_movement": movement,
                "crowd_density": crowd_density,
                "energy_level": vision_energy,
            }
        if audio_energy is not None:
            payload["audio"] = {
                "volume": volume,
                "energy": audio_energy,
                "conversational": conversational,
                "musicality": musicality,
                "ambient_noise": ambient_noise,
            }
        return Context.model_validate(payload)
    return _make

# --- Engines: seeded predictor, no seed patterns unless a test adds them ---
@pytest.fixture
def engine() -> MoodEngine:
    return MoodEngine(EngineConfig.build(seed=42))

@pytest.fixture
def seeded_engine(engine: MoodEngine) -> MoodEngine:
    engine.seed_patterns()
    return engine

@pytest.fixture
def client(engine: MoodEngine):
    return TestClient(create_app(engine))
