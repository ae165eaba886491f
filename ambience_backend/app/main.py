# main.py: backend entrypoint
from __future__ import annotations
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ambience_backend.app.config import (
    APP_ENV, DEBUG_MODE, engine_config_from_env, get_data_dir, seed_patterns_enabled, validate_manifest,
)
from ambience_backend.app.routers import abtest, learn, mood, state
from ambience_backend.app.services.engine import MoodEngine

logger = logging.getLogger("uvicorn.error")


def create_app(engine: Optional[MoodEngine] = None) -> FastAPI:
    """
    Build the API around one MoodEngine. Tests pass their own engine; the
    module-level `app` builds one from AMBIENCE_* env settings.
    """
    if engine is None:
        engine = MoodEngine(engine_config_from_env())
        if seed_patterns_enabled():
            engine.seed_patterns()

    app = FastAPI(title="Ambience API", debug=DEBUG_MODE)
    app.state.engine = engine

    # --- CORS for the dashboard dev server ------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for module in (mood, learn, abtest, state):
        app.include_router(module.router, prefix="/api")

    # --- health ---------------------------------------------------------------
    @app.get("/health")
    def health():
        return {"ok": True, "env": APP_ENV}

    @app.get("/api/health")
    def api_health():
        manifest = validate_manifest()
        return {"ok": manifest["status"] == "ok", "rules": manifest["status"],
                "missing": manifest["missing_required"], "data_dir": str(get_data_dir())}

    logger.info("ambience api ready (%d patterns)", len(engine.patterns))
    return app


app = create_app()
