# ambience_backend/app/routers/deps.py
from __future__ import annotations
from fastapi import Request

from ambience_backend.app.services.engine import MoodEngine

# What it does:
# Hand the app's single MoodEngine to a route.
def get_engine(request: Request) -> MoodEngine:
    return request.app.state.engine
