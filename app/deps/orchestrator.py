"""
Dépendances FastAPI (orchestrateur)
===================================

- `build_orchestrator(settings)` : assemble catalogue + clients TMDb/Gemini.
- `get_orchestrator` : *dependency* qui renvoie l'instance posée sur `app.state`.

Tests
-----
Remplacer l'orchestrateur via `app.dependency_overrides[get_orchestrator]`
(catalogue et clients factices, `random.Random(seed)`).
"""
from __future__ import annotations

from pathlib import Path

from fastapi import Request

from app.config.settings import Settings
from app.services.game_orchestrator import GameOrchestrator
from app.services.llm_engine import GeminiClient
from app.services.quiz_catalog import QuizCatalog
from app.services.tmdb_client import TMDbClient


def build_orchestrator(settings: Settings) -> GameOrchestrator:
    """Charge le catalogue (une seule fois) et instancie les clients HTTP."""
    catalog = QuizCatalog.from_file(Path(settings.DATA_DIR) / settings.QUIZZES_FILE)
    tmdb = TMDbClient(
        settings.TMDB_BASE_URL,
        settings.TMDB_API_KEY,
        probe_timeout=settings.PROBE_TIMEOUT_S,
    )
    llm = GeminiClient(settings.GEMINI_BASE_URL, settings.GEMINI_MODEL, settings.GEMINI_API_KEY)
    return GameOrchestrator(catalog, tmdb, llm, image_base=settings.TMDB_IMAGE_BASE)


def get_orchestrator(request: Request) -> GameOrchestrator:
    return request.app.state.orchestrator
