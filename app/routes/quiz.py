"""
Module routes/quiz.py
Rôle:
- Endpoints publics du jeu (préfixe /api): langues, nouvelle partie, suggestions.

Intégrations:
- GameOrchestrator (injecté via `get_orchestrator`).
- QuizFlixError → réponse `{"error": ...}` (voir app.utils.http_errors).

Codes retour /api/new-game:
- 200 payload + "source" ("live" | "fallback")
- 400 paramètres manquants/invalides, 404 aucun film, 503 aucun quiz de repli.
"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import ValidationError

from app.deps.orchestrator import get_orchestrator
from app.models.game import FailureKind, GameFailure, GameRequest
from app.services.game_orchestrator import GameOrchestrator
from app.services.tmdb_client import TMDbServiceError
from app.utils.http_errors import QuizFlixError

router = APIRouter(prefix="/api", tags=["quiz"])

MISSING_PARAMS_MESSAGE = "A start year, end year, language, and difficulty must be provided."

_STATUS_BY_FAILURE = {
    FailureKind.NOT_FOUND: 404,
    FailureKind.UNAVAILABLE: 503,
}


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    field = ".".join(str(p) for p in err.get("loc", ())) or "request"
    return f"Invalid {field}: {err.get('msg', 'invalid value')}"


@router.get("/languages")
def languages(orchestrator: GameOrchestrator = Depends(get_orchestrator)) -> List[Dict[str, Any]]:
    """Langues supportées par TMDb (iso_639_1, english_name, name)."""
    try:
        return orchestrator.list_languages()
    except TMDbServiceError:
        raise QuizFlixError(500, "Failed to fetch languages.")


@router.get("/new-game")
def new_game(
    startYear: Optional[str] = Query(default=None),
    endYear: Optional[str] = Query(default=None),
    language: Optional[str] = Query(default=None),
    difficulty: Optional[str] = Query(default=None),
    orchestrator: GameOrchestrator = Depends(get_orchestrator),
):
    """Nouvelle partie: live si possible, sinon quiz pré-généré."""
    if not all((startYear, endYear, language, difficulty)):
        raise QuizFlixError(400, MISSING_PARAMS_MESSAGE)
    try:
        request = GameRequest(
            start_year=startYear,
            end_year=endYear,
            language=language,
            difficulty=difficulty,
        )
    except ValidationError as exc:
        raise QuizFlixError(400, _first_error(exc))

    outcome = orchestrator.new_game(request)
    if isinstance(outcome, GameFailure):
        raise QuizFlixError(_STATUS_BY_FAILURE[outcome.kind], outcome.message)
    return {**outcome.payload.to_public(), "source": outcome.source}


@router.get("/search")
def search(
    query: Optional[str] = Query(default=None),
    orchestrator: GameOrchestrator = Depends(get_orchestrator),
) -> List[str]:
    """Suggestions de titres (≤ 5); liste vide si requête courte ou TMDb indisponible."""
    return orchestrator.search_titles(query)
