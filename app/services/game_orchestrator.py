"""
Service: game_orchestrator.py
Rôle:
- Produire une énigme (titre + 5 indices) pour une GameRequest.
- Pipeline en deux étages: live (TMDb → Gemini) puis repli sur le catalogue statique.

Pipeline live:
1. Sonde de joignabilité TMDb (timeout court). Échec → repli.
2. /discover/movie filtré par années/langue/seuil de votes (selon difficulté).
   - 0 page → GameFailure(NOT_FOUND) (les réglages ne donnent rien, pas de repli).
   - page tirée au hasard dans 1..min(total_pages, 500), puis un film au hasard.
3. Gemini génère les indices. Erreur réseau ou sortie mal formée → repli.

Résultat étiqueté:
- LiveGame(payload) | FallbackGame(payload, reason) | GameFailure(kind, message)

Dépendances injectées:
- catalog (QuizCatalog), tmdb (TMDbClient), llm (GeminiClient), rng (random.Random).
"""
import logging
import random
from typing import Any, Dict, List, Optional

from app.models.game import (
    Difficulty,
    FailureKind,
    FallbackGame,
    GameFailure,
    GamePayload,
    GameOutcome,
    GameRequest,
    LiveGame,
)
from .llm_engine import GeminiClient, LLMServiceError, generate_clues
from .quiz_catalog import QuizCatalog
from .tmdb_client import TMDbClient, TMDbServiceError

logger = logging.getLogger(__name__)

# Seuil minimal de votes TMDb: plus il est haut, plus les films sont connus.
VOTE_COUNT_FLOOR: Dict[Difficulty, int] = {
    Difficulty.EASY: 5000,
    Difficulty.MEDIUM: 1000,
    Difficulty.HARD: 200,
}
MAX_PAGE = 500  # TMDb ne sert pas au-delà de la page 500
MAX_SUGGESTIONS = 5
MIN_QUERY_LENGTH = 2

NO_RESULTS_MESSAGE = "No movies found for these settings. Try a wider range or easier difficulty."
EMPTY_PAGE_MESSAGE = "Could not fetch movies for the selected range."
NO_FALLBACK_MESSAGE = "Pre-generated quiz data not available."


class NoCandidatesError(Exception):
    """Les réglages ne produisent aucun film (→ 404, pas de repli)."""


class GameOrchestrator:
    def __init__(
        self,
        catalog: QuizCatalog,
        tmdb: TMDbClient,
        llm: GeminiClient,
        *,
        image_base: str = "",
        rng: Optional[random.Random] = None,
    ) -> None:
        self.catalog = catalog
        self.tmdb = tmdb
        self.llm = llm
        self.image_base = image_base
        self.rng = rng or random.Random()

    # ---------------- métadonnées ----------------
    def list_languages(self) -> List[Dict[str, Any]]:
        """Proxy de la liste des langues TMDb (lève TMDbServiceError si indisponible)."""
        return self.tmdb.languages()

    def search_titles(self, query: Optional[str]) -> List[str]:
        """Jusqu'à 5 titres pour l'autocomplétion; [] si requête trop courte ou TMDb en panne."""
        query = (query or "").strip()
        if len(query) < MIN_QUERY_LENGTH:
            return []
        try:
            results = self.tmdb.search(query)
        except TMDbServiceError:
            logger.warning("Search suggestions unavailable", extra={"query": query})
            return []
        titles = [
            m["title"] for m in results
            if isinstance(m, dict) and isinstance(m.get("title"), str) and m["title"]
        ]
        return titles[:MAX_SUGGESTIONS]

    # ---------------- nouvelle partie ----------------
    def new_game(self, request: GameRequest) -> GameOutcome:
        if not self.tmdb.is_reachable():
            return self._fallback(request, reason="tmdb_unreachable")

        try:
            return LiveGame(self._live_game(request))
        except NoCandidatesError as exc:
            logger.info(
                "No live candidates for settings",
                extra={"difficulty": request.difficulty.value, "language": request.language},
            )
            return GameFailure(FailureKind.NOT_FOUND, str(exc))
        except TMDbServiceError:
            logger.warning("Falling back to pre-generated quizzes due to TMDb error")
            return self._fallback(request, reason="tmdb_error")
        except LLMServiceError:
            logger.warning("Falling back to pre-generated quizzes due to LLM error")
            return self._fallback(request, reason="llm_error")
        except Exception:
            logger.exception("Unexpected error in live game pipeline, falling back")
            return self._fallback(request, reason="live_error")

    def _pick_movie(self, request: GameRequest) -> Dict[str, Any]:
        criteria = dict(
            start_year=request.start_year,
            end_year=request.end_year,
            language=request.language,
            min_vote_count=VOTE_COUNT_FLOOR[request.difficulty],
        )
        first = self.tmdb.discover(**criteria)
        try:
            total_pages = int(first.get("total_pages") or 0)
        except (TypeError, ValueError) as exc:
            raise TMDbServiceError("Unexpected total_pages in TMDb discover payload") from exc
        if total_pages <= 0:
            raise NoCandidatesError(NO_RESULTS_MESSAGE)

        page = self.rng.randint(1, min(total_pages, MAX_PAGE))
        movies = self.tmdb.discover(**criteria, page=page).get("results") or []
        if not movies:
            raise NoCandidatesError(EMPTY_PAGE_MESSAGE)
        return self.rng.choice(movies)

    def _live_game(self, request: GameRequest) -> GamePayload:
        movie = self._pick_movie(request)
        payload = generate_clues(self.llm, movie, request.language)
        poster_path = movie.get("poster_path")
        payload = payload.model_copy(
            update={"poster_url": f"{self.image_base}{poster_path}" if poster_path else None}
        )
        logger.info(
            "Served live quiz",
            extra={"difficulty": request.difficulty.value, "language": request.language},
        )
        return payload

    def _fallback(self, request: GameRequest, *, reason: str) -> GameOutcome:
        picked = self.catalog.pick(request.difficulty.value, self.rng)
        if picked is None:
            logger.error("No pre-generated quizzes available", extra={"reason": reason})
            return GameFailure(FailureKind.UNAVAILABLE, NO_FALLBACK_MESSAGE)
        served, payload = picked
        if served != request.difficulty.value:
            logger.info(
                "Served quiz from fallback difficulty",
                extra={"requested": request.difficulty.value, "served": served},
            )
        logger.info(
            "Served pre-generated quiz",
            extra={"difficulty": served, "quiz_title": payload.title, "reason": reason},
        )
        return FallbackGame(payload, reason=reason)
