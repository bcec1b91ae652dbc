"""
Client: api.py
- Client HTTP du front vers le backend QuizFlix (/api/languages, /api/new-game, /api/search).
- Les erreurs deviennent `QuizFlixApiError` avec le message `error` renvoyé par le serveur.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from app.models.game import GameRequest

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3001"
DEFAULT_TIMEOUT: Tuple[float, float] = (5.0, 90.0)  # la génération live peut être lente
CONNECTION_ERROR_MESSAGE = "Could not connect to the server or generate a new game."


class QuizFlixApiError(RuntimeError):
    """Échec d'un appel au backend (message prêt à afficher)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class QuizFlixApi:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        session: Optional[requests.Session] = None,
        timeout: Tuple[float, float] = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = self.session.get(f"{self.base_url}{path}", params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Backend unreachable", extra={"http_path": path})
            raise QuizFlixApiError(CONNECTION_ERROR_MESSAGE) from exc

        if response.status_code >= 400:
            message = CONNECTION_ERROR_MESSAGE
            try:
                body = response.json()
                if isinstance(body, dict) and body.get("error"):
                    message = body["error"]
            except ValueError:
                pass
            raise QuizFlixApiError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise QuizFlixApiError(CONNECTION_ERROR_MESSAGE, status_code=response.status_code) from exc

    def languages(self) -> List[Dict[str, Any]]:
        return self._get("/api/languages")

    def search(self, query: str) -> List[str]:
        return self._get("/api/search", {"query": query})

    def new_game(self, request: GameRequest) -> Dict[str, Any]:
        return self._get(
            "/api/new-game",
            {
                "startYear": request.start_year,
                "endYear": request.end_year,
                "language": request.language,
                "difficulty": request.difficulty.value,
            },
        )
