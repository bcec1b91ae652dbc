"""
Service: tmdb_client.py
- Centralise les appels HTTP vers TMDb (catalogue de films).
- Toute erreur réseau/HTTP est encapsulée dans `TMDbServiceError`.

Méthodes principales:
- is_reachable(): sonde légère (/configuration) avec timeout court.
- languages(): liste des langues supportées (/configuration/languages).
- discover(...): page de films filtrée par années, langue et nombre de votes.
- search(query): recherche par titre (/search/movie).
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: Tuple[float, float] = (5.0, 15.0)  # connect, read
DEFAULT_PROBE_TIMEOUT: float = 3.0


class TMDbServiceError(RuntimeError):
    """Erreur encapsulant un échec de communication avec TMDb."""


class TMDbClient:
    """
    Client HTTP TMDb.
    - Retries courts sur les 5xx (pas sur 429: la limite de débit = indisponible).
    - La clé API est passée en paramètre `api_key` à chaque appel.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: Tuple[float, float] = DEFAULT_TIMEOUT,
        probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.session = session or self._build_session()
        self.timeout = timeout
        self.probe_timeout = probe_timeout

    @staticmethod
    def _build_session() -> requests.Session:
        session = requests.Session()
        retry = Retry(
            total=2,
            backoff_factor=0.3,
            status_forcelist=(500, 502, 503, 504),
            allowed_methods=frozenset({"GET"}),
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None, *, timeout: Any = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        query = {"api_key": self.api_key, **(params or {})}
        try:
            logger.debug("TMDb request start", extra={"tmdb_path": path})
            response = self.session.get(url, params=query, timeout=timeout or self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.Timeout as exc:
            logger.warning("TMDb request timeout", extra={"tmdb_path": path})
            raise TMDbServiceError("TMDb request timed out") from exc
        except requests.RequestException as exc:
            logger.error("TMDb request failed", exc_info=True, extra={"tmdb_path": path})
            raise TMDbServiceError("TMDb request failed") from exc
        except ValueError as exc:
            logger.error("Invalid JSON payload from TMDb", exc_info=True, extra={"tmdb_path": path})
            raise TMDbServiceError("Invalid JSON payload from TMDb") from exc

    def is_reachable(self) -> bool:
        """Sonde /configuration; toute erreur (timeout, 429, réseau) → False."""
        try:
            self._get("/configuration", timeout=self.probe_timeout)
            return True
        except TMDbServiceError:
            logger.warning("TMDb API not reachable or rate-limited")
            return False

    def languages(self) -> List[Dict[str, Any]]:
        data = self._get("/configuration/languages")
        if not isinstance(data, list):
            raise TMDbServiceError("Unexpected languages payload from TMDb")
        return data

    def discover(
        self,
        *,
        start_year: int,
        end_year: int,
        language: str,
        min_vote_count: int,
        page: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Une page de /discover/movie (films triés par popularité, sans contenu adulte)."""
        params: Dict[str, Any] = {
            "language": language,
            "sort_by": "popularity.desc",
            "include_adult": "false",
            "primary_release_date.gte": f"{start_year}-01-01",
            "primary_release_date.lte": f"{end_year}-12-31",
            "vote_count.gte": min_vote_count,
        }
        if page is not None:
            params["page"] = page
        data = self._get("/discover/movie", params)
        if not isinstance(data, dict):
            raise TMDbServiceError("Unexpected discover payload from TMDb")
        data["results"] = self._movie_list(data.get("results"), "discover")
        return data

    def search(self, query: str, *, language: str = "en-US") -> List[Dict[str, Any]]:
        data = self._get(
            "/search/movie",
            {"language": language, "query": query, "page": 1},
            timeout=self.probe_timeout,
        )
        if not isinstance(data, dict):
            raise TMDbServiceError("Unexpected search payload from TMDb")
        return self._movie_list(data.get("results"), "search")

    @staticmethod
    def _movie_list(results: Any, endpoint: str) -> List[Dict[str, Any]]:
        """`results` doit être une liste de films (dicts); None → liste vide."""
        if results is None:
            return []
        if not isinstance(results, list) or not all(isinstance(m, dict) for m in results):
            raise TMDbServiceError(f"Unexpected results in TMDb {endpoint} payload")
        return results
