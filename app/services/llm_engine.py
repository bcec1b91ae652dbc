"""
Service: llm_engine.py
- Centralise les appels vers Gemini (API REST generateContent) pour produire les indices.
- Nettoie la sortie du modèle (balises ``` éventuelles) et valide le JSON obtenu.

Fonctions principales:
- build_clue_prompt(movie, language): prompt fixe (ton joueur, vague → précis, pas de noms propres).
- strip_code_fences(text): retire les balises ```json / ``` autour du JSON.
- parse_clue_payload(text): JSON → GamePayload (titre + exactement 5 indices).
- generate_clues(client, movie, language): enchaîne prompt → appel → parsing.
"""
import logging
import re
from typing import Any, Dict, Optional, Tuple
from uuid import uuid4

import requests
from pydantic import ValidationError
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from app.models.game import GamePayload
from .io_utils import JSONDecodeError, parse_json

logger = logging.getLogger(__name__)

DEFAULT_GENERATE_TIMEOUT: Tuple[float, float] = (5.0, 45.0)  # connect, read

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


class LLMServiceError(RuntimeError):
    """Erreur encapsulant un échec de communication avec le LLM."""


class ClueFormatError(LLMServiceError):
    """Sortie du modèle inexploitable (pas du JSON, ou schéma inattendu)."""


class GeminiClient:
    """
    Client HTTP pour l'endpoint `models/<model>:generateContent`.
    - Configure retries avec backoff exponentiel.
    - Journalise chaque requête avec un identifiant de corrélation.
    """

    def __init__(
        self,
        base_url: str,
        model: str,
        api_key: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: Tuple[float, float] = DEFAULT_GENERATE_TIMEOUT,
    ) -> None:
        self.endpoint = f"{base_url.rstrip('/')}/models/{model}:generateContent"
        self.model = model
        self.api_key = api_key
        self.session = session or self._build_session()
        self.timeout = timeout

    @staticmethod
    def _build_session() -> requests.Session:
        session = requests.Session()
        retry = Retry(
            total=2,
            backoff_factor=0.5,
            status_forcelist=(500, 502, 503, 504),
            allowed_methods=frozenset({"POST"}),
            respect_retry_after_header=True,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def generate_content(self, prompt: str, *, request_id: str) -> str:
        """Envoie `prompt` et retourne le texte du premier candidat."""
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            logger.debug(
                "LLM request start",
                extra={"llm_model": self.model, "llm_request_id": request_id},
            )
            response = self.session.post(
                self.endpoint,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.Timeout as exc:
            logger.warning("LLM request timeout", extra={"llm_request_id": request_id})
            raise LLMServiceError("LLM request timed out") from exc
        except requests.RequestException as exc:
            logger.error("LLM request failed", exc_info=True, extra={"llm_request_id": request_id})
            raise LLMServiceError("LLM request failed") from exc
        except ValueError as exc:
            logger.error("Invalid JSON payload from LLM", exc_info=True, extra={"llm_request_id": request_id})
            raise LLMServiceError("Invalid JSON payload from LLM") from exc

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            logger.error("Empty response payload from LLM", extra={"llm_request_id": request_id})
            raise LLMServiceError("Empty response from LLM") from exc

        logger.debug("LLM generate success", extra={"llm_request_id": request_id})
        return text


def build_clue_prompt(movie: Dict[str, Any], language: str) -> str:
    """Prompt fixe envoyé au modèle pour un film TMDb (title/overview/release_date)."""
    release_year = (movie.get("release_date") or "")[:4] or "unknown"
    return (
        "You are a witty and charismatic movie buff crafting clever trivia questions for your friends. "
        "Your tone should be playful and intriguing.\n"
        f'Based on the following movie data, generate 5 clues in the language with the ISO 639-1 code: "{language}".\n'
        "Follow these rules strictly:\n"
        "- **Style:** Start vague and get more specific. Avoid just summarizing the plot. Instead, focus on "
        "iconic scenes, famous quotes, the director's unique style, or the film's cultural impact.\n"
        "- **Restrictions:** Absolutely no movie titles or actor/character names. Do not sound like a robot.\n"
        '- **Format:** Return ONLY a valid JSON object with two keys: "title" (the movie\'s title) '
        'and "clues" (an array of 5 string clues).\n'
        "Movie Data:\n"
        f"Title: {movie.get('title', '')}\n"
        f"Overview: {movie.get('overview', '')}\n"
        f"Release Year: {release_year}\n"
    )


def strip_code_fences(text: str) -> str:
    """Supprime les balises ```json / ``` que le modèle ajoute parfois."""
    return _FENCE_RE.sub("", text).strip()


def parse_clue_payload(text: str) -> GamePayload:
    """Texte brut du modèle → GamePayload validé (sinon ClueFormatError)."""
    cleaned = strip_code_fences(text)
    try:
        data = parse_json(cleaned)
    except JSONDecodeError as exc:
        raise ClueFormatError("LLM output is not valid JSON") from exc
    if not isinstance(data, dict):
        raise ClueFormatError("LLM output is not a JSON object")
    try:
        return GamePayload.model_validate({"title": data.get("title"), "clues": data.get("clues")})
    except ValidationError as exc:
        raise ClueFormatError("LLM output does not match the clue schema") from exc


def generate_clues(client: GeminiClient, movie: Dict[str, Any], language: str) -> GamePayload:
    """
    Génère les 5 indices d'un film.
    - Lève LLMServiceError (ou ClueFormatError) en cas d'échec: l'appelant bascule en repli.
    """
    request_id = f"generate-{uuid4().hex}"
    prompt = build_clue_prompt(movie, language)
    text = client.generate_content(prompt, request_id=request_id)
    try:
        payload = parse_clue_payload(text)
    except ClueFormatError:
        logger.warning(
            "LLM returned malformed clues",
            extra={"llm_request_id": request_id, "llm_output": text[:200]},
        )
        raise
    logger.info(
        "LLM clues generated",
        extra={"llm_request_id": request_id, "language": language},
    )
    return payload
