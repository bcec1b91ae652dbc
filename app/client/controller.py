"""
Client: controller.py
Rôle:
- Machine à états d'une partie côté joueur: IDLE → LOADING → PLAYING → CORRECT | FAILED.
- Les réglages (années, langues, difficulté) ne sont lus qu'au lancement d'une partie.

Phases (union étiquetée, champs propres à chaque phase):
- Idle(error, fallback)           écran d'accueil, message d'erreur éventuel
- Loading(request)                requête /api/new-game en cours
- Playing(round, clue_index, guess, suggestions)
- Correct(round, clue_index) / Failed(round, clue_index)
  → seules phases exposant l'affiche (pas d'indice visuel pendant le jeu).

Suggestions:
- Demandées quand la saisie est stable depuis 300 ms et fait plus d'1 caractère.
- Une réponse arrivée pour une saisie dépassée est ignorée.
- Effacées à chaque proposition et en fin de manche.
"""
from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from app.models.game import Difficulty, GamePayload, GameRequest
from .api import QuizFlixApi, QuizFlixApiError

logger = logging.getLogger(__name__)

YEAR_MIN = 1890
YEAR_MAX = 2025
DEFAULT_YEAR_RANGE: Tuple[int, int] = (1990, 2025)
SUGGESTION_DEBOUNCE_S = 0.3
MAX_SUGGESTIONS = 5

NO_LANGUAGE_MESSAGE = "Please select at least one language in settings."
INVALID_GAME_MESSAGE = "Received an invalid game from the server."


@dataclass(frozen=True)
class LanguageOption:
    code: str   # ISO 639-1
    label: str  # nom anglais affiché


DEFAULT_LANGUAGE = LanguageOption("en", "English")


@dataclass
class GameSettings:
    year_range: Tuple[int, int] = DEFAULT_YEAR_RANGE
    languages: List[LanguageOption] = field(default_factory=lambda: [DEFAULT_LANGUAGE])
    difficulty: Difficulty = Difficulty.MEDIUM


@dataclass(frozen=True)
class Round:
    title: str
    clues: Tuple[str, ...]
    poster_url: Optional[str] = None
    fallback: bool = False  # quiz pré-généré (réglages possiblement ignorés)

    def matches(self, guess: str) -> bool:
        return guess.strip().lower() == self.title.strip().lower()


@dataclass(frozen=True)
class Idle:
    error: Optional[str] = None
    fallback: bool = False


@dataclass(frozen=True)
class Loading:
    request: GameRequest


@dataclass(frozen=True)
class Playing:
    round: Round
    clue_index: int = 0
    guess: str = ""
    suggestions: Tuple[str, ...] = ()

    @property
    def clue(self) -> str:
        return self.round.clues[self.clue_index]

    @property
    def is_last_clue(self) -> bool:
        return self.clue_index >= len(self.round.clues) - 1


@dataclass(frozen=True)
class Correct:
    round: Round
    clue_index: int


@dataclass(frozen=True)
class Failed:
    round: Round
    clue_index: int


Phase = Union[Idle, Loading, Playing, Correct, Failed]


@dataclass(frozen=True)
class SuggestionTicket:
    seq: int
    query: str


class GameController:
    """Pilote une partie; `api` fournit languages() / search() / new_game()."""

    def __init__(
        self,
        api: Optional[QuizFlixApi] = None,
        *,
        settings: Optional[GameSettings] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.api = api or QuizFlixApi()
        self.settings = settings or GameSettings()
        self.rng = rng or random.Random()
        self.clock = clock
        self.phase: Phase = Idle()
        self.language_options: List[LanguageOption] = []
        self._guess_changed_at: float = 0.0
        self._seq = 0
        self._pending: Optional[SuggestionTicket] = None
        self._last_query: Optional[str] = None

    # ---------------- vues ----------------
    @property
    def poster_url(self) -> Optional[str]:
        """Affiche révélée uniquement en fin de manche."""
        if isinstance(self.phase, (Correct, Failed)):
            return self.phase.round.poster_url
        return None

    @property
    def is_fallback(self) -> bool:
        phase = self.phase
        if isinstance(phase, Idle):
            return phase.fallback
        if isinstance(phase, (Playing, Correct, Failed)):
            return phase.round.fallback
        return False

    # ---------------- réglages ----------------
    def load_languages(self) -> List[LanguageOption]:
        """Charge les langues TMDb (celles sans nom anglais sont écartées)."""
        try:
            raw = self.api.languages()
        except QuizFlixApiError:
            logger.warning("Could not fetch languages")
            return self.language_options
        if not isinstance(raw, list):
            logger.warning("Unexpected languages payload")
            return self.language_options
        self.language_options = [
            LanguageOption(lang["iso_639_1"], lang["english_name"])
            for lang in raw
            if isinstance(lang, dict) and lang.get("iso_639_1") and lang.get("english_name")
        ]
        return self.language_options

    def update_settings(
        self,
        *,
        year_range: Optional[Tuple[int, int]] = None,
        languages: Optional[Sequence[LanguageOption]] = None,
        difficulty: Optional[Union[Difficulty, str]] = None,
    ) -> GameSettings:
        """Modifie les réglages; effet à la prochaine partie seulement."""
        if year_range is not None:
            start, end = year_range
            if not (YEAR_MIN <= start <= end <= YEAR_MAX):
                raise ValueError(f"year range must be within {YEAR_MIN}-{YEAR_MAX} and ordered")
            self.settings.year_range = (start, end)
        if languages is not None:
            self.settings.languages = list(languages)
        if difficulty is not None:
            self.settings.difficulty = Difficulty(difficulty)
        return self.settings

    # ---------------- cycle de partie ----------------
    def begin_new_game(self) -> Optional[GameRequest]:
        """Passe en LOADING et retourne la requête à envoyer (None si réglages invalides)."""
        if not self.settings.languages:
            self.phase = Idle(error=NO_LANGUAGE_MESSAGE)
            return None
        start, end = self.settings.year_range
        request = GameRequest(
            start_year=start,
            end_year=end,
            language=self.rng.choice(self.settings.languages).code,
            difficulty=self.settings.difficulty,
        )
        self._reset_suggestions()
        self.phase = Loading(request)
        return request

    def receive_game(self, data: Dict[str, Any]) -> Phase:
        if not isinstance(self.phase, Loading):
            return self.phase
        try:
            payload = GamePayload.model_validate(data)
        except ValidationError:
            logger.error("Invalid game payload from server")
            return self.receive_error(INVALID_GAME_MESSAGE)
        game_round = Round(
            title=payload.title,
            clues=tuple(payload.clues),
            poster_url=payload.poster_url,
            fallback=data.get("source") == "fallback",
        )
        self._guess_changed_at = self.clock()
        self.phase = Playing(game_round)
        return self.phase

    def receive_error(self, message: str) -> Phase:
        if isinstance(self.phase, Loading):
            self.phase = Idle(error=message, fallback=True)
        return self.phase

    def start_game(self) -> Phase:
        """Lancement complet: requête → PLAYING, ou retour IDLE avec erreur."""
        if isinstance(self.phase, (Loading, Playing)):
            return self.phase
        request = self.begin_new_game()
        if request is None:
            return self.phase
        try:
            data = self.api.new_game(request)
        except QuizFlixApiError as exc:
            logger.warning("Failed to fetch new game", extra={"status_code": exc.status_code})
            return self.receive_error(exc.message)
        return self.receive_game(data)

    def play_again(self) -> Phase:
        if isinstance(self.phase, (Correct, Failed)):
            return self.start_game()
        return self.phase

    # ---------------- propositions ----------------
    def submit_guess(self, guess: Optional[str] = None) -> Phase:
        """Vérifie une proposition (ignorée hors PLAYING)."""
        phase = self.phase
        if not isinstance(phase, Playing):
            return phase
        guess = phase.guess if guess is None else guess
        self._reset_suggestions()

        if phase.round.matches(guess):
            self.phase = Correct(phase.round, phase.clue_index)
        elif phase.is_last_clue:
            self.phase = Failed(phase.round, phase.clue_index)
        else:
            self.phase = Playing(phase.round, phase.clue_index + 1)
            self._guess_changed_at = self.clock()
        return self.phase

    def choose_suggestion(self, suggestion: str) -> Phase:
        self.set_guess(suggestion)
        return self.submit_guess(suggestion)

    def give_up(self) -> Phase:
        phase = self.phase
        if isinstance(phase, Playing):
            self._reset_suggestions()
            self.phase = Failed(phase.round, phase.clue_index)
        return self.phase

    # ---------------- suggestions ----------------
    def set_guess(self, text: str) -> None:
        if isinstance(self.phase, Playing):
            self.phase = replace(self.phase, guess=text)
            self._guess_changed_at = self.clock()

    def request_suggestions(self) -> Optional[SuggestionTicket]:
        """Ticket de recherche si la saisie est stable (300 ms) et > 1 caractère."""
        phase = self.phase
        if not isinstance(phase, Playing):
            return None
        if self.clock() - self._guess_changed_at < SUGGESTION_DEBOUNCE_S:
            return None
        query = phase.guess
        if len(query) <= 1:
            if phase.suggestions:
                self.phase = replace(phase, suggestions=())
            self._pending = None
            self._last_query = None
            return None
        if query == self._last_query:
            return None
        self._seq += 1
        self._pending = SuggestionTicket(self._seq, query)
        self._last_query = query
        return self._pending

    def receive_suggestions(self, ticket: SuggestionTicket, titles: Sequence[str]) -> bool:
        """Applique une réponse; False si elle est périmée (ticket remplacé ou saisie modifiée)."""
        phase = self.phase
        if ticket != self._pending or not isinstance(phase, Playing) or phase.guess != ticket.query:
            return False
        self.phase = replace(phase, suggestions=tuple(titles[:MAX_SUGGESTIONS]))
        self._pending = None
        return True

    def poll_suggestions(self) -> Tuple[str, ...]:
        """Version synchrone: demande + réception en un appel (à appeler périodiquement)."""
        ticket = self.request_suggestions()
        if ticket is not None:
            try:
                titles = self.api.search(ticket.query)
            except QuizFlixApiError:
                titles = []
            self.receive_suggestions(ticket, titles)
        phase = self.phase
        return phase.suggestions if isinstance(phase, Playing) else ()

    def _reset_suggestions(self) -> None:
        self._pending = None
        self._last_query = None
