"""
Models / game.py
Rôle:
- Définir les structures échangées entre routes, orchestrateur et client.

Types:
- Difficulty: easy | medium | hard (règle le seuil de popularité TMDb).
- GameRequest: paramètres d'une nouvelle partie (années, langue, difficulté).
- GamePayload: titre + 5 indices (du plus vague au plus précis) + affiche optionnelle.
- GameOutcome: résultat étiqueté de l'orchestrateur
  (LiveGame | FallbackGame | GameFailure).
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

CLUE_COUNT = 5


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class GameRequest(BaseModel):
    """Paramètres d'une nouvelle partie (tous obligatoires)."""
    start_year: int
    end_year: int
    language: str = Field(min_length=2)  # code ISO 639-1
    difficulty: Difficulty

    @model_validator(mode="after")
    def _check_range(self) -> "GameRequest":
        if self.start_year > self.end_year:
            raise ValueError("startYear must not be after endYear")
        return self


class GamePayload(BaseModel):
    """Une énigme jouable: titre non vide + exactement 5 indices."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str = Field(min_length=1)
    clues: List[str] = Field(min_length=CLUE_COUNT, max_length=CLUE_COUNT)
    poster_url: Optional[str] = Field(default=None, alias="posterUrl")

    @field_validator("title")
    @classmethod
    def _strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be empty")
        return v

    @field_validator("clues")
    @classmethod
    def _check_clues(cls, v: List[str]) -> List[str]:
        cleaned = [c.strip() for c in v]
        if any(not c for c in cleaned):
            raise ValueError("clues must be non-empty strings")
        return cleaned

    def to_public(self) -> dict:
        """Vue JSON renvoyée au front (`posterUrl` omis s'il est inconnu)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class FailureKind(str, Enum):
    NOT_FOUND = "not_found"      # aucun film pour ces réglages → 404
    UNAVAILABLE = "unavailable"  # ni live ni catalogue → 503


@dataclass(frozen=True)
class LiveGame:
    payload: GamePayload
    source: str = "live"


@dataclass(frozen=True)
class FallbackGame:
    payload: GamePayload
    reason: str
    source: str = "fallback"


@dataclass(frozen=True)
class GameFailure:
    kind: FailureKind
    message: str


GameOutcome = Union[LiveGame, FallbackGame, GameFailure]
