"""
Service: quiz_catalog.py
Rôle:
- Charger en mémoire les quiz pré-générés (catalogue statique, lecture seule).
- Fournir une énigme quand TMDb/Gemini sont indisponibles (mode dégradé).

Fichier source:
- app/data/quizzes.json → [{"difficulty": "easy", "quizzes": [{title, clues[5], posterUrl?}]}]

Remarques:
- Fichier absent ou JSON invalide → catalogue vide (journalisé, jamais fatal).
- Les entrées mal formées (titre vide, pas 5 indices) sont ignorées au chargement.
- Ordre de repli: difficulté demandée → "medium" → premier groupe non vide.
"""
import logging
import random
from pathlib import Path
from typing import Any, List, Optional, Tuple

from pydantic import ValidationError

from app.models.game import Difficulty, GamePayload
from .io_utils import JSONDecodeError, read_json

logger = logging.getLogger(__name__)

DEFAULT_BUCKET = Difficulty.MEDIUM.value


class QuizCatalog:
    """Catalogue immuable de quiz groupés par difficulté.

    Exemple d'entrée:
    {
      "difficulty": "hard",
      "quizzes": [
        {"title": "Brazil", "clues": ["...", "...", "...", "...", "..."]}
      ]
    }
    """

    def __init__(self, buckets: Optional[List[Tuple[str, List[GamePayload]]]] = None):
        self._buckets: Tuple[Tuple[str, Tuple[GamePayload, ...]], ...] = tuple(
            (difficulty, tuple(quizzes)) for difficulty, quizzes in (buckets or [])
        )

    @classmethod
    def from_raw(cls, raw: Any) -> "QuizCatalog":
        """Construit le catalogue depuis la structure JSON brute (liste de groupes)."""
        if not isinstance(raw, list):
            if raw is not None:
                logger.error("Quiz catalog root must be a list", extra={"raw_type": type(raw).__name__})
            return cls()

        buckets: List[Tuple[str, List[GamePayload]]] = []
        for group in raw:
            if not isinstance(group, dict) or not isinstance(group.get("difficulty"), str):
                logger.warning("Skipping quiz group without difficulty")
                continue
            entries = group.get("quizzes") or []
            if not isinstance(entries, list):
                logger.warning(
                    "Skipping quiz group with non-list quizzes",
                    extra={"difficulty": group["difficulty"]},
                )
                continue
            quizzes: List[GamePayload] = []
            for entry in entries:
                try:
                    quizzes.append(GamePayload.model_validate(entry))
                except ValidationError:
                    logger.warning(
                        "Skipping malformed quiz entry",
                        extra={"difficulty": group["difficulty"]},
                    )
            buckets.append((group["difficulty"], quizzes))
        return cls(buckets)

    @classmethod
    def from_file(cls, path: Path) -> "QuizCatalog":
        """Charge `path`; un fichier manquant ou illisible donne un catalogue vide."""
        try:
            raw = read_json(path)
        except (OSError, JSONDecodeError):
            logger.error("Error loading pre-generated quizzes", exc_info=True, extra={"path": str(path)})
            return cls()
        if raw is None:
            logger.warning("Pre-generated quiz file not found", extra={"path": str(path)})
            return cls()
        catalog = cls.from_raw(raw)
        logger.info(
            "Pre-generated quizzes loaded",
            extra={"path": str(path), "quizzes": len(catalog)},
        )
        return catalog

    def __len__(self) -> int:
        return sum(len(quizzes) for _, quizzes in self._buckets)

    def is_empty(self) -> bool:
        return len(self) == 0

    def difficulties(self) -> List[str]:
        return [d for d, _ in self._buckets]

    def bucket(self, difficulty: str) -> Tuple[GamePayload, ...]:
        """Premier groupe portant cette difficulté (tuple vide sinon)."""
        for d, quizzes in self._buckets:
            if d == difficulty:
                return quizzes
        return ()

    def select_bucket(self, difficulty: str) -> Optional[Tuple[str, Tuple[GamePayload, ...]]]:
        """Applique la chaîne de repli et retourne (difficulté servie, quiz) ou None."""
        for candidate in (difficulty, DEFAULT_BUCKET):
            quizzes = self.bucket(candidate)
            if quizzes:
                return candidate, quizzes
        for d, quizzes in self._buckets:
            if quizzes:
                return d, quizzes
        return None

    def pick(self, difficulty: str, rng: Optional[random.Random] = None) -> Optional[Tuple[str, GamePayload]]:
        """Tire un quiz au hasard selon la chaîne de repli (None si catalogue vide)."""
        selected = self.select_bucket(difficulty)
        if selected is None:
            return None
        served, quizzes = selected
        return served, (rng or random).choice(quizzes)
