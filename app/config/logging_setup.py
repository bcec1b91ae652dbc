"""
Journalisation QuizFlix
=======================

Rôle
----
- Installer une seule fois un handler console sur le logger racine.
- Injecter un identifiant de corrélation par requête (`request_id`) dans chaque
  enregistrement, pour suivre une partie de la sonde TMDb jusqu'à la réponse.

Intégrations
------------
- `app.main` appelle `setup_logging()` au chargement et pose l'identifiant via
  un middleware HTTP (`set_request_id`).
"""
from __future__ import annotations

import logging
import uuid
from contextvars import ContextVar

_request_id: ContextVar[str] = ContextVar("request_id", default="-")

_CONSOLE_FMT = logging.Formatter(
    fmt="%(asctime)s | %(levelname)-8s | %(name)-32s | [%(request_id)s] %(message)s",
    datefmt="%H:%M:%S",
)

_CONFIGURED = False


def set_request_id(rid: str | None = None) -> str:
    """Pose l'identifiant de corrélation du contexte courant et le retourne."""
    rid = rid or uuid.uuid4().hex[:12]
    _request_id.set(rid)
    return rid


def get_request_id() -> str:
    return _request_id.get()


class _RequestIdFilter(logging.Filter):
    """Ajoute `request_id` à chaque record (valeur du contextvar)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()
        return True


def setup_logging(level: str = "INFO") -> None:
    """Initialise le logging console. Sans effet si déjà appelé."""
    global _CONFIGURED
    if _CONFIGURED:
        return
    _CONFIGURED = True

    handler = logging.StreamHandler()
    handler.setFormatter(_CONSOLE_FMT)
    handler.addFilter(_RequestIdFilter())

    root = logging.getLogger()
    root.setLevel(level.upper())
    root.addHandler(handler)
