"""
Utilitaires IO JSON (rapides) basés sur orjson.
- read_json(Path)  → Any | None (None si fichier manquant)
- parse_json(text) → Any (lève JSONDecodeError si invalide)

Attention:
- orjson renvoie/attend des bytes; on lit en mode binaire.
"""
import orjson as json
from pathlib import Path
from typing import Any

JSONDecodeError = json.JSONDecodeError


def read_json(path: Path) -> Any:
    """Lit un fichier JSON (ou None s'il n'existe pas)."""
    if not path.exists():
        return None
    with path.open("rb") as f:
        return json.loads(f.read())


def parse_json(text: str | bytes) -> Any:
    """Décode une chaîne JSON (texte brut renvoyé par une API)."""
    return json.loads(text)
