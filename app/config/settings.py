"""
Configuration de l'application (Settings)
=========================================

Rôle
----
- Centraliser les paramètres de QuizFlix (host/port, clés API, endpoints, chemins).
- Les valeurs par défaut conviennent pour un environnement de dev local.
- Les variables peuvent être surchargées via un fichier `.env` ou l'environnement.

Intégrations
------------
- `pydantic-settings` charge automatiquement les variables d'env et `.env`.
- Les services/routers importent `from app.config.settings import settings`.

Bonnes pratiques
----------------
- *Ne commitez pas* les vraies valeurs de `TMDB_API_KEY` / `GEMINI_API_KEY`. Utilisez `.env`.
- `DATA_DIR` calcule un chemin relatif au repo : `<repo>/app/data`.
- `FRONTEND_ORIGIN` est la seule origine autorisée par le CORS.

Exemple de `.env`
-----------------
TMDB_API_KEY="xxxxxxxx"
GEMINI_API_KEY="yyyyyyyy"
GEMINI_MODEL="gemini-1.5-flash-latest"
FRONTEND_ORIGIN="http://localhost:5173"
PORT=3001
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
import os


class Settings(BaseSettings):
    # Nom du service (apparaît dans /health)
    APP_NAME: str = "QuizFlix Backend"
    # Bind réseau (FastAPI / Uvicorn)
    HOST: str = "0.0.0.0"
    PORT: int = 3001

    # Catalogue de films (TMDb)
    TMDB_API_KEY: str = ""
    TMDB_BASE_URL: str = "https://api.themoviedb.org/3"
    # Préfixe des affiches : posterUrl = TMDB_IMAGE_BASE + poster_path
    TMDB_IMAGE_BASE: str = "https://image.tmdb.org/t/p/w500"

    # Génération des indices (Gemini, API REST generateContent)
    GEMINI_API_KEY: str = ""
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_MODEL: str = "gemini-1.5-flash-latest"

    # Front autorisé (CORS)
    FRONTEND_ORIGIN: str = "http://localhost:5173"

    # Timeout de la sonde de joignabilité TMDb (secondes)
    PROBE_TIMEOUT_S: float = 3.0

    # Répertoire des données statiques (quiz pré-générés)
    # Par défaut: <repo>/app/data
    DATA_DIR: str = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data")
    QUIZZES_FILE: str = "quizzes.json"

    LOG_LEVEL: str = "INFO"

    # Paramétrage pydantic-settings :
    # - lit le fichier .env (UTF-8) si présent
    # - ignore les clés supplémentaires pour éviter les erreurs
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


# Instance unique importable partout : `settings`
settings = Settings()
