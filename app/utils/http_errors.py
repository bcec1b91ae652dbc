"""
Utils: http_errors.py
Rôle:
- Erreur applicative rendue au front sous la forme `{"error": message}`.
- Handlers branchés dans `app.main` (QuizFlixError + filet de sécurité 500).
"""
import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class QuizFlixError(Exception):
    """Erreur destinée au client: code HTTP + message affiché tel quel par l'UI."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


async def quizflix_error_handler(request: Request, exc: QuizFlixError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", extra={"http_path": request.url.path})
    return JSONResponse(status_code=500, content={"error": "Internal server error."})
