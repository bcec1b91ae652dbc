"""
Application FastAPI — Point d'entrée
====================================

Rôle
----
- Instancie l'app FastAPI, configure le CORS pour le front,
- Charge le catalogue de quiz et assemble l'orchestrateur (`app.state.orchestrator`),
- Monte les routeurs REST et les handlers d'erreur `{"error": ...}`.

Notes
-----
- Une seule origine autorisée : `settings.FRONTEND_ORIGIN`.
- ⚠️ Le middleware CORS doit être ajouté AVANT les include_router.
- Lancement : `quizflix-server` (ou `uvicorn app.main:app --port 3001`).
"""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.config.logging_setup import set_request_id, setup_logging
from app.config.settings import settings
from app.deps.orchestrator import build_orchestrator
from app.routes.health import router as health_router
from app.routes.quiz import router as quiz_router
from app.utils.http_errors import QuizFlixError, quizflix_error_handler, unhandled_error_handler

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger("quizflix")

# --- App FastAPI principale  ---
app = FastAPI(title="QuizFlix Backend")
app.state.orchestrator = build_orchestrator(settings)

# ===========================
# CORS
# ===========================
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_ORIGIN],
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Pose un identifiant de corrélation par requête (repris dans les logs)."""
    rid = set_request_id(request.headers.get("X-Request-ID"))
    response = await call_next(request)
    response.headers["X-Request-ID"] = rid
    return response


app.add_exception_handler(QuizFlixError, quizflix_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

# ===========================
# Montage des routers
# ===========================
app.include_router(quiz_router)
app.include_router(health_router)


@app.get("/")
def root():
    """Ping basique : permet de vérifier que l'app tourne (sans appel TMDb)."""
    return {"ok": True, "service": "quizflix-backend"}


@app.on_event("startup")
def log_config():
    """Affiche la configuration utile au diagnostic (sans les secrets)."""
    logger.info(
        "QuizFlix backend running on http://%s:%s (model=%s, quizzes=%d, tmdb_key=%s)",
        settings.HOST,
        settings.PORT,
        settings.GEMINI_MODEL,
        len(app.state.orchestrator.catalog),
        "set" if settings.TMDB_API_KEY else "missing",
    )


def run() -> None:
    """Point d'entrée console `quizflix-server`."""
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
