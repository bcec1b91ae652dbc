"""
Module routes/health.py
Rôle:
- Endpoints de santé (service OK + joignabilité TMDb).

Intégrations:
- settings: nom d'app.
- GameOrchestrator: taille du catalogue de repli, sonde TMDb.
"""
from fastapi import APIRouter, Depends
import time

from app.config.settings import settings
from app.deps.orchestrator import get_orchestrator
from app.services.game_orchestrator import GameOrchestrator

router = APIRouter(prefix="/health", tags=["health"])

@router.get("")
def health(orchestrator: GameOrchestrator = Depends(get_orchestrator)):
    """Renvoie un OK minimal avec le nom de service et le nombre de quiz de repli."""
    return {"ok": True, "service": settings.APP_NAME, "catalog_quizzes": len(orchestrator.catalog)}

@router.get("/upstream")
def health_upstream(orchestrator: GameOrchestrator = Depends(get_orchestrator)):
    """
    Vérifie la disponibilité de TMDb (même sonde que /api/new-game).
    - Retourne la latence en secondes; `ok` reflète la joignabilité.
    """
    t0 = time.perf_counter()
    reachable = orchestrator.tmdb.is_reachable()
    dt = time.perf_counter() - t0
    return {"ok": reachable, "tmdb_reachable": reachable, "latency_s": round(dt, 3)}
