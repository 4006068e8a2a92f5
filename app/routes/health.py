"""
Module routes/health.py
Rôle:
- Endpoint de santé (service OK + présence du module de simulation).
"""
from fastapi import APIRouter

from app.config.settings import settings
from app.services.session_store import get_session_engine, list_session_ids

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health():
    """Renvoie un OK minimal avec le nom de service configuré."""
    engine = get_session_engine()
    return {
        "ok": True,
        "service": settings.APP_NAME,
        "simulation_connected": engine.gateway.has_collaborator,
        "sessions": list_session_ids(),
    }
