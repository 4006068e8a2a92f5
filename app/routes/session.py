"""
Module routes/session.py
Rôle:
- Lecture publique de l'état de la session (jamais le rôle secret avant la fin).
- Redémarrage HTTP, équivalent de l'événement WS `restart-session`.
"""
from fastapi import APIRouter

from app.services.session_store import get_session_engine

router = APIRouter(prefix="/session", tags=["session"])


@router.get("/status")
async def session_status():
    """Snapshot public : tour, temps restant, issue, présence du collaborateur."""
    return get_session_engine().status()


@router.post("/restart")
async def session_restart():
    """Réinitialise la session (nouveau rôle secret, nouveau timer) et prévient les clients."""
    return await get_session_engine().restart()
