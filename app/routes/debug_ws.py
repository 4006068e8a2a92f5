# app/routes/debug_ws.py
"""
Module routes/debug_ws.py
Rôle:
- Utilitaires de debug du canal temps réel :
  - Statut des pairs (connectés / collaborateur présent).
  - Fermeture forcée de toutes les sockets.
"""
from fastapi import APIRouter
from typing import Dict, Any

from app.services.session_store import get_session_engine

router = APIRouter(prefix="/debug/ws", tags=["debug-ws"])


@router.get("/peers")
def ws_peers() -> Dict[str, Any]:
    """Carte des connexions WS."""
    return get_session_engine().gateway.stats()


@router.post("/close_all")
async def close_all():
    """Ferme toutes les sockets (spectateurs + collaborateur)."""
    stats = await get_session_engine().gateway.close_all()
    return {"ok": True, "stats": stats}
