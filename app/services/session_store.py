"""
Session store registry
======================

Expose des helpers pour récupérer le `SessionEngine` dédié à une session.
Les instances sont mises en cache en mémoire et initialisées à la demande
avec les paramètres de `settings` (durée, période du timer, fenêtre).

Seule la session `"default"` est branchée sur le canal `/ws`.
"""
from __future__ import annotations

from threading import RLock
from typing import Dict, Optional

from app.config.settings import settings
from .session_engine import SessionEngine
from .ws_manager import WS, WSManager

DEFAULT_SESSION_ID = "default"

_ENGINES: Dict[str, SessionEngine] = {}
_LOCK = RLock()


def get_session_engine(
    session_id: str = DEFAULT_SESSION_ID,
    gateway: Optional[WSManager] = None,
) -> SessionEngine:
    """Retourne l'orchestrateur de la session (créé si nécessaire)."""
    normalized = (session_id or DEFAULT_SESSION_ID).strip() or DEFAULT_SESSION_ID
    with _LOCK:
        engine = _ENGINES.get(normalized)
        if engine is None:
            engine = SessionEngine(
                gateway=gateway or WS,
                duration=settings.GAME_DURATION_SECONDS,
                tick_seconds=settings.TICK_SECONDS,
                window=settings.CONVERSATION_WINDOW,
            )
            _ENGINES[normalized] = engine
        return engine


def drop_session_engine(session_id: str) -> None:
    """Retire une session du cache après avoir coupé son compte à rebours."""
    with _LOCK:
        engine = _ENGINES.pop(session_id, None)
    if engine is not None:
        engine.timer.cancel()


def list_session_ids() -> list[str]:
    """Retourne la liste des sessions actuellement chargées en mémoire."""
    with _LOCK:
        return list(_ENGINES.keys())
