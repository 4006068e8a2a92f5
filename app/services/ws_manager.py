# app/services/ws_manager.py
"""
Service: ws_manager.py
- Registre des sockets connectées + poignée unique du collaborateur narratif.
- Trois modes d'adressage : broadcast (tous, collaborateur inclus), réponse directe
  (une seule socket), envoi réservé au collaborateur.
- Snapshots immuables pour éviter "set changed size during iteration".
- Une socket morte (échec d'envoi) est retirée sans interrompre le broadcast.
- Admin: stats(), close_all().
"""
from __future__ import annotations
from typing import Any, Optional, Set
from dataclasses import dataclass, field
import logging

import orjson
from starlette.websockets import WebSocket

logger = logging.getLogger(__name__)


@dataclass
class WSManager:
    clients: Set[WebSocket] = field(default_factory=set)
    # poignée du module de simulation (dernier annoncé gagnant)
    collaborator: Optional[WebSocket] = None

    async def connect(self, ws: WebSocket) -> None:
        """Accepte la connexion WS et l'ajoute au registre."""
        await ws.accept()
        self.clients.add(ws)
        logger.info("[WS] client connected (total=%d)", len(self.clients))

    def _unlink(self, ws: WebSocket) -> bool:
        """Retire 'ws' du registre ; renvoie True si c'était le collaborateur."""
        self.clients.discard(ws)
        return self.release_collaborator(ws)

    async def disconnect(self, ws: WebSocket) -> bool:
        """Ferme proprement la connexion et nettoie les registres."""
        was_collaborator = self._unlink(ws)
        try:
            await ws.close()
        except Exception:
            # socket déjà fermée côté client
            logger.debug("[WS] close on already closed socket")
        return was_collaborator

    # ---------- collaborateur ----------
    def register_collaborator(self, ws: WebSocket) -> None:
        if self.collaborator is not None and self.collaborator is not ws:
            logger.info("[WS] collaborator handle replaced")
        self.collaborator = ws

    def is_collaborator(self, ws: WebSocket) -> bool:
        return self.collaborator is not None and self.collaborator is ws

    @property
    def has_collaborator(self) -> bool:
        return self.collaborator is not None

    def release_collaborator(self, ws: WebSocket) -> bool:
        """Efface la poignée seulement si `ws` est bien le collaborateur courant."""
        if self.is_collaborator(ws):
            self.collaborator = None
            return True
        return False

    # ---------- envois ----------
    async def _send_json_one(self, ws: WebSocket, payload: Any) -> bool:
        """Envoie à un WS; renvoie True si succès, sinon False (et retire le WS mort)."""
        try:
            await ws.send_text(orjson.dumps(payload).decode("utf-8"))
            return True
        except Exception:
            logger.warning("[WS] send failed, dropping socket", exc_info=True)
            self._unlink(ws)
            return False

    async def send_json(self, ws: WebSocket, payload: Any) -> bool:
        return await self._send_json_one(ws, payload)

    def _snapshot(self) -> list[WebSocket]:
        return list(self.clients)

    async def broadcast(self, payload: Any) -> int:
        conns = self._snapshot()
        success = 0
        for ws in conns:
            if await self._send_json_one(ws, payload):
                success += 1
        return success

    # ---------- helpers typés ----------
    async def send_type(self, ws: WebSocket, event_type: str, payload: Any = None) -> bool:
        return await self.send_json(ws, {"type": event_type, "payload": payload})

    async def broadcast_type(self, event_type: str, payload: Any = None) -> int:
        return await self.broadcast({"type": event_type, "payload": payload})

    async def send_type_to_collaborator(self, event_type: str, payload: Any = None) -> bool:
        """Envoi réservé au collaborateur ; False si aucun n'est connecté."""
        ws = self.collaborator
        if ws is None:
            return False
        return await self.send_type(ws, event_type, payload)

    # ---------- admin ----------
    def stats(self) -> dict:
        return {
            "connected_total": len(self.clients),
            "collaborator_connected": self.has_collaborator,
        }

    async def close_all(self) -> dict:
        """Ferme TOUTES les sockets (collaborateur inclus)."""
        for ws in self._snapshot():
            await self.disconnect(ws)
        return self.stats()


WS = WSManager()
