"""
Service: session_engine.py
Rôle:
- Orchestration d'une session Tartarus : tours joueur, relais vers le module de
  simulation, accusation, compte à rebours et redémarrage.
- Propriétaire de l'état (`SessionState`), du timer (`CountdownTimer`) et d'une
  passerelle WS injectée (`WSManager` ou doublure de test).

Machine d'états:
- ACTIVE --timeout--> DEFEAT, ACTIVE --bonne accusation--> VICTORY,
  ACTIVE --mauvaise accusation--> DEFEAT, {VICTORY, DEFEAT} --restart--> ACTIVE.
- Le collaborateur ne peut que narrer, jamais terminer la partie.

Concurrence:
- Boucle asyncio unique. Chaque handler mute l'état AVANT son premier `await` ;
  le verrou `is_game_over` est donc le seul garde nécessaire (première résolution gagnante).

API interne exposée aux routes:
- start(), restart(), reset(), shutdown()
- register_collaborator(ws), handle_disconnect(ws)
- submit_action(message, player_action), receive_narration(message, choices)
- accuse(target_name), send_initial_state(ws), status()
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from app.models.event import (
    EVENT_CHAT_LINE,
    EVENT_GAME_OVER,
    EVENT_GAME_RESPONSE,
    EVENT_GENERATE_RESPONSE,
    EVENT_SECRET_ROLE,
    EVENT_SESSION_RESET,
    EVENT_TIME_UPDATE,
    CollaboratorPrompt,
    ContextSnapshot,
    GameOver,
    GameResponse,
    TimeUpdate,
)
from .accusation import execution_line, resolve_accusation
from .countdown import CountdownTimer
from .game_state import (
    DEFAULT_CONVERSATION_WINDOW,
    DEFAULT_DURATION_SECONDS,
    OUTCOME_DEFEAT,
    SPEAKER_AI,
    SPEAKER_PLAYER,
    SessionState,
)
from .ws_manager import WSManager

logger = logging.getLogger(__name__)

OFFLINE_MESSAGE = "[SYSTEM] AI 시뮬레이션 모듈이 연결되지 않았습니다."
OFFLINE_CHOICES = ["다시 시도", "대기", "시스템 확인"]
DEFAULT_CHOICES = ["계속", "대기", "확인"]

TIMEOUT_CHAT_LINE = "[SYSTEM] 시간 종료. 배신자를 찾지 못했습니다."
TIMEOUT_MESSAGE = "TARTARUS SYSTEM: [TIME OVER]. 제한 시간 내 배신자를 찾지 못했습니다. 미션 실패."


def _clock(seconds: int) -> str:
    return f"{seconds // 60}:{seconds % 60:02d}"


@dataclass
class SessionEngine:
    gateway: WSManager
    duration: int = DEFAULT_DURATION_SECONDS
    tick_seconds: float = 1.0
    window: int = DEFAULT_CONVERSATION_WINDOW
    rng: random.Random = field(default_factory=random.Random)
    state: SessionState = field(init=False)
    timer: CountdownTimer = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.timer = CountdownTimer(self.tick_seconds)
        self.state = SessionState.fresh(self.duration, self.rng)

    # === cycle de vie ===
    def reset(self) -> SessionState:
        """
        Remplace l'état entier par un état neuf et réarme le compte à rebours.
        L'ancien timer est annulé avant d'en armer un nouveau (jamais deux timers).
        Doit être appelé depuis la boucle asyncio.
        """
        self.timer.cancel()
        self.state = SessionState.fresh(self.duration, self.rng)
        self.timer.start(self._on_tick)
        logger.info("[GAME START] secret role assigned (hidden)")
        logger.debug("[GAME START] secret role=%s", self.state.secret_role)
        return self.state

    async def start(self) -> Dict[str, Any]:
        """Démarrage processus : état neuf + information du collaborateur s'il est déjà là."""
        self.reset()
        await self._send_secret_role()
        return {"ok": True, "timeRemaining": self.state.time_remaining}

    async def restart(self) -> Dict[str, Any]:
        """Redémarrage demandé par un client : reset, annonce globale, rôle au collaborateur."""
        self.reset()
        await self.gateway.broadcast_type(EVENT_SESSION_RESET)
        await self._send_secret_role()
        logger.info("[GAME RESTART] new session started")
        return {"ok": True, "timeRemaining": self.state.time_remaining}

    async def shutdown(self) -> None:
        self.timer.cancel()

    # === collaborateur ===
    async def register_collaborator(self, ws) -> None:
        self.gateway.register_collaborator(ws)
        logger.info("[SYSTEM] simulation module connected")
        await self._send_secret_role()

    async def handle_disconnect(self, ws) -> bool:
        """Nettoie la socket ; True si c'était le collaborateur (comparaison d'identité)."""
        was_collaborator = await self.gateway.disconnect(ws)
        if was_collaborator:
            logger.info("[SYSTEM] simulation module disconnected")
        else:
            logger.info("[WS] spectator disconnected")
        return was_collaborator

    async def _send_secret_role(self) -> bool:
        return await self.gateway.send_type_to_collaborator(EVENT_SECRET_ROLE, self.state.secret_role)

    # === tours ===
    async def submit_action(
        self,
        message: Optional[str] = None,
        player_action: Optional[str] = None,
    ) -> Dict[str, Any]:
        state = self.state
        if state.is_game_over:
            logger.debug("[ACTION] ignored, game already over")
            return {"ok": False, "ignored": "game_over"}

        if message:
            logger.info("[PLAYER] %s", message)
            state.append(SPEAKER_PLAYER, message)

        state.turn += 1
        turn = state.turn
        logger.info("[TURN %d] processing player action [TIME: %s]", turn, _clock(state.time_remaining))

        prompt: Optional[CollaboratorPrompt] = None
        if self.gateway.has_collaborator:
            prompt = CollaboratorPrompt(
                turn=turn,
                player_action=player_action or message,
                conversation=state.conversation_window(self.window),
                game_state=ContextSnapshot(**state.context_snapshot()),
            )

        if message:
            await self.gateway.broadcast_type(EVENT_CHAT_LINE, f"> {message}")

        if prompt is not None:
            await self.gateway.send_type_to_collaborator(
                EVENT_GENERATE_RESPONSE, prompt.model_dump(by_alias=True)
            )
            return {"ok": True, "turn": turn, "forwarded": True}

        offline = GameResponse(message=OFFLINE_MESSAGE, choices=list(OFFLINE_CHOICES))
        await self.gateway.broadcast_type(EVENT_GAME_RESPONSE, offline.model_dump(by_alias=True))
        return {"ok": True, "turn": turn, "forwarded": False}

    async def receive_narration(self, message: str, choices: Optional[List[str]] = None) -> Dict[str, Any]:
        """Réponse asynchrone du collaborateur : journalisée puis rediffusée à tous."""
        state = self.state
        if state.is_game_over:
            return {"ok": False, "ignored": "game_over"}

        logger.info("[AI] %s", message)
        state.append(SPEAKER_AI, message)

        response = GameResponse(message=message, choices=choices or list(DEFAULT_CHOICES))
        await self.gateway.broadcast_type(EVENT_CHAT_LINE, message)
        await self.gateway.broadcast_type(EVENT_GAME_RESPONSE, response.model_dump(by_alias=True))
        return {"ok": True}

    # === accusation ===
    async def accuse(self, target_name: Optional[str]) -> Dict[str, Any]:
        state = self.state
        if state.is_game_over:
            logger.info("[ACCUSE] game already over")
            return {"ok": False, "ignored": "game_over"}
        if not target_name:
            logger.error("[ACCUSE] targetName missing")
            return {"ok": False, "error": "missing targetName"}

        logger.info("[ACCUSE] player accuses %s", target_name)
        self.timer.cancel()

        verdict = resolve_accusation(target_name, state.secret_role)
        state.latch(verdict.outcome, verdict.message)
        if verdict.correct:
            logger.info("[VICTORY] traitor found: %s (%s)", target_name, state.secret_role)
        else:
            logger.info("[DEFEAT] wrong accusation: %s (traitor: %s)", target_name, state.secret_role)

        await self.gateway.broadcast_type(EVENT_CHAT_LINE, execution_line(target_name))
        await self.gateway.broadcast_type(EVENT_GAME_OVER, self._game_over_payload(state))
        return {"ok": True, "result": verdict.outcome}

    # === synchronisation tardive ===
    async def send_initial_state(self, ws) -> None:
        """Réponse directe : temps restant, puis l'événement terminal si la partie est finie."""
        state = self.state
        await self.gateway.send_type(
            ws, EVENT_TIME_UPDATE, TimeUpdate(time_remaining=state.time_remaining).model_dump(by_alias=True)
        )
        if state.is_game_over:
            await self.gateway.send_type(ws, EVENT_GAME_OVER, self._game_over_payload(state))

    def status(self) -> Dict[str, Any]:
        snapshot = self.state.public_snapshot()
        snapshot["collaboratorConnected"] = self.gateway.has_collaborator
        snapshot["timerActive"] = self.timer.active
        return snapshot

    # === compte à rebours ===
    async def _on_tick(self) -> bool:
        state = self.state
        if state.is_game_over:
            return False

        remaining = state.tick()
        timed_out = remaining <= 0 and state.latch(OUTCOME_DEFEAT, TIMEOUT_MESSAGE)

        await self.gateway.broadcast_type(
            EVENT_TIME_UPDATE, TimeUpdate(time_remaining=remaining).model_dump(by_alias=True)
        )
        if not timed_out:
            return True

        logger.info("[GAME OVER] time over - defeat")
        await self.gateway.broadcast_type(EVENT_CHAT_LINE, TIMEOUT_CHAT_LINE)
        await self.gateway.broadcast_type(EVENT_GAME_OVER, self._game_over_payload(state))
        return False

    @staticmethod
    def _game_over_payload(state: SessionState) -> Dict[str, Any]:
        event = GameOver(
            result=state.outcome,
            message=state.outcome_message or "",
            real_traitor=state.secret_role,
        )
        return event.model_dump(by_alias=True)
