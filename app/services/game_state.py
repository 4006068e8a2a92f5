"""
Service: game_state.py
Rôle :
- Porter l'état autoritaire d'une session de jeu (tour, rôle secret, journal de
  conversation, verrou de fin de partie, temps restant).
- Fournir les vues dérivées : fenêtre de conversation pour la simulation,
  contexte joueur, snapshot public (sans secret tant que la partie dure).

Invariants :
- Un seul rôle secret par session, tiré dans `ROLES`.
- `is_game_over` ne repasse jamais à False dans une même session (verrou).
- `time_remaining` ne descend jamais sous 0.
- Un redémarrage remplace l'objet entier (`SessionState.fresh`), jamais champ par champ.
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

ROLES = ("Captain", "Engineer", "Doctor", "Pilot")

OUTCOME_VICTORY = "victory"
OUTCOME_DEFEAT = "defeat"

SPEAKER_PLAYER = "플레이어"
SPEAKER_AI = "AI"

DEFAULT_DURATION_SECONDS = 600
DEFAULT_CONVERSATION_WINDOW = 20
DEFAULT_LOCATION = "bridge"


@dataclass
class ConversationEntry:
    speaker: str
    text: str

    def to_dict(self) -> Dict[str, str]:
        return {"speaker": self.speaker, "text": self.text}


@dataclass
class SessionState:
    secret_role: str
    turn: int = 0
    time_remaining: int = DEFAULT_DURATION_SECONDS
    player_location: str = DEFAULT_LOCATION
    is_alive: bool = True
    conversation: List[ConversationEntry] = field(default_factory=list)
    is_game_over: bool = False
    outcome: Optional[str] = None
    outcome_message: Optional[str] = None

    @classmethod
    def fresh(
        cls,
        duration: int = DEFAULT_DURATION_SECONDS,
        rng: Optional[random.Random] = None,
    ) -> "SessionState":
        """Nouvel état de session : tour 0, journal vide, rôle secret tiré uniformément."""
        picker = rng or random
        return cls(secret_role=picker.choice(ROLES), time_remaining=duration)

    # -----------------------------
    # Journal de conversation
    # -----------------------------
    def append(self, speaker: str, text: str) -> ConversationEntry:
        entry = ConversationEntry(speaker=speaker, text=text)
        self.conversation.append(entry)
        return entry

    def conversation_window(self, size: int = DEFAULT_CONVERSATION_WINDOW) -> List[Dict[str, str]]:
        """Les `size` dernières entrées (le journal stocké n'est pas tronqué)."""
        if size <= 0:
            return []
        return [entry.to_dict() for entry in self.conversation[-size:]]

    # -----------------------------
    # Temps / verrou
    # -----------------------------
    def tick(self) -> int:
        self.time_remaining = max(0, self.time_remaining - 1)
        return self.time_remaining

    def latch(self, outcome: str, message: str) -> bool:
        """
        Fige l'issue de la partie.
        Renvoie False si la partie était déjà terminée (première résolution gagnante).
        """
        if self.is_game_over:
            return False
        self.is_game_over = True
        self.outcome = outcome
        self.outcome_message = message
        return True

    # -----------------------------
    # Vues
    # -----------------------------
    def context_snapshot(self) -> Dict[str, Any]:
        return {
            "location": self.player_location,
            "isAlive": self.is_alive,
            "timeRemaining": self.time_remaining,
        }

    def public_snapshot(self) -> Dict[str, Any]:
        """Vue diffusable: le rôle secret n'apparaît qu'une fois la partie terminée."""
        snapshot: Dict[str, Any] = {
            "turn": self.turn,
            "timeRemaining": self.time_remaining,
            "isGameOver": self.is_game_over,
            "outcome": self.outcome,
            "conversationLength": len(self.conversation),
        }
        if self.is_game_over:
            snapshot["realTraitor"] = self.secret_role
        return snapshot
