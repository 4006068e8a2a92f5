"""
Models / event.py
Rôle:
- Définir les payloads échangés sur le canal temps réel (/ws).
- Entrants: action joueur, accusation, réponse narrative du collaborateur.
- Sortants: réponse de jeu, mise à jour du temps, fin de partie, prompt simulation.

Notes:
- Les noms côté fil sont en camelCase (`playerAction`, `targetName`, `realTraitor`),
  exposés en snake_case côté Python via des alias.
- Toujours sérialiser avec `model_dump(by_alias=True)` avant diffusion.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Literal, Optional

# Catégories d'événements du protocole temps réel
EVENT_ANNOUNCE_COLLABORATOR = "announce-collaborator"
EVENT_NARRATION_REPLY = "narration-reply"
EVENT_SECRET_ROLE = "secret-role-info"
EVENT_GENERATE_RESPONSE = "generate-response"
EVENT_ACTION = "action"
EVENT_ACCUSE = "accuse"
EVENT_INITIAL_STATE = "request-initial-state"
EVENT_RESTART = "restart-session"
EVENT_CHAT_LINE = "chat-line"
EVENT_GAME_RESPONSE = "game-response"
EVENT_TIME_UPDATE = "time-update"
EVENT_GAME_OVER = "game-over"
EVENT_SESSION_RESET = "session-reset"

# Noms historiques émis par l'ancien module simulation.js
EVENT_ALIASES = {
    "simulation-ready": EVENT_ANNOUNCE_COLLABORATOR,
    "ai response": EVENT_NARRATION_REPLY,
    "restart_game": EVENT_RESTART,
}

GameResult = Literal["victory", "defeat"]


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ActionPayload(WireModel):
    """Action joueur : message libre et/ou choix explicite."""
    message: Optional[str] = None
    player_action: Optional[str] = Field(default=None, alias="playerAction")


class AccusePayload(WireModel):
    # optionnel ici: l'absence est traitée par le moteur (log + abandon)
    target_name: Optional[str] = Field(default=None, alias="targetName")


class NarrationReply(WireModel):
    """Réponse du collaborateur narratif (texte + choix proposés)."""
    message: str
    choices: Optional[List[str]] = None


class GameResponse(WireModel):
    message: str
    choices: List[str]


class TimeUpdate(WireModel):
    time_remaining: int = Field(alias="timeRemaining")


class GameOver(WireModel):
    """Événement terminal ; `realTraitor` n'est divulgué qu'une fois la partie finie."""
    result: GameResult
    message: str
    real_traitor: str = Field(alias="realTraitor")


class ContextSnapshot(WireModel):
    location: str
    is_alive: bool = Field(alias="isAlive")
    time_remaining: int = Field(alias="timeRemaining")


class CollaboratorPrompt(WireModel):
    """Prompt transmis au module de simulation (fire-and-forget, sans corrélation)."""
    turn: int
    player_action: Optional[str] = Field(default=None, alias="playerAction")
    conversation: List[Dict[str, Any]] = Field(default_factory=list)
    game_state: ContextSnapshot = Field(alias="gameState")
