"""
Configuration de l'application (Settings)
=========================================

Rôle
----
- Centraliser les paramètres du serveur Tartarus (bind réseau, durée de partie,
  fenêtre de conversation, lancement du module de simulation…).
- Les valeurs par défaut conviennent pour un environnement de dev local.
- Les variables peuvent être surchargées via un fichier `.env` ou l'environnement.

Intégrations
------------
- `pydantic-settings` charge automatiquement les variables d'env et `.env`.
- Les services/routers importent `from app.config.settings import settings`.

Bonnes pratiques
----------------
- `RUN_SIMULATION` n'est actif que pour la chaîne exacte "true" (casse et
  espaces ignorés) ; "1" ou "yes" laissent le module désactivé.
- `STATIC_DIR` calcule un chemin relatif au repo : `<repo>/public`.

Exemples de `.env`
------------------
PORT=8080
RUN_SIMULATION="true"
SIMULATION_COMMAND="node simulation.js"
GAME_DURATION_SECONDS=300
LOG_LEVEL="DEBUG"
"""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Any, List
import os


class Settings(BaseSettings):
    # Nom du service (apparaît dans /health)
    APP_NAME: str = "Tartarus Protocol"
    # Bind réseau (toutes interfaces)
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Module de simulation (collaborateur narratif lancé en sous-processus)
    RUN_SIMULATION: bool = False
    SIMULATION_COMMAND: str = "node simulation.js"

    # Règles de partie
    GAME_DURATION_SECONDS: int = 600
    TICK_SECONDS: float = 1.0
    CONVERSATION_WINDOW: int = 20

    # Front statique (servi seulement si le dossier existe)
    STATIC_DIR: str = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "public")
    ALLOWED_ORIGINS: List[str] = ["*"]

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("RUN_SIMULATION", mode="before")
    @classmethod
    def _strict_true(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        return str(value or "").strip().lower() == "true"


# Instance unique importable partout : `settings`
settings = Settings()
