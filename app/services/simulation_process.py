"""
Service: simulation_process.py
Rôle:
- Lancer (optionnellement) le module de simulation narratif en sous-processus,
  avec l'environnement courant du serveur.
- Journaliser son code de sortie et l'arrêter proprement à l'extinction.

Le module se connecte ensuite lui-même sur /ws et s'annonce comme collaborateur ;
ce service ne parle jamais au processus directement.
"""
from __future__ import annotations

import asyncio
import logging
import os
import shlex
from typing import List, Optional, Sequence, Union

logger = logging.getLogger(__name__)


class SimulationProcess:
    def __init__(self, command: Union[str, Sequence[str]]) -> None:
        self.command: List[str] = shlex.split(command) if isinstance(command, str) else list(command)
        self._proc: Optional[asyncio.subprocess.Process] = None
        self._watcher: Optional[asyncio.Task] = None
        self.returncode: Optional[int] = None

    @property
    def running(self) -> bool:
        return self._proc is not None and self._proc.returncode is None

    async def start(self) -> bool:
        """Démarre le sous-processus ; False (et log) si la commande est introuvable."""
        if self.running:
            return True
        if not self.command:
            logger.error("[SYSTEM] simulation command is empty")
            return False
        logger.info("[SYSTEM] Starting simulation: %s", " ".join(self.command))
        try:
            self._proc = await asyncio.create_subprocess_exec(*self.command, env=dict(os.environ))
        except OSError:
            logger.error("[SYSTEM] simulation error", exc_info=True)
            return False
        self._watcher = asyncio.create_task(self._watch(self._proc))
        return True

    async def _watch(self, proc: asyncio.subprocess.Process) -> None:
        self.returncode = await proc.wait()
        logger.info("[SYSTEM] simulation exit %s", self.returncode)

    async def wait(self) -> Optional[int]:
        if self._watcher is not None:
            await self._watcher
        return self.returncode

    async def stop(self, timeout: float = 5.0) -> None:
        """Termine le sous-processus (kill après `timeout` secondes)."""
        proc = self._proc
        if proc is not None and proc.returncode is None:
            proc.terminate()
            try:
                await asyncio.wait_for(proc.wait(), timeout)
            except asyncio.TimeoutError:
                proc.kill()
                await proc.wait()
        if self._watcher is not None:
            await asyncio.gather(self._watcher, return_exceptions=True)
            self._watcher = None
