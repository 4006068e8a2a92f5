"""
Service: countdown.py
Rôle:
- Tâche asyncio répétitive (période `interval`) pilotant le compte à rebours d'une session.
- Un seul tick actif à la fois : `start()` annule toujours la tâche précédente.

Contrat du callback:
- `on_tick()` est une coroutine qui renvoie True pour continuer, False pour s'arrêter
  (fin de partie, timeout résolu).
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

TickCallback = Callable[[], Awaitable[bool]]


class CountdownTimer:
    def __init__(self, interval: float = 1.0) -> None:
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def active(self) -> bool:
        return bool(self._task and not self._task.done())

    def start(self, on_tick: TickCallback) -> None:
        """Arme un nouveau compte à rebours (l'ancien est annulé d'abord)."""
        self.cancel()
        self._task = asyncio.create_task(self._run(on_tick))

    def cancel(self) -> None:
        """Annule la tâche en cours si nécessaire (idempotent)."""
        task = self._task
        self._task = None
        if task and not task.done():
            task.cancel()
            logger.debug("[TIMER] countdown cancelled")

    async def wait(self) -> None:
        """Attend la fin naturelle de la tâche courante (utile en test)."""
        task = self._task
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    async def _run(self, on_tick: TickCallback) -> None:
        # échéances calées sur l'horloge de la boucle : la durée d'un tick
        # (broadcast compris) ne décale pas les suivants
        loop = asyncio.get_running_loop()
        next_at = loop.time()
        try:
            while True:
                next_at += self.interval
                await asyncio.sleep(max(0.0, next_at - loop.time()))
                if not await on_tick():
                    break
        except Exception:
            logger.exception("[TIMER] tick failed, countdown stopped")
