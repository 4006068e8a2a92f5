import asyncio
import json

import pytest

from app.services.ws_manager import WSManager


class FakeSocket:
    """Doublure minimale d'une WebSocket Starlette (accept/send_text/close)."""

    def __init__(self, broken: bool = False, delay: float = 0.0):
        self.sent: list[dict] = []
        self.closed = False
        self.broken = broken
        self.delay = delay

    async def accept(self):
        return None

    async def send_text(self, data: str):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.broken or self.closed:
            raise RuntimeError("socket closed")
        self.sent.append(json.loads(data))

    async def close(self):
        self.closed = True

    def types(self, skip=("time-update",)) -> list[str]:
        return [m["type"] for m in self.sent if m["type"] not in skip]

    def of_type(self, event_type: str) -> list:
        return [m["payload"] for m in self.sent if m["type"] == event_type]


@pytest.fixture
def make_socket():
    return FakeSocket


@pytest.fixture
def gateway():
    return WSManager()
