from __future__ import annotations

from typing import List

import pytest

from client.transport import Transport
from client.ws_client import WsClient

SECRET = "xxx123456"


class DummyTransport(Transport):
    """In-memory transport: records sent frames, lets tests fire events."""

    def __init__(self) -> None:
        super().__init__()
        self.sent: List[bytes] = []
        self.opened = False
        self.closed = False

    @property
    def is_open(self) -> bool:
        return self.opened and not self.closed

    def send(self, data: bytes) -> None:
        assert self.is_open, "send on a transport that is not open"
        self.sent.append(bytes(data))

    def close(self) -> None:
        self.closed = True
        self._notify_close()

    # test helpers
    def open(self) -> None:
        self.opened = True
        self._notify_open()

    def deliver(self, data: bytes) -> None:
        self._notify_message(data)


@pytest.fixture
def transport() -> DummyTransport:
    return DummyTransport()


@pytest.fixture
def client(transport: DummyTransport) -> WsClient:
    return WsClient({"url": "ws://localhost:8080", "secret": SECRET}, transport=transport)
