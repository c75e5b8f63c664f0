from __future__ import annotations
import asyncio
from abc import ABC, abstractmethod
from typing import Callable, Optional

import websockets

from shared.log import get_logger

logger = get_logger(__name__)

OpenCallback = Callable[[], None]
BytesCallback = Callable[[bytes], None]
CloseCallback = Callable[[], None]


class Transport(ABC):
    """
    The one channel a session talks over: send bytes, and notify on
    open / message(bytes) / close. Connection lifecycle belongs here,
    never to the session.
    """

    def __init__(self) -> None:
        self._on_open: Optional[OpenCallback] = None
        self._on_message: Optional[BytesCallback] = None
        self._on_close: Optional[CloseCallback] = None

    def bind(self, on_open: OpenCallback, on_message: BytesCallback, on_close: CloseCallback) -> None:
        self._on_open = on_open
        self._on_message = on_message
        self._on_close = on_close

    def unbind(self) -> None:
        """Stop delivering events to whoever was bound."""
        self._on_open = None
        self._on_message = None
        self._on_close = None

    def _notify_open(self) -> None:
        if self._on_open:
            self._on_open()

    def _notify_message(self, data: bytes) -> None:
        if self._on_message:
            self._on_message(data)

    def _notify_close(self) -> None:
        if self._on_close:
            self._on_close()

    @property
    @abstractmethod
    def is_open(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def send(self, data: bytes) -> None:
        """Queue one frame. Frames leave in the order they were queued."""
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        """Close after frames already queued have been sent."""
        raise NotImplementedError


_CLOSE = None  # outbox sentinel


class WebsocketTransport(Transport):
    """
    Transport over a binary WebSocket using `websockets`.

    A single writer task drains the outbox so that frames reach the socket
    in submission order even though `send` never blocks.
    """

    def __init__(
        self,
        url: str,
        max_message_size: int = 2048,
        ping_interval: Optional[float] = 10.0,
        ping_timeout: Optional[float] = 20.0,
    ) -> None:
        super().__init__()
        self.url = url
        self.max_message_size = max_message_size
        self.ping_interval = ping_interval
        self.ping_timeout = ping_timeout
        self.websocket: Optional[websockets.ClientConnection] = None
        self._outbox: Optional["asyncio.Queue[Optional[bytes]]"] = None
        self._writer: Optional[asyncio.Task] = None
        self._close_requested = False

    @property
    def is_open(self) -> bool:
        return self.websocket is not None

    async def connect(self) -> None:
        """Open the WebSocket, start the writer and signal open."""
        logger.info("Connecting to %s", self.url, extra={"url": self.url})
        ws = await websockets.connect(
            self.url,
            max_size=self.max_message_size,
            ping_interval=self.ping_interval,
            ping_timeout=self.ping_timeout,
        )
        if self._close_requested:
            # close() was called while the handshake was in flight
            self._close_requested = False
            await ws.close(code=1000)
            logger.info("Closed %s right after connecting", self.url, extra={"url": self.url})
            return
        self.websocket = ws
        self._outbox = asyncio.Queue()
        self._writer = asyncio.create_task(self._write_loop(self.websocket, self._outbox))
        self._notify_open()

    async def recv_loop(self) -> None:
        """Deliver inbound frames until the connection closes, then signal close."""
        ws = self.websocket
        if ws is None:
            return
        try:
            async for raw in ws:
                if isinstance(raw, str):
                    raw = raw.encode("utf-8")
                self._notify_message(raw)
        except websockets.exceptions.ConnectionClosedError as e:
            logger.warning("Connection closed with error: %s", e)
        finally:
            await self._teardown()

    async def run(self) -> None:
        await self.connect()
        await self.recv_loop()

    async def _write_loop(self, ws: websockets.ClientConnection, outbox: asyncio.Queue) -> None:
        while True:
            data = await outbox.get()
            if data is _CLOSE:
                await ws.close(code=1000)
                return
            try:
                await ws.send(data)
            except websockets.exceptions.ConnectionClosed:
                logger.warning("Connection closed while sending %d bytes", len(data))
                return

    async def _teardown(self) -> None:
        writer, self._writer = self._writer, None
        if writer is not None and not writer.done():
            writer.cancel()
            try:
                await writer
            except asyncio.CancelledError:
                pass
        if self.websocket is not None:
            self.websocket = None
            self._notify_close()

    def send(self, data: bytes) -> None:
        if not self.is_open or self._outbox is None:
            raise ConnectionError("transport is not open")
        self._outbox.put_nowait(bytes(data))

    def close(self) -> None:
        if self.is_open and self._outbox is not None:
            self._outbox.put_nowait(_CLOSE)
        else:
            self._close_requested = True

    async def reconnect(self, max_retries: int = 5, base_delay: float = 1.0) -> bool:
        """Reconnect with exponential backoff"""
        self._close_requested = False
        for attempt in range(max_retries):
            try:
                delay = base_delay * (2 ** attempt)
                logger.info(f"Reconnecting in {delay}s (attempt {attempt + 1}/{max_retries})")
                await asyncio.sleep(delay)
                await self.connect()
                return True
            except (OSError, websockets.exceptions.WebSocketException) as e:
                logger.warning(f"Reconnect attempt {attempt + 1} failed: {e}")
        return False
