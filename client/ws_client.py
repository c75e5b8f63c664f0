from __future__ import annotations
from collections import deque
from enum import Enum
from typing import Any, Callable, Deque, Dict, Mapping, Optional, Union

from client.auth import Credentials
from client.transport import Transport
from shared.config import ClientConfig
from shared.log import frame_context, get_logger
from wire.consts import MsgType, Scope
from wire.errors import DecodingError
from wire.frame import Frame, Payload
from wire.identifiers import Identifier, IdentifierEncoder, get_encoder
from wire.messages import ChatMessage, KillMessage

logger = get_logger(__name__)


FrameHandler = Callable[[Frame], None]
OpenHandler = Callable[[], None]
CloseHandler = Callable[[], None]
ErrorHandler = Callable[[bytes, Exception], None]

# `to` value for frames addressed to the hub itself or to everyone
HUB_RECIPIENT = 0


class SessionState(str, Enum):
    CREATED = "created"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class SessionStateError(Exception):
    """Raised when an operation is not allowed in the session's current state."""
    pass


class WsClient:
    """
    One logical chat session over an externally managed transport.

    Outbound operations build a header, append the payload and hand the
    frame to the transport. Frames are queued until the transport is open
    and login() has been called; the LOGIN frame always goes out first.
    Inbound bytes are decoded and dispatched synchronously; frames that
    fail to decode are reported through the error handler and dropped.

        client = WsClient({"url": "ws://localhost:8080", "secret": "xxx123456"})
        client.set_on_open(lambda: client.send_to_client("1", MsgType.CHAT, "hello"))
        client.attach(WebsocketTransport(client.config.url))
        client.login("2")
    """

    def __init__(
        self,
        config: Union[ClientConfig, Mapping[str, Any]],
        transport: Optional[Transport] = None,
        identifier_encoder: Optional[IdentifierEncoder] = None,
    ) -> None:
        if not isinstance(config, ClientConfig):
            config = ClientConfig.from_dict(dict(config))
        self.config = config
        self.encoder = identifier_encoder or get_encoder(config.identifier_encoding)
        self.state = SessionState.CREATED
        self.identity: Optional[str] = None
        self.transport: Optional[Transport] = None
        self.handlers: Dict[int, FrameHandler] = {}
        self._pending: Deque[bytes] = deque()
        self._on_open: Optional[OpenHandler] = None
        self._on_message: Optional[FrameHandler] = None
        self._on_close: Optional[CloseHandler] = None
        self._on_error: Optional[ErrorHandler] = None
        if transport is not None:
            self.attach(transport)

    # ========================================
    #           HANDLER REGISTRATION
    # ========================================
    # Each set_* replaces the previous handler; passing None removes it.

    def set_on_open(self, handler: Optional[OpenHandler]) -> None:
        self._on_open = handler

    def set_on_message(self, handler: Optional[FrameHandler]) -> None:
        """Default handler for frames without a per-type handler."""
        self._on_message = handler

    def set_on_close(self, handler: Optional[CloseHandler]) -> None:
        self._on_close = handler

    def set_on_error(self, handler: Optional[ErrorHandler]) -> None:
        """Called with the raw bytes and the exception for every dropped frame."""
        self._on_error = handler

    def on(self, msg_type: Union[MsgType, int], handler: FrameHandler) -> None:
        self.handlers[int(msg_type)] = handler

    def off(self, msg_type: Union[MsgType, int]) -> None:
        self.handlers.pop(int(msg_type), None)

    # ========================================
    #           TRANSPORT EVENTS
    # ========================================

    def attach(self, transport: Transport) -> None:
        """Bind this session to a transport's open/message/close events."""
        if self.state in (SessionState.OPEN, SessionState.CLOSED):
            raise SessionStateError(f"cannot attach a transport to a {self.state.value} session")
        if self.transport is not None and self.transport is not transport:
            self.transport.unbind()
        transport.bind(self._handle_open, self.handle_frame, self._handle_close)
        self.transport = transport
        self.state = SessionState.OPEN if transport.is_open else SessionState.CONNECTING
        self._flush()

    def _handle_open(self) -> None:
        if self.state is SessionState.CLOSED:
            logger.warning("Transport opened for a closed session; ignoring")
            return
        self.state = SessionState.OPEN
        logger.info("Session open", extra={"url": self.config.url})
        self._flush()
        if self._on_open:
            self._on_open()

    def _handle_close(self) -> None:
        transport = self.transport
        self.state = SessionState.CLOSED
        if self._pending:
            logger.warning("Session closed with %d unsent frames", len(self._pending))
            self._pending.clear()
        if transport is None:
            return
        # A finished transport must not reach this session again
        transport.unbind()
        self.transport = None
        logger.info("Session closed")
        if self._on_close:
            self._on_close()

    def _flush(self) -> None:
        # Nothing leaves before the LOGIN frame, which login() puts at the front
        if self.state is not SessionState.OPEN or self.transport is None or self.identity is None:
            return
        while self._pending:
            self.transport.send(self._pending[0])
            self._pending.popleft()

    # ========================================
    #           OUTBOUND
    # ========================================

    def _send_frame(self, frame: Frame, first: bool = False) -> None:
        if self.state is SessionState.CLOSED:
            raise SessionStateError("session is closed")
        # Encode before queueing so a bad field never leaves a partial frame behind
        data = frame.to_bytes()
        if first:
            self._pending.appendleft(data)
        else:
            self._pending.append(data)
        self._flush()
        logger.debug("Queued %d byte frame", len(data), extra=frame_context(frame.header, self.identity))

    def login(self, identity: str) -> None:
        """
        Send the LOGIN frame for identity, ahead of every frame queued before
        it. Other frames are held until this has been called.
        """
        if self.identity is not None:
            raise SessionStateError(f"already logged in as {self.identity}")
        if self.state is SessionState.CLOSED:
            raise SessionStateError("session is closed")
        credentials = Credentials.for_login(identity, self.config.secret, self.config.auth_mode)
        frame = Frame.build(MsgType.LOGIN, Scope.CLIENT, HUB_RECIPIENT, credentials.to_message().encode())
        self.identity = identity
        self._send_frame(frame, first=True)
        logger.info("Login sent", extra={"identity": identity})

    def send_to_client(self, identity: Identifier, msg_type: Union[MsgType, int], payload: Payload) -> None:
        frame = Frame.build(msg_type, Scope.CLIENT, self.encoder.encode(identity), payload)
        self._send_frame(frame)

    def send_to_group(self, group: Identifier, msg_type: Union[MsgType, int], payload: Payload) -> None:
        frame = Frame.build(msg_type, Scope.GROUP, self.encoder.encode(group), payload)
        self._send_frame(frame)

    def broadcast(self, msg_type: Union[MsgType, int], payload: Payload) -> None:
        self._send_frame(Frame.build(msg_type, Scope.BROADCAST, HUB_RECIPIENT, payload))

    def send_chat(self, to: Optional[Identifier], text: str, scope: Union[Scope, int] = Scope.CLIENT, kind: int = 1) -> None:
        """Send a CHAT frame from the logged-in identity."""
        if self.identity is None:
            raise SessionStateError("login before sending chat messages")
        scope = Scope(scope)
        body = ChatMessage(from_=self.identity, text=text, type=kind).encode()
        if scope is Scope.BROADCAST:
            self.broadcast(MsgType.CHAT, body)
        elif scope is Scope.GROUP:
            self.send_to_group(to, MsgType.CHAT, body)
        else:
            self.send_to_client(to, MsgType.CHAT, body)

    def close(self) -> None:
        """Stop sending and ask the transport to close after queued frames."""
        if self.state is SessionState.CLOSED:
            return
        transport = self.transport
        self.state = SessionState.CLOSED
        if transport is None:
            self._handle_close()
            return
        opened = transport.is_open
        transport.close()
        if not opened:
            # A transport that never opened has no close to report
            self._handle_close()

    def reset(self) -> None:
        """Return a closed session to CREATED so it can log in again."""
        if self.state is not SessionState.CLOSED:
            raise SessionStateError("only a closed session can be reset")
        if self.transport is not None:
            self.transport.unbind()
        self.state = SessionState.CREATED
        self.identity = None
        self.transport = None
        self._pending.clear()

    # ========================================
    #           INBOUND
    # ========================================

    def _report_error(self, data: bytes, exc: Exception) -> None:
        if self._on_error:
            try:
                self._on_error(data, exc)
            except Exception as e:
                logger.error("Error handler failed: %s", e)

    def handle_frame(self, data: bytes) -> bool:
        """
        Decode one inbound frame and dispatch it.

        Returns True when the frame reached a handler. Frames that fail to
        decode, and handlers that raise, are logged and reported without
        interrupting the frames that follow.
        """
        if self.state is not SessionState.OPEN:
            logger.warning("Dropping %d byte frame: session is %s", len(data), self.state.value)
            return False
        try:
            frame = Frame.from_bytes(data)
            if frame.msg_type == MsgType.KILL:
                kill = KillMessage.decode(frame.payload)
        except DecodingError as e:
            logger.error("Failed to decode inbound frame (%d bytes): %s", len(data), e)
            self._report_error(data, e)
            return False

        handler = self.handlers.get(int(frame.msg_type), self._on_message)
        delivered = False
        if handler:
            try:
                handler(frame)
                delivered = True
            except Exception as e:
                logger.error("Failed to process inbound frame: %s", e,
                             extra=frame_context(frame.header, self.identity))
                self._report_error(data, e)

        if frame.msg_type == MsgType.KILL:
            logger.warning("Hub ended session for peer %s", kill.peer_id, extra={"identity": self.identity})
            self.close()
        return delivered
