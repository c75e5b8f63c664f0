from __future__ import annotations
import time
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode, urlsplit, urlunsplit

from cryptography.hazmat.primitives import hashes

from wire.messages import LoginMessage


def make_nonce() -> str:
    """Nanosecond timestamp, the nonce format the hub expects."""
    return str(time.time_ns())


def digest(identity: str, nonce: str, secret: str) -> str:
    """Hex MD5 of identity || nonce || secret."""
    h = hashes.Hash(hashes.MD5())
    h.update(identity.encode("utf-8"))
    h.update(nonce.encode("utf-8"))
    h.update(secret.encode("utf-8"))
    return h.finalize().hex()


@dataclass(frozen=True)
class Credentials:
    """
    What the LOGIN frame carries for one identity.

    In `plain` mode the shared secret travels as is and the hub compares it
    opaquely. In `digest` mode only MD5(identity || nonce || secret) is sent.
    """
    identity: str
    nonce: str
    credential: str

    @classmethod
    def for_login(cls, identity: str, secret: str, mode: str = "plain",
                  nonce: Optional[str] = None) -> "Credentials":
        nonce = nonce or make_nonce()
        if mode == "plain":
            return cls(identity, nonce, secret)
        if mode == "digest":
            return cls(identity, nonce, digest(identity, nonce, secret))
        raise ValueError(f"Unknown auth mode: {mode}")

    def to_message(self) -> LoginMessage:
        return LoginMessage(identity=self.identity, nonce=self.nonce, credential=self.credential)


def login_url(base_url: str, identity: str, secret: str, nonce: Optional[str] = None) -> str:
    """
    URL for hubs that authenticate during the WebSocket handshake:

        ws://host:port/client?id=<identity>&nonce=<nonce>&digest=<md5>
    """
    nonce = nonce or make_nonce()
    parts = urlsplit(base_url)
    query = urlencode({"id": identity, "nonce": nonce, "digest": digest(identity, nonce, secret)})
    return urlunsplit((parts.scheme, parts.netloc, "/client", query, ""))
