"""
Socket.IO relay transport.

Relays request nodes to a WhatsApp socket bridge and returns its replies.
The bridge owns the WhatsApp connection and the signal sessions; this side
only shapes stanzas.

Protocol:
- connect with auth={token}; the bridge emits `ready` with {"id", "lid"}
- `call("query", <node>)` acks with the reply node or {"error": {...}}
- `call("decrypt", {"node", "me_id", "me_lid"})` acks with the plaintext
  message or {"error": {...}}
"""

import asyncio
import itertools
import logging
import random
import secrets
from typing import Any, Optional

import socketio
from pydantic import ValidationError

from wa_newsletter.errors import DecryptionError, MalformedReplyError, TransportError
from wa_newsletter.models.identity import Identity
from wa_newsletter.models.node import BinaryNode
from wa_newsletter.reply import get_binary_node_child

SOCKETIO_PATH = "/socket.io/"

logger = logging.getLogger("wa_newsletter.transport.socketio")


def _error_dict(err: Any, default: str) -> dict[str, Any]:
    """Bridges may ack a bare string error; normalize it to {"message": ...}."""
    if isinstance(err, dict):
        return err
    return {"message": str(err) if err else default}


class SocketIOTransport:
    def __init__(
        self,
        base_url: str,
        token: str,
        transports: Optional[list[str]] = None,
        ready_timeout: float = 15.0,
        query_timeout: float = 60.0,
    ):
        self._base_url = base_url
        self._token = token
        self._transports = transports or ["websocket"]
        self._ready_timeout = ready_timeout
        self._query_timeout = query_timeout
        self._sio: Optional[socketio.AsyncClient] = None
        self._connected = False
        self._identity: Optional[Identity] = None
        self._tag_prefix = f"{random.randint(0, 0xFFFF)}.{random.randint(0, 0xFFFF)}-"
        self._epoch = itertools.count(1)

    @property
    def connected(self) -> bool:
        return self._connected and self._sio is not None and self._sio.connected

    @property
    def identity(self) -> Identity:
        if self._identity is None:
            raise TransportError("Bridge identity unknown. Call connect() first.", code="not_connected")
        return self._identity

    async def connect(self) -> None:
        """Connect to the bridge and wait for its `ready` event."""
        if self._sio and self._sio.connected:
            return

        self._sio = socketio.AsyncClient()
        ready_event = asyncio.Event()

        @self._sio.on("ready")
        async def on_ready(data: Any = None) -> None:
            if isinstance(data, dict) and data.get("id"):
                self._identity = Identity.model_validate(data)
            self._connected = True
            ready_event.set()

        @self._sio.event
        async def disconnect(_reason: str = "") -> None:
            self._connected = False

        try:
            await self._sio.connect(
                self._base_url,
                auth={"token": self._token},
                transports=self._transports,
                socketio_path=SOCKETIO_PATH,
            )
        except socketio.exceptions.ConnectionError as e:
            raise TransportError(f"Could not connect to bridge at {self._base_url}: {e}", code="connection_error")

        try:
            await asyncio.wait_for(ready_event.wait(), timeout=self._ready_timeout)
        except asyncio.TimeoutError:
            await self._sio.disconnect()
            raise TransportError(f"Timed out waiting for 'ready' event after {self._ready_timeout}s", code="timeout")

    def generate_message_tag(self) -> str:
        return f"{self._tag_prefix}{next(self._epoch)}"

    def generate_message_id(self) -> str:
        return "3EB0" + secrets.token_hex(9).upper()

    async def _call(self, event: str, data: Any) -> Any:
        if not self._sio or not self._sio.connected:
            raise TransportError("Socket.IO not connected", code="not_connected")
        try:
            return await self._sio.call(event, data, timeout=self._query_timeout)
        except socketio.exceptions.TimeoutError:
            logger.error(f"No reply to {event} within {self._query_timeout}s")
            raise TransportError(f"Timeout waiting for {event} reply", code="timeout")
        except socketio.exceptions.SocketIOError as e:
            logger.error(f"{event} failed: {e}")
            raise TransportError(f"{event} failed: {e}")

    async def query(self, node: BinaryNode) -> BinaryNode:
        ack = await self._call("query", node.model_dump())
        if not isinstance(ack, dict):
            raise TransportError(f"Bridge returned no reply for <{node.tag}>")
        if "error" in ack:
            err = _error_dict(ack["error"], "bridge query failed")
            raise TransportError(
                err.get("message", "bridge query failed"),
                code=str(err.get("code", "transport_error")),
                details=err,
            )

        try:
            reply = BinaryNode.model_validate(ack)
        except ValidationError as e:
            raise MalformedReplyError(f"Bridge reply to <{node.tag}> is not a node: {e}", {"ack": ack})
        error_node = get_binary_node_child(reply, "error")
        if reply.attrs.get("type") == "error" or error_node is not None:
            attrs = error_node.attrs if error_node is not None else {}
            raise TransportError(
                attrs.get("text", "server returned an error"),
                code=attrs.get("code", "server_error"),
                details={"id": node.attrs.get("id"), **attrs},
            )
        return reply

    async def decrypt(self, node: BinaryNode, me_id: str, me_lid: str) -> Any:
        """Decrypt a fetched message via the bridge's signal sessions."""
        server_id = node.attrs.get("server_id")
        try:
            ack = await self._call("decrypt", {"node": node.model_dump(), "me_id": me_id, "me_lid": me_lid})
        except TransportError as e:
            raise DecryptionError(str(e), server_id=server_id)
        if isinstance(ack, dict) and "error" in ack:
            err = _error_dict(ack["error"], "decryption failed")
            raise DecryptionError(err.get("message", "decryption failed"), server_id=server_id)
        return ack

    async def disconnect(self) -> None:
        self._connected = False
        if self._sio:
            await self._sio.disconnect()
            self._sio = None
