"""
Collaborator interfaces the newsletter client borrows from its socket.
"""

from typing import Any, Protocol, Union

from wa_newsletter.models.node import BinaryNode

MediaUpload = Union[bytes, str]  # raw bytes, a file path, or an http(s) URL


class Transport(Protocol):
    async def query(self, node: BinaryNode) -> BinaryNode:
        """Send a request node and return the reply. Raises TransportError."""
        ...

    def generate_message_tag(self) -> str:
        """Fresh IQ id, unique per in-flight request."""
        ...

    def generate_message_id(self) -> str:
        """Fresh message stanza id."""
        ...


class MessageDecryptor(Protocol):
    async def __call__(self, node: BinaryNode, me_id: str, me_lid: str) -> Any:
        ...


class PictureDeriver(Protocol):
    async def __call__(self, media: MediaUpload) -> bytes:
        ...
