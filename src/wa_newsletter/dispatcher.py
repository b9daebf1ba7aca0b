"""
Query dispatcher. Builds newsletter request nodes and sends them.

Each call draws one fresh id from the transport. Transport failures
propagate to the caller untouched; nothing here retries.
"""

import logging
from typing import Any, Optional

from wa_newsletter.errors import InvalidArgumentError
from wa_newsletter.models.node import BinaryNode
from wa_newsletter.query_ids import MessageStanza, QueryId, TaggedCommand, TunneledQuery, wire_shape_for
from wa_newsletter.transport.base import Transport
from wa_newsletter.transport.envelope import build_mex_iq, build_newsletter_iq, build_reaction

logger = logging.getLogger("wa_newsletter.dispatcher")


class QueryDispatcher:
    def __init__(self, transport: Transport):
        self._transport = transport

    async def send_tagged(self, jid: str, iq_type: str, content: list[BinaryNode]) -> BinaryNode:
        """Send a `newsletter` IQ addressed to `jid`."""
        if iq_type not in ("get", "set"):
            raise InvalidArgumentError(f"iq type must be 'get' or 'set', got {iq_type!r}")
        node = build_newsletter_iq(jid, iq_type, content, self._transport.generate_message_tag())
        logger.debug("newsletter %s to %s: %s", iq_type, jid, [c.tag for c in content])
        return await self._transport.query(node)

    async def send_tunneled(
        self,
        jid: Optional[str],
        query_id: QueryId,
        variables: Optional[dict[str, Any]] = None,
    ) -> BinaryNode:
        """Send a `w:mex` query; always routed to the default server address."""
        node = build_mex_iq(jid, QueryId(query_id).value, variables, self._transport.generate_message_tag())
        logger.debug("mex query %s for %s", QueryId(query_id).name, jid)
        return await self._transport.query(node)

    async def send_reaction(self, jid: str, server_id: str, code: Optional[str] = None) -> BinaryNode:
        node = build_reaction(jid, server_id, code, self._transport.generate_message_id())
        logger.debug("reaction %r on %s/%s", code, jid, server_id)
        return await self._transport.query(node)

    async def dispatch(
        self,
        operation: str,
        jid: Optional[str],
        *,
        attrs: Optional[dict[str, str]] = None,
        variables: Optional[dict[str, Any]] = None,
        server_id: Optional[str] = None,
        code: Optional[str] = None,
    ) -> BinaryNode:
        """Send `operation` in the one shape registered for it."""
        shape = wire_shape_for(operation)
        if isinstance(shape, TunneledQuery):
            return await self.send_tunneled(jid, shape.query_id, variables)
        if not jid:
            raise InvalidArgumentError(f"{operation} needs a target jid")
        if isinstance(shape, TaggedCommand):
            if variables is not None:
                raise InvalidArgumentError(f"{operation} is a tagged command and takes no variables")
            return await self.send_tagged(jid, shape.iq_type, [BinaryNode(tag=shape.tag, attrs=attrs or {})])
        if isinstance(shape, MessageStanza):
            if not server_id:
                raise InvalidArgumentError(f"{operation} needs a server_id")
            return await self.send_reaction(jid, server_id, code)
        raise InvalidArgumentError(f"Unsupported wire shape for {operation}: {shape!r}")
