"""
Request node construction for the two newsletter query families.

Tagged:    <iq id type xmlns="newsletter" to=jid>{children}</iq>
Tunneled:  <iq id type="get" xmlns="w:mex" to="s.whatsapp.net">
               <query query_id>{"variables": {...}}</query>
           </iq>
"""

import json
from typing import Any, Optional

from wa_newsletter.models.node import BinaryNode, S_WHATSAPP_NET

NEWSLETTER_XMLNS = "newsletter"
MEX_XMLNS = "w:mex"


def build_newsletter_iq(jid: str, iq_type: str, content: list[BinaryNode], request_id: str) -> BinaryNode:
    return BinaryNode(
        tag="iq",
        attrs={"id": request_id, "type": iq_type, "xmlns": NEWSLETTER_XMLNS, "to": jid},
        content=content,
    )


def encode_variables(jid: Optional[str], variables: Optional[dict[str, Any]] = None) -> bytes:
    """JSON payload of a tunneled query. A missing jid drops `newsletter_id`."""
    body: dict[str, Any] = {}
    if jid is not None:
        body["newsletter_id"] = jid
    body.update(variables or {})
    return json.dumps({"variables": body}, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def build_mex_iq(jid: Optional[str], query_id: str, variables: Optional[dict[str, Any]], request_id: str) -> BinaryNode:
    # the mex envelope is always typed "get", mutations included
    return BinaryNode(
        tag="iq",
        attrs={"id": request_id, "type": "get", "xmlns": MEX_XMLNS, "to": S_WHATSAPP_NET},
        content=[
            BinaryNode(
                tag="query",
                attrs={"query_id": query_id},
                content=encode_variables(jid, variables),
            )
        ],
    )


def build_reaction(jid: str, server_id: str, code: Optional[str], message_id: str) -> BinaryNode:
    """Reaction stanza; no code removes the current reaction."""
    return BinaryNode(
        tag="message",
        attrs={"to": jid, "type": "reaction", "server_id": server_id, "id": message_id},
        content=[BinaryNode(tag="reaction", attrs={"code": code} if code else {})],
    )
