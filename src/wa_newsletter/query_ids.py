"""
Operation registry.

Every channel operation is wired to exactly one request shape:

- TaggedCommand: a `newsletter` IQ whose child tag names the action
- TunneledQuery: a `w:mex` IQ carrying a query id and JSON variables
- MessageStanza: a plain `message` stanza (reactions)
"""

from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel

from wa_newsletter.errors import InvalidArgumentError


class QueryId(str, Enum):
    JOB_MUTATION = "7150902998257522"
    METADATA = "6620195908089573"
    UNFOLLOW = "7238632346214362"
    FOLLOW = "7871414976211147"
    UNMUTE = "7337137176362961"
    MUTE = "25151904754424642"
    CREATE = "6996806640408138"
    ADMIN_COUNT = "7130823597031706"
    CHANGE_OWNER = "7341777602580933"
    DELETE = "8316537688363079"
    DEMOTE = "6551828931592903"


class XWAPath(str, Enum):
    """Top-level keys under `data` in tunneled query results."""
    CREATE = "xwa2_newsletter_create"
    NEWSLETTER = "xwa2_newsletter"
    ADMIN_COUNT = "xwa2_newsletter_admin"


class TaggedCommand(BaseModel):
    kind: Literal["tagged"] = "tagged"
    tag: str
    iq_type: Literal["get", "set"]


class TunneledQuery(BaseModel):
    kind: Literal["tunneled"] = "tunneled"
    query_id: QueryId


class MessageStanza(BaseModel):
    kind: Literal["stanza"] = "stanza"
    type: str


WireShape = Union[TaggedCommand, TunneledQuery, MessageStanza]

OPERATIONS: dict[str, WireShape] = {
    "subscribe_updates": TaggedCommand(tag="live_updates", iq_type="set"),
    "fetch_messages": TaggedCommand(tag="messages", iq_type="get"),
    "fetch_message_updates": TaggedCommand(tag="messages_updates", iq_type="get"),
    "react_message": MessageStanza(type="reaction"),
    "set_reaction_mode": TunneledQuery(query_id=QueryId.JOB_MUTATION),
    "update_description": TunneledQuery(query_id=QueryId.JOB_MUTATION),
    "update_name": TunneledQuery(query_id=QueryId.JOB_MUTATION),
    "update_picture": TunneledQuery(query_id=QueryId.JOB_MUTATION),
    "remove_picture": TunneledQuery(query_id=QueryId.JOB_MUTATION),
    "follow": TunneledQuery(query_id=QueryId.FOLLOW),
    "unfollow": TunneledQuery(query_id=QueryId.UNFOLLOW),
    "mute": TunneledQuery(query_id=QueryId.MUTE),
    "unmute": TunneledQuery(query_id=QueryId.UNMUTE),
    "create": TunneledQuery(query_id=QueryId.CREATE),
    "metadata": TunneledQuery(query_id=QueryId.METADATA),
    "admin_count": TunneledQuery(query_id=QueryId.ADMIN_COUNT),
    "change_owner": TunneledQuery(query_id=QueryId.CHANGE_OWNER),
    "demote": TunneledQuery(query_id=QueryId.DEMOTE),
    "delete": TunneledQuery(query_id=QueryId.DELETE),
}


def wire_shape_for(operation: str) -> WireShape:
    try:
        return OPERATIONS[operation]
    except KeyError:
        raise InvalidArgumentError(f"Unknown newsletter operation: {operation!r}") from None


def query_id_for(operation: str) -> QueryId:
    """Query id of a tunneled operation. Tagged operations have none."""
    shape = wire_shape_for(operation)
    if not isinstance(shape, TunneledQuery):
        raise InvalidArgumentError(f"Operation {operation!r} is not a tunneled query")
    return shape.query_id
