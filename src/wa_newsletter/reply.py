"""
Reply parsing: child lookup, JSON payloads, fetched message batches.
"""

import asyncio
import json
import logging
from typing import Any, Optional

from wa_newsletter.errors import DecryptionError, InvalidArgumentError, MalformedReplyError
from wa_newsletter.models.identity import Identity
from wa_newsletter.models.newsletter import MessageUpdate
from wa_newsletter.models.node import BinaryNode
from wa_newsletter.transport.base import MessageDecryptor

logger = logging.getLogger("wa_newsletter.reply")


def get_all_binary_node_children(node: Optional[BinaryNode]) -> list[BinaryNode]:
    if node is None or not isinstance(node.content, list):
        return []
    return [child for child in node.content if isinstance(child, BinaryNode)]


def get_binary_node_children(node: Optional[BinaryNode], tag: str) -> list[BinaryNode]:
    return [child for child in get_all_binary_node_children(node) if child.tag == tag]


def get_binary_node_child(node: Optional[BinaryNode], tag: str) -> Optional[BinaryNode]:
    """First immediate child tagged `tag`, or None."""
    for child in get_all_binary_node_children(node):
        if child.tag == tag:
            return child
    return None


def decode_json_payload(node: BinaryNode) -> Any:
    """Decode a node's byte content as UTF-8 JSON."""
    content = node.content
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedReplyError(f"<{node.tag}> payload is not UTF-8: {e}")
    if not isinstance(content, str):
        raise MalformedReplyError(f"<{node.tag}> carries no byte payload")
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise MalformedReplyError(f"<{node.tag}> payload is not valid JSON: {e}")


def get_result_json(reply: BinaryNode) -> Any:
    """JSON body of a tunneled query reply (the `result` child)."""
    result = get_binary_node_child(reply, "result")
    if result is None:
        raise MalformedReplyError("mex reply has no <result> child", {"tag": reply.tag})
    return decode_json_payload(result)


def _parse_views(message_node: BinaryNode) -> Optional[int]:
    views_node = get_binary_node_child(message_node, "views_count")
    count = views_node.attrs.get("count") if views_node is not None else None
    if count is None:
        return None
    try:
        return int(count)
    except ValueError:
        raise MalformedReplyError(f"views_count is not a number: {count!r}")


def _parse_message(message_node: BinaryNode) -> MessageUpdate:
    server_id = message_node.attrs.get("server_id")
    if not server_id:
        raise MalformedReplyError("fetched message has no server_id", {"attrs": message_node.attrs})

    return MessageUpdate(
        server_id=server_id,
        views=_parse_views(message_node),
        # newest first, as sent
        reactions=[dict(r.attrs) for r in get_binary_node_children(message_node, "reactions")],
    )


async def _decrypt_into(
    update: MessageUpdate,
    message_node: BinaryNode,
    identity: Identity,
    decrypt: MessageDecryptor,
) -> MessageUpdate:
    try:
        update.message = await decrypt(message_node, identity.id, identity.lid or "")
    except DecryptionError as e:
        logger.warning(f"Decryption failed for message {update.server_id}: {e}")
        update.error = e
    except Exception as e:
        logger.warning(f"Decryption failed for message {update.server_id}: {e}")
        update.error = DecryptionError(str(e) or type(e).__name__, server_id=update.server_id)
    return update


async def parse_fetched_updates(
    reply: BinaryNode,
    identity: Identity,
    decrypt: MessageDecryptor,
    kind: str = "messages",
) -> list[MessageUpdate]:
    """Decrypt every message in a history reply, concurrently, keeping wire order.

    A failed decryption is recorded on that message's update; the rest of
    the batch is unaffected.
    """
    if kind == "messages":
        container = get_binary_node_child(reply, "messages")
        if container is None:
            raise MalformedReplyError("messages reply has no <messages> child")
    elif kind == "updates":
        container = get_binary_node_child(get_binary_node_child(reply, "message_updates"), "messages")
        if container is None:
            return []
    else:
        raise InvalidArgumentError(f"unknown fetch kind: {kind!r}")

    # the whole batch is checked before any decryption starts
    nodes = get_all_binary_node_children(container)
    updates = [_parse_message(node) for node in nodes]
    return list(await asyncio.gather(*(
        _decrypt_into(update, node, identity, decrypt)
        for update, node in zip(updates, nodes)
    )))
