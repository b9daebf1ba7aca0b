"""
Metadata normalization for tunneled (mex) replies.

The server sends numeric fields as strings and optional images as objects
that may be missing; both are flattened here into NewsletterMetadata.
"""

from typing import Any, Optional

from pydantic import ValidationError

from wa_newsletter.errors import MalformedReplyError
from wa_newsletter.models.newsletter import NewsletterMetadata
from wa_newsletter.models.node import BinaryNode
from wa_newsletter.query_ids import XWAPath
from wa_newsletter.reply import get_binary_node_child, get_result_json


def _field(obj: Any, *path: str) -> Any:
    current = obj
    for i, key in enumerate(path):
        if not isinstance(current, dict) or key not in current:
            raise MalformedReplyError(f"reply is missing {'.'.join(path[:i + 1])}")
        current = current[key]
    return current


def _to_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise MalformedReplyError(f"{name} is not numeric: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise MalformedReplyError(f"{name} is not numeric: {value!r}")


def _direct_path(image: Any) -> Optional[str]:
    if not isinstance(image, dict):
        return None
    return image.get("direct_path") or None


def _data_path(reply: BinaryNode, path: XWAPath) -> dict[str, Any]:
    payload = get_result_json(reply)
    data = _field(payload, "data", path.value)
    if not isinstance(data, dict):
        raise MalformedReplyError(f"data.{path.value} is not an object")
    return data


def extract_newsletter_metadata(reply: BinaryNode, is_create: bool = False) -> NewsletterMetadata:
    """Project a create or lookup reply onto NewsletterMetadata."""
    data = _data_path(reply, XWAPath.CREATE if is_create else XWAPath.NEWSLETTER)
    thread = _field(data, "thread_metadata")
    if not isinstance(thread, dict):
        raise MalformedReplyError("thread_metadata is not an object")

    try:
        return NewsletterMetadata(
            id=_field(data, "id"),
            state=_field(data, "state", "type"),
            creation_time=_to_int(_field(thread, "creation_time"), "creation_time"),
            name=_field(thread, "name", "text"),
            name_time=_to_int(_field(thread, "name", "update_time"), "name.update_time"),
            description=_field(thread, "description", "text"),
            description_time=_to_int(_field(thread, "description", "update_time"), "description.update_time"),
            invite=thread.get("invite"),
            handle=thread.get("handle"),
            picture=_direct_path(thread.get("picture")),
            preview=_direct_path(thread.get("preview")),
            reaction_codes=_field(thread, "settings", "reaction_codes", "value"),
            subscribers=_to_int(_field(thread, "subscribers_count"), "subscribers_count"),
            verification=thread.get("verification"),
            viewer_metadata=data.get("viewer_metadata"),
        )
    except ValidationError as e:
        raise MalformedReplyError(f"unexpected metadata field types: {e}")


def extract_admin_count(reply: BinaryNode) -> int:
    data = _data_path(reply, XWAPath.ADMIN_COUNT)
    return _to_int(_field(data, "admin_count"), "admin_count")


def extract_live_updates(reply: BinaryNode) -> dict[str, str]:
    """Subscription attrs of a live_updates reply, e.g. {"duration": "300"}."""
    node = get_binary_node_child(reply, "live_updates")
    if node is None:
        raise MalformedReplyError("live_updates reply has no <live_updates> child")
    return dict(node.attrs)
