"""Shared fakes for newsletter tests."""

import json
from typing import Any, Optional

import pytest

from wa_newsletter import BinaryNode, Identity


class FakeTransport:
    """Records every node sent and replays queued replies (or raises queued errors)."""

    def __init__(self, replies: Optional[list[Any]] = None):
        self.sent: list[BinaryNode] = []
        self.replies = list(replies or [])
        self._tags = 0

    def generate_message_tag(self) -> str:
        self._tags += 1
        return f"tag-{self._tags}"

    def generate_message_id(self) -> str:
        return "3EB0TESTMSG"

    async def query(self, node: BinaryNode) -> BinaryNode:
        self.sent.append(node)
        if self.replies:
            reply = self.replies.pop(0)
            if isinstance(reply, Exception):
                raise reply
            return reply
        return BinaryNode(tag="iq", attrs={"type": "result"})


def mex_reply(payload: Any) -> BinaryNode:
    return BinaryNode(
        tag="iq",
        attrs={"type": "result"},
        content=[BinaryNode(tag="result", content=json.dumps(payload).encode("utf-8"))],
    )


def thread_metadata(**overrides: Any) -> dict[str, Any]:
    meta = {
        "creation_time": "1000",
        "name": {"text": "Daily News", "update_time": "1001"},
        "description": {"text": "All the news", "update_time": "1002"},
        "invite": "AbCdEfGh",
        "handle": None,
        "preview": {"direct_path": "/v/preview.jpg"},
        "settings": {"reaction_codes": {"value": "ALL"}},
        "subscribers_count": "42",
        "verification": "UNVERIFIED",
    }
    meta.update(overrides)
    return meta


def newsletter_payload(path: str, **thread_overrides: Any) -> dict[str, Any]:
    return {
        "data": {
            path: {
                "id": "120363000000000001@newsletter",
                "state": {"type": "ACTIVE"},
                "thread_metadata": thread_metadata(**thread_overrides),
                "viewer_metadata": {"mute": "OFF", "role": "OWNER"},
            }
        }
    }


@pytest.fixture
def identity() -> Identity:
    return Identity(id="15550001111:7@s.whatsapp.net", lid="987654321:7@lid")


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
