"""
AsyncNewsletterClient / NewsletterClient — channel (newsletter) operations.
"""

import asyncio
import base64
from typing import Any, Optional, Union

from wa_newsletter.dispatcher import QueryDispatcher
from wa_newsletter.errors import InvalidArgumentError
from wa_newsletter.metadata import extract_admin_count, extract_live_updates, extract_newsletter_metadata
from wa_newsletter.models.identity import Identity
from wa_newsletter.models.newsletter import (
    FetchKeyType,
    MessageUpdate,
    MetadataKeyType,
    NewsletterMetadata,
    NewsletterReactionMode,
    NewsletterViewRole,
)
from wa_newsletter.models.node import S_WHATSAPP_NET
from wa_newsletter.picture import load_picture
from wa_newsletter.reply import parse_fetched_updates
from wa_newsletter.transport.base import MediaUpload, MessageDecryptor, PictureDeriver, Transport


def _coerce(enum_cls: Any, value: Any, name: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidArgumentError(f"{name} must be one of {allowed}, got {value!r}") from None


def _non_negative(name: str, value: int) -> str:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidArgumentError(f"{name} must be a non-negative integer, got {value!r}")
    return str(value)


class AsyncNewsletterClient:
    """Async newsletter client (primary)."""

    def __init__(
        self,
        transport: Transport,
        identity: Identity,
        decrypt: MessageDecryptor,
        derive_picture: Optional[PictureDeriver] = None,
    ):
        self._identity = identity
        self._decrypt = decrypt
        self._derive_picture = derive_picture or load_picture
        self._dispatcher = QueryDispatcher(transport)

    @property
    def dispatcher(self) -> QueryDispatcher:
        return self._dispatcher

    async def subscribe_updates(self, jid: str) -> dict[str, str]:
        """Subscribe to live updates; returns e.g. {"duration": "300"}."""
        result = await self._dispatcher.dispatch("subscribe_updates", jid)
        return extract_live_updates(result)

    async def set_reaction_mode(self, jid: str, mode: Union[NewsletterReactionMode, str]) -> None:
        await self._dispatcher.dispatch("set_reaction_mode", jid, variables={
            "updates": {"settings": {"reaction_codes": {"value": _coerce(NewsletterReactionMode, mode, "mode").value}}},
        })

    async def update_description(self, jid: str, description: Optional[str] = None) -> None:
        await self._dispatcher.dispatch("update_description", jid, variables={
            "updates": {"description": description or "", "settings": None},
        })

    async def update_name(self, jid: str, name: str) -> None:
        if not name:
            raise InvalidArgumentError("Channel name cannot be empty")
        await self._dispatcher.dispatch("update_name", jid, variables={
            "updates": {"name": name, "settings": None},
        })

    async def update_picture(self, jid: str, media: MediaUpload) -> None:
        image = await self._derive_picture(media)
        await self._dispatcher.dispatch("update_picture", jid, variables={
            "updates": {"picture": base64.b64encode(image).decode("ascii"), "settings": None},
        })

    async def remove_picture(self, jid: str) -> None:
        await self._dispatcher.dispatch("remove_picture", jid, variables={
            "updates": {"picture": "", "settings": None},
        })

    async def follow(self, jid: str) -> None:
        await self._dispatcher.dispatch("follow", jid)

    async def unfollow(self, jid: str) -> None:
        await self._dispatcher.dispatch("unfollow", jid)

    async def mute(self, jid: str) -> None:
        await self._dispatcher.dispatch("mute", jid)

    async def unmute(self, jid: str) -> None:
        await self._dispatcher.dispatch("unmute", jid)

    async def create(self, name: str, description: str = "") -> NewsletterMetadata:
        if not name:
            raise InvalidArgumentError("Channel name cannot be empty")
        result = await self._dispatcher.dispatch("create", None, variables={
            "input": {"name": name, "description": description},
        })
        return extract_newsletter_metadata(result, is_create=True)

    async def metadata(
        self,
        key: str,
        role: Union[NewsletterViewRole, str],
        key_type: Union[MetadataKeyType, str] = MetadataKeyType.JID,
    ) -> NewsletterMetadata:
        """Fetch channel metadata by jid (or invite code with key_type=INVITE)."""
        key_type = _coerce(MetadataKeyType, key_type, "key_type")
        # invite lookups carry no newsletter_id
        jid = key if key_type is MetadataKeyType.JID else None
        result = await self._dispatcher.dispatch("metadata", jid, variables={
            "input": {
                "key": key,
                "type": key_type.value,
                "view_role": _coerce(NewsletterViewRole, role, "role").value,
            },
            "fetch_viewer_metadata": True,
            "fetch_full_image": True,
            "fetch_creation_time": True,
        })
        return extract_newsletter_metadata(result)

    async def admin_count(self, jid: str) -> int:
        result = await self._dispatcher.dispatch("admin_count", jid)
        return extract_admin_count(result)

    async def change_owner(self, jid: str, user: str) -> None:
        """Hand channel ownership to `user` (a user jid)."""
        await self._dispatcher.dispatch("change_owner", jid, variables={"user_id": user})

    async def demote(self, jid: str, user: str) -> None:
        await self._dispatcher.dispatch("demote", jid, variables={"user_id": user})

    async def delete(self, jid: str) -> None:
        await self._dispatcher.dispatch("delete", jid)

    async def react_message(self, jid: str, server_id: str, code: Optional[str] = None) -> None:
        """React to a channel message. Without a code the current reaction is removed."""
        await self._dispatcher.dispatch("react_message", jid, server_id=server_id, code=code)

    async def fetch_messages(
        self,
        key_type: Union[FetchKeyType, str],
        key: str,
        count: int,
        after: int = 0,
    ) -> list[MessageUpdate]:
        """Fetch channel message history by invite code or jid."""
        key_type = _coerce(FetchKeyType, key_type, "key_type")
        if not key:
            raise InvalidArgumentError("fetch_messages needs an invite code or jid")

        attrs = {"type": key_type.value}
        attrs["key" if key_type is FetchKeyType.INVITE else "jid"] = key
        attrs["count"] = _non_negative("count", count)
        attrs["after"] = _non_negative("after", after)

        # history is served from the default address, not the channel
        result = await self._dispatcher.dispatch("fetch_messages", S_WHATSAPP_NET, attrs=attrs)
        return await parse_fetched_updates(result, self._identity, self._decrypt)

    async def fetch_message_updates(self, jid: str, count: int, after: int, since: int) -> list[MessageUpdate]:
        """Fetch view/reaction updates for messages after `after` since `since`."""
        result = await self._dispatcher.dispatch("fetch_message_updates", jid, attrs={
            "count": _non_negative("count", count),
            "after": _non_negative("after", after),
            "since": _non_negative("since", since),
        })
        return await parse_fetched_updates(result, self._identity, self._decrypt, kind="updates")


class NewsletterClient:
    """Sync wrapper around AsyncNewsletterClient. Runs the event loop internally."""

    def __init__(self, transport: Transport, identity: Identity, decrypt: MessageDecryptor, **kwargs: Any):
        self._async = AsyncNewsletterClient(transport, identity, decrypt, **kwargs)
        self._loop = asyncio.new_event_loop()

    def _run(self, coro: Any) -> Any:
        return self._loop.run_until_complete(coro)

    def close(self) -> None:
        self._loop.close()

    def subscribe_updates(self, jid: str) -> dict[str, str]:
        return self._run(self._async.subscribe_updates(jid))

    def set_reaction_mode(self, jid: str, mode: Union[NewsletterReactionMode, str]) -> None:
        self._run(self._async.set_reaction_mode(jid, mode))

    def update_description(self, jid: str, description: Optional[str] = None) -> None:
        self._run(self._async.update_description(jid, description))

    def update_name(self, jid: str, name: str) -> None:
        self._run(self._async.update_name(jid, name))

    def update_picture(self, jid: str, media: MediaUpload) -> None:
        self._run(self._async.update_picture(jid, media))

    def remove_picture(self, jid: str) -> None:
        self._run(self._async.remove_picture(jid))

    def follow(self, jid: str) -> None:
        self._run(self._async.follow(jid))

    def unfollow(self, jid: str) -> None:
        self._run(self._async.unfollow(jid))

    def mute(self, jid: str) -> None:
        self._run(self._async.mute(jid))

    def unmute(self, jid: str) -> None:
        self._run(self._async.unmute(jid))

    def create(self, name: str, description: str = "") -> NewsletterMetadata:
        return self._run(self._async.create(name, description))

    def metadata(self, key: str, role: Union[NewsletterViewRole, str], **kwargs: Any) -> NewsletterMetadata:
        return self._run(self._async.metadata(key, role, **kwargs))

    def admin_count(self, jid: str) -> int:
        return self._run(self._async.admin_count(jid))

    def change_owner(self, jid: str, user: str) -> None:
        self._run(self._async.change_owner(jid, user))

    def demote(self, jid: str, user: str) -> None:
        self._run(self._async.demote(jid, user))

    def delete(self, jid: str) -> None:
        self._run(self._async.delete(jid))

    def react_message(self, jid: str, server_id: str, code: Optional[str] = None) -> None:
        self._run(self._async.react_message(jid, server_id, code))

    def fetch_messages(self, key_type: Union[FetchKeyType, str], key: str, count: int, after: int = 0) -> list[MessageUpdate]:
        return self._run(self._async.fetch_messages(key_type, key, count, after))

    def fetch_message_updates(self, jid: str, count: int, after: int, since: int) -> list[MessageUpdate]:
        return self._run(self._async.fetch_message_updates(jid, count, after, since))
