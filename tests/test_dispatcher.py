"""Request shapes for every newsletter operation."""

import base64
import json

import pytest

from conftest import FakeTransport, mex_reply, newsletter_payload

from wa_newsletter import (
    AsyncNewsletterClient,
    BinaryNode,
    InvalidArgumentError,
    QueryDispatcher,
    S_WHATSAPP_NET,
    TransportError,
)

JID = "120363000000000001@newsletter"


async def _no_decrypt(node, me_id, me_lid):
    return None


def make_client(transport: FakeTransport, identity, **kwargs) -> AsyncNewsletterClient:
    return AsyncNewsletterClient(transport, identity, _no_decrypt, **kwargs)


def mex_node(query_id: str, variables: dict, request_id: str = "tag-1") -> BinaryNode:
    return BinaryNode(
        tag="iq",
        attrs={"id": request_id, "type": "get", "xmlns": "w:mex", "to": S_WHATSAPP_NET},
        content=[BinaryNode(
            tag="query",
            attrs={"query_id": query_id},
            content=json.dumps({"variables": variables}, separators=(",", ":"), ensure_ascii=False).encode(),
        )],
    )


def sent_variables(node: BinaryNode) -> dict:
    return json.loads(node.content[0].content)["variables"]


class TestTunneledShapes:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,query_id", [
        ("follow", "7871414976211147"),
        ("unfollow", "7238632346214362"),
        ("mute", "25151904754424642"),
        ("unmute", "7337137176362961"),
        ("delete", "8316537688363079"),
    ])
    async def test_plain_operations(self, transport, identity, method, query_id):
        client = make_client(transport, identity)
        await getattr(client, method)(JID)
        assert transport.sent == [mex_node(query_id, {"newsletter_id": JID})]

    @pytest.mark.asyncio
    async def test_reaction_mode(self, transport, identity):
        await make_client(transport, identity).set_reaction_mode(JID, "BASIC")
        assert transport.sent == [mex_node("7150902998257522", {
            "newsletter_id": JID,
            "updates": {"settings": {"reaction_codes": {"value": "BASIC"}}},
        })]

    @pytest.mark.asyncio
    async def test_update_description_defaults_to_empty(self, transport, identity):
        await make_client(transport, identity).update_description(JID)
        assert sent_variables(transport.sent[0]) == {
            "newsletter_id": JID,
            "updates": {"description": "", "settings": None},
        }
        assert b'"settings":null' in transport.sent[0].content[0].content

    @pytest.mark.asyncio
    async def test_update_name(self, transport, identity):
        await make_client(transport, identity).update_name(JID, "Café news")
        assert transport.sent == [mex_node("7150902998257522", {
            "newsletter_id": JID,
            "updates": {"name": "Café news", "settings": None},
        })]
        assert "Café".encode("utf-8") in transport.sent[0].content[0].content

    @pytest.mark.asyncio
    async def test_update_picture_uses_deriver(self, transport, identity):
        seen = []

        async def derive(media):
            seen.append(media)
            return b"\xff\xd8jpeg"

        await make_client(transport, identity, derive_picture=derive).update_picture(JID, b"raw")
        assert seen == [b"raw"]
        assert sent_variables(transport.sent[0])["updates"] == {
            "picture": base64.b64encode(b"\xff\xd8jpeg").decode(),
            "settings": None,
        }

    @pytest.mark.asyncio
    async def test_remove_picture(self, transport, identity):
        await make_client(transport, identity).remove_picture(JID)
        assert sent_variables(transport.sent[0])["updates"] == {"picture": "", "settings": None}

    @pytest.mark.asyncio
    async def test_change_owner_and_demote(self, transport, identity):
        client = make_client(transport, identity)
        await client.change_owner(JID, "15550002222@s.whatsapp.net")
        await client.demote(JID, "15550003333@s.whatsapp.net")
        assert transport.sent == [
            mex_node("7341777602580933", {"newsletter_id": JID, "user_id": "15550002222@s.whatsapp.net"}, "tag-1"),
            mex_node("6551828931592903", {"newsletter_id": JID, "user_id": "15550003333@s.whatsapp.net"}, "tag-2"),
        ]

    @pytest.mark.asyncio
    async def test_create_has_no_newsletter_id(self, identity):
        transport = FakeTransport([mex_reply(newsletter_payload("xwa2_newsletter_create"))])
        await make_client(transport, identity).create("Daily News", "All the news")
        assert transport.sent == [mex_node("6996806640408138", {
            "input": {"name": "Daily News", "description": "All the news"},
        })]

    @pytest.mark.asyncio
    async def test_metadata_request(self, identity):
        transport = FakeTransport([mex_reply(newsletter_payload("xwa2_newsletter"))])
        await make_client(transport, identity).metadata(JID, "SUBSCRIBER")
        assert transport.sent == [mex_node("6620195908089573", {
            "newsletter_id": JID,
            "input": {"key": JID, "type": "JID", "view_role": "SUBSCRIBER"},
            "fetch_viewer_metadata": True,
            "fetch_full_image": True,
            "fetch_creation_time": True,
        })]

    @pytest.mark.asyncio
    async def test_metadata_by_invite(self, identity):
        transport = FakeTransport([mex_reply(newsletter_payload("xwa2_newsletter"))])
        await make_client(transport, identity).metadata("AbCdEfGh", "GUEST", key_type="INVITE")
        variables = sent_variables(transport.sent[0])
        assert "newsletter_id" not in variables
        assert variables["input"] == {"key": "AbCdEfGh", "type": "INVITE", "view_role": "GUEST"}

    @pytest.mark.asyncio
    async def test_admin_count_request(self, identity):
        transport = FakeTransport([mex_reply({"data": {"xwa2_newsletter_admin": {"admin_count": 3}}})])
        assert await make_client(transport, identity).admin_count(JID) == 3
        assert transport.sent == [mex_node("7130823597031706", {"newsletter_id": JID})]

    @pytest.mark.asyncio
    async def test_mutations_are_get_to_default_address(self, transport, identity):
        client = make_client(transport, identity)
        await client.update_name(JID, "x")
        await client.delete(JID)
        await client.change_owner(JID, "u@s.whatsapp.net")
        for node in transport.sent:
            assert node.attrs["type"] == "get"
            assert node.attrs["to"] == S_WHATSAPP_NET
            assert node.attrs["xmlns"] == "w:mex"


class TestTaggedShapes:

    @pytest.mark.asyncio
    async def test_subscribe_updates(self, identity):
        reply = BinaryNode(tag="iq", content=[BinaryNode(tag="live_updates", attrs={"duration": "300"})])
        transport = FakeTransport([reply])
        result = await make_client(transport, identity).subscribe_updates(JID)
        assert result == {"duration": "300"}
        assert transport.sent == [BinaryNode(
            tag="iq",
            attrs={"id": "tag-1", "type": "set", "xmlns": "newsletter", "to": JID},
            content=[BinaryNode(tag="live_updates")],
        )]

    @pytest.mark.asyncio
    async def test_fetch_messages_by_invite(self, identity):
        transport = FakeTransport([BinaryNode(tag="iq", content=[BinaryNode(tag="messages", content=[])])])
        assert await make_client(transport, identity).fetch_messages("invite", "AbCdEfGh", 10, 5) == []
        assert transport.sent == [BinaryNode(
            tag="iq",
            attrs={"id": "tag-1", "type": "get", "xmlns": "newsletter", "to": S_WHATSAPP_NET},
            content=[BinaryNode(tag="messages", attrs={"type": "invite", "key": "AbCdEfGh", "count": "10", "after": "5"})],
        )]

    @pytest.mark.asyncio
    async def test_fetch_messages_by_jid(self, identity):
        transport = FakeTransport([BinaryNode(tag="iq", content=[BinaryNode(tag="messages", content=[])])])
        await make_client(transport, identity).fetch_messages("jid", JID, 20)
        assert transport.sent[0].content[0].attrs == {"type": "jid", "jid": JID, "count": "20", "after": "0"}

    @pytest.mark.asyncio
    async def test_fetch_message_updates(self, transport, identity):
        assert await make_client(transport, identity).fetch_message_updates(JID, 5, 100, 1700000000) == []
        assert transport.sent == [BinaryNode(
            tag="iq",
            attrs={"id": "tag-1", "type": "get", "xmlns": "newsletter", "to": JID},
            content=[BinaryNode(tag="messages_updates", attrs={"count": "5", "after": "100", "since": "1700000000"})],
        )]

    @pytest.mark.asyncio
    async def test_send_tagged_rejects_unknown_type(self, transport):
        with pytest.raises(InvalidArgumentError):
            await QueryDispatcher(transport).send_tagged(JID, "result", [])
        assert transport.sent == []


class TestReactions:

    @pytest.mark.asyncio
    async def test_react_with_code(self, transport, identity):
        await make_client(transport, identity).react_message(JID, "101", "👍")
        assert transport.sent == [BinaryNode(
            tag="message",
            attrs={"to": JID, "type": "reaction", "server_id": "101", "id": "3EB0TESTMSG"},
            content=[BinaryNode(tag="reaction", attrs={"code": "👍"})],
        )]

    @pytest.mark.asyncio
    async def test_react_without_code_removes(self, transport, identity):
        await make_client(transport, identity).react_message(JID, "101")
        assert transport.sent[0].content == [BinaryNode(tag="reaction", attrs={})]


class TestArgumentErrors:

    @pytest.mark.asyncio
    async def test_unknown_operation_sends_nothing(self, transport):
        with pytest.raises(InvalidArgumentError):
            await QueryDispatcher(transport).dispatch("promote", JID)
        assert transport.sent == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("args", [
        ("channel", "AbCdEfGh", 10),
        ("jid", "", 10),
        ("jid", JID, -1),
    ])
    async def test_bad_fetch_arguments(self, transport, identity, args):
        with pytest.raises(InvalidArgumentError):
            await make_client(transport, identity).fetch_messages(*args)
        assert transport.sent == []

    @pytest.mark.asyncio
    async def test_bad_enum_values(self, transport, identity):
        client = make_client(transport, identity)
        with pytest.raises(InvalidArgumentError):
            await client.set_reaction_mode(JID, "SOME")
        with pytest.raises(InvalidArgumentError):
            await client.metadata(JID, "VISITOR")
        assert transport.sent == []

    @pytest.mark.asyncio
    async def test_tagged_command_rejects_variables(self, transport):
        with pytest.raises(InvalidArgumentError):
            await QueryDispatcher(transport).dispatch("subscribe_updates", JID, variables={"x": 1})

    @pytest.mark.asyncio
    async def test_reaction_needs_server_id(self, transport):
        with pytest.raises(InvalidArgumentError):
            await QueryDispatcher(transport).dispatch("react_message", JID)


class TestTransportFailures:

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, identity):
        transport = FakeTransport([TransportError("socket closed")])
        with pytest.raises(TransportError, match="socket closed"):
            await make_client(transport, identity).follow(JID)

    @pytest.mark.asyncio
    async def test_each_request_gets_a_fresh_id(self, transport, identity):
        client = make_client(transport, identity)
        await client.follow(JID)
        await client.mute(JID)
        await client.fetch_message_updates(JID, 1, 0, 0)
        ids = [node.attrs["id"] for node in transport.sent]
        assert len(set(ids)) == 3


class TestSyncClient:

    def test_sync_wrapper_sends_same_nodes(self, identity):
        from wa_newsletter import NewsletterClient

        transport = FakeTransport([mex_reply({"data": {"xwa2_newsletter_admin": {"admin_count": 2}}})])
        client = NewsletterClient(transport, identity, _no_decrypt)
        try:
            assert client.admin_count(JID) == 2
            client.react_message(JID, "55", "🔥")
        finally:
            client.close()
        assert transport.sent[0] == mex_node("7130823597031706", {"newsletter_id": JID})
        assert transport.sent[1].content == [BinaryNode(tag="reaction", attrs={"code": "🔥"})]
