"""Message router dispatch table."""

import itertools
import json

import pytest

from gcm_ccs.errors import DecodeError, SendFailed
from gcm_ccs.models.messages import UpstreamMessage
from gcm_ccs.router import ECHO_COLLAPSE_KEY, MessageHandlers
from gcm_ccs.session import SessionManager
from gcm_ccs.transport.loopback import LoopbackChannel

PROJECT_ID = "123456789"

UPSTREAM = json.dumps({"from": "D1", "message_id": "M1", "data": {"k": "v"}, "category": "app.x"})
DRAINING = json.dumps({"message_type": "control", "control_type": "CONNECTION_DRAINING"})


async def connected_session(handlers=None):
    channel = LoopbackChannel()
    counter = itertools.count(1)
    session = SessionManager(
        lambda config: channel,
        PROJECT_ID,
        handlers=handlers,
        id_factory=lambda: f"id-{next(counter)}",
    )
    await session.connect(PROJECT_ID, "api-key")
    return session, channel


def sent(channel):
    return [json.loads(text) for text in channel.sent_json]


class TestUpstream:
    @pytest.mark.asyncio
    async def test_echo_and_ack(self):
        session, channel = await connected_session()
        await session.router.process(UPSTREAM)

        echo, ack = sent(channel)
        assert ack == {"message_type": "ack", "to": "D1", "message_id": "M1"}
        assert echo["to"] == "D1"
        assert echo["message_id"] == "id-1"
        assert echo["collapse_key"] == ECHO_COLLAPSE_KEY
        assert echo["data"] == {"k": "v", "ECHO": "Application: app.x"}

    @pytest.mark.asyncio
    async def test_ack_still_sent_while_draining(self):
        session, channel = await connected_session()
        await session.router.process(DRAINING)
        await session.router.process(UPSTREAM)

        assert sent(channel) == [{"message_type": "ack", "to": "D1", "message_id": "M1"}]

    @pytest.mark.asyncio
    async def test_ack_sent_when_handler_fails(self):
        class Failing(MessageHandlers):
            async def handle_upstream(self, message, session):
                raise RuntimeError("boom")

        session, channel = await connected_session(Failing())
        await session.router.process(UPSTREAM)

        assert sent(channel) == [{"message_type": "ack", "to": "D1", "message_id": "M1"}]

    @pytest.mark.asyncio
    async def test_missing_from_sends_nothing(self):
        session, channel = await connected_session()
        await session.router.process(json.dumps({"message_id": "M1", "data": {}}))
        assert channel.sent == []

    @pytest.mark.asyncio
    async def test_missing_data_still_echoes(self):
        session, channel = await connected_session()
        await session.router.process(json.dumps({"from": "D1", "message_id": "M1", "category": "app.x"}))
        echo, _ack = sent(channel)
        assert echo["data"] == {"ECHO": "Application: app.x"}

    @pytest.mark.asyncio
    async def test_non_string_data_is_echoed_as_text(self):
        session, channel = await connected_session()
        await session.router.process(json.dumps({"from": "D1", "message_id": "M1", "category": "app.x", "data": {"n": 1}}))
        echo, ack = sent(channel)
        assert echo["data"] == {"n": "1", "ECHO": "Application: app.x"}
        assert ack["message_id"] == "M1"

    @pytest.mark.asyncio
    async def test_ack_failure_is_surfaced(self):
        session, channel = await connected_session()
        await channel.close()
        with pytest.raises(SendFailed):
            await session.router.process(UPSTREAM)


class TestReceipts:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", ["ack", "nack"])
    async def test_no_reply(self, kind):
        session, channel = await connected_session()
        await session.router.process(json.dumps({"message_type": kind, "from": "D1", "message_id": "M1"}))
        assert channel.sent == []
        assert not session.draining

    @pytest.mark.asyncio
    async def test_ack_handler_receives_correlation(self):
        seen = []

        class Recording(MessageHandlers):
            async def handle_ack(self, message, session):
                seen.append((message.from_, message.message_id))

        session, _channel = await connected_session(Recording())
        await session.router.process(json.dumps({"message_type": "ack", "from": "D1", "message_id": "M1"}))
        assert seen == [("D1", "M1")]


class TestControl:
    @pytest.mark.asyncio
    async def test_connection_draining(self):
        session, _channel = await connected_session()
        await session.router.process(DRAINING)
        assert session.draining

    @pytest.mark.asyncio
    async def test_draining_twice(self):
        session, _channel = await connected_session()
        await session.router.process(DRAINING)
        await session.router.process(DRAINING)
        assert session.draining

    @pytest.mark.asyncio
    async def test_unrecognized_control_type(self):
        session, channel = await connected_session()
        await session.router.process(json.dumps({"message_type": "control", "control_type": "FOO"}))
        assert not session.draining
        assert channel.sent == []

    @pytest.mark.asyncio
    async def test_control_without_type(self):
        session, _channel = await connected_session()
        await session.router.process(json.dumps({"message_type": "control"}))
        assert not session.draining


class TestUnknown:
    @pytest.mark.asyncio
    async def test_unknown_message_type_is_ignored(self):
        session, channel = await connected_session()
        await session.router.process(json.dumps({"message_type": "receipt", "from": "D1", "message_id": "M1"}))
        assert channel.sent == []
        assert not session.draining

    @pytest.mark.asyncio
    async def test_decode_error_propagates_from_process(self):
        session, _channel = await connected_session()
        with pytest.raises(DecodeError):
            await session.router.process("{broken")


class TestOverrides:
    @pytest.mark.asyncio
    async def test_override_upstream_only(self):
        received = []

        class Quiet(MessageHandlers):
            async def handle_upstream(self, message, session):
                received.append(message)

        session, channel = await connected_session(Quiet())
        await session.router.process(UPSTREAM)
        await session.router.process(DRAINING)

        assert isinstance(received[0], UpstreamMessage)
        assert sent(channel) == [{"message_type": "ack", "to": "D1", "message_id": "M1"}]
        assert session.draining
