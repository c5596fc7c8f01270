"""
Tests for the WhatsApp channel.
"""

import httpx
import pytest

from app.exceptions import UpstreamServiceError
from app.services.whatsapp import (
    ERROR_REPLY,
    WhatsAppChannel,
    is_private_sender,
    parse_incoming,
    split_message,
)

from conftest import text_message_payload


class TestParsing:
    """Test webhook payload parsing."""

    def test_text_message(self):
        messages = parse_incoming(text_message_payload(body="  oi  "))
        assert len(messages) == 1
        assert messages[0].sender == "5511999999999"
        assert messages[0].text == "oi"
        assert messages[0].message_id == "wamid.incoming"

    def test_status_update_ignored(self):
        payload = {
            "entry": [
                {"changes": [{"value": {"statuses": [{"id": "wamid.1", "status": "delivered"}]}}]}
            ]
        }
        assert parse_incoming(payload) == []

    def test_non_text_ignored(self):
        assert parse_incoming(text_message_payload(msg_type="audio")) == []

    def test_empty_body_ignored(self):
        assert parse_incoming(text_message_payload(body="   ")) == []

    def test_empty_payload(self):
        assert parse_incoming({}) == []

    @pytest.mark.parametrize(
        "sender,expected",
        [
            ("5511999999999", True),
            ("120363000000@g.us", False),
            ("status@broadcast", False),
        ],
    )
    def test_private_sender(self, sender, expected):
        assert is_private_sender(sender) is expected


class TestSplitMessage:
    def test_short_message(self):
        assert split_message("olá") == ["olá"]

    def test_splits_on_line_break(self):
        text = "a" * 6 + "\n" + "b" * 6
        assert split_message(text, limit=10) == ["aaaaaa", "bbbbbb"]

    def test_hard_split(self):
        assert split_message("x" * 25, limit=10) == ["x" * 10, "x" * 10, "x" * 5]


class TestSend:
    """Test outgoing messages against a mocked Graph API."""

    @pytest.mark.anyio
    async def test_send(self, channel, graph_api):
        message_id = await channel.send("5511999999999", "olá")
        assert message_id == "wamid.1"
        assert graph_api.bodies() == ["olá"]
        assert channel.status()["last_error"] is None

    @pytest.mark.anyio
    async def test_long_message_chunked(self, channel, graph_api):
        await channel.send("5511999999999", "linha\n" * 1000)
        assert len(graph_api.requests) == 2

    @pytest.mark.anyio
    async def test_http_error(self, channel, graph_api):
        graph_api.status_code = 401
        with pytest.raises(UpstreamServiceError) as exc_info:
            await channel.send("5511999999999", "olá")
        assert exc_info.value.service == "WhatsApp"
        assert channel.status()["last_error"] == "HTTP 401"

    @pytest.mark.anyio
    async def test_network_error(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        channel = WhatsAppChannel(
            access_token="t",
            phone_number_id="1",
            verify_token="v",
            transport=httpx.MockTransport(refuse),
        )
        with pytest.raises(UpstreamServiceError):
            await channel.send("5511999999999", "olá")

    @pytest.mark.anyio
    async def test_not_configured(self, graph_api):
        channel = WhatsAppChannel(
            access_token="",
            phone_number_id="",
            verify_token="",
            transport=httpx.MockTransport(graph_api),
        )
        assert channel.configured is False
        with pytest.raises(UpstreamServiceError):
            await channel.send("5511999999999", "olá")
        assert graph_api.requests == []


class TestDispatch:
    """Test webhook dispatch to the registered handler."""

    @pytest.mark.anyio
    async def test_registered_handler(self, channel, graph_api):
        async def echo(message):
            return f"eco: {message.text}"

        channel.on_receive(echo)
        handled = await channel.dispatch(text_message_payload(body="oi"))
        assert handled == 1
        assert graph_api.bodies() == ["eco: oi"]
        assert channel.status()["handler_registered"] is True

    @pytest.mark.anyio
    async def test_no_handler(self, channel, graph_api):
        assert await channel.dispatch(text_message_payload()) == 0
        assert graph_api.requests == []

    @pytest.mark.anyio
    async def test_handler_failure_answered_with_apology(self, channel, graph_api):
        async def broken(message):
            raise RuntimeError("boom")

        channel.on_receive(broken)
        handled = await channel.dispatch(text_message_payload())
        assert handled == 1
        assert graph_api.bodies() == [ERROR_REPLY]


class TestWebhookVerification:
    def test_accepts_matching_token(self, channel):
        assert channel.verify_webhook("subscribe", "verify-me", "123") == "123"

    def test_rejects_wrong_token(self, channel):
        assert channel.verify_webhook("subscribe", "other", "123") is None

    def test_rejects_wrong_mode(self, channel):
        assert channel.verify_webhook("unsubscribe", "verify-me", "123") is None
