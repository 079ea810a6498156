"""
Tests for the reply webhook client
"""

import pytest
import requests
from unittest.mock import Mock

from config.app_config import WebhookConfig
from infrastructure.external.reply_webhook import (
    NO_TEXT_REPLY,
    ReplyGatewayError,
    ReplyWebhookClient,
    decode_reply,
)
from services.chat_service.models import ChatFile


def make_client(response=None, error=None, timeout=None):
    session = Mock(spec=requests.Session)
    if error is not None:
        session.post.side_effect = error
    else:
        session.post.return_value = response
    config = WebhookConfig(url="https://hooks.test/reply", timeout_seconds=timeout)
    return ReplyWebhookClient(config=config, session=session), session


def ok_response(body):
    response = Mock(ok=True, status_code=200)
    response.json.return_value = body
    return response


class TestDecodeReply:
    """Test reply extraction from the various response shapes"""

    def test_reply_field(self):
        assert decode_reply({"reply": "Olá!"}) == "Olá!"

    def test_output_field(self):
        assert decode_reply({"output": "Resposta"}) == "Resposta"

    def test_reply_preferred_over_output(self):
        assert decode_reply({"reply": "primeiro", "output": "segundo"}) == "primeiro"

    def test_empty_reply_falls_through_to_output(self):
        assert decode_reply({"reply": "", "output": "segundo"}) == "segundo"

    def test_bare_string(self):
        assert decode_reply("texto puro") == "texto puro"

    @pytest.mark.parametrize("body", [{}, {"reply": None}, {"reply": 42}, [], None, ""])
    def test_unusable_bodies_give_sentinel(self, body):
        assert decode_reply(body) == NO_TEXT_REPLY

    def test_custom_fallback(self):
        assert decode_reply({}, fallback="sem texto") == "sem texto"


class TestReplyWebhookClient:
    """Test request building and error mapping"""

    def test_payload_without_file(self):
        client, _ = make_client()

        payload = client.build_payload("Oi", "conv-1")

        assert payload == {
            "user_id": "anonymous",
            "message": "Oi",
            "conversation_id": "conv-1",
            "file_content_base64": None,
            "file_type": None,
            "file_name": None,
        }

    def test_payload_with_file(self):
        client, _ = make_client()
        file = ChatFile(name="nota.txt", mime_type="text/plain", data=b"abc")

        payload = client.build_payload("Segue", "conv-1", file, user_id="user-1")

        assert payload["user_id"] == "user-1"
        assert payload["file_content_base64"] == "YWJj"
        assert payload["file_type"] == "text/plain"
        assert payload["file_name"] == "nota.txt"

    def test_send_message_posts_once(self):
        client, session = make_client(ok_response({"reply": "Claro!"}), timeout=10.0)

        reply = client.send_message("Pode me ajudar?", "conv-1", user_id="user-1")

        assert reply == "Claro!"
        session.post.assert_called_once()
        args, kwargs = session.post.call_args
        assert args == ("https://hooks.test/reply",)
        assert kwargs["json"]["conversation_id"] == "conv-1"
        assert kwargs["timeout"] == 10.0

    def test_response_without_text(self):
        client, _ = make_client(ok_response({"status": "ok"}))

        assert client.send_message("Oi", "conv-1") == NO_TEXT_REPLY

    def test_error_status_raises(self):
        response = Mock(ok=False, status_code=502, reason="Bad Gateway")
        client, session = make_client(response)

        with pytest.raises(ReplyGatewayError, match="Bad Gateway"):
            client.send_message("Oi", "conv-1")
        assert session.post.call_count == 1

    def test_network_error_raises(self):
        client, _ = make_client(error=requests.ConnectionError("connection refused"))

        with pytest.raises(ReplyGatewayError, match="Erro na comunicação com o servidor"):
            client.send_message("Oi", "conv-1")

    def test_unreadable_body_raises(self):
        response = Mock(ok=True, status_code=200)
        response.json.side_effect = ValueError("Expecting value")
        client, _ = make_client(response)

        with pytest.raises(ReplyGatewayError):
            client.send_message("Oi", "conv-1")
