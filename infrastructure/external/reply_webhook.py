"""
Reply webhook client - relays chat messages to the automation endpoint
that generates the assistant's answers.
"""

from typing import Any, Callable, List, Optional

import requests

from config.app_config import WebhookConfig, get_config
from services.chat_service.models import ChatFile
from utils.logging_config import get_logger, log_execution_time

NO_TEXT_REPLY = "Recebido, mas sem resposta de texto."


class ReplyGatewayError(Exception):
    """The reply endpoint could not be reached or answered with an error"""


def _reply_field(body: Any) -> Optional[str]:
    return body.get("reply") if isinstance(body, dict) else None


def _output_field(body: Any) -> Optional[str]:
    return body.get("output") if isinstance(body, dict) else None


def _bare_string(body: Any) -> Optional[str]:
    return body if isinstance(body, str) else None


# Tried in order; the first non-empty string wins
REPLY_DECODERS: List[Callable[[Any], Optional[str]]] = [_reply_field, _output_field, _bare_string]


def decode_reply(body: Any, fallback: str = NO_TEXT_REPLY) -> str:
    """
    Extract the reply text from the endpoint's response body.

    The automation's response shape is not fixed: it may answer with
    ``{"reply": ...}``, ``{"output": ...}`` or a bare JSON string.
    Anything else decodes to ``fallback``.
    """
    for decoder in REPLY_DECODERS:
        text = decoder(body)
        if isinstance(text, str) and text:
            return text
    return fallback


class ReplyWebhookClient:
    """
    Adapter for the reply webhook.
    Builds the JSON payload, posts it once and decodes the answer.
    """

    def __init__(self, config: Optional[WebhookConfig] = None, session: Optional[requests.Session] = None,
                 no_text_reply: Optional[str] = None):
        self.logger = get_logger(__name__)
        app_config = get_config()
        self.config = config or app_config.webhook
        self.no_text_reply = no_text_reply or app_config.chat.no_text_reply
        self.http = session or requests.Session()

    def build_payload(self, text: str, conversation_id: str, file: Optional[ChatFile] = None,
                      user_id: Optional[str] = None) -> dict:
        return {
            "user_id": user_id or self.config.anonymous_user_id,
            "message": text,
            "conversation_id": conversation_id,
            "file_content_base64": file.to_base64() if file else None,
            "file_type": file.mime_type if file else None,
            "file_name": file.name if file else None,
        }

    def send_message(self, text: str, conversation_id: str, file: Optional[ChatFile] = None,
                     user_id: Optional[str] = None) -> str:
        """
        Send a message and return the assistant's reply text

        Raises:
            ReplyGatewayError: on transport errors, non-2xx status or an unreadable body
        """
        payload = self.build_payload(text, conversation_id, file, user_id)

        try:
            with log_execution_time(self.logger, "reply_webhook_request",
                                    conversation_id=conversation_id, has_file=file is not None):
                response = self.http.post(self.config.url, json=payload, timeout=self.config.timeout_seconds)

                if not response.ok:
                    raise ReplyGatewayError(
                        f"Erro na comunicação com o servidor: {response.reason or response.status_code}"
                    )

                body = response.json()
        except ReplyGatewayError:
            raise
        except (requests.RequestException, ValueError) as e:
            raise ReplyGatewayError(f"Erro na comunicação com o servidor: {e}") from e

        return decode_reply(body, self.no_text_reply)
