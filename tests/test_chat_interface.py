"""
Tests for the chat composer and upload conversion
"""

import pytest
import streamlit as st
from types import SimpleNamespace
from unittest.mock import Mock, patch

from infrastructure.external.reply_webhook import ReplyWebhookClient
from services.chat_service.chat_repository import ChatRepository
from services.chat_service.conversation_manager import ConversationManager
from services.ui_service.chat_interface import ChatInterface, chat_file_from_upload


def uploaded(name, mime_type, data):
    return SimpleNamespace(name=name, type=mime_type, getvalue=lambda: data)


@pytest.fixture
def manager(supabase, notifications):
    return ConversationManager(ChatRepository(supabase), Mock(spec=ReplyWebhookClient), notifications,
                               welcome_message="Bem-vindo!")


@pytest.fixture
def interface(manager, notifications):
    return ChatInterface(manager, Mock(), notifications)


class TestChatFileFromUpload:
    def test_no_upload(self):
        assert chat_file_from_upload(None) is None

    def test_missing_type_defaults_to_binary(self):
        file = chat_file_from_upload(uploaded("dados.bin", None, b"\x00"))

        assert file.mime_type == "application/octet-stream"
        assert file.data == b"\x00"


class TestComposerSubmit:
    """Test what the composer hands to the send pipeline"""

    def test_text_only(self, interface, manager):
        with patch.object(st, "rerun") as rerun:
            interface.submit("Preciso de ajuda", [])

        assert manager.pending.text == "Preciso de ajuda"
        assert manager.pending.file is None
        rerun.assert_called_once()

    def test_file_only(self, interface, manager):
        with patch.object(st, "rerun") as rerun:
            interface.submit("", [uploaded("extrato.pdf", "application/pdf", b"%PDF-1.4")])

        assert manager.pending.text == ""
        assert manager.pending.file.name == "extrato.pdf"
        assert manager.messages[-1].attachment.name == "extrato.pdf"
        rerun.assert_called_once()

    def test_first_file_is_sent(self, interface, manager):
        with patch.object(st, "rerun"):
            interface.submit("Fotos", [
                uploaded("a.png", "image/png", b"a"),
                uploaded("b.png", "image/png", b"b"),
            ])

        assert manager.pending.file.name == "a.png"

    def test_blank_message_is_ignored(self, interface, manager):
        with patch.object(st, "rerun") as rerun:
            interface.submit("   ", [])

        assert manager.pending is None
        assert not manager.busy
        rerun.assert_not_called()

    def test_ignored_while_busy(self, interface, manager):
        manager.busy = True

        with patch.object(st, "rerun") as rerun:
            interface.submit("Outra pergunta", [])

        assert manager.pending is None
        rerun.assert_not_called()
