"""
Tests for chat models and view routing helpers
"""

from services.auth_service.models import UserProfile, UserSession
from services.chat_service.models import (
    Attachment,
    ChatFile,
    ChatMessage,
    Conversation,
    new_local_id,
    parse_timestamp,
)
from services.ui_service.navigation import ViewState, get_current_view, navigate, recovery_token
from tests.conftest import make_session


class TestChatModels:
    def test_local_ids_are_unique(self):
        assert new_local_id() != new_local_id()
        assert ChatMessage(id=new_local_id(), role="user", content="Oi").is_local

    def test_parse_timestamp_with_z_suffix(self):
        parsed = parse_timestamp("2024-03-01T12:00:00Z")

        assert parsed.utcoffset().total_seconds() == 0
        assert parsed.hour == 12

    def test_parse_timestamp_with_five_digit_fraction(self):
        parsed = parse_timestamp("2024-05-01T12:00:00.12345+00:00")

        assert parsed.microsecond == 123450
        assert parsed.utcoffset().total_seconds() == 0

    def test_message_from_row(self):
        message = ChatMessage.from_row({
            "id": 7,
            "role": "assistant",
            "content": None,
            "created_at": "2024-03-01T12:00:00+00:00",
            "attachment_info": {"name": "a.png", "type": "image/png", "url": "https://storage.test/a.png"},
        })

        assert message.id == "7"
        assert message.content == ""
        assert message.attachment.is_image
        assert not message.is_local

    def test_conversation_from_row(self):
        conversation = Conversation.from_row({"id": "c1", "title": None, "updated_at": "2024-03-01T12:00:00Z"})

        assert conversation.title == ""
        assert conversation.updated_at.year == 2024

    def test_chat_file_encoding(self):
        file = ChatFile(name="a.png", mime_type="image/png", data=b"abc")

        assert file.is_image
        assert file.to_base64() == "YWJj"
        assert file.to_data_uri() == "data:image/png;base64,YWJj"

    def test_attachment_record_has_no_preview(self):
        record = Attachment(name="a.png", type="image/png", preview_url="data:...").to_record()

        assert record == {"name": "a.png", "type": "image/png", "url": None}
        assert Attachment.from_record(None) is None


class TestAuthModels:
    def test_user_session_from_supabase(self):
        session = UserSession.from_supabase(make_session())

        assert session.user_id == "user-1"
        assert session.to_dict()["expires_at"] is None

    def test_profile_initials(self):
        profile = UserProfile(first_name="ana", last_name="souza")

        assert profile.initials == "AS"
        assert profile.full_name == "ana souza"


class TestNavigation:
    def test_default_view_is_login(self, session_state):
        assert get_current_view() == ViewState.LOGIN

    def test_navigate_without_rerun(self, session_state):
        navigate(ViewState.ONBOARDING, rerun=False)

        assert get_current_view() == ViewState.ONBOARDING

    def test_recovery_token(self):
        assert recovery_token({"token_hash": "abc", "type": "recovery"}) == "abc"
        assert recovery_token({"token_hash": "abc", "type": "signup"}) is None
        assert recovery_token({"type": "recovery"}) is None
        assert recovery_token({}) is None
