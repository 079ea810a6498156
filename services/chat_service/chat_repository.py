"""
Chat repository - persists conversations, messages and attachments in Supabase.

Every operation runs on behalf of the user signed in on the given client.
Backend failures are logged and turned into empty results; the chat keeps
working even when a write is lost.
"""

import time
from typing import Any, Dict, List, Optional

from supabase import Client

from config.app_config import ChatConfig, get_config
from infrastructure.external.supabase_client import get_current_user_id
from services.chat_service.models import ChatFile, ChatMessage, Conversation, utc_now
from utils.logging_config import get_logger, log_conversation_event

CONVERSATIONS_TABLE = "conversations"
MESSAGES_TABLE = "chat_messages"


def conversation_title(text: str, max_length: int = 30, default: str = "Nova Conversa") -> str:
    """Title for a new conversation, derived from its first message"""
    return text[:max_length] or default


class ChatRepository:
    """
    Repository for chat persistence.
    Wraps the conversations/chat_messages tables and the attachments bucket.
    """

    def __init__(self, client: Client, bucket: Optional[str] = None, chat_config: Optional[ChatConfig] = None):
        self.logger = get_logger(__name__)
        self.client = client
        config = get_config()
        self.bucket = bucket or config.supabase.attachments_bucket
        self.chat_config = chat_config or config.chat

    def current_user_id(self) -> Optional[str]:
        try:
            return get_current_user_id(self.client)
        except Exception as e:
            self.logger.warning(f"Could not read auth session: {e}")
            return None

    # ------------------------------------------------------------------
    # Conversations
    # ------------------------------------------------------------------

    def create_conversation(self, title: str) -> Optional[Conversation]:
        """
        Create a conversation owned by the current user

        Returns:
            The created conversation, or None without a session or on backend error
        """
        user_id = self.current_user_id()
        if not user_id:
            return None

        clean_title = conversation_title(
            title, self.chat_config.title_max_length, self.chat_config.default_title
        )
        try:
            response = (
                self.client.table(CONVERSATIONS_TABLE)
                .insert({"user_id": user_id, "title": clean_title})
                .execute()
            )
            if not response.data:
                self.logger.error("Conversation insert returned no row")
                return None
            conversation = Conversation.from_row(response.data[0])
        except Exception as e:
            self.logger.error(f"Error creating conversation: {e}")
            return None

        log_conversation_event(self.logger, "created", conversation.id, title=clean_title)
        return conversation

    def list_conversations(self) -> List[Conversation]:
        """All conversations of the current user, most recent activity first"""
        user_id = self.current_user_id()
        if not user_id:
            return []

        try:
            response = (
                self.client.table(CONVERSATIONS_TABLE)
                .select("*")
                .eq("user_id", user_id)
                .order("updated_at", desc=True)
                .execute()
            )
            return [Conversation.from_row(row) for row in response.data or []]
        except Exception as e:
            self.logger.error(f"Error listing conversations: {e}")
            return []

    def delete_conversation(self, conversation_id: str) -> bool:
        try:
            self.client.table(CONVERSATIONS_TABLE).delete().eq("id", conversation_id).execute()
        except Exception as e:
            self.logger.error(f"Error deleting conversation {conversation_id}: {e}")
            return False

        log_conversation_event(self.logger, "deleted", conversation_id)
        return True

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def load_history(self, conversation_id: str) -> List[ChatMessage]:
        """Messages of a conversation in creation order"""
        if not self.current_user_id():
            return []

        try:
            response = (
                self.client.table(MESSAGES_TABLE)
                .select("*")
                .eq("conversation_id", conversation_id)
                .order("created_at", desc=False)
                .execute()
            )
            return [ChatMessage.from_row(row) for row in response.data or []]
        except Exception as e:
            self.logger.error(f"Error loading history for {conversation_id}: {e}")
            return []

    def save_message(self, conversation_id: Optional[str], role: str, content: str,
                     attachment_info: Optional[Dict[str, Any]] = None) -> None:
        """
        Persist a message and bump the conversation's last activity.

        Never raises; a lost write is logged and the chat carries on.
        """
        user_id = self.current_user_id()
        if not user_id:
            return

        if not conversation_id:
            self.logger.error("Refusing to save a message without a conversation id")
            return

        try:
            self.client.table(MESSAGES_TABLE).insert({
                "conversation_id": conversation_id,
                "user_id": user_id,
                "role": role,
                "content": content,
                "attachment_info": attachment_info,
            }).execute()
        except Exception as e:
            self.logger.error(f"Error saving {role} message to {conversation_id}: {e}")
            return

        try:
            (
                self.client.table(CONVERSATIONS_TABLE)
                .update({"updated_at": utc_now().isoformat()})
                .eq("id", conversation_id)
                .execute()
            )
        except Exception as e:
            self.logger.warning(f"Could not bump updated_at of {conversation_id}: {e}")

        log_conversation_event(self.logger, "message_saved", conversation_id, role=role)

    # ------------------------------------------------------------------
    # Attachments
    # ------------------------------------------------------------------

    def upload_attachment(self, file: ChatFile) -> Optional[str]:
        """
        Upload a file to the attachments bucket

        Returns:
            The public URL of the stored object, or None on any failure
        """
        try:
            user_id = get_current_user_id(self.client)
            if not user_id:
                raise PermissionError("User is not authenticated")

            storage_key = f"{user_id}/{int(time.time() * 1000)}_{file.name}"
            bucket = self.client.storage.from_(self.bucket)
            bucket.upload(storage_key, file.data, {"content-type": file.mime_type})
            public_url = bucket.get_public_url(storage_key)
        except Exception as e:
            self.logger.error(f"Error uploading attachment {file.name}: {e}")
            return None

        self.logger.info("Attachment uploaded", extra={"storage_key": storage_key})
        return public_url
