"""
Conversation manager service - chat state and the message submission pipeline.

A send goes through these steps:

    optimistic insert -> resolve conversation -> upload attachment
    -> persist user message -> request reply -> append/persist reply

``begin_send`` performs the optimistic part synchronously so the view can
show the user's message before any network call; ``complete_send`` runs the
remaining steps. The conversation a send targets is captured when it
begins and is never re-read from the (mutable) active selection.
"""

from dataclasses import dataclass
from typing import List, Optional

import streamlit as st

from config.app_config import get_config
from infrastructure.external.reply_webhook import ReplyGatewayError, ReplyWebhookClient
from services.chat_service.chat_repository import ChatRepository
from services.chat_service.models import (
    ASSISTANT_ROLE,
    USER_ROLE,
    Attachment,
    ChatFile,
    ChatMessage,
    Conversation,
    new_local_id,
)
from services.ui_service.notifications import NotificationChannel
from utils.logging_config import get_logger, log_user_interaction

WELCOME_MESSAGE_ID = "welcome"
SESSION_STATE_KEY = "conversation_manager"


class ConversationCreationError(Exception):
    """The backend did not create the conversation a send needs"""


@dataclass
class PendingSend:
    """A send whose optimistic part is done and whose network part is not"""
    text: str
    file: Optional[ChatFile]
    local_message_id: str
    conversation_id: Optional[str]
    view_generation: int


class ConversationManager:
    """
    Service for managing conversation state and operations.
    Holds the visible message list, the conversation list and the busy flag
    of one browser session.
    """

    def __init__(self, repository: ChatRepository, reply_client: ReplyWebhookClient,
                 notifications: NotificationChannel, welcome_message: Optional[str] = None):
        self.logger = get_logger(__name__)
        self.repository = repository
        self.reply_client = reply_client
        self.notifications = notifications
        self.welcome_message = welcome_message or get_config().chat.welcome_message

        self.messages: List[ChatMessage] = []
        self.conversations: List[Conversation] = []
        self.active_conversation_id: Optional[str] = None
        self.busy = False
        self.pending: Optional[PendingSend] = None
        # Bumped whenever the user switches what the chat area shows
        self._view_generation = 0

        self._show_welcome()

    # ------------------------------------------------------------------
    # Conversation list and switching
    # ------------------------------------------------------------------

    def refresh_conversations(self) -> List[Conversation]:
        self.conversations = self.repository.list_conversations()
        return self.conversations

    def get_active_conversation(self) -> Optional[Conversation]:
        for conversation in self.conversations:
            if conversation.id == self.active_conversation_id:
                return conversation
        return None

    def select_conversation(self, conversation_id: str):
        """Show a stored conversation, replacing the visible messages"""
        self._view_generation += 1
        self.active_conversation_id = conversation_id
        self.messages = self.repository.load_history(conversation_id)
        self.logger.debug(f"Switched to conversation {conversation_id} ({len(self.messages)} messages)")

    def start_new_conversation(self):
        """Back to the untitled state; the conversation is created on first send"""
        self._view_generation += 1
        self.active_conversation_id = None
        self._show_welcome()

    def delete_conversation(self, conversation_id: str) -> bool:
        if not self.repository.delete_conversation(conversation_id):
            self.notifications.error("Erro ao excluir conversa.")
            return False

        self.conversations = [c for c in self.conversations if c.id != conversation_id]
        if self.active_conversation_id == conversation_id:
            self.start_new_conversation()
        self.notifications.info("Conversa excluída.")
        return True

    def _show_welcome(self):
        self.messages = [ChatMessage(id=WELCOME_MESSAGE_ID, role=ASSISTANT_ROLE, content=self.welcome_message)]

    def _is_showing(self, pending: PendingSend) -> bool:
        return pending.view_generation == self._view_generation

    # ------------------------------------------------------------------
    # Send pipeline
    # ------------------------------------------------------------------

    def begin_send(self, text: str, file: Optional[ChatFile] = None) -> Optional[PendingSend]:
        """
        Optimistically show the user's message and mark the chat busy.

        Returns:
            The pending send, or None when there is nothing to send or a
            send is already in flight.
        """
        if (not text.strip() and file is None) or self.busy:
            return None

        attachment = None
        if file is not None:
            attachment = Attachment(
                name=file.name,
                type=file.mime_type,
                preview_url=file.to_data_uri() if file.is_image else None,
            )

        local_message = ChatMessage(id=new_local_id(), role=USER_ROLE, content=text, attachment=attachment)
        self.messages.append(local_message)
        self.busy = True

        self.pending = PendingSend(
            text=text,
            file=file,
            local_message_id=local_message.id,
            conversation_id=self.active_conversation_id,
            view_generation=self._view_generation,
        )
        log_user_interaction(self.logger, "message_submitted",
                             message_length=len(text), has_file=file is not None)
        return self.pending

    def complete_send(self, pending: PendingSend) -> Optional[ChatMessage]:
        """
        Persist the user's message, fetch the reply and persist it.

        Returns:
            The assistant message, or None when the send failed (the failure
            is reported through the notification channel).
        """
        try:
            conversation_id = self._resolve_conversation(pending)

            attachment_info = None
            if pending.file is not None:
                url = self.repository.upload_attachment(pending.file)
                attachment_info = Attachment(name=pending.file.name, type=pending.file.mime_type, url=url).to_record()

            self.repository.save_message(conversation_id, USER_ROLE, pending.text, attachment_info)

            reply_text = self.reply_client.send_message(
                pending.text, conversation_id, pending.file, user_id=self.repository.current_user_id()
            )

            reply = ChatMessage(id=new_local_id(), role=ASSISTANT_ROLE, content=reply_text)
            if self._is_showing(pending):
                self.messages.append(reply)
            self.repository.save_message(conversation_id, ASSISTANT_ROLE, reply_text)
            return reply

        except (ConversationCreationError, ReplyGatewayError) as e:
            self.logger.error(f"Message pipeline aborted: {e}")
            self.notifications.error(f"Erro ao processar mensagem: {e}")
            return None
        finally:
            self.busy = False
            self.pending = None

    def send(self, text: str, file: Optional[ChatFile] = None) -> Optional[ChatMessage]:
        """Run the whole pipeline in one call"""
        pending = self.begin_send(text, file)
        if pending is None:
            return None
        return self.complete_send(pending)

    def _resolve_conversation(self, pending: PendingSend) -> str:
        if pending.conversation_id:
            return pending.conversation_id

        conversation = self.repository.create_conversation(pending.text)
        if conversation is None:
            raise ConversationCreationError("Falha ao criar nova conversa no banco.")

        pending.conversation_id = conversation.id
        self.conversations.insert(0, conversation)
        if self._is_showing(pending):
            self.active_conversation_id = conversation.id
        return conversation.id


def get_conversation_manager(repository: ChatRepository, reply_client: ReplyWebhookClient,
                             notifications: NotificationChannel) -> ConversationManager:
    """Get the conversation manager of the current browser session, creating it on first use"""
    if SESSION_STATE_KEY not in st.session_state:
        manager = ConversationManager(repository, reply_client, notifications)
        manager.refresh_conversations()
        st.session_state[SESSION_STATE_KEY] = manager
    return st.session_state[SESSION_STATE_KEY]
