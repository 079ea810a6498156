"""
Chat interface service - handles chat UI components and interactions.
Renders the conversation sidebar, the message list and the composer, and
drives the two halves of the send pipeline across Streamlit reruns.
"""

import streamlit as st
from typing import List, Optional

from config.app_config import get_config
from services.auth_service.auth_manager import AuthManager
from services.chat_service.conversation_manager import ConversationManager
from services.chat_service.models import Attachment, ChatFile, ChatMessage
from services.ui_service.navigation import ViewState, navigate
from services.ui_service.notifications import NotificationChannel
from utils.logging_config import get_logger

PROFILE_PLACEHOLDER_NAME = "Usuário"
PROFILE_PLACEHOLDER_EMAIL = "carregando..."


def chat_file_from_upload(uploaded_file) -> Optional[ChatFile]:
    """Convert a Streamlit UploadedFile into a ChatFile"""
    if uploaded_file is None:
        return None
    return ChatFile(
        name=uploaded_file.name,
        mime_type=uploaded_file.type or "application/octet-stream",
        data=uploaded_file.getvalue(),
    )


class ChatInterface:
    """
    Service for chat interface components and interactions.
    """

    def __init__(self, manager: ConversationManager, auth: AuthManager, notifications: NotificationChannel):
        self.logger = get_logger(__name__)
        self.config = get_config()
        self.manager = manager
        self.auth = auth
        self.notifications = notifications

    def render(self):
        self.render_sidebar()
        self.render_messages(self.manager.messages)

        if self.manager.pending is not None:
            self._process_pending()

        self.render_composer()

    # ------------------------------------------------------------------
    # Sidebar
    # ------------------------------------------------------------------

    def render_sidebar(self):
        manager = self.manager

        with st.sidebar:
            self._render_profile()
            st.divider()

            if st.button("➕ Nova conversa", use_container_width=True, disabled=manager.busy):
                manager.start_new_conversation()
                st.rerun()

            st.markdown("### 💬 Conversas")
            if not manager.conversations:
                st.caption("Nenhuma conversa ainda.")

            for conversation in manager.conversations:
                is_active = conversation.id == manager.active_conversation_id
                col1, col2 = st.columns([5, 1])
                with col1:
                    if st.button(
                        conversation.title,
                        key=f"select_{conversation.id}",
                        use_container_width=True,
                        type="primary" if is_active else "secondary",
                    ):
                        if not is_active:
                            manager.select_conversation(conversation.id)
                            st.rerun()
                with col2:
                    if st.button("🗑️", key=f"delete_{conversation.id}", help="Excluir conversa"):
                        manager.delete_conversation(conversation.id)
                        st.rerun()

            st.divider()
            if st.button("🏠 Início", use_container_width=True):
                navigate(ViewState.HOME)
            if st.button("Sair", use_container_width=True):
                self.auth.logout()
                self.notifications.info("Você saiu do sistema.")
                navigate(ViewState.LOGIN)

    def _render_profile(self):
        profile = self.auth.get_profile()
        if profile is not None:
            name = profile.full_name or PROFILE_PLACEHOLDER_NAME
            email = profile.email or PROFILE_PLACEHOLDER_EMAIL
            initials = profile.initials or "U"
        else:
            name, email, initials = PROFILE_PLACEHOLDER_NAME, PROFILE_PLACEHOLDER_EMAIL, "U"

        st.markdown(f"### {initials}")
        st.markdown(f"**{name}**")
        st.caption(email)

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def render_messages(self, messages: List[ChatMessage]):
        for message in messages:
            with st.chat_message(message.role):
                if message.attachment is not None:
                    self._render_attachment(message.attachment)
                if message.content:
                    st.markdown(message.content)

    def _render_attachment(self, attachment: Attachment):
        source = attachment.preview_url or attachment.url
        if attachment.is_image and source:
            st.image(source, caption=attachment.name, width=240)
        elif attachment.url:
            st.markdown(f"📎 [{attachment.name}]({attachment.url})")
        else:
            st.caption(f"📎 {attachment.name}")

    # ------------------------------------------------------------------
    # Composer and send
    # ------------------------------------------------------------------

    def render_composer(self):
        value = st.chat_input(
            "Digite sua mensagem...",
            accept_file=True,
            file_type=self.config.chat.accepted_file_types,
            disabled=self.manager.busy,
        )
        if value is not None:
            self.submit(value.text, value.files)

    def submit(self, text: Optional[str], files: List) -> None:
        """Start a send from the composer; text may be empty when a file is attached"""
        upload = files[0] if files else None
        pending = self.manager.begin_send(text or "", chat_file_from_upload(upload))
        if pending is None:
            return
        st.rerun()

    def _process_pending(self):
        pending = self.manager.pending
        with st.chat_message("assistant"):
            with st.spinner("Digitando..."):
                self.manager.complete_send(pending)
        st.rerun()
