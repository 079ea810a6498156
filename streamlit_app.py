import streamlit as st
from datetime import date

from config.app_config import get_config
from infrastructure.external.reply_webhook import ReplyWebhookClient
from infrastructure.external.supabase_client import get_supabase_client
from services.auth_service.auth_manager import get_auth_manager
from services.chat_service.chat_repository import ChatRepository
from services.chat_service.conversation_manager import get_conversation_manager
from services.ui_service.auth_views import AuthInterface
from services.ui_service.chat_interface import ChatInterface
from services.ui_service.navigation import (
    PROTECTED_VIEWS,
    ViewState,
    get_current_view,
    navigate,
    recovery_token,
)
from services.ui_service.notifications import get_notification_channel, render_notifications
from services.ui_service.onboarding_wizard import OnboardingWizard
from utils.logging_config import get_logger, initialize_logging

# Initialize logging and error tracking
error_tracker = initialize_logging()
logger = get_logger(__name__)

# Get configuration
config = get_config()

st.set_page_config(
    page_title=config.ui.app_title,
    page_icon=config.ui.page_icon,
    layout="centered",
)


def render_header():
    st.markdown(f"# {config.ui.page_icon} {config.ui.app_title}")
    st.caption(config.ui.tagline)


def render_footer():
    st.divider()
    st.caption(f"© {date.today().year} {config.ui.footer}")


def handle_recovery_link(auth, notifications):
    """Open the new-password screen when the app is reached from a recovery e-mail"""
    token_hash = recovery_token(st.query_params)
    if not token_hash:
        return

    st.query_params.clear()
    if auth.verify_recovery_token(token_hash):
        st.session_state.recovery_mode = True
        notifications.info("Recuperação detectada. Por favor, defina sua nova senha.")
        navigate(ViewState.UPDATE_PASSWORD, rerun=False)
    else:
        notifications.error("Link de recuperação inválido ou expirado.")
        navigate(ViewState.FORGOT_PASSWORD, rerun=False)


def render_chat(auth, notifications):
    client = get_supabase_client()
    repository = ChatRepository(client)
    reply_client = ReplyWebhookClient()
    manager = get_conversation_manager(repository, reply_client, notifications)
    ChatInterface(manager, auth, notifications).render()


def main():
    notifications = get_notification_channel()

    try:
        auth = get_auth_manager()
    except ValueError as e:
        # Supabase is not configured
        error_tracker.track_error(e, "supabase_client_initialization")
        st.error("Serviço indisponível: configuração do Supabase ausente.")
        return

    handle_recovery_link(auth, notifications)

    view = get_current_view()
    # A recovery session may only be used to set the new password
    if st.session_state.get("recovery_mode") and view != ViewState.UPDATE_PASSWORD:
        navigate(ViewState.UPDATE_PASSWORD, rerun=False)
        view = ViewState.UPDATE_PASSWORD

    if view in PROTECTED_VIEWS and not auth.is_authenticated():
        logger.info(f"Redirecting unauthenticated visit to {view.value}")
        navigate(ViewState.LOGIN, rerun=False)
        view = ViewState.LOGIN

    if view != ViewState.CHAT:
        render_header()

    auth_views = AuthInterface(auth, notifications)
    if view == ViewState.LOGIN:
        auth_views.render_login()
    elif view == ViewState.ONBOARDING:
        OnboardingWizard(auth, notifications).render()
    elif view == ViewState.SUCCESS:
        auth_views.render_success()
    elif view == ViewState.FORGOT_PASSWORD:
        auth_views.render_forgot_password()
    elif view == ViewState.UPDATE_PASSWORD:
        auth_views.render_update_password()
    elif view == ViewState.HOME:
        auth_views.render_home()
    elif view == ViewState.CHAT:
        render_chat(auth, notifications)

    if view != ViewState.CHAT:
        render_footer()

    render_notifications(notifications)


main()
