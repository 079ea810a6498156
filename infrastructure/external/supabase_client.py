"""
Supabase client adapter for the application.

The client keeps the signed-in user's auth session in memory, so every
browser session gets its own client stored in Streamlit session state.
"""

from typing import Optional

import streamlit as st
from supabase import Client, create_client

from config.app_config import get_config
from utils.logging_config import get_logger

SESSION_STATE_KEY = "supabase_client"

logger = get_logger(__name__)


def create_supabase_client(url: Optional[str] = None, anon_key: Optional[str] = None) -> Client:
    """
    Build a new Supabase client

    Raises:
        ValueError: if the project URL or anon key is not configured
    """
    config = get_config()
    url = url or config.supabase.url
    anon_key = anon_key or config.supabase.anon_key
    if not url or not anon_key:
        raise ValueError("Supabase URL and anon key must be configured")

    client = create_client(url, anon_key)
    logger.debug("Supabase client created", extra={"supabase_url": url})
    return client


def get_supabase_client() -> Client:
    """Get the Supabase client bound to the current browser session"""
    if SESSION_STATE_KEY not in st.session_state:
        st.session_state[SESSION_STATE_KEY] = create_supabase_client()
    return st.session_state[SESSION_STATE_KEY]


def get_current_user_id(client: Client) -> Optional[str]:
    """User id of the session held by ``client``, or None when signed out"""
    session = client.auth.get_session()
    if not session or not session.user:
        return None
    return session.user.id
