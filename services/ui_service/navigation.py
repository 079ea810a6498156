"""
View routing for the single-page app.
"""

from enum import Enum
from typing import Mapping, Optional

import streamlit as st

VIEW_STATE_KEY = "current_view"


class ViewState(str, Enum):
    LOGIN = "login"
    ONBOARDING = "onboarding"
    SUCCESS = "success"
    HOME = "home"
    FORGOT_PASSWORD = "forgot-password"
    UPDATE_PASSWORD = "update-password"
    CHAT = "chat"


# Views that need a signed-in user
PROTECTED_VIEWS = {ViewState.HOME, ViewState.CHAT, ViewState.UPDATE_PASSWORD}


def get_current_view() -> ViewState:
    if VIEW_STATE_KEY not in st.session_state:
        st.session_state[VIEW_STATE_KEY] = ViewState.LOGIN
    return st.session_state[VIEW_STATE_KEY]


def navigate(view: ViewState, rerun: bool = True):
    """Switch to ``view``; by default rerun the script so it renders now"""
    st.session_state[VIEW_STATE_KEY] = view
    if rerun:
        st.rerun()


def recovery_token(query_params: Mapping[str, str]) -> Optional[str]:
    """
    Token hash of a password recovery link, if the app was opened from one.

    The recovery e-mail template links to ``?token_hash=...&type=recovery``.
    """
    if query_params.get("type") != "recovery":
        return None
    return query_params.get("token_hash") or None
