"""
Authentication service - login, registration and password management.

Credentials, sessions and password storage are handled by Supabase Auth;
this service drives it and mirrors the signed-in user into Streamlit
session state.
"""

import streamlit as st
from typing import Dict, Optional, Tuple

from supabase import Client

from config.app_config import get_config
from infrastructure.external.supabase_client import get_supabase_client
from services.auth_service.access_log import register_access_log
from services.auth_service.models import UserProfile, UserSession
from services.auth_service.schemas import (
    ForgotPasswordForm,
    LoginForm,
    OnboardingForm,
    UpdatePasswordForm,
)
from utils.logging_config import get_logger, log_user_interaction
from utils.validators import only_digits

PROFILES_TABLE = "profiles"
DUPLICATE_DOCUMENT_RPC = "check_duplicate_documents"

# Per-user keys dropped on logout
USER_STATE_KEYS = ["user_session", "conversation_manager", "user_profile", "recovery_mode"]


def _error_message(error: Exception, default: str) -> str:
    return getattr(error, "message", None) or str(error) or default


class AuthManager:
    """
    Main authentication manager service.
    Handles sign-in/out, onboarding sign-up and password recovery.
    """

    def __init__(self, client: Optional[Client] = None):
        self.logger = get_logger(__name__)
        self.config = get_config()
        self.client = client or get_supabase_client()

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def get_current_session(self) -> Optional[UserSession]:
        """
        Session of the signed-in user, refreshed by the client when needed

        Returns:
            UserSession if signed in, None otherwise
        """
        try:
            session = self.client.auth.get_session()
        except Exception as e:
            self.logger.warning(f"Could not read auth session: {e}")
            return None

        if not session or not session.user:
            return None

        user_session = UserSession.from_supabase(session)
        st.session_state.user_session = user_session.to_dict()
        return user_session

    def is_authenticated(self) -> bool:
        return self.get_current_session() is not None

    def clear_session(self):
        """Clear per-user data from Streamlit session state"""
        for key in USER_STATE_KEYS:
            if key in st.session_state:
                del st.session_state[key]

    # ------------------------------------------------------------------
    # Login / logout
    # ------------------------------------------------------------------

    def login(self, form: LoginForm) -> Tuple[bool, str]:
        """
        Sign in with email and password

        Returns:
            (success, message) tuple
        """
        try:
            response = self.client.auth.sign_in_with_password({
                "email": form.email,
                "password": form.password,
            })
        except Exception as e:
            self.logger.error(f"Login error: {e}")
            return False, _error_message(e, "Erro ao fazer login. Verifique suas credenciais.")

        if not response.user:
            return False, "Erro ao fazer login. Verifique suas credenciais."

        self.get_current_session()
        log_user_interaction(self.logger, "login", user_id=response.user.id)

        if self.config.auth.access_log_enabled:
            headers = self._request_headers()
            register_access_log(self.client, response.user.id, headers.get("User-Agent", ""), headers)

        return True, "Login realizado com sucesso!"

    def logout(self) -> bool:
        try:
            self.client.auth.sign_out()
        except Exception as e:
            self.logger.error(f"Error during logout: {e}")
            return False
        finally:
            self.clear_session()

        self.logger.info("User logged out")
        return True

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, form: OnboardingForm) -> Tuple[bool, str]:
        """
        Create the auth user and its profile row

        Returns:
            (success, message) tuple
        """
        cpf = only_digits(form.cpf)

        try:
            duplicate = self.client.rpc(DUPLICATE_DOCUMENT_RPC, {"cpf_input": cpf}).execute()
        except Exception as e:
            self.logger.error(f"Duplicate document check failed: {e}")
            return False, f"Erro na verificação de documentos: {_error_message(e, 'erro desconhecido')}"

        if duplicate.data:
            return False, "Este CPF já possui cadastro em nosso sistema."

        try:
            response = self.client.auth.sign_up({
                "email": form.email,
                "password": form.password,
                "options": {"data": {"first_name": form.first_name, "last_name": form.last_name}},
            })
        except Exception as e:
            message = _error_message(e, "Ocorreu um erro inesperado.")
            self.logger.error(f"Sign-up error: {message}")
            if "already registered" in message:
                return False, "Este e-mail já está cadastrado."
            return False, message

        if not response.user or not response.user.id:
            return False, "Erro crítico: ID do usuário não retornado pelo Auth."

        try:
            self.client.table(PROFILES_TABLE).insert(form.to_profile_row(response.user.id)).execute()
        except Exception as e:
            details = getattr(e, "details", None)
            self.logger.error(f"Profile insert failed: {e}", extra={"details": details})
            suffix = f" ({details})" if details else ""
            return False, f"Erro ao salvar dados: {_error_message(e, 'Erro desconhecido')}{suffix}"

        log_user_interaction(self.logger, "registered", user_id=response.user.id)
        return True, "Cadastro realizado com sucesso!"

    # ------------------------------------------------------------------
    # Password recovery
    # ------------------------------------------------------------------

    def request_password_reset(self, form: ForgotPasswordForm) -> Tuple[bool, str]:
        options = {}
        if self.config.auth.password_reset_redirect_url:
            options["redirect_to"] = self.config.auth.password_reset_redirect_url

        try:
            self.client.auth.reset_password_for_email(form.email, options)
        except Exception as e:
            self.logger.error(f"Password reset request failed: {e}")
            return False, _error_message(e, "Erro ao enviar e-mail de recuperação.")

        return True, "Se o e-mail estiver cadastrado, você receberá um link de recuperação."

    def verify_recovery_token(self, token_hash: str) -> bool:
        """Exchange the token from a recovery link for a session"""
        try:
            response = self.client.auth.verify_otp({"token_hash": token_hash, "type": "recovery"})
        except Exception as e:
            self.logger.error(f"Recovery token verification failed: {e}")
            return False

        if not response.session:
            return False

        self.get_current_session()
        return True

    def update_password(self, form: UpdatePasswordForm) -> Tuple[bool, str]:
        try:
            self.client.auth.update_user({"password": form.password})
        except Exception as e:
            self.logger.error(f"Update password error: {e}")
            return False, _error_message(e, "Erro ao atualizar senha.")

        return True, "Senha atualizada com sucesso!"

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def get_profile(self) -> Optional[UserProfile]:
        """Name and email for the chat sidebar; None when unavailable"""
        if "user_profile" in st.session_state:
            return st.session_state.user_profile

        session = self.get_current_session()
        if not session:
            return None

        try:
            response = (
                self.client.table(PROFILES_TABLE)
                .select("nome, sobrenome")
                .eq("id", session.user_id)
                .single()
                .execute()
            )
        except Exception as e:
            self.logger.warning(f"Could not load profile: {e}")
            return None

        if not response.data:
            return None

        profile = UserProfile(
            first_name=response.data.get("nome") or "",
            last_name=response.data.get("sobrenome") or "",
            email=session.email,
        )
        st.session_state.user_profile = profile
        return profile

    def _request_headers(self) -> Dict[str, str]:
        try:
            return dict(st.context.headers)
        except Exception:
            # Not running inside a Streamlit request
            return {}


def get_auth_manager() -> AuthManager:
    """Get the auth manager bound to the current browser session"""
    if "auth_manager" not in st.session_state:
        st.session_state.auth_manager = AuthManager()
    return st.session_state.auth_manager
