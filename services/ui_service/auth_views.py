"""
Authentication views - login, password recovery, post-signup and home screens.
"""

import streamlit as st
from typing import Dict

from pydantic import ValidationError

from services.auth_service.auth_manager import AuthManager
from services.auth_service.schemas import (
    ForgotPasswordForm,
    LoginForm,
    UpdatePasswordForm,
    form_errors,
)
from services.ui_service.navigation import ViewState, navigate
from services.ui_service.notifications import NotificationChannel
from utils.logging_config import get_logger


FORM_ERROR_TOAST = "Verifique os campos do formulário."


def show_field_errors(errors: Dict[str, str], notifications: NotificationChannel):
    for message in errors.values():
        st.error(message)
    notifications.error(FORM_ERROR_TOAST)


class AuthInterface:
    """
    Renders the screens a signed-out user moves through.
    """

    def __init__(self, auth: AuthManager, notifications: NotificationChannel):
        self.logger = get_logger(__name__)
        self.auth = auth
        self.notifications = notifications

    def render_login(self):
        st.subheader("Acesse sua conta")

        with st.form("login_form"):
            email = st.text_input("E-mail", placeholder="seu@email.com")
            password = st.text_input("Senha", type="password", placeholder="••••••")
            submitted = st.form_submit_button("Entrar", type="primary", use_container_width=True)

        if submitted:
            try:
                form = LoginForm(email=email, password=password)
            except ValidationError as e:
                show_field_errors(form_errors(e), self.notifications)
                return

            with st.spinner("Entrando..."):
                success, message = self.auth.login(form)

            if success:
                self.notifications.success(message)
                navigate(ViewState.CHAT)
            else:
                self.notifications.error(message)

        col1, col2 = st.columns(2)
        with col1:
            if st.button("Esqueci minha senha", use_container_width=True):
                navigate(ViewState.FORGOT_PASSWORD)
        with col2:
            if st.button("Não tem uma conta? Cadastre-se", use_container_width=True):
                navigate(ViewState.ONBOARDING)

    def render_forgot_password(self):
        st.subheader("Recuperar senha")
        st.caption("Informe seu e-mail para receber um link de redefinição de senha.")

        with st.form("forgot_password_form"):
            email = st.text_input("E-mail", placeholder="seu@email.com")
            submitted = st.form_submit_button("Enviar link", type="primary", use_container_width=True)

        if submitted:
            try:
                form = ForgotPasswordForm(email=email)
            except ValidationError as e:
                show_field_errors(form_errors(e), self.notifications)
                return

            with st.spinner("Enviando..."):
                success, message = self.auth.request_password_reset(form)

            if success:
                self.notifications.success(message)
                navigate(ViewState.LOGIN)
            else:
                self.notifications.error(message)

        if st.button("Voltar ao Login"):
            navigate(ViewState.LOGIN)

    def render_update_password(self):
        st.subheader("🔒 Definir nova senha")
        st.caption("Crie uma nova senha segura para sua conta.")

        with st.form("update_password_form"):
            password = st.text_input("Nova senha", type="password", placeholder="••••••")
            confirm_password = st.text_input("Confirmar senha", type="password", placeholder="••••••")
            submitted = st.form_submit_button("Salvar Nova Senha", type="primary", use_container_width=True)

        if not submitted:
            return

        try:
            form = UpdatePasswordForm(password=password, confirm_password=confirm_password)
        except ValidationError as e:
            show_field_errors(form_errors(e), self.notifications)
            return

        with st.spinner("Salvando..."):
            success, message = self.auth.update_password(form)

        if success:
            self.notifications.success(message)
            self.auth.logout()
            navigate(ViewState.LOGIN)
        else:
            self.notifications.error(message)

    def render_success(self):
        st.success("### ✅ Cadastro concluído!")
        st.write("Bem-vindo à Suporte Offshore. Sua conta foi criada com sucesso.")
        st.write("Agora você pode acessar o portal de investimentos ou realizar um novo cadastro.")

        col1, col2 = st.columns(2)
        with col1:
            if st.button("Fazer Login", type="primary", use_container_width=True):
                navigate(ViewState.LOGIN)
        with col2:
            if st.button("Criar novo cadastro", use_container_width=True):
                navigate(ViewState.ONBOARDING)

    def render_home(self):
        st.markdown("### 🎉 Parabéns, você realizou login!")
        st.write("Você agora tem acesso ao painel do Suporte Offshore.")

        col1, col2 = st.columns(2)
        with col1:
            if st.button("Abrir chat", type="primary", use_container_width=True):
                navigate(ViewState.CHAT)
        with col2:
            if st.button("Sair (Logout)", use_container_width=True):
                self.sign_out()

    def sign_out(self):
        self.auth.logout()
        self.notifications.info("Você saiu do sistema.")
        navigate(ViewState.LOGIN)
