"""
Onboarding wizard - two-step registration (personal data, then address).
"""

import streamlit as st
from datetime import date
from typing import Any, Dict

from pydantic import ValidationError

from services.auth_service.address_lookup import lookup_postal_code
from services.auth_service.auth_manager import AuthManager
from services.auth_service.schemas import (
    AddressForm,
    OnboardingForm,
    PersonalDataForm,
    form_errors,
)
from services.ui_service.auth_views import FORM_ERROR_TOAST
from services.ui_service.navigation import ViewState, navigate
from services.ui_service.notifications import NotificationChannel
from utils.logging_config import get_logger
from utils.validators import BRAZILIAN_STATES, mask_cep, mask_cpf, mask_phone

STEP_KEY = "onboarding_step"
DATA_KEY = "onboarding_data"
ERRORS_KEY = "onboarding_errors"
ADDRESS_FIELDS = ["cep", "street", "number", "complement", "neighborhood", "city", "state"]
TOTAL_STEPS = 2


def _widget_key(field: str) -> str:
    return f"onboarding_{field}"


class OnboardingWizard:
    """
    Collects PersonalDataForm then AddressForm and submits them together.
    Entered values survive moving back and forth between steps.
    """

    def __init__(self, auth: AuthManager, notifications: NotificationChannel):
        self.logger = get_logger(__name__)
        self.auth = auth
        self.notifications = notifications

    @property
    def step(self) -> int:
        return st.session_state.setdefault(STEP_KEY, 1)

    @property
    def data(self) -> Dict[str, Any]:
        return st.session_state.setdefault(DATA_KEY, {})

    def reset(self):
        for key in [STEP_KEY, DATA_KEY, ERRORS_KEY] + [_widget_key(f) for f in ADDRESS_FIELDS]:
            if key in st.session_state:
                del st.session_state[key]

    def render(self):
        step = self.step
        st.progress(step / TOTAL_STEPS, text=f"Passo {step} de {TOTAL_STEPS}")

        if step == 1:
            st.subheader("Dados Pessoais")
            st.caption("Precisamos de alguns dados para identificar você.")
            self._render_personal_step()
        else:
            st.subheader("Endereço")
            st.caption("Para envio de correspondências e validação regulatória.")
            self._render_address_step()

    # ------------------------------------------------------------------
    # Step 1
    # ------------------------------------------------------------------

    def _render_personal_step(self):
        data = self.data
        errors = st.session_state.get(ERRORS_KEY, {})

        with st.form("onboarding_personal"):
            col1, col2 = st.columns(2)
            with col1:
                first_name = st.text_input("Nome", value=data.get("first_name", ""))
            with col2:
                last_name = st.text_input("Sobrenome", value=data.get("last_name", ""))

            email = st.text_input("E-mail", value=data.get("email", ""), placeholder="seu@email.com")
            password = st.text_input("Senha", value=data.get("password", ""), type="password")

            col1, col2 = st.columns(2)
            with col1:
                birth_date = st.date_input(
                    "Data de nascimento",
                    value=date.fromisoformat(data["birth_date"]) if data.get("birth_date") else None,
                    min_value=date(1900, 1, 1),
                    max_value=date.today(),
                    format="DD/MM/YYYY",
                )
            with col2:
                phone = st.text_input("Telefone", value=data.get("phone", ""), placeholder="(00) 00000-0000")

            cpf = st.text_input("CPF", value=data.get("cpf", ""), placeholder="000.000.000-00")

            col1, col2 = st.columns(2)
            with col1:
                rg = st.text_input("RG", value=data.get("rg", ""))
            with col2:
                issuing_authority = st.text_input("Órgão emissor", value=data.get("issuing_authority", ""),
                                                  placeholder="SSP/SP")

            for message in errors.values():
                st.error(message)

            col1, col2 = st.columns(2)
            with col1:
                back = st.form_submit_button("Voltar ao Login", use_container_width=True)
            with col2:
                next_step = st.form_submit_button("Próximo", type="primary", use_container_width=True)

        if back:
            self.reset()
            navigate(ViewState.LOGIN)

        if next_step:
            values = {
                "first_name": first_name,
                "last_name": last_name,
                "email": email,
                "password": password,
                "birth_date": birth_date.isoformat() if birth_date else "",
                "phone": mask_phone(phone),
                "cpf": mask_cpf(cpf),
                "rg": rg,
                "issuing_authority": issuing_authority,
            }
            data.update(values)
            try:
                PersonalDataForm(**values)
            except ValidationError as e:
                st.session_state[ERRORS_KEY] = form_errors(e)
                self.notifications.error(FORM_ERROR_TOAST)
                st.rerun()

            st.session_state[ERRORS_KEY] = {}
            st.session_state[STEP_KEY] = 2
            st.rerun()

    # ------------------------------------------------------------------
    # Step 2
    # ------------------------------------------------------------------

    def _render_address_step(self):
        data = self.data
        for field in ADDRESS_FIELDS:
            st.session_state.setdefault(_widget_key(field), data.get(field, ""))

        col1, col2 = st.columns([3, 1])
        with col1:
            st.text_input("CEP", key=_widget_key("cep"), placeholder="00000-000")
        with col2:
            st.write("")
            # Runs before the widgets below exist, so their keys can still be written
            st.button("Buscar CEP", on_click=self._prefill_address, use_container_width=True)

        st.text_input("Rua", key=_widget_key("street"))
        col1, col2 = st.columns(2)
        with col1:
            st.text_input("Número", key=_widget_key("number"))
        with col2:
            st.text_input("Complemento", key=_widget_key("complement"))
        st.text_input("Bairro", key=_widget_key("neighborhood"))
        col1, col2 = st.columns([3, 1])
        with col1:
            st.text_input("Cidade", key=_widget_key("city"))
        with col2:
            st.selectbox("UF", [""] + BRAZILIAN_STATES, key=_widget_key("state"))

        for message in st.session_state.get(ERRORS_KEY, {}).values():
            st.error(message)

        col1, col2 = st.columns(2)
        with col1:
            if st.button("Voltar", use_container_width=True):
                self._store_address()
                st.session_state[ERRORS_KEY] = {}
                st.session_state[STEP_KEY] = 1
                st.rerun()
        with col2:
            submitted = st.button("Finalizar Cadastro", type="primary", use_container_width=True)

        if submitted:
            self._store_address()
            self._submit()

    def _prefill_address(self):
        cep = st.session_state.get(_widget_key("cep"), "")
        address = lookup_postal_code(cep)
        if not address:
            self.notifications.info("CEP não encontrado. Preencha o endereço manualmente.")
            return

        st.session_state[_widget_key("cep")] = mask_cep(cep)
        for field, value in address.items():
            st.session_state[_widget_key(field)] = value

    def _store_address(self):
        for field in ADDRESS_FIELDS:
            self.data[field] = st.session_state.get(_widget_key(field), "")
        self.data["cep"] = mask_cep(self.data["cep"])

    def _submit(self):
        try:
            AddressForm(**{f: self.data.get(f) for f in ADDRESS_FIELDS})
            form = OnboardingForm(**self.data)
        except ValidationError as e:
            st.session_state[ERRORS_KEY] = form_errors(e)
            self.notifications.error(FORM_ERROR_TOAST)
            st.rerun()

        with st.spinner("Cadastrando..."):
            success, message = self.auth.register(form)

        if not success:
            self.notifications.error(message)
            return

        self.notifications.success(message)
        self.reset()
        navigate(ViewState.SUCCESS)
