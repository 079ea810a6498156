"""
Tests for login, onboarding and password form schemas
"""

import pytest
from pydantic import ValidationError

from services.auth_service.schemas import (
    AddressForm,
    LoginForm,
    OnboardingForm,
    PersonalDataForm,
    UpdatePasswordForm,
    form_errors,
)

PERSONAL_DATA = {
    "email": "ana@example.com",
    "password": "segredo123",
    "first_name": "Ana",
    "last_name": "Souza",
    "birth_date": "1990-05-17",
    "phone": "(11) 98765-4321",
    "cpf": "529.982.247-25",
    "rg": "12.345.678-9",
    "issuing_authority": "SSP/SP",
}

ADDRESS = {
    "cep": "01310-100",
    "street": "Avenida Paulista",
    "number": "1000",
    "complement": "",
    "neighborhood": "Bela Vista",
    "city": "São Paulo",
    "state": "sp",
}


def errors_for(model, **data):
    with pytest.raises(ValidationError) as exc_info:
        model(**data)
    return form_errors(exc_info.value)


class TestLoginForm:
    def test_valid(self):
        form = LoginForm(email=" ana@example.com ", password="x")
        assert form.email == "ana@example.com"

    def test_invalid_email_and_missing_password(self):
        errors = errors_for(LoginForm, email="ana", password="")
        assert errors == {"email": "E-mail inválido", "password": "Senha é obrigatória"}


class TestUpdatePasswordForm:
    def test_too_short(self):
        errors = errors_for(UpdatePasswordForm, password="123", confirm_password="123")
        assert errors["password"] == "A nova senha deve ter no mínimo 6 caracteres"

    def test_mismatch(self):
        errors = errors_for(UpdatePasswordForm, password="123456", confirm_password="654321")
        assert "As senhas não coincidem" in errors.values()


class TestPersonalDataForm:
    def test_valid(self):
        assert PersonalDataForm(**PERSONAL_DATA).first_name == "Ana"

    def test_invalid_cpf(self):
        errors = errors_for(PersonalDataForm, **{**PERSONAL_DATA, "cpf": "529.982.247-24"})
        assert errors == {"cpf": "CPF inválido"}

    def test_incomplete_cpf(self):
        errors = errors_for(PersonalDataForm, **{**PERSONAL_DATA, "cpf": "529.982"})
        assert errors == {"cpf": "CPF incompleto"}

    def test_short_name(self):
        errors = errors_for(PersonalDataForm, **{**PERSONAL_DATA, "first_name": "A"})
        assert errors == {"first_name": "Nome é obrigatório"}

    @pytest.mark.parametrize("birth_date", ["19900-05-17", "1990-13-01", ""])
    def test_invalid_birth_date(self, birth_date):
        errors = errors_for(PersonalDataForm, **{**PERSONAL_DATA, "birth_date": birth_date})
        assert "birth_date" in errors

    def test_short_phone(self):
        errors = errors_for(PersonalDataForm, **{**PERSONAL_DATA, "phone": "(11) 9876"})
        assert errors == {"phone": "Telefone inválido"}


class TestAddressForm:
    def test_state_normalized(self):
        assert AddressForm(**ADDRESS).state == "SP"

    def test_unknown_state(self):
        errors = errors_for(AddressForm, **{**ADDRESS, "state": "XX"})
        assert errors == {"state": "UF é obrigatória"}

    def test_incomplete_cep(self):
        errors = errors_for(AddressForm, **{**ADDRESS, "cep": "0131"})
        assert errors == {"cep": "CEP inválido"}


class TestOnboardingForm:
    def test_profile_row_strips_masks(self):
        form = OnboardingForm(**PERSONAL_DATA, **ADDRESS)

        row = form.to_profile_row("user-1")

        assert row["id"] == "user-1"
        assert row["nome"] == "Ana"
        assert row["cpf"] == "52998224725"
        assert row["telefone"] == "11987654321"
        assert row["cep"] == "01310100"
        assert row["uf"] == "SP"
        assert row["complemento"] is None
        assert row["data_nascimento"] == "1990-05-17"
