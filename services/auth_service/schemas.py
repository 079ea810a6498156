"""
Form schemas for login, onboarding and password management.

Validation messages are user-facing (pt-BR); ``form_errors`` flattens a
ValidationError into one message per field for inline display.
"""

import re
from datetime import date
from typing import Dict, Optional

from pydantic import BaseModel, ValidationError, field_validator, model_validator

from utils.validators import (
    BRAZILIAN_STATES,
    CEP_LENGTH,
    only_digits,
    validate_cpf,
)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PASSWORD_MIN_LENGTH = 6


def _check_email(value: str) -> str:
    value = value.strip()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("E-mail inválido")
    return value


def _require(value: str, message: str, min_length: int = 1) -> str:
    value = (value or "").strip()
    if len(value) < min_length:
        raise ValueError(message)
    return value


class LoginForm(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return _check_email(value)

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        if not value:
            raise ValueError("Senha é obrigatória")
        return value


class ForgotPasswordForm(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return _check_email(value)


class UpdatePasswordForm(BaseModel):
    password: str
    confirm_password: str

    @field_validator("password")
    @classmethod
    def check_length(cls, value: str) -> str:
        if len(value) < PASSWORD_MIN_LENGTH:
            raise ValueError(f"A nova senha deve ter no mínimo {PASSWORD_MIN_LENGTH} caracteres")
        return value

    @model_validator(mode="after")
    def check_match(self) -> 'UpdatePasswordForm':
        if self.password != self.confirm_password:
            raise ValueError("As senhas não coincidem")
        return self


class PersonalDataForm(BaseModel):
    """Step 1 of the onboarding wizard"""
    email: str
    password: str
    first_name: str
    last_name: str
    birth_date: str  # ISO date, YYYY-MM-DD
    phone: str
    cpf: str
    rg: str
    issuing_authority: str

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return _check_email(value)

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        if len(value) < PASSWORD_MIN_LENGTH:
            raise ValueError(f"A senha deve ter no mínimo {PASSWORD_MIN_LENGTH} caracteres")
        return value

    @field_validator("first_name")
    @classmethod
    def check_first_name(cls, value: str) -> str:
        return _require(value, "Nome é obrigatório", min_length=2)

    @field_validator("last_name")
    @classmethod
    def check_last_name(cls, value: str) -> str:
        return _require(value, "Sobrenome é obrigatório", min_length=2)

    @field_validator("birth_date")
    @classmethod
    def check_birth_date(cls, value: str) -> str:
        value = _require(value, "Data de nascimento é obrigatória")
        if len(value.split("-")[0]) != 4:
            raise ValueError("Data inválida (O ano deve ter 4 dígitos)")
        try:
            date.fromisoformat(value)
        except ValueError:
            raise ValueError("Data inválida") from None
        return value

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: str) -> str:
        if len(only_digits(value)) < 10:
            raise ValueError("Telefone inválido")
        return value

    @field_validator("cpf")
    @classmethod
    def check_cpf(cls, value: str) -> str:
        if len(only_digits(value)) < 11:
            raise ValueError("CPF incompleto")
        if not validate_cpf(value):
            raise ValueError("CPF inválido")
        return value

    @field_validator("rg")
    @classmethod
    def check_rg(cls, value: str) -> str:
        return _require(value, "RG é obrigatório")

    @field_validator("issuing_authority")
    @classmethod
    def check_issuing_authority(cls, value: str) -> str:
        return _require(value, "Órgão emissor obrigatório")


class AddressForm(BaseModel):
    """Step 2 of the onboarding wizard"""
    cep: str
    street: str
    number: str
    complement: Optional[str] = None
    neighborhood: str
    city: str
    state: str

    @field_validator("cep")
    @classmethod
    def check_cep(cls, value: str) -> str:
        if len(only_digits(value)) != CEP_LENGTH:
            raise ValueError("CEP inválido")
        return value

    @field_validator("street")
    @classmethod
    def check_street(cls, value: str) -> str:
        return _require(value, "Rua é obrigatória")

    @field_validator("number")
    @classmethod
    def check_number(cls, value: str) -> str:
        return _require(value, "Número é obrigatório")

    @field_validator("neighborhood")
    @classmethod
    def check_neighborhood(cls, value: str) -> str:
        return _require(value, "Bairro é obrigatório")

    @field_validator("city")
    @classmethod
    def check_city(cls, value: str) -> str:
        return _require(value, "Cidade é obrigatória")

    @field_validator("state")
    @classmethod
    def check_state(cls, value: str) -> str:
        value = (value or "").strip().upper()
        if value not in BRAZILIAN_STATES:
            raise ValueError("UF é obrigatória")
        return value


class OnboardingForm(PersonalDataForm, AddressForm):
    """Both wizard steps together, validated once more on submit"""

    def to_profile_row(self, user_id: str) -> Dict[str, Optional[str]]:
        """Row for the profiles table, with masks stripped"""
        return {
            "id": user_id,
            "nome": self.first_name,
            "sobrenome": self.last_name,
            "data_nascimento": self.birth_date or None,
            "telefone": only_digits(self.phone),
            "cpf": only_digits(self.cpf),
            "rg": only_digits(self.rg),
            "orgao_emissor": self.issuing_authority,
            "cep": only_digits(self.cep),
            "rua": self.street,
            "numero": self.number,
            "complemento": self.complement or None,
            "bairro": self.neighborhood,
            "municipio": self.city,
            "uf": self.state,
        }


def form_errors(error: ValidationError) -> Dict[str, str]:
    """First message per field; model-level errors are keyed by "__root__" """
    messages: Dict[str, str] = {}
    for item in error.errors():
        field = str(item["loc"][0]) if item.get("loc") else "__root__"
        ctx_error = item.get("ctx", {}).get("error")
        messages.setdefault(field, str(ctx_error) if ctx_error else item["msg"])
    return messages
