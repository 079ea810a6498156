"""
Brazilian document validation and input masks.

All functions are pure string transforms; masks accept partially typed
input and format as much of it as is available.
"""

import re

BRAZILIAN_STATES = [
    "AC", "AL", "AP", "AM", "BA", "CE", "DF", "ES", "GO", "MA", "MT", "MS", "MG", "PA",
    "PB", "PR", "PE", "PI", "RJ", "RN", "RS", "RO", "RR", "SC", "SP", "SE", "TO"
]

CPF_LENGTH = 11
CEP_LENGTH = 8
PHONE_MAX_LENGTH = 11


def only_digits(value: str) -> str:
    """Strip everything but 0-9"""
    return re.sub(r"\D", "", value or "")


def _cpf_check_digit(digits: str) -> int:
    weight = len(digits) + 1
    total = sum(int(d) * (weight - i) for i, d in enumerate(digits))
    remainder = 11 - (total % 11)
    return 0 if remainder >= 10 else remainder


def validate_cpf(cpf: str) -> bool:
    """
    Validate a CPF (Cadastro de Pessoas Físicas) number.

    Accepts masked or unmasked input. Sequences of one repeated digit
    ("111.111.111-11") pass the checksum but are never issued, so they are
    rejected up front.
    """
    digits = only_digits(cpf)
    if len(digits) != CPF_LENGTH:
        return False
    if len(set(digits)) == 1:
        return False

    if _cpf_check_digit(digits[:9]) != int(digits[9]):
        return False
    return _cpf_check_digit(digits[:10]) == int(digits[10])


def mask_cpf(value: str) -> str:
    """000.000.000-00"""
    masked = only_digits(value)
    masked = re.sub(r"(\d{3})(\d)", r"\1.\2", masked, count=1)
    masked = re.sub(r"(\d{3})(\d)", r"\1.\2", masked, count=1)
    masked = re.sub(r"(\d{3})(\d{1,2})", r"\1-\2", masked, count=1)
    return re.sub(r"(-\d{2})\d+?$", r"\1", masked)


def mask_phone(value: str) -> str:
    """(00) 00000-0000 for mobiles, (00) 0000-0000 for landlines"""
    masked = only_digits(value)[:PHONE_MAX_LENGTH]
    masked = re.sub(r"^(\d{2})(\d)", r"(\1) \2", masked)
    return re.sub(r"(\d)(\d{4})$", r"\1-\2", masked)


def mask_cep(value: str) -> str:
    """00000-000"""
    masked = re.sub(r"^(\d{5})(\d)", r"\1-\2", only_digits(value))
    return masked[:CEP_LENGTH + 1]
