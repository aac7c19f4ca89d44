"""
Normalização e formatação de campos digitados pelo usuário.

Funções puras, sem efeitos colaterais, compartilhadas por todas as telas.
Entrada malformada nunca lança exceção: degrada para a melhor máscara parcial.
"""

import re
import unicodedata
from typing import Optional

CPF_DIGITS = 11
PHONE_MAX_DIGITS = 11

_NON_DIGITS = re.compile(r"\D")
_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_BR_DATE = re.compile(r"^\d{2}/\d{2}/\d{4}$")


def only_digits(value: Optional[str]) -> str:
    return _NON_DIGITS.sub("", value or "")


def format_cpf(value: Optional[str]) -> str:
    """Máscara progressiva ``###.###.###-##`` para CPF (completo ou parcial)."""
    digits = only_digits(value)[:CPF_DIGITS]
    if len(digits) <= 3:
        return digits
    if len(digits) <= 6:
        return f"{digits[:3]}.{digits[3:]}"
    if len(digits) <= 9:
        return f"{digits[:3]}.{digits[3:6]}.{digits[6:]}"
    return f"{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}"


def format_phone(value: Optional[str]) -> str:
    """Máscara ``(DD)XXXX-XXXX`` / ``(DD)XXXXX-XXXX`` conforme a quantidade de dígitos."""
    digits = only_digits(value)[:PHONE_MAX_DIGITS]
    if len(digits) >= 10:
        return f"({digits[:2]}){digits[2:-4]}-{digits[-4:]}"
    if len(digits) >= 3:
        return f"({digits[:2]}){digits[2:]}"
    return digits


def format_field(value: Optional[str], kind: str = "plain") -> str:
    if kind == "cpf":
        return format_cpf(value)
    if kind == "phone":
        return format_phone(value)
    return value or ""


def display_cpf(value: Optional[str]) -> str:
    """CPF armazenado (só dígitos) para exibição; valores fora do padrão ficam como vieram."""
    if not value:
        return "N/A"
    digits = only_digits(value)
    if len(digits) != CPF_DIGITS:
        return value
    return format_cpf(digits)


def strip_accents(value: Optional[str]) -> str:
    value = unicodedata.normalize("NFKD", value or "")
    return "".join(ch for ch in value if not unicodedata.combining(ch))


def normalize_name(value: Optional[str]) -> str:
    """Nome para busca: sem acento e em minúsculas."""
    return strip_accents((value or "").strip()).lower()


def format_date(value: Optional[str]) -> str:
    """``YYYY-MM-DD`` vira ``DD/MM/YYYY``; datas já no padrão brasileiro ficam iguais."""
    if not value:
        return ""
    if _BR_DATE.match(value):
        return value
    m = _ISO_DATE.match(value)
    if m:
        year, month, day = m.groups()
        return f"{day}/{month}/{year}"
    return value


def truncate_words(text: Optional[str], words: int = 2) -> str:
    parts = (text or "").split()
    if len(parts) <= words:
        return " ".join(parts)
    return " ".join(parts[:words]) + "..."


def truncate_chars(text: Optional[str], size: int = 20) -> str:
    text = text or ""
    return f"{text[:size]}..." if len(text) > size else text
