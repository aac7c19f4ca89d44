import re
from typing import Annotated, Any, Dict, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, ValidationInfo, field_validator

from fraudbase.common.formatting import CPF_DIGITS, only_digits

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD = 6


class User(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    login: str = ""
    nome: str = ""
    cpf: str = ""
    matricula: str = ""
    telefone: str = ""
    cidade: str = ""
    estado: str = ""
    unidade_policial: str = ""
    email: str = ""
    is_admin: bool = False

    @field_validator("*", mode="before")
    @classmethod
    def _null_to_default(cls, v, info):
        if v is None and info.field_name not in ("id", "is_admin"):
            return ""
        return v


class UserForm(BaseModel):
    """Dados de cadastro/edição de usuário, validados antes de ir ao backend."""

    model_config = ConfigDict(validate_default=True)

    login: str = ""
    nome: str = ""
    cpf: str = ""
    matricula: str = ""
    telefone: str = ""
    cidade: str = ""
    estado: str = ""
    unidade_policial: str = ""
    email: str = ""
    is_admin: bool = False

    @field_validator("login", "nome", "matricula", "telefone", "cidade", "estado", "unidade_policial", "email")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()

    @field_validator("login")
    @classmethod
    def _login(cls, v: str) -> str:
        if not v:
            raise ValueError("Login é obrigatório")
        return v

    @field_validator("nome")
    @classmethod
    def _nome(cls, v: str) -> str:
        if not v:
            raise ValueError("Nome é obrigatório")
        return v

    @field_validator("matricula")
    @classmethod
    def _matricula(cls, v: str) -> str:
        if not v:
            raise ValueError("Matrícula é obrigatória")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        if not v:
            raise ValueError("Email é obrigatório")
        if not EMAIL_RE.match(v):
            raise ValueError("Email inválido")
        return v

    @field_validator("cpf")
    @classmethod
    def _cpf(cls, v: str) -> str:
        digits = only_digits(v)
        if not digits:
            raise ValueError("CPF é obrigatório")
        if len(digits) != CPF_DIGITS:
            raise ValueError("CPF deve ter 11 dígitos")
        return digits

    @field_validator("telefone", mode="after")
    @classmethod
    def _telefone(cls, v: str) -> str:
        return only_digits(v)

    def to_payload(self, user_id: Optional[int] = None) -> Dict[str, Any]:
        payload = self.model_dump()
        if user_id is not None:
            payload["id"] = user_id
        return payload


def check_password(senha: str) -> str:
    if not senha:
        raise ValueError("Nova senha é obrigatória")
    if len(senha) < MIN_PASSWORD:
        raise ValueError(f"A senha deve ter pelo menos {MIN_PASSWORD} caracteres")
    return senha


def check_confirmation(confirmacao: str, info: ValidationInfo) -> str:
    senha = info.data.get("senha")
    if senha is not None and confirmacao != senha:
        raise ValueError("As senhas não coincidem")
    return confirmacao


NewPassword = Annotated[str, AfterValidator(check_password)]
Confirmation = Annotated[str, AfterValidator(check_confirmation)]


class PasswordChange(BaseModel):
    model_config = ConfigDict(validate_default=True)

    senha: NewPassword = ""
    confirmacao: Confirmation = ""


class NewUserForm(UserForm):
    """Cadastro: além dos dados, a senha inicial com confirmação."""

    senha: NewPassword = ""
    confirmacao: Confirmation = ""

    def to_payload(self, user_id: Optional[int] = None) -> Dict[str, Any]:
        payload = super().to_payload(user_id)
        payload.pop("confirmacao", None)
        return payload
