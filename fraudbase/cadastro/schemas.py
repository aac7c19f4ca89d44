import re
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, field_validator

from fraudbase.common.formatting import CPF_DIGITS, PHONE_MAX_DIGITS, only_digits

DATE_BR_RE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")
DATE_ISO_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Chave de cada lista de apoio nas respostas do backend
LOOKUP_KEYS = {
    "municipios": "municipio",
    "ufs": "uf",
    "paises": "nome_pais",
    "delegacias": "nome",
    "bancos": "nome_completo",
}


def lookup_names(payload: Any, key: str) -> List[str]:
    """Lista de apoio como nomes simples; aceita lista de strings ou de objetos."""
    names = []
    for item in payload or []:
        value = item.get(key) if isinstance(item, dict) else item
        if value:
            names.append(str(value))
    return names


def _iso_date(value: str) -> str:
    value = value.strip()
    if not value or DATE_ISO_RE.match(value):
        return value
    match = DATE_BR_RE.match(value)
    if match:
        day, month, year = match.groups()
        return f"{year}-{month}-{day}"
    raise ValueError("Data inválida. Use o formato DD/MM/AAAA")


class EnvolvidoForm(BaseModel):
    """Formulário de cadastro de envolvido."""

    model_config = ConfigDict(extra="ignore", validate_default=True, str_strip_whitespace=True)

    numero_do_bo: str = ""
    tipo_envolvido: str = ""
    nomecompleto: str = ""
    cpf: str = ""
    nomedamae: str = ""
    nascimento: str = ""
    nacionalidade: str = ""
    naturalidade: str = ""
    uf_envolvido: str = ""
    sexo_envolvido: str = ""
    telefone_envolvido: str = ""
    data_fato: str = ""
    cep_fato: str = ""
    latitude_fato: str = ""
    longitude_fato: str = ""
    logradouro_fato: str = ""
    numerocasa_fato: str = ""
    bairro_fato: str = ""
    municipio_fato: str = ""
    pais_fato: str = ""
    delegacia_responsavel: str = ""
    situacao: str = ""
    natureza: str = ""
    relato_historico: str = ""
    instituicao_bancaria: str = ""
    endereco_ip: str = ""
    valor: str = ""
    pix_utilizado: str = ""
    numero_conta_bancaria: str = ""
    numero_boleto: str = ""
    processo_banco: str = ""
    numero_agencia_bancaria: str = ""
    cartao: str = ""
    terminal: str = ""
    tipo_pagamento: str = ""
    orgao_concessionaria: str = ""
    veiculo: str = ""
    terminal_conexao: str = ""
    erb: str = ""
    operacao_policial: str = ""
    numero_laudo_pericial: str = ""

    @field_validator("numero_do_bo")
    @classmethod
    def _bo(cls, v: str) -> str:
        if not v:
            raise ValueError("Número do B.O. é obrigatório")
        return v

    @field_validator("tipo_envolvido")
    @classmethod
    def _tipo(cls, v: str) -> str:
        if not v:
            raise ValueError("Tipo de envolvimento é obrigatório")
        return v

    @field_validator("nomecompleto")
    @classmethod
    def _nome(cls, v: str) -> str:
        if not v:
            raise ValueError("Nome completo é obrigatório")
        return v

    @field_validator("cpf")
    @classmethod
    def _cpf(cls, v: str) -> str:
        digits = only_digits(v)
        if digits and len(digits) != CPF_DIGITS:
            raise ValueError("CPF deve ter 11 dígitos")
        return digits

    @field_validator("telefone_envolvido")
    @classmethod
    def _telefone(cls, v: str) -> str:
        return only_digits(v)[:PHONE_MAX_DIGITS]

    @field_validator("nascimento", "data_fato")
    @classmethod
    def _datas(cls, v: str) -> str:
        return _iso_date(v)

    def to_payload(self) -> Dict[str, str]:
        return self.model_dump()
