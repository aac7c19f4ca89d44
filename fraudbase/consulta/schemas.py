import math
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ---------- ENVOLVIDO ----------
class Envolvido(BaseModel):
    """Pessoa vinculada a um B.O. (suposto autor, vítima, testemunha...)."""

    model_config = ConfigDict(extra="ignore")

    id: int
    numero_do_bo: Optional[str] = None
    tipo_envolvido: Optional[str] = None
    nomecompleto: Optional[str] = None
    cpf: Optional[str] = None
    nomedamae: Optional[str] = None
    nascimento: Optional[str] = None
    nacionalidade: Optional[str] = None
    naturalidade: Optional[str] = None
    uf_envolvido: Optional[str] = None
    sexo_envolvido: Optional[str] = None
    telefone_envolvido: Optional[str] = None
    data_fato: Optional[str] = None
    delegacia_responsavel: Optional[str] = None
    situacao: Optional[str] = None
    natureza: Optional[str] = None

    # Campos presentes só no detalhe
    cep_fato: Optional[str] = None
    latitude_fato: Optional[str] = None
    longitude_fato: Optional[str] = None
    logradouro_fato: Optional[str] = None
    numerocasa_fato: Optional[str] = None
    bairro_fato: Optional[str] = None
    municipio_fato: Optional[str] = None
    pais_fato: Optional[str] = None
    relato_historico: Optional[str] = None
    instituicao_bancaria: Optional[str] = None
    endereco_ip: Optional[str] = None
    valor: Optional[str] = None
    pix_utilizado: Optional[str] = None
    numero_conta_bancaria: Optional[str] = None
    numero_boleto: Optional[str] = None
    processo_banco: Optional[str] = None
    numero_agencia_bancaria: Optional[str] = None
    cartao: Optional[str] = None
    terminal: Optional[str] = None
    tipo_pagamento: Optional[str] = None
    orgao_concessionaria: Optional[str] = None
    veiculo: Optional[str] = None
    terminal_conexao: Optional[str] = None
    erb: Optional[str] = None
    operacao_policial: Optional[str] = None
    numero_laudo_pericial: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _stringify(cls, v, info):
        if info.field_name != "id" and isinstance(v, (int, float)):
            return str(v)
        return v


# ---------- FILTROS ----------
class FilterSet(BaseModel):
    """Critérios da consulta; cada um com seu próprio mínimo para valer."""

    nome: str = ""
    cpf: str = ""
    bo: str = ""
    telefone: str = ""


# ---------- RESULTADO PAGINADO ----------
class PageResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: List[Envolvido] = Field(default_factory=list)
    total_count: int = Field(0, alias="totalCount")
    page: int = 1
    limit: int = 10
    total_pages: Optional[int] = Field(None, alias="totalPages")

    @field_validator("data", mode="before")
    @classmethod
    def _null_data(cls, v):
        return v or []

    @field_validator("page", mode="before")
    @classmethod
    def _min_page(cls, v):
        try:
            return max(1, int(v))
        except (TypeError, ValueError):
            return 1

    @model_validator(mode="after")
    def _consistency(self):
        if self.limit > 0 and len(self.data) > self.limit:
            self.data = self.data[: self.limit]
        if self.total_pages is None:
            self.total_pages = math.ceil(self.total_count / self.limit) if self.limit > 0 else 0
        return self

    @classmethod
    def empty(cls, page: int = 1, limit: int = 10) -> "PageResult":
        return cls(data=[], total_count=0, page=page, limit=limit, total_pages=0)

    @property
    def page_index(self) -> int:
        """Índice de página zero-based usado pelo controle de paginação."""
        return self.page - 1

    @property
    def show_pagination(self) -> bool:
        return (self.total_pages or 0) > 1
