import math
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from fraudbase.common.formatting import display_cpf, only_digits, truncate_chars

BO_SEPARATOR = ", "


class RiskTier(str, Enum):
    HIGH = "ALTO"
    MEDIUM = "MÉDIO"
    LOW = "BAIXO"

    @property
    def advisory(self) -> str:
        return RISK_ADVISORIES[self]


RISK_ADVISORIES = {
    RiskTier.HIGH: (
        "Infrator com alto índice de reincidência. Recomenda-se priorizar a análise "
        "dos casos vinculados e o compartilhamento das informações com as unidades envolvidas."
    ),
    RiskTier.MEDIUM: (
        "Reincidência moderada. Recomenda-se acompanhar os novos registros vinculados a este CPF."
    ),
    RiskTier.LOW: "Reincidência baixa. Manter o monitoramento de rotina.",
}


def risk_tier(count: int) -> RiskTier:
    """Faixa de risco: mais de 5 ocorrências é ALTO, 4 ou 5 é MÉDIO, o resto BAIXO."""
    if count > 5:
        return RiskTier.HIGH
    if count >= 4:
        return RiskTier.MEDIUM
    return RiskTier.LOW


class RecidivismRecord(BaseModel):
    """Um CPF com mais de uma ocorrência como suposto autor/infrator."""

    model_config = ConfigDict(extra="ignore")

    cpf: str = ""
    nomecompleto: Optional[str] = None
    numeros_do_bo: Optional[str] = None
    quantidade: int = 0

    @property
    def cpf_digits(self) -> str:
        return only_digits(self.cpf)

    @property
    def cpf_display(self) -> str:
        return display_cpf(self.cpf)

    @property
    def display_name(self) -> str:
        return self.nomecompleto or "Nome não informado"

    @property
    def chart_name(self) -> str:
        return truncate_chars(self.display_name, 20)

    @property
    def bo_list(self) -> List[str]:
        if not self.numeros_do_bo:
            return []
        return [bo.strip() for bo in self.numeros_do_bo.split(BO_SEPARATOR) if bo.strip()]

    @property
    def risk_tier(self) -> RiskTier:
        return risk_tier(self.quantidade)


class RecidivismPage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: List[RecidivismRecord] = Field(default_factory=list)
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
    def _pages(self):
        if not self.total_pages:
            self.total_pages = max(1, math.ceil(self.total_count / self.limit)) if self.limit > 0 else 1
        return self
