"""
Dados do painel inicial: contadores, vítimas por sexo / faixa etária,
infratores por delegacia e o B.O. mais recente / mais antigo.
"""

import asyncio
import logging
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError

from fraudbase.common import notifications
from fraudbase.common.exceptions import ApiError, TransportError
from fraudbase.common.notifications import Notification
from fraudbase.services.api_client import FraudbaseApiClient

logger = logging.getLogger(__name__)

MSG_DASHBOARD_ERROR = "Erro ao carregar dados do dashboard."


class SexoStat(BaseModel):
    sexo: str = "Não informado"
    quantidade: int = 0


class FaixaEtariaStat(BaseModel):
    faixa_etaria: str = "Não informado"
    quantidade: int = 0


class DelegaciaStat(BaseModel):
    delegacia_responsavel: str = "Não informado"
    quantidade: int = 0


class BOStatistics(BaseModel):
    recent_bos: List[str] = Field(default_factory=list)
    oldest_bo: Optional[str] = None

    @property
    def newest_bo(self) -> Optional[str]:
        return self.recent_bos[0] if self.recent_bos else None

    @classmethod
    def from_payload(cls, payload: Any) -> "BOStatistics":
        """Aceita ``{recentBOs[], oldestBO}`` e também ``{newestBO, oldestBO}``."""
        if not isinstance(payload, dict):
            payload = {}

        def numero(item) -> Optional[str]:
            if isinstance(item, dict):
                return item.get("numero_do_bo")
            return str(item) if item else None

        recent = [numero(bo) for bo in payload.get("recentBOs") or []]
        if not recent and payload.get("newestBO"):
            recent = [numero(payload["newestBO"])]
        return cls(recent_bos=[bo for bo in recent if bo], oldest_bo=numero(payload.get("oldestBO")))


class DashboardData(BaseModel):
    quantidade_bos: int = 0
    quantidade_infratores: int = 0
    quantidade_vitimas: int = 0
    vitimas_por_sexo: List[SexoStat] = Field(default_factory=list)
    vitimas_por_faixa_etaria: List[FaixaEtariaStat] = Field(default_factory=list)
    infratores_por_delegacia: List[DelegaciaStat] = Field(default_factory=list)
    bo_statistics: BOStatistics = Field(default_factory=BOStatistics)
    failed: bool = False
    notification: Optional[Notification] = None


def _quantidade(payload: Any) -> int:
    if isinstance(payload, dict):
        return int(payload.get("quantidade") or 0)
    return 0


async def load_dashboard(api: FraudbaseApiClient) -> DashboardData:
    """Busca todas as estatísticas; qualquer falha zera o painel e gera uma notificação de erro."""
    try:
        sexo, faixa, delegacia, bos, infratores, vitimas = await asyncio.gather(
            api.dashboard_stat("vitimas-por-sexo"),
            api.dashboard_stat("vitimas-por-faixa-etaria"),
            api.dashboard_stat("infratores-por-delegacia"),
            api.dashboard_stat("quantidade-bos"),
            api.dashboard_stat("quantidade-infratores"),
            api.dashboard_stat("quantidade-vitimas"),
        )
        data = DashboardData(
            quantidade_bos=_quantidade(bos),
            quantidade_infratores=_quantidade(infratores),
            quantidade_vitimas=_quantidade(vitimas),
            vitimas_por_sexo=sexo or [],
            vitimas_por_faixa_etaria=faixa or [],
            infratores_por_delegacia=delegacia or [],
        )
    except (ApiError, TransportError, ValidationError, ValueError) as e:
        logger.error("Erro ao buscar dados para o dashboard: %s", e)
        return DashboardData(failed=True, notification=notifications.error(MSG_DASHBOARD_ERROR))

    # Estatística de B.O. é complementar: falha aqui não derruba o painel
    try:
        data.bo_statistics = BOStatistics.from_payload(await api.bo_statistics())
    except (ApiError, TransportError, ValidationError) as e:
        logger.warning("Estatísticas de B.O. indisponíveis: %s", e)
    return data
