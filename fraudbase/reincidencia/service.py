"""
Reincidência por CPF.

A agregação (contagem por CPF, ordem decrescente de ocorrências) é feita pelo
backend; aqui só se pagina, seleciona e monta o que a tela precisa.
"""

import logging
from typing import List, Optional

from pydantic import BaseModel, ValidationError

from fraudbase.common import notifications
from fraudbase.common.config import get_settings
from fraudbase.common.exceptions import ApiError, TransportError
from fraudbase.common.formatting import only_digits
from fraudbase.common.notifications import Notification
from fraudbase.services.api_client import FraudbaseApiClient

from .schemas import RecidivismPage, RecidivismRecord

logger = logging.getLogger(__name__)

MSG_LOAD_ERROR = "Erro ao carregar dados de reincidência por CPF."
MSG_EMPTY = "Nenhum dado de reincidência encontrado."
MSG_NOT_ON_PAGE = "Infrator não encontrado na página atual."


class RecidivismView(BaseModel):
    page: RecidivismPage
    failed: bool = False
    notification: Optional[Notification] = None

    @property
    def records(self) -> List[RecidivismRecord]:
        return self.page.data

    @property
    def empty(self) -> bool:
        return not self.page.data

    @property
    def total_label(self) -> str:
        return f"Total: {len(self.page.data)} infratores"


class RecidivismAggregator:
    def __init__(self, api: FraudbaseApiClient, page_size: Optional[int] = None):
        self.api = api
        self.page_size = page_size or get_settings().recidivism_page_size

    async def fetch_page(self, page: int = 1) -> RecidivismView:
        page = max(1, page)
        try:
            payload = await self.api.reincidencia_cpf(page, self.page_size)
            result = RecidivismPage.model_validate(payload or {})
        except (ApiError, TransportError, ValidationError) as e:
            logger.error("Erro ao buscar reincidência por CPF (página %s): %s", page, e)
            return RecidivismView(
                page=RecidivismPage(data=[], page=page, limit=self.page_size, total_pages=1),
                failed=True,
                notification=notifications.error(MSG_LOAD_ERROR),
            )

        if not result.data:
            return RecidivismView(page=result, notification=notifications.info(MSG_EMPTY))
        return RecidivismView(page=result)

    @staticmethod
    def select(view: RecidivismView, cpf: str) -> Optional[RecidivismRecord]:
        digits = only_digits(cpf)
        for record in view.records:
            if record.cpf_digits == digits:
                return record
        return None
