"""
Cliente de consulta de envolvidos.

Máquina de estados ``idle -> loading -> {success | failed}``. Uma nova consulta
pode ser disparada com outra ainda em andamento: cada requisição recebe um
número de sequência e a resposta só é aplicada se ainda for a mais recente.
Não há cancelamento nem timeout de requisição.
"""

import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ValidationError

from fraudbase.common import notifications
from fraudbase.common.config import get_settings
from fraudbase.common.exceptions import ApiError, TransportError
from fraudbase.common.notifications import Notification
from fraudbase.services.api_client import FraudbaseApiClient

from .filters import build_query_params, is_search_worthy
from .schemas import Envolvido, FilterSet, PageResult

logger = logging.getLogger(__name__)

MSG_INVALID_FILTERS = (
    "Informe ao menos um filtro válido: nome ou B.O. com 3 caracteres, "
    "CPF com 11 dígitos ou telefone com 3 caracteres."
)
MSG_NO_RESULTS = "Nenhum resultado encontrado para os filtros informados."
MSG_SEARCH_ERROR = "Erro ao buscar envolvidos. Tente novamente."
MSG_DETAIL_ERROR = "Erro ao carregar detalhes do envolvido."


class SearchState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILED = "failed"


class OutcomeKind(str, Enum):
    WARNING = "warning"
    SUCCESS = "success"
    ERROR = "error"
    STALE = "stale"


class SearchOutcome(BaseModel):
    kind: OutcomeKind
    sequence: int = 0
    result: Optional[PageResult] = None
    notification: Optional[Notification] = None


class DetailOutcome(BaseModel):
    record: Optional[Envolvido] = None
    notification: Optional[Notification] = None

    @property
    def ok(self) -> bool:
        return self.record is not None


def count_message(result: PageResult) -> Notification:
    if result.total_count == 0:
        return notifications.info(MSG_NO_RESULTS)
    return notifications.success(f"{result.total_count} resultado(s) encontrado(s).")


class SearchClient:
    def __init__(self, api: FraudbaseApiClient, limit: Optional[int] = None):
        self.api = api
        self.state = SearchState.IDLE
        self.filters = FilterSet()
        self.page = 1
        self.limit = limit or get_settings().search_default_limit
        self.result = PageResult.empty(limit=self.limit)
        self.notification: Optional[Notification] = None
        self._sequence = 0

    @property
    def latest_sequence(self) -> int:
        return self._sequence

    async def search(self, filters: FilterSet, page: int = 1, limit: Optional[int] = None) -> SearchOutcome:
        limit = limit or self.limit
        if not is_search_worthy(filters):
            self.notification = notifications.warning(MSG_INVALID_FILTERS)
            return SearchOutcome(kind=OutcomeKind.WARNING, notification=self.notification)

        self._sequence += 1
        sequence = self._sequence
        self.filters = filters
        self.page = max(1, page)
        self.limit = limit
        self.state = SearchState.LOADING

        try:
            payload = await self.api.search_envolvidos(build_query_params(filters, self.page, limit))
            result = PageResult.model_validate(payload or {})
        except (ApiError, TransportError, ValidationError) as e:
            if sequence != self._sequence:
                logger.info("Erro da consulta #%s ignorado: já existe consulta mais recente", sequence)
                return SearchOutcome(kind=OutcomeKind.STALE, sequence=sequence)
            logger.error("Erro ao buscar envolvidos: %s", e)
            self.state = SearchState.FAILED
            self.result = PageResult.empty(page=self.page, limit=limit)
            self.notification = notifications.error(MSG_SEARCH_ERROR)
            return SearchOutcome(
                kind=OutcomeKind.ERROR,
                sequence=sequence,
                result=self.result,
                notification=self.notification,
            )

        if sequence != self._sequence:
            logger.info("Resposta obsoleta da consulta #%s descartada (atual: #%s)", sequence, self._sequence)
            return SearchOutcome(kind=OutcomeKind.STALE, sequence=sequence, result=result)

        self.state = SearchState.SUCCESS
        self.result = result
        self.notification = count_message(result)
        return SearchOutcome(
            kind=OutcomeKind.SUCCESS,
            sequence=sequence,
            result=result,
            notification=self.notification,
        )

    async def change_page(self, new_page: int) -> Optional[SearchOutcome]:
        """Repete a consulta atual em outra página; filtros inválidos não disparam requisição."""
        if not is_search_worthy(self.filters):
            return None
        return await self.search(self.filters, new_page, self.limit)

    async def change_page_size(self, new_size: int) -> Optional[SearchOutcome]:
        self.limit = new_size
        self.page = 1
        if not is_search_worthy(self.filters):
            return None
        return await self.search(self.filters, 1, new_size)

    async def fetch_detail(self, envolvido_id: int) -> DetailOutcome:
        """Busca o registro completo; falha não mexe na lista já exibida."""
        try:
            payload = await self.api.get_envolvido(envolvido_id)
            record = Envolvido.model_validate(payload)
        except (ApiError, TransportError, ValidationError) as e:
            logger.error("Erro ao carregar detalhes do envolvido %s: %s", envolvido_id, e)
            return DetailOutcome(notification=notifications.error(MSG_DETAIL_ERROR))
        return DetailOutcome(record=record)
