from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from fraudbase.common.config import get_settings
from fraudbase.common.formatting import format_cpf
from fraudbase.common.notifications import Notification
from fraudbase.common.session import Session, require_session
from fraudbase.common.templating import render
from fraudbase.services.api_client import FraudbaseApiClient, get_api_client

from .presenter import present_detail, present_pagination, present_rows
from .schemas import FilterSet
from .service import SearchClient

router = APIRouter(prefix="/consulta-envolvidos", tags=["consulta"])


def _page_size(limit: Optional[int]) -> int:
    settings = get_settings()
    if limit in settings.search_page_size_options:
        return limit
    return settings.search_default_limit


def _has_input(filters: FilterSet) -> bool:
    return any(v.strip() for v in (filters.nome, filters.cpf, filters.bo, filters.telefone))


async def _run_search(
    client: SearchClient, filters: FilterSet, page: int, limit: int, submitted: bool = False
) -> List[Optional[Notification]]:
    # Primeira carga da página não busca; envio do formulário sempre passa pela validação
    if not submitted and not _has_input(filters):
        return []
    outcome = await client.search(filters, page, limit)
    return [outcome.notification]


def _render_page(request: Request, client: SearchClient, session: Session, notes, detail=None):
    return render(
        request,
        "consulta_envolvidos.html",
        {
            "filters": client.filters,
            "rows": present_rows(client.result),
            "pagination": present_pagination(client.result),
            "page_size_options": get_settings().search_page_size_options,
            "detail": detail,
            "detail_sections": present_detail(detail) if detail else None,
        },
        session=session,
        notifications=notes,
    )


@router.get("", response_class=HTMLResponse)
async def consulta_envolvidos(
    request: Request,
    nome: str = "",
    cpf: str = "",
    bo: str = "",
    telefone: str = "",
    page: int = 1,
    limit: Optional[int] = None,
    buscar: str = "",
    session: Session = Depends(require_session),
    api: FraudbaseApiClient = Depends(get_api_client),
):
    limit = _page_size(limit)
    client = SearchClient(api, limit)
    filters = FilterSet(nome=nome, cpf=format_cpf(cpf), bo=bo, telefone=telefone)
    client.filters = filters
    notes = await _run_search(client, filters, page, limit, submitted=bool(buscar))
    return _render_page(request, client, session, notes)


@router.get("/{envolvido_id}", response_class=HTMLResponse)
async def detalhes_envolvido(
    request: Request,
    envolvido_id: int,
    nome: str = "",
    cpf: str = "",
    bo: str = "",
    telefone: str = "",
    page: int = 1,
    limit: Optional[int] = None,
    buscar: str = "",
    session: Session = Depends(require_session),
    api: FraudbaseApiClient = Depends(get_api_client),
):
    """Lista atual + modal de detalhes. Se o detalhe falhar, a lista fica como estava."""
    limit = _page_size(limit)
    client = SearchClient(api, limit)
    filters = FilterSet(nome=nome, cpf=format_cpf(cpf), bo=bo, telefone=telefone)
    client.filters = filters
    notes = await _run_search(client, filters, page, limit, submitted=bool(buscar))

    detail = await client.fetch_detail(envolvido_id)
    if not detail.ok:
        notes.append(detail.notification)
    return _render_page(request, client, session, notes, detail=detail.record)
