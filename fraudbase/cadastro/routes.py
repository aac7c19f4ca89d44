import asyncio
import logging
from typing import Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from pydantic import ValidationError

from fraudbase.common import notifications
from fraudbase.common.exceptions import ApiError, TransportError
from fraudbase.common.forms import form_errors
from fraudbase.common.notifications import Notification
from fraudbase.common.session import Session, require_session
from fraudbase.common.templating import redirect, render
from fraudbase.services.api_client import FraudbaseApiClient, get_api_client

from .schemas import LOOKUP_KEYS, EnvolvidoForm, lookup_names

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cadastro-envolvidos", tags=["cadastro"])

MSG_CREATED = "Cadastro realizado com sucesso!"
MSG_LOOKUP_ERROR = "Erro ao carregar listas de apoio do formulário."
TIPOS_ENVOLVIDO = ["Suposto Autor/Infrator", "Vítima", "Testemunha", "Comunicante", "Outro"]
SEXOS = ["Masculino", "Feminino", "Não informado"]


async def load_lookups(api: FraudbaseApiClient) -> Tuple[Dict[str, List[str]], Optional[Notification]]:
    """Carrega as listas dos selects; em caso de falha o formulário abre com listas vazias."""
    try:
        results = await asyncio.gather(
            api.list_municipios(),
            api.list_ufs(),
            api.list_paises(),
            api.list_delegacias(),
            api.list_bancos(),
        )
    except (ApiError, TransportError) as e:
        logger.error("Erro ao carregar listas de apoio: %s", e)
        return {name: [] for name in LOOKUP_KEYS}, notifications.warning(MSG_LOOKUP_ERROR)
    return {name: lookup_names(payload, LOOKUP_KEYS[name]) for name, payload in zip(LOOKUP_KEYS, results)}, None


async def _render_form(request, session, api, form=None, errors=None, notes=()):
    lookups, note = await load_lookups(api)
    return render(
        request,
        "cadastro_envolvidos.html",
        {
            "form": form or {},
            "errors": errors or {},
            "lookups": lookups,
            "tipos": TIPOS_ENVOLVIDO,
            "sexos": SEXOS,
        },
        session=session,
        notifications=[note, *notes],
    )


@router.get("", response_class=HTMLResponse)
async def cadastro_page(
    request: Request,
    session: Session = Depends(require_session),
    api: FraudbaseApiClient = Depends(get_api_client),
):
    return await _render_form(request, session, api)


@router.post("", response_class=HTMLResponse)
async def cadastrar_envolvido(
    request: Request,
    session: Session = Depends(require_session),
    api: FraudbaseApiClient = Depends(get_api_client),
):
    raw = {k: v for k, v in (await request.form()).items() if isinstance(v, str)}
    try:
        form = EnvolvidoForm(**raw)
    except ValidationError as e:
        return await _render_form(request, session, api, form=raw, errors=form_errors(e))

    try:
        created = await api.create_envolvido(form.to_payload())
    except (ApiError, TransportError) as e:
        logger.error("Erro ao cadastrar envolvido (B.O. %s): %s", form.numero_do_bo, e)
        return await _render_form(
            request,
            session,
            api,
            form=raw,
            notes=[notifications.error(f"Erro ao cadastrar: {e}")],
        )

    logger.info("Envolvido cadastrado (B.O. %s, id %s)", form.numero_do_bo, (created or {}).get("id"))
    return redirect("/cadastro-envolvidos", notifications.success(MSG_CREATED), session=session)
