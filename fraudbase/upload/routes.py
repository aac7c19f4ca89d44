"""
Importação de relatórios de B.O. em planilha (.xlsx) e limpeza de duplicatas.

A leitura da planilha e a deduplicação são feitas pelo backend; aqui só se
valida o arquivo antes do envio e se traduz a resposta em mensagem.
"""

import logging
import os
from typing import Any, Dict

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import HTMLResponse

from fraudbase.common import notifications
from fraudbase.common.exceptions import ApiError, TransportError
from fraudbase.common.notifications import Notification
from fraudbase.common.session import Session, require_session
from fraudbase.common.templating import redirect, render
from fraudbase.services.api_client import FraudbaseApiClient, get_api_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["upload"])

ALLOWED_EXTENSION = ".xlsx"
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
MSG_INVALID_FORMAT = "Formato de arquivo inválido. Apenas arquivos .xlsx são permitidos."
MSG_EMPTY_FILE = "Arquivo vazio."
MSG_PROCESS_ERROR = "Erro ao processar o arquivo."
MSG_CLEAN_ERROR = "Erro ao remover duplicatas."


def upload_message(payload: Dict[str, Any]) -> str:
    inseridos = payload.get("registrosInseridos") or 0
    message = f"Upload realizado com sucesso! {inseridos} registros foram inseridos."
    duplicatas = payload.get("duplicatasEvitadas")
    if duplicatas:
        message += f" {duplicatas} duplicata(s) evitada(s)."
    return message


def _api_error(e: ApiError, fallback: str) -> Notification:
    return notifications.error(e.message if e.message and not e.message.startswith("Erro HTTP") else fallback)


@router.get("/upload-relatorio", response_class=HTMLResponse)
async def upload_page(request: Request, session: Session = Depends(require_session)):
    return render(request, "upload_relatorio.html", session=session)


@router.post("/upload-relatorio", response_class=HTMLResponse)
async def upload_relatorio(
    relatorio: UploadFile = File(...),
    session: Session = Depends(require_session),
    api: FraudbaseApiClient = Depends(get_api_client),
):
    filename = relatorio.filename or ""
    if os.path.splitext(filename)[1].lower() != ALLOWED_EXTENSION:
        return redirect("/upload-relatorio", notifications.error(MSG_INVALID_FORMAT), session=session)

    content = await relatorio.read()
    if not content:
        return redirect("/upload-relatorio", notifications.error(MSG_EMPTY_FILE), session=session)

    try:
        payload = await api.upload_relatorio(filename, content, relatorio.content_type or XLSX_CONTENT_TYPE)
    except ApiError as e:
        logger.error("Upload de %s recusado: %s", filename, e)
        return redirect("/upload-relatorio", _api_error(e, MSG_PROCESS_ERROR), session=session)
    except TransportError as e:
        return redirect("/upload-relatorio", notifications.error(str(e)), session=session)

    payload = payload or {}
    logger.info(
        "Relatório %s importado: %s inseridos, %s duplicatas evitadas",
        filename,
        payload.get("registrosInseridos"),
        payload.get("duplicatasEvitadas"),
    )
    return redirect("/upload-relatorio", notifications.success(upload_message(payload)), session=session)


@router.post("/upload-relatorio/limpar-duplicatas")
async def clean_duplicates(
    session: Session = Depends(require_session),
    api: FraudbaseApiClient = Depends(get_api_client),
):
    try:
        payload = await api.clean_duplicates() or {}
    except ApiError as e:
        logger.error("Erro na limpeza de duplicatas: %s", e)
        return redirect("/upload-relatorio", _api_error(e, MSG_CLEAN_ERROR), session=session)
    except TransportError as e:
        return redirect("/upload-relatorio", notifications.error(str(e)), session=session)

    removed = payload.get("rowsRemoved") or 0
    return redirect(
        "/upload-relatorio",
        notifications.success(f"{removed} registros duplicados removidos."),
        session=session,
    )
