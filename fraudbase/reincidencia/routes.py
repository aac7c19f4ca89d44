import io

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, StreamingResponse

from fraudbase.common import notifications
from fraudbase.common.session import Session, require_session
from fraudbase.common.templating import flash, redirect, render
from fraudbase.reports.exporter import ExportMode, ReportExporter
from fraudbase.services.api_client import FraudbaseApiClient, get_api_client

from .charts import occurrences_chart
from .schemas import RecidivismRecord
from .service import MSG_NOT_ON_PAGE, RecidivismAggregator, RecidivismView

router = APIRouter(tags=["reincidencia"])

MSG_PIX_PENDING = "Esta funcionalidade está em desenvolvimento e estará disponível em breve."


def get_exporter() -> ReportExporter:
    return ReportExporter()


def _render(request: Request, session: Session, view: RecidivismView, selected=None, notes=()):
    return render(
        request,
        "reincidencia_cpf.html",
        {
            "view": view,
            "records": view.records,
            "chart": occurrences_chart(view.records) if view.records else "",
            "selected": selected,
            "export_modes": list(ExportMode),
        },
        session=session,
        notifications=[view.notification, *notes],
    )


@router.get("/reincidencia-cpf", response_class=HTMLResponse)
async def reincidencia_cpf(
    request: Request,
    page: int = 1,
    session: Session = Depends(require_session),
    api: FraudbaseApiClient = Depends(get_api_client),
):
    view = await RecidivismAggregator(api).fetch_page(page)
    return _render(request, session, view)


@router.get("/reincidencia-cpf/{cpf}", response_class=HTMLResponse)
async def reincidencia_cpf_detalhe(
    request: Request,
    cpf: str,
    page: int = 1,
    session: Session = Depends(require_session),
    api: FraudbaseApiClient = Depends(get_api_client),
):
    """Página atual com o painel de detalhes do CPF selecionado."""
    view = await RecidivismAggregator(api).fetch_page(page)
    selected = RecidivismAggregator.select(view, cpf)
    notes = []
    if selected is None and not view.failed:
        notes.append(notifications.warning(MSG_NOT_ON_PAGE))
    return _render(request, session, view, selected=selected, notes=notes)


@router.get("/reincidencia-cpf/{cpf}/pdf")
async def reincidencia_cpf_pdf(
    cpf: str,
    page: int = 1,
    modo: ExportMode = ExportMode.STYLED,
    session: Session = Depends(require_session),
    api: FraudbaseApiClient = Depends(get_api_client),
    exporter: ReportExporter = Depends(get_exporter),
):
    back = f"/reincidencia-cpf/{cpf}?page={page}"
    view = await RecidivismAggregator(api).fetch_page(page)
    if view.failed:
        return redirect(f"/reincidencia-cpf?page={page}", view.notification, session=session)

    record: RecidivismRecord = RecidivismAggregator.select(view, cpf)
    if record is None:
        return redirect(f"/reincidencia-cpf?page={page}", notifications.warning(MSG_NOT_ON_PAGE), session=session)

    result = exporter.export(record, modo)
    if not result.ok:
        return redirect(back, result.notification, session=session)

    response = StreamingResponse(
        io.BytesIO(result.content),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )
    return flash(response, result.notification)


@router.get("/reincidencia-pix", response_class=HTMLResponse)
async def reincidencia_pix(request: Request, session: Session = Depends(require_session)):
    return render(
        request,
        "reincidencia_pix.html",
        {"mensagem": MSG_PIX_PENDING},
        session=session,
        notifications=[notifications.info(MSG_PIX_PENDING)],
    )
