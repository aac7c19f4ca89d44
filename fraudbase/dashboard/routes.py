from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from fraudbase.common.session import Session, require_session
from fraudbase.common.templating import render
from fraudbase.services.api_client import FraudbaseApiClient, get_api_client

from .charts import delegacia_chart, faixa_etaria_chart, sexo_chart
from .service import load_dashboard

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_class=HTMLResponse)
async def dashboard(
    request: Request,
    session: Session = Depends(require_session),
    api: FraudbaseApiClient = Depends(get_api_client),
):
    data = await load_dashboard(api)
    charts = {}
    if not data.failed:
        charts = {
            "sexo": sexo_chart(data.vitimas_por_sexo) if data.vitimas_por_sexo else "",
            "faixa_etaria": faixa_etaria_chart(data.vitimas_por_faixa_etaria) if data.vitimas_por_faixa_etaria else "",
            "delegacia": delegacia_chart(data.infratores_por_delegacia) if data.infratores_por_delegacia else "",
        }
    return render(
        request,
        "dashboard.html",
        {"data": data, "charts": charts},
        session=session,
        notifications=[data.notification],
    )
