import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse

from fraudbase.common import notifications
from fraudbase.common.exceptions import ApiError, TransportError
from fraudbase.common.session import Session, get_session
from fraudbase.common.templating import redirect, render
from fraudbase.services.api_client import FraudbaseApiClient, get_api_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

MSG_INVALID_CREDENTIALS = "Usuário ou senha inválidos."
MSG_MISSING_CREDENTIALS = "Informe usuário e senha."
MSG_LOGGED_OUT = "Sessão encerrada."


@router.get("/", response_class=HTMLResponse)
async def sign_in_page(request: Request, session: Session = Depends(get_session)):
    if session.is_authenticated():
        return redirect("/dashboard")
    return render(request, "login.html", {"username": ""}, session=session)


@router.post("/login", response_class=HTMLResponse)
async def login(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    session: Session = Depends(get_session),
    api: FraudbaseApiClient = Depends(get_api_client),
):
    username = username.strip()
    if not username or not password:
        return render(
            request,
            "login.html",
            {"username": username},
            session=session,
            notifications=[notifications.warning(MSG_MISSING_CREDENTIALS)],
            status_code=400,
        )

    try:
        payload = await api.login(username, password)
    except ApiError as e:
        logger.warning("Login recusado para %s: %s", username, e)
        message = MSG_INVALID_CREDENTIALS if e.unauthorized else e.message
        return render(
            request,
            "login.html",
            {"username": username},
            session=session,
            notifications=[notifications.error(message)],
            status_code=401 if e.unauthorized else 200,
        )
    except TransportError as e:
        return render(
            request,
            "login.html",
            {"username": username},
            session=session,
            notifications=[notifications.error(str(e))],
        )

    new_session = Session.from_login(payload or {})
    logger.info("Usuário %s autenticado", new_session.username or username)
    return redirect("/dashboard", session=new_session)


@router.get("/logout")
async def logout(session: Session = Depends(get_session)):
    session.clear()
    return redirect("/", notifications.info(MSG_LOGGED_OUT), session=session)
