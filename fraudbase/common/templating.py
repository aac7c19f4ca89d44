import base64
import json
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from fastapi import Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from jinja2 import Environment, FileSystemLoader, select_autoescape

from .config import get_settings
from .formatting import display_cpf, format_cpf, format_date, format_phone
from .notifications import Notification
from .session import Session

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
FLASH_COOKIE = "fraudbase_flash"

# Configuração do Jinja2 para templates HTML
env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
)
env.filters["cpf"] = display_cpf
env.filters["cpf_mask"] = format_cpf
env.filters["phone"] = format_phone
env.filters["date_br"] = format_date


def _encode_flash(notification: Notification) -> str:
    raw = notification.model_dump_json().encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii")


def _decode_flash(value: str) -> Optional[Notification]:
    try:
        data = json.loads(base64.urlsafe_b64decode(value.encode("ascii")))
        return Notification.model_validate(data)
    except (ValueError, TypeError):
        return None


def render(
    request: Request,
    template_name: str,
    context: Optional[Dict[str, Any]] = None,
    session: Optional[Session] = None,
    notifications: Iterable[Optional[Notification]] = (),
    status_code: int = 200,
) -> HTMLResponse:
    """Renderiza uma página, incluindo a notificação pendente de um redirect anterior."""
    flash_raw = request.cookies.get(FLASH_COOKIE)
    flashed = _decode_flash(flash_raw) if flash_raw else None
    messages = ([flashed] if flashed else []) + [n for n in notifications if n is not None]

    template = env.get_template(template_name)
    html = template.render(
        request=request,
        session=session,
        notifications=messages,
        settings=get_settings(),
        **(context or {}),
    )
    response = HTMLResponse(html, status_code=status_code)
    if flash_raw:
        response.delete_cookie(FLASH_COOKIE)
    if session is not None:
        session.persist(response)
    return response


def flash(response: Response, notification: Notification) -> Response:
    """Agenda uma notificação para a próxima página renderizada."""
    response.set_cookie(FLASH_COOKIE, _encode_flash(notification), httponly=True, samesite="lax")
    return response


def redirect(
    url: str,
    notification: Optional[Notification] = None,
    session: Optional[Session] = None,
) -> RedirectResponse:
    response = RedirectResponse(url, status_code=303)
    if notification is not None:
        flash(response, notification)
    if session is not None:
        session.persist(response)
    return response
