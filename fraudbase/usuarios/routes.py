"""
Administração de usuários (somente administradores) e perfil do usuário logado.
"""

import logging
from typing import Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from pydantic import ValidationError

from fraudbase.common import notifications
from fraudbase.common.exceptions import ApiError, TransportError
from fraudbase.common.forms import form_errors
from fraudbase.common.notifications import Notification
from fraudbase.common.session import Session, require_admin, require_session
from fraudbase.common.templating import redirect, render
from fraudbase.services.api_client import FraudbaseApiClient, get_api_client

from .schemas import NewUserForm, PasswordChange, User, UserForm

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["usuarios"])

MSG_LIST_ERROR = "Erro ao carregar usuários."
MSG_USER_CREATED = "Usuário cadastrado com sucesso!"
MSG_USER_CREATE_ERROR = "Erro ao cadastrar usuário. Tente novamente."
MSG_USER_UPDATED = "Usuário atualizado com sucesso!"
MSG_USER_DELETED = "Usuário excluído com sucesso!"
MSG_PASSWORD_CHANGED = "Senha alterada com sucesso"
MSG_PROFILE_ERROR = "Erro ao carregar informações do usuário"
MSG_USER_UNKNOWN = "Usuário não identificado"


async def _load_users(api: FraudbaseApiClient) -> Tuple[List[User], Optional[Notification]]:
    try:
        payload = await api.list_users()
        return [User.model_validate(u) for u in payload or []], None
    except (ApiError, TransportError, ValidationError) as e:
        logger.error("Erro ao listar usuários: %s", e)
        return [], notifications.error(MSG_LIST_ERROR)


def _find(users: List[User], user_id: Optional[int]) -> Optional[User]:
    return next((u for u in users if u.id == user_id), None)


def _render_users(request, session, users, notes, editing=None, deleting=None, form=None, errors=None):
    return render(
        request,
        "users.html",
        {
            "users": users,
            "editing": editing,
            "deleting": deleting,
            "form": form if form is not None else (editing.model_dump() if editing else {}),
            "errors": errors or {},
        },
        session=session,
        notifications=notes,
    )


@router.get("/users", response_class=HTMLResponse)
async def list_users(
    request: Request,
    editar: Optional[int] = None,
    excluir: Optional[int] = None,
    session: Session = Depends(require_admin),
    api: FraudbaseApiClient = Depends(get_api_client),
):
    users, note = await _load_users(api)
    return _render_users(
        request,
        session,
        users,
        [note],
        editing=_find(users, editar),
        deleting=_find(users, excluir),
    )


@router.post("/users/{user_id}/excluir")
async def delete_user(
    user_id: int,
    session: Session = Depends(require_admin),
    api: FraudbaseApiClient = Depends(get_api_client),
):
    try:
        await api.delete_user(user_id)
    except (ApiError, TransportError) as e:
        logger.error("Erro ao excluir usuário %s: %s", user_id, e)
        return redirect("/settings/users", notifications.error(str(e)), session=session)
    logger.info("Usuário %s excluído por %s", user_id, session.username)
    return redirect("/settings/users", notifications.success(MSG_USER_DELETED), session=session)


@router.post("/users/{user_id}", response_class=HTMLResponse)
async def update_user(
    request: Request,
    user_id: int,
    login: str = Form(""),
    nome: str = Form(""),
    cpf: str = Form(""),
    matricula: str = Form(""),
    telefone: str = Form(""),
    cidade: str = Form(""),
    estado: str = Form(""),
    unidade_policial: str = Form(""),
    email: str = Form(""),
    is_admin: bool = Form(False),
    alterar_senha: bool = Form(False),
    senha: str = Form(""),
    confirmacao: str = Form(""),
    session: Session = Depends(require_admin),
    api: FraudbaseApiClient = Depends(get_api_client),
):
    raw = dict(
        login=login,
        nome=nome,
        cpf=cpf,
        matricula=matricula,
        telefone=telefone,
        cidade=cidade,
        estado=estado,
        unidade_policial=unidade_policial,
        email=email,
        is_admin=is_admin,
    )
    errors: Dict[str, str] = {}
    form = None
    password = None
    try:
        form = UserForm(**raw)
    except ValidationError as e:
        errors.update(form_errors(e))
    if alterar_senha:
        try:
            password = PasswordChange(senha=senha, confirmacao=confirmacao)
        except ValidationError as e:
            errors.update(form_errors(e))

    if errors:
        users, note = await _load_users(api)
        return _render_users(
            request,
            session,
            users,
            [note],
            editing=_find(users, user_id) or User(id=user_id),
            form=raw,
            errors=errors,
        )

    try:
        await api.update_user(form.to_payload(user_id))
        if password is not None:
            await api.update_user_password(user_id, password.senha)
    except (ApiError, TransportError) as e:
        logger.error("Erro ao atualizar usuário %s: %s", user_id, e)
        return redirect(f"/settings/users?editar={user_id}", notifications.error(str(e)), session=session)
    return redirect("/settings/users", notifications.success(MSG_USER_UPDATED), session=session)


@router.get("/register", response_class=HTMLResponse)
async def register_page(request: Request, session: Session = Depends(require_admin)):
    return render(request, "user_register.html", {"form": {}, "errors": {}}, session=session)


@router.post("/register", response_class=HTMLResponse)
async def register_user(
    request: Request,
    login: str = Form(""),
    nome: str = Form(""),
    cpf: str = Form(""),
    matricula: str = Form(""),
    telefone: str = Form(""),
    cidade: str = Form(""),
    estado: str = Form(""),
    unidade_policial: str = Form(""),
    email: str = Form(""),
    is_admin: bool = Form(False),
    senha: str = Form(""),
    confirmacao: str = Form(""),
    session: Session = Depends(require_admin),
    api: FraudbaseApiClient = Depends(get_api_client),
):
    raw = dict(
        login=login,
        nome=nome,
        cpf=cpf,
        matricula=matricula,
        telefone=telefone,
        cidade=cidade,
        estado=estado,
        unidade_policial=unidade_policial,
        email=email,
        is_admin=is_admin,
    )
    try:
        form = NewUserForm(**raw, senha=senha, confirmacao=confirmacao)
    except ValidationError as e:
        return render(
            request,
            "user_register.html",
            {"form": raw, "errors": form_errors(e)},
            session=session,
        )

    try:
        await api.create_user(form.to_payload())
    except ApiError as e:
        logger.error("Erro ao cadastrar usuário %s: %s", form.login, e)
        return render(
            request,
            "user_register.html",
            {"form": raw, "errors": {}},
            session=session,
            notifications=[notifications.error(e.message or MSG_USER_CREATE_ERROR)],
        )
    except TransportError as e:
        logger.error("Erro ao cadastrar usuário %s: %s", form.login, e)
        return render(
            request,
            "user_register.html",
            {"form": raw, "errors": {}},
            session=session,
            notifications=[notifications.error(MSG_USER_CREATE_ERROR)],
        )
    logger.info("Usuário %s cadastrado por %s", form.login, session.username)
    return redirect("/settings/users", notifications.success(MSG_USER_CREATED), session=session)


async def _load_profile(api: FraudbaseApiClient, session: Session):
    if session.user_id is None:
        return None, notifications.error(MSG_USER_UNKNOWN)
    try:
        return User.model_validate(await api.get_user(session.user_id)), None
    except (ApiError, TransportError, ValidationError) as e:
        logger.error("Erro ao buscar dados do usuário %s: %s", session.user_id, e)
        return None, notifications.error(MSG_PROFILE_ERROR)


@router.get("/profile", response_class=HTMLResponse)
async def profile(
    request: Request,
    session: Session = Depends(require_session),
    api: FraudbaseApiClient = Depends(get_api_client),
):
    user, note = await _load_profile(api, session)
    return render(request, "profile.html", {"user": user, "errors": {}}, session=session, notifications=[note])


@router.post("/profile/senha", response_class=HTMLResponse)
async def change_own_password(
    request: Request,
    senha: str = Form(""),
    confirmacao: str = Form(""),
    session: Session = Depends(require_session),
    api: FraudbaseApiClient = Depends(get_api_client),
):
    try:
        change = PasswordChange(senha=senha, confirmacao=confirmacao)
    except ValidationError as e:
        user, note = await _load_profile(api, session)
        return render(
            request,
            "profile.html",
            {"user": user, "errors": form_errors(e)},
            session=session,
            notifications=[note],
        )

    if session.user_id is None:
        return redirect("/settings/profile", notifications.error(MSG_USER_UNKNOWN), session=session)
    try:
        await api.update_user_password(session.user_id, change.senha)
    except (ApiError, TransportError) as e:
        logger.error("Erro ao alterar senha do usuário %s: %s", session.user_id, e)
        return redirect("/settings/profile", notifications.error(str(e)), session=session)
    return redirect("/settings/profile", notifications.success(MSG_PASSWORD_CHANGED), session=session)
