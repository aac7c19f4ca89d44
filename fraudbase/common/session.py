"""
Contexto de sessão do usuário.

A credencial do backend e os dados do usuário logado ficam num cookie de sessão
assinado. Cada rota recebe um objeto ``Session`` explícito (injeção via
``Depends``) em vez de ler o armazenamento diretamente.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Depends, Request
from fastapi.responses import Response

from .config import get_settings
from .exceptions import AdminRequired, SessionRequired
from .security import create_session_token, read_session_token

logger = logging.getLogger(__name__)

SESSION_KEYS = ("token", "userId", "username", "nome", "isAdmin")


class Session:
    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._data = {k: v for k, v in (data or {}).items() if k in SESSION_KEYS}
        self._dirty = False

    @classmethod
    def from_login(cls, payload: Dict[str, Any]) -> "Session":
        """Monta a sessão a partir da resposta de ``POST /login``."""
        session = cls(
            {
                "token": payload.get("token", ""),
                "userId": payload.get("userId"),
                "username": payload.get("username", ""),
                "nome": payload.get("nome", ""),
                "isAdmin": bool(payload.get("isAdmin", False)),
            }
        )
        session._dirty = True
        return session

    def get_token(self) -> str:
        return self._data.get("token") or ""

    def is_authenticated(self) -> bool:
        return self._data.get("token") is not None

    @property
    def is_admin(self) -> bool:
        return bool(self._data.get("isAdmin"))

    @property
    def user_id(self) -> Optional[int]:
        return self._data.get("userId")

    @property
    def username(self) -> str:
        return self._data.get("username") or ""

    @property
    def nome(self) -> str:
        return self._data.get("nome") or ""

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._data)

    def clear(self) -> None:
        if self._data:
            logger.info("Sessão encerrada para o usuário %s", self.username)
        self._data = {}
        self._dirty = True

    def persist(self, response: Response) -> None:
        """Grava (ou remove) o cookie de sessão se a sessão mudou."""
        if not self._dirty:
            return
        settings = get_settings()
        if self._data:
            response.set_cookie(
                settings.session_cookie_name,
                create_session_token(self._data),
                httponly=True,
                samesite="lax",
            )
        else:
            response.delete_cookie(settings.session_cookie_name)
        self._dirty = False


def get_session(request: Request) -> Session:
    raw = request.cookies.get(get_settings().session_cookie_name)
    data = read_session_token(raw) if raw else None
    return Session(data)


def require_session(session: Session = Depends(get_session)) -> Session:
    """Guarda de rota: sem credencial de sessão, volta para ``/``."""
    if not session.is_authenticated():
        raise SessionRequired()
    return session


def require_admin(session: Session = Depends(require_session)) -> Session:
    if not session.is_admin:
        raise AdminRequired()
    return session
