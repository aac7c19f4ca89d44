"""
Cliente HTTP assíncrono para a API REST do Fraudbase.

Toda chamada anexa ``Authorization: Bearer <token>`` com o token da sessão.
Token ausente segue como ``Bearer `` vazio: quem decide é o backend.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx
from fastapi import Depends

from fraudbase.common.config import get_settings
from fraudbase.common.exceptions import ApiError, TransportError
from fraudbase.common.session import Session, get_session

logger = logging.getLogger(__name__)

QueryParams = Sequence[Tuple[str, Any]]


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text.strip()
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body.get("detail") or "")
    return ""


class FraudbaseApiClient:
    def __init__(
        self,
        session: Session,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.session = session
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            transport=transport,
            timeout=settings.http_timeout,
        )

    async def __aenter__(self) -> "FraudbaseApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, auth: bool = True, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if auth:
            headers["Authorization"] = f"Bearer {self.session.get_token()}"

        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Falha de conexão em %s %s: %s", method, path, e)
            raise TransportError("Erro de conexão com o servidor.", e) from e

        logger.info("%s %s -> %s", method, path, response.status_code)
        if response.is_error:
            raise ApiError(response.status_code, _error_message(response))

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(response.status_code, "Resposta inválida do servidor.") from e

    # --- Autenticação ---

    async def login(self, username: str, password: str) -> Dict[str, Any]:
        return await self._request(
            "POST", "/login", auth=False, json={"username": username, "password": password}
        )

    # --- Listas de apoio (selects do cadastro) ---

    async def list_municipios(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/municipios") or []

    async def list_ufs(self) -> List[Any]:
        return await self._request("GET", "/ufs") or []

    async def list_paises(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/paises") or []

    async def list_delegacias(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/delegacias") or []

    async def list_bancos(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/bancos") or []

    # --- Envolvidos ---

    async def create_envolvido(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/envolvidos", json=payload)

    async def search_envolvidos(self, params: QueryParams) -> Dict[str, Any]:
        return await self._request("GET", "/consulta-envolvidos", params=list(params))

    async def get_envolvido(self, envolvido_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/consulta-envolvidos/{envolvido_id}")

    # --- Dashboard ---

    async def dashboard_stat(self, name: str) -> Any:
        return await self._request("GET", f"/dashboard/{name}")

    async def bo_statistics(self) -> Dict[str, Any]:
        return await self._request("GET", "/bo-statistics") or {}

    # --- Reincidência ---

    async def reincidencia_cpf(self, page: int, limit: int) -> Dict[str, Any]:
        return await self._request(
            "GET", "/reincidencia/cpf", params=[("page", page), ("limit", limit)]
        )

    # --- Usuários ---

    async def list_users(self) -> Any:
        return await self._request("GET", "/users")

    async def get_user(self, user_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/users/{user_id}")

    async def create_user(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/users", json=payload)

    async def update_user(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PUT", "/users", json=payload)

    async def update_user_password(self, user_id: int, password: str) -> Dict[str, Any]:
        return await self._request(
            "PUT", "/users/password", json={"id": user_id, "password": password}
        )

    async def delete_user(self, user_id: int) -> Any:
        return await self._request("DELETE", f"/users/{user_id}")

    # --- Importação de relatórios ---

    async def upload_relatorio(self, filename: str, content: bytes, content_type: str) -> Dict[str, Any]:
        files = {"relatorio": (filename, content, content_type)}
        return await self._request("POST", "/upload-relatorio", files=files)

    async def clean_duplicates(self) -> Dict[str, Any]:
        return await self._request("POST", "/clean-duplicates")


def get_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Transporte HTTP do cliente; ``None`` usa a rede (testes sobrescrevem)."""
    return None


async def get_api_client(
    session: Session = Depends(get_session),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_transport),
):
    async with FraudbaseApiClient(session, transport=transport) as api:
        yield api
