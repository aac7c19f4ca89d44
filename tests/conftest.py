"""
Fixtures compartilhadas.

O backend REST é simulado com ``httpx.MockTransport``: cada teste registra as
rotas que precisa e depois inspeciona as requisições recebidas.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from fraudbase.common.config import get_settings
from fraudbase.common.session import Session
from fraudbase.main import app
from fraudbase.services.api_client import FraudbaseApiClient, get_transport

Handler = Callable[[httpx.Request], httpx.Response]


class FakeBackend:
    """Backend simulado: (método, caminho) -> resposta, com registro das chamadas."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.requests: List[httpx.Request] = []
        self.prefix = httpx.URL(get_settings().api_base_url).path.rstrip("/")

    def on(self, method: str, path: str, status_code: int = 200, json: Any = None,
           handler: Optional[Handler] = None) -> None:
        if handler is None:
            def handler(request, _status=status_code, _json=json):
                return httpx.Response(_status, json=_json)
        self.routes[(method, path)] = handler

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and self._path(r) == path]

    def _path(self, request: httpx.Request) -> str:
        path = request.url.path
        return path[len(self.prefix):] if path.startswith(self.prefix) else path

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, self._path(request)))
        if handler is None:
            return httpx.Response(404, json={"message": "Não encontrado"})
        return handler(request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def envolvido(id: int, nome: str = "Maria Silva", tipo: str = "Suposto Autor/Infrator", **extra) -> Dict[str, Any]:
    record = {
        "id": id,
        "numero_do_bo": f"{1000 + id}/2024",
        "tipo_envolvido": tipo,
        "nomecompleto": nome,
        "cpf": "12345678901",
        "data_fato": "2024-03-15",
        "natureza": "Estelionato mediante fraude eletrônica",
    }
    record.update(extra)
    return record


def page_payload(data: List[Dict[str, Any]], total: Optional[int] = None, page: int = 1, limit: int = 10,
                 total_pages: Optional[int] = None) -> Dict[str, Any]:
    total = len(data) if total is None else total
    return {
        "data": data,
        "totalCount": total,
        "page": page,
        "limit": limit,
        "totalPages": total_pages if total_pages is not None else max(1, -(-total // limit)),
    }


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def api_factory(backend):
    """Cria clientes da API ligados ao backend simulado."""

    def make(token: Optional[str] = "tok-123") -> FraudbaseApiClient:
        data = {"token": token} if token is not None else {}
        return FraudbaseApiClient(Session(data), transport=backend.transport())

    return make


@pytest.fixture
def client(backend):
    app.dependency_overrides[get_transport] = backend.transport
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def sign_in(client: TestClient, backend: FakeBackend, is_admin: bool = False) -> TestClient:
    """Faz login pelo fluxo real para o cookie de sessão vir do próprio servidor."""
    backend.on(
        "POST",
        "/login",
        json={"token": "tok-123", "userId": 7, "username": "maria", "nome": "Maria", "isAdmin": is_admin},
    )
    response = client.post("/login", data={"username": "maria", "password": "segredo"}, follow_redirects=False)
    assert response.status_code == 303
    backend.requests.clear()
    return client


@pytest.fixture
def logged_client(client, backend):
    return sign_in(client, backend)


@pytest.fixture
def admin_client(client, backend):
    return sign_in(client, backend, is_admin=True)
