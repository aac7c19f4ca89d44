from typing import Optional


class FraudbaseError(Exception):
    """Erro base da aplicação."""


class ApiError(FraudbaseError):
    """Resposta não-2xx do backend."""

    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        self.message = message or f"Erro HTTP {status_code}"
        super().__init__(self.message)

    @property
    def not_found(self) -> bool:
        return self.status_code == 404

    @property
    def unauthorized(self) -> bool:
        return self.status_code in (401, 403)


class TransportError(FraudbaseError):
    """Falha de rede ao falar com o backend (conexão, DNS, etc.)."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class ExportError(FraudbaseError):
    """Falha ao gerar um relatório."""


class SessionRequired(FraudbaseError):
    """Rota protegida acessada sem credencial de sessão."""


class AdminRequired(FraudbaseError):
    """Rota administrativa acessada por usuário sem privilégio."""
