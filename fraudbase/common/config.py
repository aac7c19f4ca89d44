"""
Configurações da aplicação.

Centraliza toda configuração via .env / variáveis de ambiente.
"""

from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    app_name: str = "Fraudbase Web"
    debug: bool = False
    log_level: str = "INFO"

    # Backend REST (local ou servidor implantado)
    api_base_url: str = "http://localhost:8080/api"
    # Sem timeout por padrão: requisição travada mantém o carregamento
    http_timeout: Optional[float] = None

    # Sessão (cookie assinado)
    session_secret_key: str = "CHANGE_ME_IN_PRODUCTION"
    session_algorithm: str = "HS256"
    session_cookie_name: str = "fraudbase_session"
    session_expires_minutes: int = 480

    # Consulta de envolvidos
    search_default_limit: int = 10
    search_page_size_options: List[int] = [5, 10, 25]

    # Reincidência
    recidivism_page_size: int = 10

    # Notificações e relatórios
    notification_timeout_ms: int = 6000
    report_margin_mm: float = 10.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
