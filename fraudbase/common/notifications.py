from enum import Enum
from typing import Optional

from pydantic import BaseModel

from .config import get_settings


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notification(BaseModel):
    """Mensagem transitória exibida ao usuário e fechada automaticamente."""

    message: str
    severity: Severity = Severity.INFO
    auto_hide_ms: Optional[int] = None

    def model_post_init(self, __context) -> None:
        if self.auto_hide_ms is None:
            self.auto_hide_ms = get_settings().notification_timeout_ms


def info(message: str) -> Notification:
    return Notification(message=message, severity=Severity.INFO)


def success(message: str) -> Notification:
    return Notification(message=message, severity=Severity.SUCCESS)


def warning(message: str) -> Notification:
    return Notification(message=message, severity=Severity.WARNING)


def error(message: str) -> Notification:
    return Notification(message=message, severity=Severity.ERROR)
