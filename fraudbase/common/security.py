from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt, JWTError

from .config import get_settings


def create_session_token(data: Dict[str, Any], expires_minutes: Optional[int] = None) -> str:
    """Assina os dados da sessão para guardar no cookie do navegador."""
    settings = get_settings()
    if expires_minutes is None:
        expires_minutes = settings.session_expires_minutes

    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode = {"data": data, "exp": expire}
    return jwt.encode(
        to_encode,
        settings.session_secret_key,
        algorithm=settings.session_algorithm,
    )


def read_session_token(token: str) -> Optional[Dict[str, Any]]:
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.session_secret_key,
            algorithms=[settings.session_algorithm],
        )
    except JWTError:
        return None
    data = payload.get("data")
    return data if isinstance(data, dict) else None
