from typing import Dict

from pydantic import ValidationError


def form_errors(exc: ValidationError) -> Dict[str, str]:
    """Primeira mensagem de erro por campo, pronta para exibir ao lado do input."""
    errors: Dict[str, str] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "__all__"
        if field in errors:
            continue
        cause = (err.get("ctx") or {}).get("error")
        errors[field] = str(cause) if cause is not None else err["msg"]
    return errors
