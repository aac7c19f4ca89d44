"""
Validação dos filtros de consulta e montagem da query string.

Uma consulta só vale a pena se pelo menos um critério atingir o seu mínimo:
nome >= 3 caracteres, CPF com 11 dígitos, B.O. >= 3 caracteres,
telefone >= 3 caracteres.
"""

from typing import List, Tuple

from fraudbase.common.formatting import CPF_DIGITS, normalize_name, only_digits

from .schemas import FilterSet

MIN_NOME = 3
MIN_BO = 3
MIN_TELEFONE = 3


def nome_ok(filters: FilterSet) -> bool:
    return len(filters.nome.strip()) >= MIN_NOME


def cpf_ok(filters: FilterSet) -> bool:
    return len(only_digits(filters.cpf)) == CPF_DIGITS


def bo_ok(filters: FilterSet) -> bool:
    return len(filters.bo.strip()) >= MIN_BO


def telefone_ok(filters: FilterSet) -> bool:
    return len(filters.telefone.strip()) >= MIN_TELEFONE


def is_search_worthy(filters: FilterSet) -> bool:
    return nome_ok(filters) or cpf_ok(filters) or bo_ok(filters) or telefone_ok(filters)


def build_query_params(filters: FilterSet, page: int, limit: int) -> List[Tuple[str, str]]:
    """
    Parâmetros na ordem fixa ``nome, cpf, bo, telefone, page, limit``.
    Campo que não passou no seu mínimo fica de fora.
    """
    params: List[Tuple[str, str]] = []
    if nome_ok(filters):
        params.append(("nome", normalize_name(filters.nome)))
    if cpf_ok(filters):
        params.append(("cpf", only_digits(filters.cpf)))
    if bo_ok(filters):
        params.append(("bo", filters.bo.strip()))
    if telefone_ok(filters):
        params.append(("telefone", filters.telefone.strip()))
    params.append(("page", str(max(1, page))))
    params.append(("limit", str(limit)))
    return params
