import pytest

from fraudbase.consulta.filters import build_query_params, is_search_worthy
from fraudbase.consulta.schemas import FilterSet, PageResult


# ============================================================================
# VALIDAÇÃO DOS FILTROS
# ============================================================================

class TestIsSearchWorthy:
    @pytest.mark.parametrize(
        "filters, expected",
        [
            ({}, False),
            ({"nome": "Jo"}, False),
            ({"nome": "Joa"}, True),
            ({"nome": "   Jo   "}, False),
            ({"cpf": "123"}, False),
            ({"cpf": "12345678901"}, True),
            ({"cpf": "123.456.789-01"}, True),
            ({"bo": "12"}, False),
            ({"bo": "123"}, True),
            ({"telefone": "11"}, False),
            ({"telefone": "119"}, True),
            ({"nome": "Jo", "cpf": "12345678901"}, True),
        ],
    )
    def test_minimums(self, filters, expected):
        assert is_search_worthy(FilterSet(**filters)) is expected


# ============================================================================
# QUERY STRING
# ============================================================================

class TestBuildQueryParams:
    def test_only_valid_fields_in_fixed_order(self):
        filters = FilterSet(nome="Jo", cpf="123.456.789-01", bo="123/2024", telefone="11")
        assert build_query_params(filters, 2, 10) == [
            ("cpf", "12345678901"),
            ("bo", "123/2024"),
            ("page", "2"),
            ("limit", "10"),
        ]

    def test_all_fields(self):
        filters = FilterSet(nome="José", cpf="12345678901", bo="100/2024", telefone="1198")
        keys = [k for k, _ in build_query_params(filters, 1, 5)]
        assert keys == ["nome", "cpf", "bo", "telefone", "page", "limit"]

    def test_nome_is_normalized(self):
        params = dict(build_query_params(FilterSet(nome="JOSÉ da Conceição"), 1, 10))
        assert params["nome"] == "jose da conceicao"

    def test_deterministic(self):
        filters = FilterSet(nome="Maria", bo="123")
        assert build_query_params(filters, 3, 25) == build_query_params(filters, 3, 25)

    def test_page_has_floor(self):
        params = dict(build_query_params(FilterSet(nome="Maria"), 0, 10))
        assert params["page"] == "1"


# ============================================================================
# RESULTADO PAGINADO
# ============================================================================

class TestPageResult:
    def test_total_pages_computed_when_missing(self):
        result = PageResult.model_validate(
            {"data": [{"id": i} for i in range(20)], "totalCount": 45, "page": 2, "limit": 20}
        )
        assert result.total_pages == 3
        assert result.page_index == 1
        assert result.show_pagination

    def test_total_pages_from_backend(self):
        result = PageResult.model_validate({"data": [], "totalCount": 0, "page": 1, "limit": 10, "totalPages": 0})
        assert result.total_pages == 0
        assert not result.show_pagination

    def test_data_never_exceeds_limit(self):
        result = PageResult.model_validate({"data": [{"id": i} for i in range(12)], "totalCount": 12, "limit": 10})
        assert len(result.data) == 10

    def test_null_data_and_bad_page(self):
        result = PageResult.model_validate({"data": None, "page": "x"})
        assert result.data == []
        assert result.page == 1

    def test_numeric_fields_become_strings(self):
        result = PageResult.model_validate({"data": [{"id": 1, "cpf": 12345678901, "valor": 150.5}]})
        assert result.data[0].cpf == "12345678901"
        assert result.data[0].valor == "150.5"
