import asyncio

import httpx

from fraudbase.common.notifications import Severity
from fraudbase.consulta.presenter import present_detail, present_pagination, present_rows, role_badge
from fraudbase.consulta.schemas import FilterSet, PageResult
from fraudbase.consulta.service import (
    MSG_DETAIL_ERROR,
    MSG_INVALID_FILTERS,
    MSG_NO_RESULTS,
    MSG_SEARCH_ERROR,
    OutcomeKind,
    SearchClient,
    SearchState,
)

from .conftest import envolvido, page_payload


def run(coro):
    return asyncio.run(coro)


# ============================================================================
# CONSULTA
# ============================================================================

class TestSearch:
    def test_invalid_filters_warn_without_request(self, backend, api_factory):
        client = SearchClient(api_factory())
        outcome = run(client.search(FilterSet(nome="Jo")))

        assert outcome.kind == OutcomeKind.WARNING
        assert outcome.notification.severity == Severity.WARNING
        assert outcome.notification.message == MSG_INVALID_FILTERS
        assert backend.requests == []
        assert client.state == SearchState.IDLE

    def test_success(self, backend, api_factory):
        backend.on("GET", "/consulta-envolvidos", json=page_payload([envolvido(1), envolvido(2)]))
        client = SearchClient(api_factory())
        outcome = run(client.search(FilterSet(nome="Maria"), 1, 10))

        assert outcome.kind == OutcomeKind.SUCCESS
        assert client.state == SearchState.SUCCESS
        assert len(client.result.data) == 2
        assert outcome.notification.message == "2 resultado(s) encontrado(s)."

        request = backend.requests[0]
        assert request.headers["Authorization"] == "Bearer tok-123"
        assert list(request.url.params.multi_items()) == [("nome", "maria"), ("page", "1"), ("limit", "10")]

    def test_empty_result_is_info(self, backend, api_factory):
        backend.on("GET", "/consulta-envolvidos", json=page_payload([]))
        outcome = run(SearchClient(api_factory()).search(FilterSet(bo="123/2024")))

        assert outcome.kind == OutcomeKind.SUCCESS
        assert outcome.notification.severity == Severity.INFO
        assert outcome.notification.message == MSG_NO_RESULTS

    def test_error_resets_results(self, backend, api_factory):
        backend.on("GET", "/consulta-envolvidos", json=page_payload([envolvido(1)]))
        client = SearchClient(api_factory())
        run(client.search(FilterSet(nome="Maria")))
        assert len(client.result.data) == 1

        backend.on("GET", "/consulta-envolvidos", status_code=500, json={"message": "boom"})
        outcome = run(client.search(FilterSet(nome="Maria")))

        assert outcome.kind == OutcomeKind.ERROR
        assert client.state == SearchState.FAILED
        assert client.result.data == []
        assert client.result.total_count == 0
        assert outcome.notification.message == MSG_SEARCH_ERROR

    def test_connection_error(self, backend, api_factory):
        def refuse(request):
            raise httpx.ConnectError("recusado", request=request)

        backend.on("GET", "/consulta-envolvidos", handler=refuse)
        outcome = run(SearchClient(api_factory()).search(FilterSet(nome="Maria")))

        assert outcome.kind == OutcomeKind.ERROR
        assert outcome.notification.severity == Severity.ERROR

    def test_missing_token_still_sends_bearer(self, backend, api_factory):
        backend.on("GET", "/consulta-envolvidos", json=page_payload([]))
        run(SearchClient(api_factory(token=None)).search(FilterSet(nome="Maria")))

        assert backend.requests[0].headers["Authorization"].strip() == "Bearer"


# ============================================================================
# RESPOSTAS FORA DE ORDEM
# ============================================================================

def test_stale_response_is_discarded(backend, api_factory):
    gate = {}

    async def respond(request):
        if request.url.params.get("nome") == "primeira":
            await gate["first"].wait()
            return httpx.Response(200, json=page_payload([envolvido(1, nome="Primeira")]))
        return httpx.Response(200, json=page_payload([envolvido(2, nome="Segunda"), envolvido(3, nome="Segunda")]))

    backend.on("GET", "/consulta-envolvidos", handler=respond)

    async def scenario():
        gate["first"] = asyncio.Event()
        client = SearchClient(api_factory())
        first = asyncio.create_task(client.search(FilterSet(nome="primeira")))
        await asyncio.sleep(0)
        second = await client.search(FilterSet(nome="segunda"))
        gate["first"].set()
        return client, await first, second

    client, first, second = run(scenario())

    assert second.kind == OutcomeKind.SUCCESS
    assert first.kind == OutcomeKind.STALE
    assert client.latest_sequence == second.sequence
    assert [e.nomecompleto for e in client.result.data] == ["Segunda", "Segunda"]
    assert client.notification.message == "2 resultado(s) encontrado(s)."


# ============================================================================
# PAGINAÇÃO
# ============================================================================

class TestPaging:
    def test_change_page_without_valid_filters_does_nothing(self, backend, api_factory):
        client = SearchClient(api_factory())
        assert run(client.change_page(3)) is None
        assert backend.requests == []

    def test_change_page_repeats_query(self, backend, api_factory):
        backend.on("GET", "/consulta-envolvidos", json=page_payload([envolvido(1)], total=30, page=2))
        client = SearchClient(api_factory())
        client.filters = FilterSet(nome="Maria")
        run(client.change_page(2))

        assert backend.requests[-1].url.params["page"] == "2"
        assert client.page == 2

    def test_change_page_size_goes_back_to_first_page(self, backend, api_factory):
        backend.on("GET", "/consulta-envolvidos", json=page_payload([envolvido(1)], limit=25))
        client = SearchClient(api_factory())
        client.filters = FilterSet(nome="Maria")
        client.page = 4
        run(client.change_page_size(25))

        params = backend.requests[-1].url.params
        assert params["page"] == "1"
        assert params["limit"] == "25"
        assert client.limit == 25


# ============================================================================
# DETALHES
# ============================================================================

class TestFetchDetail:
    def test_success(self, backend, api_factory):
        backend.on("GET", "/consulta-envolvidos/5", json=envolvido(5, relato_historico="Relato do fato."))
        detail = run(SearchClient(api_factory()).fetch_detail(5))

        assert detail.ok
        assert detail.record.relato_historico == "Relato do fato."

    def test_not_found_keeps_list(self, backend, api_factory):
        backend.on("GET", "/consulta-envolvidos", json=page_payload([envolvido(1), envolvido(2)]))
        client = SearchClient(api_factory())
        run(client.search(FilterSet(nome="Maria")))

        detail = run(client.fetch_detail(99))

        assert not detail.ok
        assert detail.notification.message == MSG_DETAIL_ERROR
        assert len(client.result.data) == 2
        assert client.state == SearchState.SUCCESS


# ============================================================================
# APRESENTAÇÃO
# ============================================================================

class TestPresenter:
    def test_role_badge(self):
        assert role_badge("Suposto Autor/Infrator") == "autor"
        assert role_badge("INFRATOR") == "autor"
        assert role_badge("Vítima") == "outro"
        assert role_badge(None) == "outro"

    def test_rows(self):
        result = PageResult.model_validate(page_payload([envolvido(1), envolvido(2, tipo="Vítima", cpf=None)]))
        rows = present_rows(result)

        assert rows[0].cpf == "123.456.789-01"
        assert rows[0].data_fato == "15/03/2024"
        assert rows[0].natureza == "Estelionato mediante..."
        assert rows[0].natureza_full == "Estelionato mediante fraude eletrônica"
        assert rows[0].badge == "autor"
        assert rows[1].cpf == ""
        assert rows[1].badge == "outro"

    def test_pagination_window(self):
        result = PageResult.model_validate(page_payload([envolvido(1)], total=100, page=5, limit=10))
        pagination = present_pagination(result)

        assert pagination.visible
        assert pagination.page_index == 4
        assert pagination.pages == [3, 4, 5, 6, 7]
        assert pagination.has_previous and pagination.has_next

    def test_single_page_hides_pagination(self):
        pagination = present_pagination(PageResult.model_validate(page_payload([envolvido(1)])))
        assert not pagination.visible

    def test_detail_sections(self):
        record = PageResult.model_validate(
            page_payload([envolvido(1, telefone_envolvido="11987654321", pix_utilizado="chave@pix")])
        ).data[0]
        sections = dict(present_detail(record))

        assert ("Telefone", "(11)98765-4321") in sections["Informações Pessoais"]
        assert sections["Informações Financeiras e Técnicas"] == [("PIX Utilizado", "chave@pix")]
        assert "Relato Histórico" not in sections
