"""Montagem das linhas da tabela, do modal de detalhes e da paginação."""

from typing import List, Optional, Tuple

from pydantic import BaseModel

from fraudbase.common.formatting import display_cpf, format_date, format_phone, truncate_words

from .schemas import Envolvido, PageResult

AUTHOR_MARKERS = ("autor", "infrator")


def role_badge(tipo_envolvido: Optional[str]) -> str:
    """Classe do selo de papel: ``autor`` para autor/infrator, ``outro`` para o resto."""
    text = (tipo_envolvido or "").lower()
    if any(marker in text for marker in AUTHOR_MARKERS):
        return "autor"
    return "outro"


class ResultRow(BaseModel):
    id: int
    nome: str
    cpf: str
    tipo: str
    badge: str
    bo: str
    data_fato: str
    natureza: str
    natureza_full: str


def present_row(envolvido: Envolvido) -> ResultRow:
    natureza = envolvido.natureza or ""
    return ResultRow(
        id=envolvido.id,
        nome=envolvido.nomecompleto or "",
        cpf=display_cpf(envolvido.cpf) if envolvido.cpf else "",
        tipo=envolvido.tipo_envolvido or "",
        badge=role_badge(envolvido.tipo_envolvido),
        bo=envolvido.numero_do_bo or "",
        data_fato=format_date(envolvido.data_fato),
        natureza=truncate_words(natureza, 2),
        natureza_full=natureza,
    )


def present_rows(result: PageResult) -> List[ResultRow]:
    return [present_row(e) for e in result.data]


class Pagination(BaseModel):
    page: int
    page_index: int
    total_pages: int
    total_count: int
    limit: int
    visible: bool
    has_previous: bool
    has_next: bool
    pages: List[int]


def present_pagination(result: PageResult, window: int = 2) -> Pagination:
    total_pages = result.total_pages or 0
    start = max(1, result.page - window)
    end = min(total_pages, result.page + window)
    return Pagination(
        page=result.page,
        page_index=result.page_index,
        total_pages=total_pages,
        total_count=result.total_count,
        limit=result.limit,
        visible=result.show_pagination,
        has_previous=result.page > 1,
        has_next=result.page < total_pages,
        pages=list(range(start, end + 1)),
    )


DetailSection = Tuple[str, List[Tuple[str, str]]]


def present_detail(e: Envolvido) -> List[DetailSection]:
    """Seções do modal de detalhes, na ordem exibida."""
    pessoais = [
        ("Nome Completo", e.nomecompleto),
        ("CPF", display_cpf(e.cpf) if e.cpf else ""),
        ("Nome da Mãe", e.nomedamae),
        ("Data de Nascimento", format_date(e.nascimento)),
        ("Nacionalidade", e.nacionalidade),
        ("Naturalidade", e.naturalidade),
        ("UF", e.uf_envolvido),
        ("Sexo", e.sexo_envolvido),
        ("Telefone", format_phone(e.telefone_envolvido)),
        ("Tipo de Envolvimento", e.tipo_envolvido),
    ]
    fato = [
        ("Número do BO", e.numero_do_bo),
        ("Data do Fato", format_date(e.data_fato)),
        ("Natureza", e.natureza),
        ("Situação", e.situacao),
        ("Delegacia Responsável", e.delegacia_responsavel),
        ("CEP", e.cep_fato),
        ("Logradouro", e.logradouro_fato),
        ("Número", e.numerocasa_fato),
        ("Bairro", e.bairro_fato),
        ("Município", e.municipio_fato),
        ("País", e.pais_fato),
        ("Latitude", e.latitude_fato),
        ("Longitude", e.longitude_fato),
    ]
    financeiro = [
        ("Instituição Bancária", e.instituicao_bancaria),
        ("Valor", e.valor),
        ("PIX Utilizado", e.pix_utilizado),
        ("Tipo de Pagamento", e.tipo_pagamento),
        ("Conta Bancária", e.numero_conta_bancaria),
        ("Agência", e.numero_agencia_bancaria),
        ("Cartão", e.cartao),
        ("Boleto", e.numero_boleto),
        ("Processo no Banco", e.processo_banco),
        ("Endereço IP", e.endereco_ip),
        ("Terminal", e.terminal),
        ("Terminal de Conexão", e.terminal_conexao),
        ("ERB", e.erb),
        ("Órgão/Concessionária", e.orgao_concessionaria),
        ("Veículo", e.veiculo),
        ("Operação Policial", e.operacao_policial),
        ("Laudo Pericial", e.numero_laudo_pericial),
    ]
    sections: List[DetailSection] = [
        ("Informações Pessoais", [(k, v or "") for k, v in pessoais]),
        ("Informações do Fato", [(k, v or "") for k, v in fato]),
        ("Informações Financeiras e Técnicas", [(k, v) for k, v in financeiro if v]),
    ]
    if e.relato_historico:
        sections.append(("Relato Histórico", [("", e.relato_historico)]))
    return sections
