"""
Exportação do relatório de reincidência em PDF.

Dois modos:
- ``colorido``: o painel de detalhes como aparece na tela (cores do tema,
  selo de risco colorido);
- ``pb``: fragmento preto-e-branco montado fora da página a partir de
  ``reports/reincidencia_pb.html``, com rodapé fixo e data de geração.

Em ambos o documento é A4, com a mesma margem nos quatro lados, e o conteúdo
que não couber numa página continua na seguinte.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional
from xml.sax.saxutils import escape

from pydantic import BaseModel
from reportlab.lib import colors
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Flowable, Paragraph, Spacer, Table, TableStyle

from fraudbase.common import notifications
from fraudbase.common.notifications import Notification
from fraudbase.common.templating import env
from fraudbase.reincidencia.schemas import RecidivismRecord, RiskTier

from .renderer import DocumentRenderer

logger = logging.getLogger(__name__)

MSG_EXPORT_OK = "Relatório PDF gerado com sucesso!"
MSG_EXPORT_ERROR = "Erro ao gerar o relatório PDF. Tente novamente."

REPORT_TITLE = "Relatório de Reincidência por CPF"
FOOTER_NOTE = (
    "Documento gerado automaticamente pelo sistema Fraudbase a partir dos boletins de "
    "ocorrência cadastrados. As informações devem ser confirmadas nos sistemas oficiais "
    "antes de qualquer providência."
)

# Cores do tema da tela
THEME_DARK = colors.HexColor("#1E1E1E")
THEME_CARD = colors.HexColor("#2A2A2A")
THEME_GOLD = colors.HexColor("#FFD700")
THEME_ORANGE = colors.HexColor("#FF8042")
TIER_COLORS = {
    RiskTier.HIGH: colors.HexColor("#D32F2F"),
    RiskTier.MEDIUM: colors.HexColor("#F57C00"),
    RiskTier.LOW: colors.HexColor("#388E3C"),
}
HEADER_HEIGHT = 22 * mm


class ExportMode(str, Enum):
    STYLED = "colorido"
    MONOCHROME = "pb"


class ExportResult(BaseModel):
    content: bytes = b""
    filename: str = ""
    pages: int = 0
    notification: Notification

    @property
    def ok(self) -> bool:
        return bool(self.content)


def report_filename(record: RecidivismRecord, mode: ExportMode, generated_at: datetime) -> str:
    suffix = "_pb" if mode == ExportMode.MONOCHROME else ""
    stamp = generated_at.strftime("%Y%m%d_%H%M%S")
    return f"reincidencia_{record.cpf_digits or 'sem_cpf'}{suffix}_{stamp}.pdf"


def render_monochrome_fragment(record: RecidivismRecord, generated_at: datetime) -> str:
    template = env.get_template("reports/reincidencia_pb.html")
    return template.render(
        titulo=REPORT_TITLE,
        nome=record.display_name,
        cpf=record.cpf_display,
        quantidade=record.quantidade,
        bos=record.bo_list,
        tier=record.risk_tier,
        rodape=FOOTER_NOTE,
        gerado_em=generated_at.strftime("%d/%m/%Y %H:%M:%S"),
    )


def _styled_flowables(record: RecidivismRecord, generated_at: datetime) -> List[Flowable]:
    base = getSampleStyleSheet()
    label = ParagraphStyle("st_label", parent=base["Normal"], textColor=THEME_GOLD, fontName="Helvetica-Bold")
    value = ParagraphStyle("st_value", parent=base["Normal"], textColor=colors.white)
    section = ParagraphStyle(
        "st_section", parent=base["Heading2"], textColor=THEME_ORANGE, spaceBefore=12, spaceAfter=6
    )
    bo_style = ParagraphStyle("st_bo", parent=base["Normal"], leftIndent=12)
    advisory = ParagraphStyle("st_advisory", parent=base["Normal"], textColor=colors.white, leading=14)
    meta = ParagraphStyle("st_meta", parent=base["Normal"], fontSize=8, textColor=colors.gray)

    tier = record.risk_tier
    tier_color = TIER_COLORS[tier]

    card = Table(
        [
            [Paragraph("Nome", label), Paragraph(escape(record.display_name), value)],
            [Paragraph("CPF", label), Paragraph(escape(record.cpf_display), value)],
            [Paragraph("Ocorrências", label), Paragraph(str(record.quantidade), value)],
        ],
        colWidths=[40 * mm, None],
    )
    card.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, -1), THEME_CARD),
                ("LINEBEFORE", (0, 0), (0, -1), 3, THEME_ORANGE),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("TOPPADDING", (0, 0), (-1, -1), 6),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
            ]
        )
    )

    risk = Table(
        [
            [Paragraph(f"Nível de Risco: {tier.value}", label)],
            [Paragraph(escape(tier.advisory), advisory)],
        ]
    )
    risk.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), tier_color),
                ("BACKGROUND", (0, 1), (-1, -1), THEME_CARD),
                ("BOX", (0, 0), (-1, -1), 1, tier_color),
                ("TOPPADDING", (0, 0), (-1, -1), 6),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
            ]
        )
    )

    flowables: List[Flowable] = [card, Paragraph("Boletins de Ocorrência", section)]
    if record.bo_list:
        for i, bo in enumerate(record.bo_list, start=1):
            flowables.append(Paragraph(escape(bo), bo_style, bulletText=f"{i}."))
    else:
        flowables.append(Paragraph("Nenhum B.O. informado.", bo_style))
    flowables += [
        Paragraph("Análise de Risco", section),
        risk,
        Spacer(1, 8 * mm),
        Paragraph(f"Gerado em {generated_at.strftime('%d/%m/%Y %H:%M:%S')}", meta),
    ]
    return flowables


def _styled_header(width: float, margin: float, generated_at: datetime) -> Callable:
    def decorate(canvas, doc):
        _, height = doc.pagesize
        canvas.saveState()
        canvas.setFillColor(THEME_DARK)
        canvas.rect(0, height - HEADER_HEIGHT, width, HEADER_HEIGHT, fill=1, stroke=0)
        canvas.setFillColor(THEME_GOLD)
        canvas.setFont("Helvetica-Bold", 18)
        canvas.drawString(margin, height - 13 * mm, "FRAUDBASE")
        canvas.setFillColor(colors.white)
        canvas.setFont("Helvetica", 9)
        canvas.drawString(margin, height - 18 * mm, REPORT_TITLE.upper())
        canvas.drawRightString(width - margin, height - 13 * mm, generated_at.strftime("%d/%m/%Y %H:%M"))
        canvas.restoreState()

    return decorate


class ReportExporter:
    def __init__(self, renderer: Optional[DocumentRenderer] = None, clock: Callable[[], datetime] = datetime.now):
        self.renderer = renderer or DocumentRenderer()
        self.clock = clock

    def export_styled(self, record: RecidivismRecord, generated_at: datetime):
        width, _ = self.renderer.pagesize
        decorate = _styled_header(width, self.renderer.margin, generated_at)
        return self.renderer.build(
            _styled_flowables(record, generated_at),
            REPORT_TITLE,
            decorate=decorate,
            top_offset=HEADER_HEIGHT,
        )

    def export_monochrome(self, record: RecidivismRecord, generated_at: datetime):
        return self.renderer.render_fragment(render_monochrome_fragment(record, generated_at), REPORT_TITLE)

    def export(self, record: RecidivismRecord, mode: ExportMode = ExportMode.STYLED) -> ExportResult:
        """Gera o PDF; qualquer falha vira notificação de erro genérica."""
        generated_at = self.clock()
        try:
            if mode == ExportMode.MONOCHROME:
                content, pages = self.export_monochrome(record, generated_at)
            else:
                content, pages = self.export_styled(record, generated_at)
        except Exception:
            logger.exception("Erro ao gerar PDF (%s) para o CPF %s", mode.value, record.cpf_display)
            return ExportResult(notification=notifications.error(MSG_EXPORT_ERROR))

        filename = report_filename(record, mode, generated_at)
        logger.info("Relatório %s gerado: %s (%s página(s))", mode.value, filename, pages)
        return ExportResult(
            content=content,
            filename=filename,
            pages=pages,
            notification=notifications.success(MSG_EXPORT_OK),
        )
