"""
Renderizador de documentos PDF em A4.

O relatório preto-e-branco é montado como um fragmento HTML fora da página
(arquivo temporário), convertido em blocos e fatiado em páginas A4. O
fragmento é sempre removido, com sucesso ou erro na geração.
"""

import io
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from bs4 import BeautifulSoup
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Flowable, HRFlowable, Paragraph, SimpleDocTemplate, Spacer

from fraudbase.common.config import get_settings
from fraudbase.common.exceptions import ExportError

logger = logging.getLogger(__name__)

PageDecorator = Callable[[object, object], None]


@contextmanager
def offscreen_fragment(html: str) -> Iterator[Path]:
    """Grava o fragmento num arquivo temporário e garante a remoção na saída."""
    fd, temp_filename = tempfile.mkstemp(prefix="relatorio_", suffix=".html")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(html)
        yield Path(temp_filename)
    finally:
        if os.path.exists(temp_filename):
            os.remove(temp_filename)
            logger.debug("Fragmento temporário removido: %s", temp_filename)


def monochrome_styles() -> Dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    black = colors.black
    return {
        "h1": ParagraphStyle("pb_h1", parent=base["Title"], textColor=black, fontSize=16, spaceAfter=6),
        "h2": ParagraphStyle("pb_h2", parent=base["Heading2"], textColor=black, fontSize=12, spaceBefore=10),
        "p": ParagraphStyle("pb_p", parent=base["Normal"], textColor=black, fontSize=10, leading=14),
        "li": ParagraphStyle("pb_li", parent=base["Normal"], textColor=black, fontSize=10, leading=14, leftIndent=18),
        "small": ParagraphStyle(
            "pb_small", parent=base["Normal"], textColor=black, fontSize=8, leading=11, alignment=TA_CENTER
        ),
    }


def fragment_to_flowables(path: Path, styles: Optional[Dict[str, ParagraphStyle]] = None) -> List[Flowable]:
    """Converte o fragmento (h1, h2, p, li, hr) em blocos do reportlab, na ordem do documento."""
    styles = styles or monochrome_styles()
    soup = BeautifulSoup(path.read_text(encoding="utf-8"), "html.parser")
    root = soup.find(class_="relatorio") or soup

    flowables: List[Flowable] = []
    for el in root.find_all(["h1", "h2", "p", "li", "hr"]):
        if el.name == "hr":
            flowables.append(HRFlowable(width="100%", thickness=0.5, color=colors.black, spaceBefore=4, spaceAfter=4))
            continue

        markup = el.decode_contents().strip()
        if el.name == "li":
            bullet = "•"
            if el.parent is not None and el.parent.name == "ol":
                siblings = el.parent.find_all("li", recursive=False)
                bullet = f"{next(i for i, li in enumerate(siblings, start=1) if li is el)}."
            flowables.append(Paragraph(markup, styles["li"], bulletText=bullet))
        elif "rodape" in (el.get("class") or []):
            flowables.append(Spacer(1, 6 * mm))
            flowables.append(Paragraph(markup, styles["small"]))
        else:
            flowables.append(Paragraph(markup, styles[el.name]))
    return flowables


class DocumentRenderer:
    def __init__(self, margin_mm: Optional[float] = None, pagesize: Tuple[float, float] = A4):
        self.margin = (margin_mm if margin_mm is not None else get_settings().report_margin_mm) * mm
        self.pagesize = pagesize

    def build(
        self,
        flowables: List[Flowable],
        title: str,
        decorate: Optional[PageDecorator] = None,
        top_offset: float = 0,
    ) -> Tuple[bytes, int]:
        """Distribui os blocos em páginas A4 com a mesma margem nos quatro lados."""
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=self.pagesize,
            leftMargin=self.margin,
            rightMargin=self.margin,
            topMargin=self.margin + top_offset,
            bottomMargin=self.margin,
            title=title,
        )
        pages: List[int] = []
        width, _ = self.pagesize

        def on_page(canvas, doc):
            pages.append(doc.page)
            if decorate is not None:
                decorate(canvas, doc)
            canvas.saveState()
            canvas.setFont("Helvetica", 7)
            canvas.setFillColor(colors.black)
            canvas.drawRightString(width - self.margin, self.margin / 2, f"Página {doc.page}")
            canvas.restoreState()

        doc.build(flowables, onFirstPage=on_page, onLaterPages=on_page)
        return buffer.getvalue(), len(pages)

    def render_fragment(self, html: str, title: str) -> Tuple[bytes, int]:
        with offscreen_fragment(html) as path:
            flowables = fragment_to_flowables(path)
            if not flowables:
                raise ExportError("Fragmento do relatório sem conteúdo.")
            return self.build(flowables, title)
