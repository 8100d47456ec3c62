"""
Base class for printable PDF documents using ReportLab
"""
import io
from typing import List
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

# Built-in CID font with Hangul coverage, no font files needed
KOREAN_FONT = 'HYSMyeongJo-Medium'

_font_registered = False


def register_fonts():
    global _font_registered
    if not _font_registered:
        pdfmetrics.registerFont(UnicodeCIDFont(KOREAN_FONT))
        _font_registered = True
    return KOREAN_FONT


def format_won(amount):
    return f"{int(round(amount)):,}원"


class DocumentGenerator:
    """Shared layout for quotations, purchase orders and similar documents"""

    author = "LogiBot"

    def __init__(self):
        self.font = register_fonts()
        self.styles = getSampleStyleSheet()
        self.title_style = ParagraphStyle(
            "DocumentTitle",
            parent=self.styles["Heading1"],
            fontName=self.font,
            fontSize=20,
            spaceAfter=12,
            alignment=1,
        )
        self.normal_style = ParagraphStyle(
            "DocumentNormal",
            parent=self.styles["Normal"],
            fontName=self.font,
            fontSize=10,
            leading=14,
        )
        self.total_style = ParagraphStyle(
            "DocumentTotal",
            parent=self.normal_style,
            fontSize=12,
            alignment=2,
        )

    def create_pdf_buffer(self, title: str, content: List) -> io.BytesIO:
        """Create a PDF document from content list"""
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            title=title,
            author=self.author,
            subject=title,
            leftMargin=15 * mm,
            rightMargin=15 * mm,
            topMargin=15 * mm,
            bottomMargin=15 * mm,
        )
        doc.build(content)
        buffer.seek(0)
        return buffer

    def info_block(self, lines):
        return [Paragraph(escape(line), self.normal_style) for line in lines if line]

    def items_table(self, header, rows, numeric_columns=()):
        """Bordered line item table with a shaded header row"""
        table = Table([header] + rows, repeatRows=1)
        style = [
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#4472C4")),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, -1), self.font),
            ("FONTSIZE", (0, 0), (-1, 0), 10),
            ("FONTSIZE", (0, 1), (-1, -1), 9),
            ("ALIGN", (0, 0), (-1, 0), "CENTER"),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
        ]
        for column in numeric_columns:
            style.append(("ALIGN", (column, 1), (column, -1), "RIGHT"))
        table.setStyle(TableStyle(style))
        return table

    def build_document(self, title, info_lines, header, rows, total_lines, numeric_columns=(), footer_lines=()):
        content = [Paragraph(escape(title), self.title_style), Spacer(1, 6 * mm)]
        content.extend(self.info_block(info_lines))
        content.append(Spacer(1, 6 * mm))
        content.append(self.items_table(header, rows, numeric_columns))
        content.append(Spacer(1, 6 * mm))
        content.extend(Paragraph(escape(line), self.total_style) for line in total_lines)
        if footer_lines:
            content.append(Spacer(1, 10 * mm))
            content.extend(self.info_block(footer_lines))
        return self.create_pdf_buffer(title, content)
