"""
File exports of tabular datasets: Excel (openpyxl), CSV and PDF (reportlab)
"""
import csv
import io
import logging
from decimal import Decimal
from numbers import Number

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from logibot.core.pdf import register_fonts

logger = logging.getLogger(__name__)

HEADER_FILL = '4472C4'
STATS_HEADER_FILL = '70AD47'
ROW_FILLS = ('FFFFFF', 'F2F2F2')
NUMBER_FORMAT = '#,##0'

PDF_MAX_ROWS = 50
PDF_LINE_SPACING = 7 * mm
PDF_PAGE_BREAK_AT = 280 * mm
PDF_TOP = 20 * mm
PDF_LEFT = 15 * mm


def _is_numeric(value):
    return isinstance(value, Number) and not isinstance(value, bool)


def _thin_border(color):
    side = Side(style='thin', color=color)
    return Border(left=side, right=side, top=side, bottom=side)


def _style_header(cells, fill_color):
    fill = PatternFill(start_color=fill_color, end_color=fill_color, fill_type='solid')
    for cell in cells:
        cell.fill = fill
        cell.font = Font(bold=True, color='FFFFFF', size=12)
        cell.alignment = Alignment(horizontal='center', vertical='center')
        cell.border = _thin_border('000000')


def _cell_value(value):
    if isinstance(value, Decimal):
        return float(value)
    return value


def column_statistics(headers, rows):
    """Sum, average, max and min for every column holding only numbers"""
    stats = []
    for index, header in enumerate(headers):
        values = [row[index] for row in rows if row[index] is not None]
        if not values or not all(_is_numeric(value) for value in values):
            continue
        total = sum(values)
        stats.append([header, total, total / len(values), max(values), min(values)])
    return stats


def export_excel(sheet_title, headers, rows, include_statistics=False):
    """
    Styled workbook with a shaded header, banded rows and an autofilter.

    Returns the file contents as bytes.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title[:31]

    ws.append(headers)
    _style_header(ws[1], HEADER_FILL)

    data_border = _thin_border('D0D0D0')
    for row in rows:
        ws.append([_cell_value(value) for value in row])
        row_number = ws.max_row
        # Banding starts on the first data row, sheet row 2
        fill_color = ROW_FILLS[(row_number - 1) % 2]
        fill = PatternFill(start_color=fill_color, end_color=fill_color, fill_type='solid')
        for cell in ws[row_number]:
            cell.fill = fill
            cell.border = data_border
            cell.alignment = Alignment(horizontal='left', vertical='center')
            if _is_numeric(cell.value):
                cell.number_format = NUMBER_FORMAT

    for index, header in enumerate(headers, start=1):
        width = max([len(str(header))] + [len(str(row[index - 1])) for row in rows if row[index - 1] is not None])
        ws.column_dimensions[get_column_letter(index)].width = width + 2

    if headers:
        ws.auto_filter.ref = f"A1:{get_column_letter(len(headers))}{max(ws.max_row, 1)}"

    if include_statistics:
        stats = column_statistics(headers, rows)
        if stats:
            stats_ws = wb.create_sheet('Statistics')
            stats_ws.append(['Item', 'Sum', 'Average', 'Max', 'Min'])
            _style_header(stats_ws[1], STATS_HEADER_FILL)
            for stat in stats:
                stats_ws.append([_cell_value(value) for value in stat])
                for cell in stats_ws[stats_ws.max_row][1:]:
                    cell.number_format = NUMBER_FORMAT
            for column in range(1, 6):
                stats_ws.column_dimensions[get_column_letter(column)].width = 16

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def export_csv(headers, rows):
    """UTF-8 CSV with a byte order mark so spreadsheet apps detect the encoding"""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(headers)
    for row in rows:
        writer.writerow(['' if value is None else value for value in row])
    return buffer.getvalue().encode('utf-8-sig')


def export_pdf(title, headers, rows):
    """
    Plain listing: the title, the header joined with " | ", then up to the
    first 50 rows. Lines advance 7mm and a new page starts past 280mm.
    """
    font = register_fonts()
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    page_height = A4[1]
    c.setTitle(title)

    c.setFont(font, 16)
    c.drawString(PDF_LEFT, page_height - PDF_TOP, title)

    if rows:
        c.setFont(font, 9)
        y = PDF_TOP + 10 * mm
        c.drawString(PDF_LEFT, page_height - y, ' | '.join(str(header) for header in headers))
        for row in rows[:PDF_MAX_ROWS]:
            y += PDF_LINE_SPACING
            if y > PDF_PAGE_BREAK_AT:
                c.showPage()
                c.setFont(font, 9)
                y = PDF_TOP
            c.drawString(PDF_LEFT, page_height - y, ' | '.join('' if value is None else str(value) for value in row))

    c.showPage()
    c.save()
    return buffer.getvalue()
