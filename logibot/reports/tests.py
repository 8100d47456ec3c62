"""
Comprehensive test suite for Reports module
Tests: Dashboard KPIs, Inventory Status, Monthly Trend, Vendor Analytics, Exports
"""
import csv
import io
from decimal import Decimal
from unittest import mock

from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from openpyxl import load_workbook
from reportlab.pdfgen import canvas
from rest_framework import status
from logibot.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from logibot.purchasing.services import create_purchase
from logibot.reports.exporters import column_statistics, export_csv, export_excel, export_pdf
from logibot.reports.services import stock_status
from logibot.sales.services import create_outbound, create_invoice


def _line(product, quantity, unit_price):
    return {'product': product, 'product_code': product.code, 'product_name': product.name,
            'quantity': quantity, 'unit_price': Decimal(unit_price)}


class ReportsTests(TestCase):
    """Test report endpoints"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

        self.supplier = TestDataFactory.create_supplier()
        self.customer = TestDataFactory.create_supplier(business_name='Happy Vet', partner_type='customer')
        self.critical = TestDataFactory.create_product(code='A-001', stock=2, safety_stock=10)
        self.normal = TestDataFactory.create_product(code='B-001', stock=15, safety_stock=10)
        self.excess = TestDataFactory.create_product(code='C-001', stock=50, safety_stock=10)

        create_outbound('Happy Vet', [_line(self.excess, 5, '2000.00')], customer=self.customer)
        create_purchase(self.supplier, [_line(self.normal, 4, '500.00')])
        create_invoice('Happy Vet', [_line(self.excess, 1, '1000.00')], customer=self.customer)

    def test_dashboard_kpis(self):
        """Test headline numbers for the current month"""
        response = self.client.get('/api/v1/reports/dashboard-kpis/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['product_count'], 3)
        self.assertEqual(response.data['total_stock'], 2 + 19 + 45)
        self.assertEqual(Decimal(str(response.data['stock_value'])), Decimal('66000.00'))
        self.assertEqual(response.data['low_stock_count'], 1)
        self.assertEqual(response.data['pending_outbound'], 1)
        self.assertEqual(Decimal(str(response.data['month_sales'])), Decimal('10000.00'))
        self.assertEqual(Decimal(str(response.data['month_purchases'])), Decimal('2000.00'))

    def test_stock_status_buckets(self):
        """Test critical, low, normal and excess thresholds"""
        self.assertEqual(stock_status(4, 10), 'critical')
        self.assertEqual(stock_status(5, 10), 'low')
        self.assertEqual(stock_status(10, 10), 'normal')
        self.assertEqual(stock_status(20, 10), 'excess')

    def test_inventory_status(self):
        """Test category totals, status buckets and the shortest products"""
        response = self.client.get('/api/v1/reports/inventory-status/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], {'critical': 1, 'low': 0, 'normal': 1, 'excess': 1})
        self.assertEqual(len(response.data['categories']), 3)
        self.assertEqual([p['code'] for p in response.data['top_low_stock']], ['A-001'])
        self.assertEqual(response.data['top_low_stock'][0]['shortage'], 8)

    def test_monthly_trend(self):
        """Test twelve months of sales against purchases"""
        response = self.client.get('/api/v1/reports/monthly-trend/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        months = response.data['months']
        self.assertEqual(len(months), 12)
        this_month = months[timezone.localdate().month - 1]
        self.assertEqual(Decimal(str(this_month['sales'])), Decimal('10000.00'))
        self.assertEqual(Decimal(str(this_month['purchases'])), Decimal('2000.00'))

    def test_monthly_trend_bad_year(self):
        """Test a non numeric year is rejected"""
        response = self.client.get('/api/v1/reports/monthly-trend/?year=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_vendor_analytics(self):
        """Test sales include outbound orders and invoices"""
        response = self.client.get('/api/v1/reports/vendor-analytics/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        top = response.data['top_partners'][0]
        self.assertEqual(top['business_name'], 'Happy Vet')
        self.assertEqual(Decimal(str(top['sales_total'])), Decimal('11100.00'))
        supplier = next(p for p in response.data['partners'] if p['partner_id'] == self.supplier.id)
        self.assertEqual(Decimal(str(supplier['purchase_total'])), Decimal('2000.00'))

    def test_reports_require_login(self):
        """Test reports are not public"""
        self.client.logout()
        response = self.client.get('/api/v1/reports/dashboard-kpis/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class ExportTests(TestCase):
    """Test dataset downloads"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        TestDataFactory.create_product(code='GZE-01', name='Gauze', stock=12)
        self.today = timezone.localdate().strftime('%Y-%m-%d')

    def test_export_excel_with_statistics(self):
        """Test Excel export with a Statistics sheet"""
        response = self.client.get('/api/v1/reports/export/products/?format=xlsx&stats=true')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            response['Content-Type'], 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
        )
        self.assertEqual(response['Content-Disposition'], f'attachment; filename="products_{self.today}.xlsx"')
        wb = load_workbook(io.BytesIO(response.content))
        self.assertEqual(wb.sheetnames, ['Products', 'Statistics'])
        self.assertEqual(wb['Products']['A2'].value, 'GZE-01')
        self.assertEqual(wb['Products']['A2'].fill.start_color.rgb[-6:], 'F2F2F2')

    def test_export_csv(self):
        """Test CSV export starts with a byte order mark"""
        response = self.client.get('/api/v1/reports/export/stock-movements/?format=csv')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.content.startswith(b'\xef\xbb\xbf'))
        rows = list(csv.reader(io.StringIO(response.content.decode('utf-8-sig'))))
        self.assertEqual(rows[0][0], 'Date')
        self.assertEqual(rows[1][1], 'GZE-01')

    def test_export_pdf(self):
        """Test PDF export"""
        response = self.client.get('/api/v1/reports/export/b2b-orders/?format=pdf')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_unknown_dataset(self):
        """Test unknown datasets return 404"""
        response = self.client.get('/api/v1/reports/export/salaries/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_unknown_format(self):
        """Test unsupported formats are rejected"""
        response = self.client.get('/api/v1/reports/export/products/?format=docx')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ExporterTests(TestCase):
    """Test export helpers directly"""

    def test_column_statistics_numeric_only(self):
        """Test statistics skip text columns and empty cells"""
        headers = ['Name', 'Qty', 'Price']
        rows = [['a', 2, Decimal('10')], ['b', 4, None], ['c', 6, Decimal('30')]]
        self.assertEqual(column_statistics(headers, rows), [
            ['Qty', 12, 4, 6, 2],
            ['Price', Decimal('40'), Decimal('20'), Decimal('30'), Decimal('10')],
        ])

    def test_csv_blank_for_none(self):
        """Test missing values are written as empty cells"""
        content = export_csv(['A', 'B'], [[1, None]])
        self.assertEqual(content.decode('utf-8-sig').splitlines(), ['A,B', '1,'])

    def test_excel_without_statistics(self):
        """Test statistics are only added on request"""
        wb = load_workbook(io.BytesIO(export_excel('Items', ['Qty'], [[1], [2]])))
        self.assertEqual(wb.sheetnames, ['Items'])
        self.assertEqual(wb['Items'].auto_filter.ref, 'A1:A3')

    def test_excel_header_style(self):
        """Test header cells are bold white on blue with a thin black border"""
        ws = load_workbook(io.BytesIO(export_excel('Items', ['Name', 'Qty'], [['a', 1]])))['Items']
        cell = ws['A1']
        self.assertTrue(cell.fill.start_color.rgb.endswith('4472C4'))
        self.assertTrue(cell.font.bold)
        self.assertEqual(cell.font.size, 12)
        self.assertTrue(cell.font.color.rgb.endswith('FFFFFF'))
        self.assertEqual(cell.border.left.style, 'thin')
        self.assertTrue(cell.border.left.color.rgb.endswith('000000'))

    def test_excel_rows_banded_and_sized(self):
        """Test data rows alternate fills, numbers get a thousands format and columns fit their text"""
        rows = [['gauze', 1500], ['long product name', 20]]
        ws = load_workbook(io.BytesIO(export_excel('Items', ['Name', 'Qty'], rows)))['Items']
        self.assertTrue(ws['A2'].fill.start_color.rgb.endswith('F2F2F2'))
        self.assertTrue(ws['A3'].fill.start_color.rgb.endswith('FFFFFF'))
        self.assertEqual(ws['B2'].number_format, '#,##0')
        self.assertEqual(ws['A2'].border.left.style, 'thin')
        self.assertEqual(ws.column_dimensions['A'].width, len('long product name') + 2)
        self.assertEqual(ws.column_dimensions['B'].width, len('Qty') + 2)

    def test_excel_statistics_header(self):
        """Test the statistics sheet has a green header"""
        wb = load_workbook(io.BytesIO(export_excel('Items', ['Qty'], [[1], [2]], include_statistics=True)))
        ws = wb['Statistics']
        self.assertEqual([c.value for c in ws[1]], ['Item', 'Sum', 'Average', 'Max', 'Min'])
        self.assertTrue(ws['A1'].fill.start_color.rgb.endswith('70AD47'))
        self.assertEqual(ws['B2'].number_format, '#,##0')

    def test_pdf_lists_first_fifty_rows(self):
        """Test the PDF draws the title, the header and at most 50 rows"""
        rows = [[f'item-{i}', i] for i in range(60)]
        with mock.patch.object(canvas.Canvas, 'drawString', autospec=True) as draw:
            content = export_pdf('Products', ['Name', 'Qty'], rows)
        self.assertTrue(content.startswith(b'%PDF'))
        self.assertEqual(draw.call_count, 52)
        drawn = [call.args[3] for call in draw.call_args_list]
        self.assertEqual(drawn[:3], ['Products', 'Name | Qty', 'item-0 | 0'])
        self.assertEqual(drawn[-1], 'item-49 | 49')
