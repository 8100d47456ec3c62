"""
Comprehensive test suite for Sales module
Tests: outbound orders, shipments, quotations with VAT, tax invoices and HomeTax submission
"""
from datetime import date, timedelta
from unittest import mock

import requests
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from decimal import Decimal
from logibot.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from logibot.core.models import AuditLog
from logibot.inventory.models import StockMovement
from logibot.sales.models import OutboundOrder, Shipment, Quotation, Invoice, calculate_vat
from logibot.sales.hometax import build_hometax_payload
from logibot.sales.services import create_invoice, expire_quotations


class VatTests(TestCase):
    """Test VAT rounding"""

    def test_vat_rounds_half_up(self):
        """Test VAT is 10% rounded half up to whole won"""
        self.assertEqual(calculate_vat(Decimal('1005')), Decimal('101'))
        self.assertEqual(calculate_vat(Decimal('1004')), Decimal('100'))
        self.assertEqual(calculate_vat(Decimal('0')), Decimal('0'))


class OutboundAPITests(TestCase):
    """Test outbound order endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer(business_name='서울병원')
        self.product = TestDataFactory.create_product(stock=20, safety_stock=5, price=Decimal('1000.00'))

    def _create(self, quantity=5, **extra):
        data = {'customer': self.customer.id, 'items': [TestDataFactory.line(self.product, quantity=quantity)]}
        data.update(extra)
        return self.client.post('/api/v1/outbound/', data, format='json')

    def test_create_outbound_reduces_stock(self):
        """Test outbound lines leave stock"""
        response = self._create(quantity=5)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'preparing')
        self.assertEqual(response.data['customer_name'], '서울병원')
        self.assertEqual(Decimal(str(response.data['total_amount'])), Decimal('5000.00'))
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 15)
        movement = StockMovement.objects.filter(product=self.product, movement_type='out').get()
        self.assertEqual(movement.reference, response.data['outbound_number'])

    def test_create_outbound_insufficient_stock(self):
        """Test a shortage rejects the whole outbound"""
        response = self._create(quantity=21)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('insufficient stock', response.data['detail'])
        self.assertFalse(OutboundOrder.objects.exists())
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 20)

    def test_create_outbound_requires_customer(self):
        """Test an outbound needs a customer or customer name"""
        data = {'items': [TestDataFactory.line(self.product)]}
        response = self.client.post('/api/v1/outbound/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_outbound_with_tracking_opens_shipment(self):
        """Test a tracking number puts the order in transit with a shipment"""
        response = self._create(quantity=3, tracking_number='CJ-123', destination='Seoul')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'in_transit')
        shipment = Shipment.objects.get(outbound_id=response.data['id'])
        self.assertEqual(shipment.status, 'in_transit')
        self.assertEqual(shipment.item_count, 3)
        self.assertEqual(shipment.destination, 'Seoul')
        self.assertEqual(shipment.customer_name, '서울병원')

    def test_update_tracking(self):
        """Test adding a tracking number later"""
        order_id = self._create().data['id']
        response = self.client.post(f'/api/v1/outbound/{order_id}/tracking/', {'tracking_number': 'HJ-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'in_transit')
        self.assertEqual(Shipment.objects.get(outbound_id=order_id).tracking_number, 'HJ-1')

    def test_complete_outbound(self):
        """Test completing an outbound order once"""
        order_id = self._create().data['id']
        response = self.client.post(f'/api/v1/outbound/{order_id}/complete/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'completed')
        self.assertIsNotNone(response.data['completed_date'])
        response = self.client.post(f'/api/v1/outbound/{order_id}/complete/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_outbound_keeps_items(self):
        """Test updates only touch notes and date"""
        order_id = self._create(quantity=2).data['id']
        response = self.client.patch(f'/api/v1/outbound/{order_id}/', {'notes': 'fragile'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['notes'], 'fragile')
        self.assertEqual(response.data['items'][0]['quantity'], 2)

    def test_list_outbound_search(self):
        """Test searching outbound orders by customer"""
        self._create()
        response = self.client.get('/api/v1/outbound/?search=서울')
        self.assertEqual(response.data['count'], 1)


class ShipmentAPITests(TestCase):
    """Test shipment endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_standalone_shipment(self):
        """Test a shipment without an outbound order"""
        data = {'customer_name': 'Busan Clinic', 'destination': 'Busan', 'carrier': 'CJ', 'item_count': 4}
        response = self.client.post('/api/v1/shipments/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'preparing')
        self.assertTrue(response.data['shipment_number'].startswith('SHP-'))

    def test_create_shipment_requires_customer(self):
        """Test a shipment needs a customer name or outbound order"""
        response = self.client.post('/api/v1/shipments/', {'destination': 'Busan'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_status_flow_sets_dates(self):
        """Test shipped and completed dates follow the status"""
        shipment_id = self.client.post('/api/v1/shipments/', {'customer_name': 'X'}, format='json').data['id']
        response = self.client.post(f'/api/v1/shipments/{shipment_id}/status/', {'status': 'in_transit'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['shipped_date'], timezone.localdate().isoformat())
        response = self.client.post(f'/api/v1/shipments/{shipment_id}/status/', {'status': 'delivered'}, format='json')
        self.assertEqual(response.data['completed_date'], timezone.localdate().isoformat())

    def test_cannot_skip_transit(self):
        """Test preparing cannot go straight to delivered"""
        shipment_id = self.client.post('/api/v1/shipments/', {'customer_name': 'X'}, format='json').data['id']
        response = self.client.post(f'/api/v1/shipments/{shipment_id}/status/', {'status': 'delivered'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'invalid_status_transition')


class QuotationAPITests(TestCase):
    """Test quotation endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(price=Decimal('1005.00'))

    def _create(self, **extra):
        data = {'customer_name': '한빛약국', 'items': [TestDataFactory.line(self.product, quantity=1)]}
        data.update(extra)
        return self.client.post('/api/v1/quotations/', data, format='json')

    def test_create_quotation_totals(self):
        """Test supply, VAT and total with half-up rounding"""
        response = self._create(quotation_date='2025-03-01')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'issued')
        self.assertEqual(Decimal(str(response.data['supply_amount'])), Decimal('1005.00'))
        self.assertEqual(Decimal(str(response.data['vat_amount'])), Decimal('101.00'))
        self.assertEqual(Decimal(str(response.data['total_amount'])), Decimal('1106.00'))
        self.assertEqual(response.data['valid_until'], '2025-03-31')

    def test_valid_until_before_date(self):
        """Test the validity date cannot precede the quotation date"""
        response = self._create(quotation_date='2025-03-01', valid_until='2025-02-01')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('valid_until', response.data)

    def test_replace_items_recalculates(self):
        """Test replacing items recalculates totals"""
        quotation_id = self._create().data['id']
        response = self.client.patch(
            f'/api/v1/quotations/{quotation_id}/',
            {'items': [{'product_name': 'Service', 'quantity': 2, 'unit_price': '500.00'}]},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(str(response.data['total_amount'])), Decimal('1100.00'))

    def test_approve_quotation_is_audited(self):
        """Test a status change writes a status_change audit log"""
        quotation_id = self._create().data['id']
        response = self.client.patch(f'/api/v1/quotations/{quotation_id}/', {'status': 'approved'}, format='json')
        self.assertEqual(response.data['status'], 'approved')
        self.assertTrue(AuditLog.objects.filter(action='status_change', model_name='Quotation').exists())

    def test_expire_quotations(self):
        """Test issued quotations past validity are expired"""
        self._create(quotation_date='2020-01-01')
        current = self._create().data['id']
        response = self.client.post('/api/v1/quotations/expire/')
        self.assertEqual(response.data['expired'], 1)
        self.assertEqual(Quotation.objects.get(id=current).status, 'issued')
        self.assertEqual(expire_quotations(), 0)

    def test_quotation_pdf(self):
        """Test the printable quotation is a PDF"""
        quotation_id = self._create().data['id']
        response = self.client.get(f'/api/v1/quotations/{quotation_id}/pdf/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(b''.join(response.streaming_content).startswith(b'%PDF'))


class InvoiceAPITests(TestCase):
    """Test tax invoice endpoints and HomeTax submission"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer(business_name='대한의원')
        self.product = TestDataFactory.create_product(stock=10, price=Decimal('2000.00'))

    def _outbound(self):
        response = self.client.post(
            '/api/v1/outbound/',
            {'customer': self.customer.id, 'items': [TestDataFactory.line(self.product, quantity=3)]},
            format='json'
        )
        return response.data['id']

    def test_invoice_copies_outbound_items(self):
        """Test an invoice from an outbound order copies its items and customer"""
        outbound_id = self._outbound()
        response = self.client.post('/api/v1/invoices/', {'outbound': outbound_id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['customer_name'], '대한의원')
        self.assertEqual(response.data['customer_business_number'], self.customer.business_number)
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(Decimal(str(response.data['supply_amount'])), Decimal('6000.00'))
        self.assertEqual(Decimal(str(response.data['tax_amount'])), Decimal('600.00'))
        self.assertEqual(Decimal(str(response.data['total_amount'])), Decimal('6600.00'))

    def test_invoice_without_items_or_outbound(self):
        """Test a standalone invoice needs items"""
        response = self.client.post('/api/v1/invoices/', {'customer_name': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('items', response.data)

    def test_mark_paid(self):
        """Test recording payment"""
        invoice = create_invoice('X', lines=[{'product': None, 'product_code': '', 'product_name': 'Fee',
                                              'quantity': 1, 'unit_price': Decimal('100.00')}])
        response = self.client.post(f'/api/v1/invoices/{invoice.id}/mark-paid/', {'payment_date': '2025-05-10'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['payment_received'])
        self.assertEqual(response.data['payment_date'], '2025-05-10')
        response = self.client.get('/api/v1/invoices/?paid=false')
        self.assertEqual(response.data['count'], 0)

    def test_mark_paid_bad_date(self):
        """Test a malformed payment date is rejected"""
        invoice = create_invoice('X', lines=[{'product': None, 'product_code': '', 'product_name': 'Fee',
                                              'quantity': 1, 'unit_price': Decimal('100.00')}])
        response = self.client.post(f'/api/v1/invoices/{invoice.id}/mark-paid/', {'payment_date': '10/05/2025'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_hometax_payload(self):
        """Test the HomeTax payload fields"""
        outbound = OutboundOrder.objects.get(id=self._outbound())
        invoice = create_invoice('', outbound=outbound, issue_date=date(2025, 4, 2))
        payload = build_hometax_payload(invoice, company={'business_number': '123-45-67890', 'name': 'LogiBot'})
        self.assertEqual(payload['writeDate'], '20250402')
        self.assertEqual(payload['invoiceType'], '01')
        self.assertEqual(payload['purposeType'], '02')
        self.assertEqual(payload['supplyCostTotal'], '6000')
        self.assertEqual(payload['taxTotal'], '600')
        self.assertEqual(payload['totalAmount'], '6600')
        self.assertEqual(payload['detailList'][0]['serialNum'], '1')
        self.assertEqual(payload['detailList'][0]['tax'], '600')

    @override_settings(HOMETAX_API_KEY=None)
    def test_hometax_test_key(self):
        """Test submission without an API key issues a test key"""
        outbound_id = self._outbound()
        invoice_id = self.client.post('/api/v1/invoices/', {'outbound': outbound_id}, format='json').data['id']
        response = self.client.post(f'/api/v1/invoices/{invoice_id}/hometax/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        invoice = Invoice.objects.get(id=invoice_id)
        self.assertTrue(response.data['invoice_key'].startswith(f'TEST-{invoice.invoice_number}-'))
        self.assertEqual(invoice.hometax_key, response.data['invoice_key'])
        self.assertIsNotNone(invoice.hometax_sent_at)
        self.assertTrue(AuditLog.objects.filter(action='hometax_submit').exists())

    @override_settings(HOMETAX_API_KEY=None)
    def test_items_locked_after_hometax(self):
        """Test items cannot change after submission"""
        outbound_id = self._outbound()
        invoice_id = self.client.post('/api/v1/invoices/', {'outbound': outbound_id}, format='json').data['id']
        self.client.post(f'/api/v1/invoices/{invoice_id}/hometax/')
        response = self.client.patch(
            f'/api/v1/invoices/{invoice_id}/',
            {'items': [{'product_name': 'Fee', 'quantity': 1, 'unit_price': '1.00'}]},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(HOMETAX_API_KEY='secret', HOMETAX_ENDPOINT='https://hometax.invalid/v1/invoice')
    def test_hometax_gateway_down(self):
        """Test an unreachable gateway returns 502 and leaves the invoice unsent"""
        outbound_id = self._outbound()
        invoice_id = self.client.post('/api/v1/invoices/', {'outbound': outbound_id}, format='json').data['id']
        with mock.patch('logibot.sales.hometax.requests.post',
                        side_effect=requests.exceptions.ConnectionError('refused')):
            response = self.client.post(f'/api/v1/invoices/{invoice_id}/hometax/')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.data['code'], 'hometax_error')
        self.assertEqual(Invoice.objects.get(id=invoice_id).hometax_key, '')

    @override_settings(HOMETAX_API_KEY='secret')
    def test_hometax_accepted(self):
        """Test the gateway key is stored on success"""
        outbound_id = self._outbound()
        invoice_id = self.client.post('/api/v1/invoices/', {'outbound': outbound_id}, format='json').data['id']
        gateway_response = mock.Mock(ok=True, status_code=200)
        gateway_response.json.return_value = {'invoiceKey': 'NTS-0001'}
        with mock.patch('logibot.sales.hometax.requests.post', return_value=gateway_response) as post:
            response = self.client.post(f'/api/v1/invoices/{invoice_id}/hometax/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['invoice_key'], 'NTS-0001')
        self.assertEqual(post.call_args.kwargs['headers']['Authorization'], 'Bearer secret')

    def test_hometax_requires_items(self):
        """Test an invoice without items cannot be submitted"""
        invoice = Invoice.objects.create(invoice_number='INV-EMPTY', customer_name='X', issue_date=timezone.localdate())
        response = self.client.post(f'/api/v1/invoices/{invoice.id}/hometax/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_invoice_date_filter(self):
        """Test filtering invoices by issue date"""
        create_invoice('X', lines=[{'product': None, 'product_code': '', 'product_name': 'Fee',
                                    'quantity': 1, 'unit_price': Decimal('100.00')}],
                       issue_date=timezone.localdate() - timedelta(days=40))
        since = (timezone.localdate() - timedelta(days=7)).isoformat()
        response = self.client.get(f'/api/v1/invoices/?date_from={since}')
        self.assertEqual(response.data['count'], 0)
