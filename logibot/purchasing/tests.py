"""
Comprehensive test suite for Purchasing module
Tests: goods receipts, stock updates and reversals, purchase order lifecycle and PDFs
"""
from django.test import TestCase
from rest_framework import status
from decimal import Decimal
from django.utils import timezone
from logibot.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from logibot.core.exceptions import InvalidStatusTransition
from logibot.core.models import AuditLog
from logibot.purchasing.models import Purchase, PurchaseItem, PurchaseOrder
from logibot.purchasing.services import change_purchase_order_status, create_purchase_order
from logibot.inventory.models import StockMovement
from logibot.inventory.services import stock_out


class PurchaseModelTests(TestCase):
    """Test Purchase and line item model methods"""

    def setUp(self):
        self.supplier = TestDataFactory.create_supplier()
        self.product = TestDataFactory.create_product(code='GZE-01', name='Gauze')
        self.purchase = Purchase.objects.create(
            purchase_number='PUR-001', supplier=self.supplier, purchase_date=timezone.localdate()
        )

    def test_purchase_str(self):
        """Test purchase string representation"""
        self.assertEqual(str(self.purchase), 'PUR-001')

    def test_line_item_snapshots_product(self):
        """Test line items copy product code and name and compute the subtotal"""
        item = PurchaseItem.objects.create(
            purchase=self.purchase, product=self.product, quantity=3, unit_price=Decimal('250.00')
        )
        self.assertEqual(item.product_code, 'GZE-01')
        self.assertEqual(item.product_name, 'Gauze')
        self.assertEqual(item.subtotal, Decimal('750.00'))

    def test_line_item_survives_product_delete(self):
        """Test deleting a product keeps the line item text"""
        item = PurchaseItem.objects.create(
            purchase=self.purchase, product=self.product, quantity=1, unit_price=Decimal('100.00')
        )
        self.product.delete()
        item.refresh_from_db()
        self.assertIsNone(item.product)
        self.assertEqual(item.product_name, 'Gauze')

    def test_purchase_total(self):
        """Test purchase total sums line subtotals"""
        PurchaseItem.objects.create(purchase=self.purchase, product=self.product, quantity=10, unit_price=Decimal('100.00'))
        PurchaseItem.objects.create(purchase=self.purchase, product=self.product, quantity=5, unit_price=Decimal('50.00'))
        self.assertEqual(self.purchase.get_total(), Decimal('1250.00'))


class PurchaseAPITests(TestCase):
    """Test Purchase API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.supplier = TestDataFactory.create_supplier()
        self.product = TestDataFactory.create_product(stock=5)

    def _create(self, quantity=10):
        data = {
            'supplier': self.supplier.id,
            'purchase_date': timezone.localdate().isoformat(),
            'items': [TestDataFactory.line(self.product, quantity=quantity, unit_price='100.00')],
        }
        return self.client.post('/api/v1/purchases/', data, format='json')

    def test_create_purchase_adds_stock(self):
        """Test creating a purchase adds stock with a ledger entry"""
        response = self._create(quantity=10)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['purchase_number'].startswith('PUR-'))
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(Decimal(str(response.data['total_amount'])), Decimal('1000.00'))
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 15)
        movement = StockMovement.objects.filter(product=self.product).first()
        self.assertEqual(movement.reason, 'purchase')
        self.assertEqual(movement.reference, response.data['purchase_number'])

    def test_create_purchase_without_items(self):
        """Test creating a purchase without items fails"""
        data = {'supplier': self.supplier.id, 'items': []}
        response = self.client.post('/api/v1/purchases/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('items', response.data)

    def test_create_purchase_item_without_product(self):
        """Test every purchase item must reference a product"""
        data = {
            'supplier': self.supplier.id,
            'items': [{'product_name': 'Loose item', 'quantity': 1, 'unit_price': '10.00'}],
        }
        response = self.client.post('/api/v1/purchases/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_purchase_zero_quantity(self):
        """Test item quantities must be positive"""
        response = self._create(quantity=0)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_purchase_notes_only(self):
        """Test updates change notes and date but not items"""
        purchase_id = self._create().data['id']
        response = self.client.patch(
            f'/api/v1/purchases/{purchase_id}/',
            {'notes': 'checked', 'items': [TestDataFactory.line(self.product, quantity=99)]},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['notes'], 'checked')
        self.assertEqual(response.data['items'][0]['quantity'], 10)

    def test_delete_purchase_reverses_stock(self):
        """Test deleting a completed purchase takes its stock back out"""
        purchase_id = self._create(quantity=10).data['id']
        response = self.client.delete(f'/api/v1/purchases/{purchase_id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 5)
        self.assertFalse(Purchase.objects.filter(id=purchase_id).exists())

    def test_delete_purchase_after_stock_used(self):
        """Test a purchase whose stock was already shipped cannot be deleted"""
        purchase_id = self._create(quantity=10).data['id']
        stock_out(self.product, 12)
        response = self.client.delete(f'/api/v1/purchases/{purchase_id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Purchase.objects.filter(id=purchase_id).exists())

    def test_list_purchases_filter_supplier(self):
        """Test listing purchases by supplier"""
        self._create()
        other = TestDataFactory.create_supplier()
        response = self.client.get(f'/api/v1/purchases/?supplier={other.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 0)
        response = self.client.get(f'/api/v1/purchases/?supplier={self.supplier.id}')
        self.assertEqual(response.data['count'], 1)


class PurchaseOrderTests(TestCase):
    """Test purchase order endpoints and status transitions"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.supplier = TestDataFactory.create_supplier()
        self.product = TestDataFactory.create_product(price=Decimal('300.00'))

    def _create_order(self):
        data = {
            'supplier': self.supplier.id,
            'expected_date': '2030-01-15',
            'items': [
                TestDataFactory.line(self.product, quantity=4),
                {'product_name': 'Custom box', 'quantity': 2, 'unit_price': '50.00'},
            ],
        }
        return self.client.post('/api/v1/purchase-orders/', data, format='json')

    def test_create_order(self):
        """Test creating a pending purchase order with totals"""
        response = self._create_order()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')
        self.assertTrue(response.data['order_number'].startswith('PO-'))
        self.assertEqual(Decimal(str(response.data['total_amount'])), Decimal('1300.00'))
        self.assertEqual(response.data['items'][0]['current_stock'], 0)

    def test_order_does_not_touch_stock(self):
        """Test purchase orders do not change stock"""
        self._create_order()
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 0)

    def test_replace_items_while_pending(self):
        """Test items can be replaced while the order is pending"""
        order_id = self._create_order().data['id']
        response = self.client.patch(
            f'/api/v1/purchase-orders/{order_id}/',
            {'items': [TestDataFactory.line(self.product, quantity=1)]},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(Decimal(str(response.data['total_amount'])), Decimal('300.00'))

    def test_items_locked_after_confirmation(self):
        """Test items cannot change once the order is confirmed"""
        order_id = self._create_order().data['id']
        self.client.post(f'/api/v1/purchase-orders/{order_id}/status/', {'status': 'confirmed'}, format='json')
        response = self.client.patch(
            f'/api/v1/purchase-orders/{order_id}/',
            {'items': [TestDataFactory.line(self.product, quantity=1)]},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('items', response.data)

    def test_status_flow(self):
        """Test pending -> confirmed -> completed"""
        order_id = self._create_order().data['id']
        response = self.client.post(f'/api/v1/purchase-orders/{order_id}/status/', {'status': 'confirmed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'confirmed')
        response = self.client.post(f'/api/v1/purchase-orders/{order_id}/status/', {'status': 'completed'}, format='json')
        self.assertEqual(response.data['status'], 'completed')
        self.assertEqual(AuditLog.objects.filter(action='status_change', model_name='PurchaseOrder').count(), 2)

    def test_invalid_transition(self):
        """Test a pending order cannot jump to completed"""
        order_id = self._create_order().data['id']
        response = self.client.post(f'/api/v1/purchase-orders/{order_id}/status/', {'status': 'completed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'invalid_status_transition')

    def test_rejected_transition_keeps_edits_unsaved(self):
        """Test an update with an invalid status change leaves the order untouched"""
        order_id = self._create_order().data['id']
        response = self.client.patch(
            f'/api/v1/purchase-orders/{order_id}/', {'notes': 'CHANGED', 'status': 'completed'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'invalid_status_transition')
        order = PurchaseOrder.objects.get(id=order_id)
        self.assertEqual(order.notes, '')
        self.assertEqual(order.status, 'pending')

    def test_update_with_valid_status(self):
        """Test notes and status can change together"""
        order_id = self._create_order().data['id']
        response = self.client.patch(
            f'/api/v1/purchase-orders/{order_id}/', {'notes': 'call first', 'status': 'confirmed'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['notes'], 'call first')
        self.assertEqual(response.data['status'], 'confirmed')

    def test_unknown_status(self):
        """Test an unknown status value is rejected"""
        order_id = self._create_order().data['id']
        response = self.client.post(f'/api/v1/purchase-orders/{order_id}/status/', {'status': 'shipped'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cancelled_is_final(self):
        """Test cancelled orders cannot be reopened"""
        order = create_purchase_order(
            self.supplier,
            [{'product': self.product, 'product_code': self.product.code, 'product_name': self.product.name,
              'quantity': 1, 'unit_price': self.product.price}],
        )
        change_purchase_order_status(order, 'cancelled')
        with self.assertRaises(InvalidStatusTransition):
            change_purchase_order_status(order, 'pending')

    def test_same_status_is_noop(self):
        """Test repeating the current status does nothing"""
        order_id = self._create_order().data['id']
        response = self.client.post(f'/api/v1/purchase-orders/{order_id}/status/', {'status': 'pending'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(AuditLog.objects.filter(action='status_change').exists())

    def test_purchase_order_pdf(self):
        """Test the printable purchase order is a PDF"""
        order_id = self._create_order().data['id']
        response = self.client.get(f'/api/v1/purchase-orders/{order_id}/pdf/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(b''.join(response.streaming_content).startswith(b'%PDF'))

    def test_filter_by_status(self):
        """Test listing orders by status"""
        self._create_order()
        response = self.client.get('/api/v1/purchase-orders/?status=confirmed')
        self.assertEqual(response.data['count'], 0)
        response = self.client.get('/api/v1/purchase-orders/?status=pending')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(PurchaseOrder.objects.count(), 1)
