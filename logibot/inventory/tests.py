"""
Comprehensive test suite for Inventory module
Tests: stock ledger, manual adjustments, low stock alerts, reorder predictions and auto reorder
"""
from datetime import date, timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from decimal import Decimal
from logibot.core.exceptions import InsufficientStock
from logibot.core.models import AuditLog
from logibot.catalog.models import Product
from logibot.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from logibot.inventory.models import StockMovement
from logibot.inventory.services import (
    stock_in, stock_out, stock_count, apply_stock_movement, build_stock_alert, predict_reorder, reorder_priority
)
from logibot.inventory.reorder import latest_suppliers
from logibot.notifications.models import Notification
from logibot.purchasing.models import PurchaseOrder
from logibot.purchasing.services import create_purchase


class StockLedgerTests(TestCase):
    """Test stock movement services"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(stock=20, safety_stock=10)

    def test_stock_in_records_movement(self):
        """Test stock in updates stock and writes a ledger row"""
        movement = stock_in(self.product, 5, reason='restock', reference='REF-1', user=self.user)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 25)
        self.assertEqual(movement.quantity, 5)
        self.assertEqual(movement.stock_before, 20)
        self.assertEqual(movement.stock_after, 25)
        self.assertEqual(movement.created_by, self.user)
        self.assertTrue(AuditLog.objects.filter(action='stock_in', object_reference='REF-1').exists())

    def test_stock_out_is_negative_delta(self):
        """Test stock out stores a negative quantity"""
        movement = stock_out(self.product, 4, reason='sale')
        self.assertEqual(movement.quantity, -4)
        self.assertEqual(self.product.stock, 16)

    def test_stock_out_insufficient(self):
        """Test stock cannot go negative"""
        with self.assertRaises(InsufficientStock):
            stock_out(self.product, 21)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 20)
        self.assertEqual(StockMovement.objects.filter(product=self.product).count(), 1)

    def test_low_stock_notification_on_crossing(self):
        """Test a notification is raised when stock drops below safety stock"""
        stock_out(self.product, 12)
        notification = Notification.objects.get(type='low_stock')
        self.assertEqual(notification.severity, 'warning')
        self.assertEqual(notification.metadata['product_id'], self.product.id)

    def test_low_stock_notification_only_once(self):
        """Test further drops below safety stock do not notify again"""
        stock_out(self.product, 12)
        stock_out(self.product, 1)
        self.assertEqual(Notification.objects.filter(type='low_stock').count(), 1)

    def test_zero_stock_is_critical(self):
        """Test running out of stock raises a critical notification"""
        stock_out(self.product, 20)
        self.assertEqual(Notification.objects.get(type='low_stock').severity, 'critical')

    def test_adjust_movement(self):
        """Test an adjustment records the signed difference"""
        movement = apply_stock_movement(self.product, -3, 'adjust', reason='count')
        self.assertEqual(movement.movement_type, 'adjust')
        self.assertTrue(AuditLog.objects.filter(action='stock_adjust').exists())

    def test_count_uses_current_stock(self):
        """Test a counted adjustment measures the difference from the stored stock, not a stale copy"""
        stale = Product.objects.get(pk=self.product.pk)
        stock_in(self.product, 5)
        movement = stock_count(stale, 12, reason='count')
        self.assertEqual(movement.stock_before, 25)
        self.assertEqual(movement.quantity, -13)
        self.assertEqual(movement.stock_after, 12)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 12)


class StockPlanningTests(TestCase):
    """Test alert and prediction calculations"""

    def test_stock_alert_math(self):
        """Test shortage, recommended order and cost"""
        product = TestDataFactory.create_product(stock=3, safety_stock=10, price=Decimal('2000.00'))
        alert = build_stock_alert(product)
        self.assertEqual(alert['shortage'], 7)
        self.assertEqual(alert['recommended_order'], 11)
        self.assertEqual(alert['total_cost'], Decimal('22000.00'))

    def test_reorder_priority(self):
        """Test priority buckets"""
        self.assertEqual(reorder_priority(6), 'high')
        self.assertEqual(reorder_priority(7), 'medium')
        self.assertEqual(reorder_priority(13), 'medium')
        self.assertEqual(reorder_priority(14), 'low')

    def test_predict_reorder(self):
        """Test prediction fields from trailing usage"""
        product = TestDataFactory.create_product(stock=50, safety_stock=10)
        today = date(2025, 6, 1)
        prediction = predict_reorder(product, total_usage=60, active_days=15, today=today)
        self.assertEqual(prediction['average_daily_usage'], 2)
        self.assertEqual(prediction['days_until_stockout'], 20)
        self.assertEqual(prediction['predicted_stockout_date'], today + timedelta(days=20))
        self.assertEqual(prediction['recommended_order_date'], today + timedelta(days=13))
        self.assertEqual(prediction['recommended_order_quantity'], 70)
        self.assertEqual(prediction['priority'], 'low')
        self.assertEqual(prediction['confidence'], 90.0)

    def test_predict_reorder_without_usage(self):
        """Test products without usage divide by one"""
        product = TestDataFactory.create_product(stock=15, safety_stock=10)
        prediction = predict_reorder(product, total_usage=0, active_days=0, today=date(2025, 6, 1))
        self.assertEqual(prediction['days_until_stockout'], 5)
        self.assertEqual(prediction['recommended_order_date'], date(2025, 6, 1))
        self.assertEqual(prediction['confidence'], 80.0)


class StockAPITests(TestCase):
    """Test Stock API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(stock=30, safety_stock=10)

    def test_adjustment_in(self):
        """Test manual stock in"""
        data = {'product': self.product.id, 'movement_type': 'in', 'quantity': 10, 'reason': 'found'}
        response = self.client.post('/api/v1/stock/adjustments/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['stock_after'], 40)

    def test_adjustment_out_insufficient(self):
        """Test manual stock out beyond stock returns the domain error"""
        data = {'product': self.product.id, 'movement_type': 'out', 'quantity': 31}
        response = self.client.post('/api/v1/stock/adjustments/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'insufficient_stock')
        self.assertIn('available: 30', response.data['detail'])

    def test_adjustment_counted_stock(self):
        """Test adjust sets the counted stock and records the difference"""
        data = {'product': self.product.id, 'movement_type': 'adjust', 'quantity': 25, 'reason': 'cycle count'}
        response = self.client.post('/api/v1/stock/adjustments/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['quantity'], -5)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 25)

    def test_adjustment_requires_reason(self):
        """Test adjust without a reason fails"""
        data = {'product': self.product.id, 'movement_type': 'adjust', 'quantity': 25}
        response = self.client.post('/api/v1/stock/adjustments/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('reason', response.data)

    def test_adjustment_zero_quantity(self):
        """Test stock in of zero fails"""
        data = {'product': self.product.id, 'movement_type': 'in', 'quantity': 0}
        response = self.client.post('/api/v1/stock/adjustments/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_movement_list_filters(self):
        """Test listing movements by product and type"""
        stock_out(self.product, 2)
        response = self.client.get(f'/api/v1/stock/movements/?product={self.product.id}&type=out')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['quantity'], -2)

    def test_product_timeline(self):
        """Test the product timeline lists movements newest first"""
        stock_out(self.product, 2)
        response = self.client.get(f'/api/v1/products/{self.product.id}/timeline/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stock'], 28)
        self.assertEqual([m['quantity'] for m in response.data['movements']], [-2, 30])

    def test_stock_alerts(self):
        """Test alerts list low stock products with the total cost"""
        low = TestDataFactory.create_product(stock=4, safety_stock=10, price=Decimal('100.00'))
        response = self.client.get('/api/v1/stock/alerts/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['product_id'], low.id)
        self.assertEqual(response.data['results'][0]['recommended_order'], 9)
        self.assertEqual(Decimal(str(response.data['total_cost'])), Decimal('900.00'))

    def test_reorder_predictions(self):
        """Test predictions only include products within the horizon"""
        soon = TestDataFactory.create_product(stock=15, safety_stock=10)
        far = TestDataFactory.create_product(stock=100, safety_stock=10)
        response = self.client.get('/api/v1/stock/reorder-predictions/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = [p['product_id'] for p in response.data['results']]
        self.assertIn(soon.id, ids)
        self.assertNotIn(far.id, ids)


class AutoReorderTests(TestCase):
    """Test automatic purchase orders"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.supplier = TestDataFactory.create_supplier()
        self.product = TestDataFactory.create_product(stock=0, safety_stock=10, price=Decimal('500.00'))

    def _purchase_from(self, supplier, product, purchase_date):
        create_purchase(
            supplier=supplier,
            lines=[{'product': product, 'product_code': product.code, 'product_name': product.name,
                    'quantity': 1, 'unit_price': product.price}],
            user=self.user,
            purchase_date=purchase_date,
        )

    def test_latest_supplier(self):
        """Test the most recent purchase decides the supplier"""
        older = TestDataFactory.create_supplier()
        self._purchase_from(older, self.product, date(2025, 1, 1))
        self._purchase_from(self.supplier, self.product, date(2025, 2, 1))
        self.assertEqual(latest_suppliers([self.product.id]), {self.product.id: self.supplier})

    def test_auto_reorder_with_explicit_supplier(self):
        """Test one pending order is created for the chosen supplier"""
        data = {'product_ids': [self.product.id], 'supplier': self.supplier.id}
        response = self.client.post('/api/v1/stock/auto-reorder/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['count'], 1)
        order = PurchaseOrder.objects.get()
        self.assertTrue(order.is_auto_generated)
        self.assertEqual(order.status, 'pending')
        item = order.items.get()
        self.assertEqual(item.quantity, 15)
        self.assertEqual(order.total_amount, Decimal('7500.00'))
        self.assertTrue(AuditLog.objects.filter(action='auto_reorder').exists())

    def test_auto_reorder_from_purchase_history(self):
        """Test products are grouped by the supplier they were last bought from"""
        self._purchase_from(self.supplier, self.product, timezone.localdate())
        response = self.client.post('/api/v1/stock/auto-reorder/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(PurchaseOrder.objects.get().supplier, self.supplier)

    def test_auto_reorder_without_known_supplier(self):
        """Test products without a supplier are skipped with 400"""
        response = self.client.post('/api/v1/stock/auto-reorder/', {'product_ids': [self.product.id]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['skipped_products'], [self.product.id])
        self.assertFalse(PurchaseOrder.objects.exists())

    def test_auto_reorder_unknown_supplier(self):
        """Test an unknown supplier id is rejected"""
        response = self.client.post('/api/v1/stock/auto-reorder/', {'supplier': 99999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('supplier', response.data)
