"""
Test suite for B2B module
Tests: approved company access, product catalogue, checkout, order fulfilment and summary
"""
from django.test import TestCase, override_settings
from rest_framework import status
from decimal import Decimal
from logibot.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from logibot.b2b.models import B2BOrder
from logibot.b2b.services import checkout, get_b2b_summary
from logibot.notifications.models import Notification


class B2BAccessTests(TestCase):
    """Test who may use the B2B portal"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        TestDataFactory.create_product(stock=10)

    def test_pending_company_forbidden(self):
        """Test companies awaiting approval get 403"""
        company = TestDataFactory.create_company(status='pending')
        self.client.authenticate_user(company.user)
        response = self.client.get('/api/v1/b2b/products/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['code'], 'company_not_approved')

    def test_user_without_company_forbidden(self):
        """Test pet owners without a company cannot order"""
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.post('/api/v1/b2b/orders/', {'items': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unauthenticated(self):
        """Test the catalogue requires login"""
        response = self.client.get('/api/v1/b2b/products/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class B2BCatalogueTests(TestCase):
    """Test the B2B product list"""

    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.company.user)

    def test_only_orderable_products(self):
        """Test out of stock, disabled and inactive products are hidden"""
        visible = TestDataFactory.create_product(stock=5)
        TestDataFactory.create_product(stock=0)
        TestDataFactory.create_product(stock=5, b2b_enabled=False)
        inactive = TestDataFactory.create_product(stock=5)
        inactive.is_active = False
        inactive.save()
        response = self.client.get('/api/v1/b2b/products/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['id'] for p in response.data], [visible.id])

    def test_ordered_by_category_then_name(self):
        """Test products are grouped by category code then name"""
        cat_b = TestDataFactory.create_category(code='BBB')
        cat_a = TestDataFactory.create_category(code='AAA')
        TestDataFactory.create_product(name='Zeta', category=cat_a, stock=1)
        TestDataFactory.create_product(name='Alpha', category=cat_b, stock=1)
        TestDataFactory.create_product(name='Beta', category=cat_a, stock=1)
        response = self.client.get('/api/v1/b2b/products/')
        self.assertEqual([p['name'] for p in response.data], ['Beta', 'Zeta', 'Alpha'])


class B2BCheckoutTests(TestCase):
    """Test cart checkout"""

    def setUp(self):
        self.company = TestDataFactory.create_company(company_name='행복동물병원')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.company.user)
        self.product = TestDataFactory.create_product(stock=10, price=Decimal('1500.00'))

    def test_checkout_creates_pending_order(self):
        """Test checkout prices lines from the catalogue and notifies staff"""
        data = {'items': [{'product': self.product.id, 'quantity': 4}], 'notes': 'ASAP'}
        response = self.client.post('/api/v1/b2b/orders/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(response.data['status_label'], 'Awaiting confirmation')
        self.assertTrue(response.data['order_number'].startswith('B2B-'))
        self.assertEqual(Decimal(str(response.data['total_amount'])), Decimal('6000.00'))
        notification = Notification.objects.get(type='urgent_order')
        self.assertEqual(notification.severity, 'warning')
        self.assertIn('행복동물병원', notification.message)

    def test_checkout_does_not_take_stock(self):
        """Test stock is only taken when the order ships"""
        self.client.post('/api/v1/b2b/orders/', {'items': [{'product': self.product.id, 'quantity': 4}]}, format='json')
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 10)

    def test_checkout_insufficient_stock(self):
        """Test ordering more than the stock fails"""
        data = {'items': [{'product': self.product.id, 'quantity': 11}]}
        response = self.client.post('/api/v1/b2b/orders/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'insufficient_stock')
        self.assertFalse(B2BOrder.objects.exists())

    def test_checkout_empty_cart(self):
        """Test an empty cart is rejected"""
        response = self.client.post('/api/v1/b2b/orders/', {'items': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('items', response.data)

    def test_company_sees_only_own_orders(self):
        """Test order lists are scoped to the company"""
        other = TestDataFactory.create_company()
        checkout(other, [{'product': self.product, 'quantity': 1}])
        checkout(self.company, [{'product': self.product, 'quantity': 1}])
        response = self.client.get('/api/v1/b2b/orders/')
        self.assertEqual(response.data['count'], 1)
        other_order = B2BOrder.objects.get(company=other)
        response = self.client.get(f'/api/v1/b2b/orders/{other_order.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class B2BFulfilmentTests(TestCase):
    """Test order status changes by administrators"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.company = TestDataFactory.create_company()
        self.product = TestDataFactory.create_product(stock=10, safety_stock=2)
        self.order = checkout(self.company, [{'product': self.product, 'quantity': 3}])

    def _status(self, new_status):
        return self.client.post(f'/api/v1/b2b/orders/{self.order.id}/status/', {'status': new_status}, format='json')

    def test_full_flow_takes_stock_on_ship(self):
        """Test pending -> confirmed -> shipped -> delivered"""
        self.assertEqual(self._status('confirmed').status_code, status.HTTP_200_OK)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 10)

        response = self._status('shipped')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['shipped_at'])
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 7)

        response = self._status('delivered')
        self.assertEqual(response.data['status'], 'delivered')
        self.assertIsNotNone(response.data['delivered_at'])
        self.assertEqual(Notification.objects.filter(type='order_status').count(), 3)

    def test_cannot_ship_pending(self):
        """Test a pending order cannot ship"""
        response = self._status('shipped')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'invalid_status_transition')

    def test_ship_without_stock(self):
        """Test shipping fails when stock ran out after checkout"""
        self._status('confirmed')
        self.product.stock = 1
        self.product.save()
        response = self._status('shipped')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, 'confirmed')

    def test_cancel(self):
        """Test cancelling raises a warning notification"""
        response = self._status('cancelled')
        self.assertEqual(response.data['status_label'], 'Cancelled')
        self.assertEqual(Notification.objects.get(type='order_status').severity, 'warning')

    def test_company_cannot_change_status(self):
        """Test only administrators change order status"""
        self.client.authenticate_user(self.company.user)
        response = self._status('confirmed')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_lists_all_orders(self):
        """Test administrators see orders from every company"""
        checkout(TestDataFactory.create_company(), [{'product': self.product, 'quantity': 1}])
        response = self.client.get('/api/v1/b2b/orders/')
        self.assertEqual(response.data['count'], 2)

    @override_settings(LOW_STOCK_B2B_THRESHOLD=50)
    def test_summary(self):
        """Test the B2B summary"""
        self._status('confirmed')
        cancelled = checkout(self.company, [{'product': self.product, 'quantity': 1}])
        self.client.post(f'/api/v1/b2b/orders/{cancelled.id}/status/', {'status': 'cancelled'}, format='json')
        response = self.client.get('/api/v1/b2b/summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_orders'], 2)
        self.assertEqual(response.data['pending_orders'], 1)
        self.assertEqual(Decimal(str(response.data['revenue'])), self.order.total_amount)
        self.assertEqual(response.data['low_stock_products'], get_b2b_summary()['low_stock_products'])
        self.assertEqual(response.data['low_stock_products'], 1)
