"""
Test suite for Parties module
Tests: trading partner CRUD, code generation, type filters and protected deletes
"""
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from logibot.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from logibot.parties.models import Supplier
from logibot.purchasing.models import Purchase


class SupplierAPITests(TestCase):
    """Test Supplier API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_supplier_generates_code(self):
        """Test a code is generated when none is given"""
        response = self.client.post('/api/v1/suppliers/', {'business_name': '한빛메디칼'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['code'].startswith('VND-'))

    def test_create_supplier_duplicate_code(self):
        """Test partner codes are unique after normalisation"""
        TestDataFactory.create_supplier()
        Supplier.objects.create(code='ACME', business_name='Acme')
        response = self.client.post('/api/v1/suppliers/', {'code': 'acme', 'business_name': 'Other'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('code', response.data)

    def test_invalid_business_number(self):
        """Test business numbers must use the 3-2-5 format"""
        response = self.client.post(
            '/api/v1/suppliers/', {'business_name': 'X', 'business_number': '12-345'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_filter_by_partner_type_includes_both(self):
        """Test a partner of type both matches supplier and customer filters"""
        TestDataFactory.create_supplier(business_name='Only Supplier')
        TestDataFactory.create_customer(business_name='Only Customer')
        TestDataFactory.create_supplier(business_name='Both Ways', partner_type='both')
        response = self.client.get('/api/v1/suppliers/?partner_type=customer')
        names = sorted(p['business_name'] for p in response.data)
        self.assertEqual(names, ['Both Ways', 'Only Customer'])

    def test_search(self):
        """Test searching partners by name"""
        TestDataFactory.create_supplier(business_name='서울상사')
        TestDataFactory.create_supplier(business_name='부산물류')
        response = self.client.get('/api/v1/suppliers/?search=서울')
        self.assertEqual(len(response.data), 1)

    def test_update_keeps_code_when_blank(self):
        """Test a blank code on update keeps the existing code"""
        supplier = TestDataFactory.create_supplier()
        response = self.client.patch(f'/api/v1/suppliers/{supplier.id}/', {'code': '', 'contact_person': 'Jung'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['code'], supplier.code)
        self.assertEqual(response.data['contact_person'], 'Jung')

    def test_delete_supplier_with_purchases(self):
        """Test partners referenced by purchases cannot be deleted"""
        supplier = TestDataFactory.create_supplier()
        Purchase.objects.create(purchase_number='PUR-TEST-1', supplier=supplier, purchase_date=timezone.localdate())
        response = self.client.delete(f'/api/v1/suppliers/{supplier.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Supplier.objects.filter(id=supplier.id).exists())

    def test_delete_supplier(self):
        """Test deleting an unused partner"""
        supplier = TestDataFactory.create_supplier()
        response = self.client.delete(f'/api/v1/suppliers/{supplier.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
