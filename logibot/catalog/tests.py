"""
Test suite for Catalog module
Tests: categories, product CRUD and filters, scan lookup, labels and QR codes
"""
import json
from io import BytesIO, StringIO
from unittest import mock

from django.core.management import call_command
from django.test import TestCase
from PIL import Image
from rest_framework import status
from decimal import Decimal
from logibot.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from logibot.core.models import AuditLog
from logibot.catalog.models import Category, Product, DEFAULT_CATEGORIES
from logibot.catalog.label_generator import qr_payload, generate_price_card, generate_label_image
from logibot.inventory.models import StockMovement


class CategoryAPITests(TestCase):
    """Test Category API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_category_uppercases_code(self):
        """Test category codes are stored upper case"""
        response = self.client.post('/api/v1/categories/', {'code': ' med ', 'name': '의료소모품'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['code'], 'MED')

    def test_list_categories_with_product_count(self):
        """Test listing categories includes product counts"""
        category = TestDataFactory.create_category(code='AAA')
        TestDataFactory.create_product(category=category)
        TestDataFactory.create_product(category=category)
        response = self.client.get('/api/v1/categories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        entry = next(c for c in response.data if c['code'] == 'AAA')
        self.assertEqual(entry['product_count'], 2)

    def test_delete_category_with_products(self):
        """Test a category that still has products cannot be deleted"""
        category = TestDataFactory.create_category()
        TestDataFactory.create_product(category=category)
        response = self.client.delete(f'/api/v1/categories/{category.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Category.objects.filter(id=category.id).exists())

    def test_delete_empty_category(self):
        """Test deleting an empty category"""
        category = TestDataFactory.create_category()
        response = self.client.delete(f'/api/v1/categories/{category.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_add_categories_command(self):
        """Test the seeding command adds the defaults once"""
        call_command('add_categories', stdout=StringIO())
        call_command('add_categories', stdout=StringIO())
        self.assertEqual(Category.objects.count(), len(DEFAULT_CATEGORIES))
        self.assertEqual(Category.objects.get(code='BAN').name, '붕대/거즈')

    def test_add_categories_clear_keeps_used(self):
        """Test --clear only removes categories without products"""
        used = TestDataFactory.create_category(code='USED')
        TestDataFactory.create_product(category=used)
        TestDataFactory.create_category(code='IDLE')
        call_command('add_categories', '--clear', stdout=StringIO())
        self.assertTrue(Category.objects.filter(code='USED').exists())
        self.assertFalse(Category.objects.filter(code='IDLE').exists())


class ProductAPITests(TestCase):
    """Test Product API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.category = TestDataFactory.create_category(code='MED')

    def test_create_product_with_initial_stock(self):
        """Test initial stock is recorded as a stock movement"""
        data = {
            'code': 'MED-001',
            'name': '멸균 거즈',
            'category': self.category.id,
            'price': '1500.00',
            'stock': 40,
            'safety_stock': 10,
        }
        response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['stock'], 40)
        product = Product.objects.get(code='MED-001')
        movement = StockMovement.objects.get(product=product)
        self.assertEqual(movement.movement_type, 'in')
        self.assertEqual(movement.quantity, 40)

    def test_create_product_negative_price(self):
        """Test negative prices are rejected"""
        data = {'code': 'BAD-1', 'name': 'Bad', 'price': '-1'}
        response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('price', response.data)

    def test_create_product_duplicate_code(self):
        """Test product codes are unique"""
        TestDataFactory.create_product(code='DUP-1')
        response = self.client.post('/api/v1/products/', {'code': 'DUP-1', 'name': 'Dup'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_ignores_stock(self):
        """Test stock cannot be edited directly"""
        product = TestDataFactory.create_product(stock=5)
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'stock': 500}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        product.refresh_from_db()
        self.assertEqual(product.stock, 5)

    def test_price_change_is_audited(self):
        """Test a price change writes a price_change audit log"""
        product = TestDataFactory.create_product(price=Decimal('1000.00'))
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'price': '1200.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        log = AuditLog.objects.get(action='price_change', object_id=str(product.id))
        self.assertEqual(log.changes['price']['new'], '1200.00')

    def test_list_products_paginated(self):
        """Test listing products returns a paginated envelope"""
        for _ in range(3):
            TestDataFactory.create_product(category=self.category)
        response = self.client.get('/api/v1/products/?limit=2')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 3)
        self.assertEqual(len(response.data['results']), 2)
        self.assertEqual(response.data['total_pages'], 2)
        self.assertEqual(response.data['next'], 2)

    def test_list_products_bad_paging(self):
        """Test non numeric or zero page and limit values are rejected"""
        response = self.client.get('/api/v1/products/?page=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('page', response.data)
        response = self.client.get('/api/v1/products/?limit=0')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('limit', response.data)
        response = self.client.get('/api/v1/stock/movements/?limit=ten')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_filter_low_stock(self):
        """Test the low_stock filter"""
        low = TestDataFactory.create_product(stock=2, safety_stock=10)
        TestDataFactory.create_product(stock=20, safety_stock=10)
        response = self.client.get('/api/v1/products/?low_stock=true')
        self.assertEqual([p['id'] for p in response.data['results']], [low.id])
        self.assertTrue(response.data['results'][0]['is_low_stock'])

    def test_search_matches_every_word(self):
        """Test search requires every word to match"""
        TestDataFactory.create_product(name='Latex Glove Large', code='GLV-L')
        TestDataFactory.create_product(name='Latex Glove Small', code='GLV-S')
        response = self.client.get('/api/v1/products/?search=glove large')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['code'], 'GLV-L')

    def test_delete_product(self):
        """Test deleting a product"""
        product = TestDataFactory.create_product()
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Product.objects.filter(id=product.id).exists())


class ProductLookupTests(TestCase):
    """Test scan lookup by product code"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(code='SYR-010')

    def test_lookup_exact(self):
        """Test exact code lookup writes a barcode_scan audit log"""
        response = self.client.get('/api/v1/products/lookup/?code=SYR-010')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], self.product.id)
        self.assertTrue(AuditLog.objects.filter(action='barcode_scan').exists())

    def test_lookup_case_insensitive(self):
        """Test lookup falls back to a case-insensitive match"""
        response = self.client.get('/api/v1/products/lookup/?code=syr-010')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], self.product.id)

    def test_lookup_not_found(self):
        """Test unknown codes return 404"""
        response = self.client.get('/api/v1/products/lookup/?code=NOPE')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_lookup_requires_code(self):
        """Test lookup without a code fails"""
        response = self.client.get('/api/v1/products/lookup/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class LabelTests(TestCase):
    """Test QR codes, price cards and barcode labels"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(code='BAN-100', name='탄력 붕대', price=Decimal('3500.00'))

    def test_qr_payload(self):
        """Test the QR payload carries code, name and timestamp"""
        payload = json.loads(qr_payload('BAN-100', '탄력 붕대', timestamp='2025-01-01T00:00:00'))
        self.assertEqual(payload, {'code': 'BAN-100', 'name': '탄력 붕대', 'timestamp': '2025-01-01T00:00:00'})

    def test_qr_code_png(self):
        """Test the QR endpoint returns a PNG"""
        response = self.client.get(f'/api/v1/products/{self.product.id}/qr-code/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'image/png')
        self.assertTrue(response.content.startswith(b'\x89PNG'))

    def test_qr_code_base64(self):
        """Test ?format=base64 returns a data URL"""
        response = self.client.get(f'/api/v1/products/{self.product.id}/qr-code/?format=base64')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['image'].startswith('data:image/png;base64,'))

    def test_price_card(self):
        """Test the price card renders"""
        response = self.client.get(f'/api/v1/products/{self.product.id}/price-card/?barcode=8801234567890')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.content.startswith(b'\x89PNG'))

    def test_label(self):
        """Test the barcode label renders"""
        response = self.client.get(f'/api/v1/products/{self.product.id}/label/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.content.startswith(b'\x89PNG'))

    def test_price_card_size(self):
        """Test price cards are 800x600"""
        with Image.open(BytesIO(generate_price_card('탄력 붕대', 'BAN-100', Decimal('3500')))) as img:
            self.assertEqual(img.size, (800, 600))

    def test_price_card_without_qr(self):
        """Test a failing QR render still returns the card"""
        with mock.patch('logibot.catalog.label_generator.build_qr_image', side_effect=RuntimeError('qr')):
            content = generate_price_card('탄력 붕대', 'BAN-100', Decimal('3500'))
        with Image.open(BytesIO(content)) as img:
            self.assertEqual(img.format, 'PNG')
            self.assertEqual(img.size, (800, 600))

    def test_label_size(self):
        """Test labels default to 400x200"""
        with Image.open(BytesIO(generate_label_image('탄력 붕대', 'BAN-100'))) as img:
            self.assertEqual(img.size, (400, 200))
