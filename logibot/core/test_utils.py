"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from logibot.core.models import CompanyProfile
from logibot.catalog.models import Category, Product
from logibot.parties.models import Supplier
from logibot.pets.models import PetProfile
from logibot.inventory.services import stock_in
from decimal import Decimal
from django.utils import timezone
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def random_business_number():
        return f"{random.randint(100, 999)}-{random.randint(10, 99)}-{random.randint(10000, 99999)}"

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role='user', is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        user = User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            is_staff=is_staff,
            is_superuser=is_superuser
        )
        return user

    @staticmethod
    def create_admin(username=None):
        """Create a user with the admin role"""
        return TestDataFactory.create_user(username=username, role='admin', is_staff=True)

    @staticmethod
    def create_company(user=None, status='approved', company_name=None):
        """Create a company profile, approved unless told otherwise"""
        if not user:
            user = TestDataFactory.create_user()
        if not company_name:
            company_name = f'Company_{TestDataFactory.random_string(6)}'
        return CompanyProfile.objects.create(
            user=user,
            username=user.username[:20],
            company_name=company_name,
            business_number=TestDataFactory.random_business_number(),
            ceo_name='Kim CEO',
            email=user.email,
            phone='02-123-4567',
            status=status,
            reviewed_at=timezone.now() if status != 'pending' else None,
        )

    @staticmethod
    def create_category(code=None, name=None):
        """Create a test category"""
        if not code:
            code = f'C{TestDataFactory.random_string(4).upper()}'
        if not name:
            name = f'Category_{code}'
        return Category.objects.create(code=code, name=name, description=f'Test category {name}')

    @staticmethod
    def create_product(name=None, code=None, category=None, price=None, stock=0, safety_stock=10, b2b_enabled=True):
        """Create a test product. Initial stock goes through the movement ledger"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        if not code:
            code = f'P{TestDataFactory.random_string(8).upper()}'
        if category is None:
            category = TestDataFactory.create_category()
        if price is None:
            price = Decimal('1000.00')
        product = Product.objects.create(
            name=name,
            code=code,
            category=category,
            price=price,
            stock=0,
            safety_stock=safety_stock,
            b2b_enabled=b2b_enabled,
        )
        if stock:
            stock_in(product, stock, reason='initial stock')
            product.refresh_from_db()
        return product

    @staticmethod
    def create_supplier(business_name=None, partner_type='supplier', business_number=None):
        """Create a test trading partner"""
        if not business_name:
            business_name = f'Supplier_{TestDataFactory.random_string(6)}'
        return Supplier.objects.create(
            code=f'VND-{TestDataFactory.random_string(8).upper()}',
            business_name=business_name,
            business_number=business_number or TestDataFactory.random_business_number(),
            partner_type=partner_type,
            contact_person='Lee Manager',
            contact_phone='010-1234-5678',
        )

    @staticmethod
    def create_customer(business_name=None):
        return TestDataFactory.create_supplier(business_name=business_name, partner_type='customer')

    @staticmethod
    def create_pet(owner, name=None, species='dog', breed='', birth_date=None):
        """Create a test pet profile"""
        return PetProfile.objects.create(
            owner=owner,
            name=name or f'Pet_{TestDataFactory.random_string(4)}',
            species=species,
            breed=breed,
            birth_date=birth_date,
        )

    @staticmethod
    def line(product, quantity=1, unit_price=None):
        """Request body entry for an item list"""
        return {
            'product': product.id,
            'quantity': quantity,
            'unit_price': str(unit_price if unit_price is not None else product.price),
        }


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
