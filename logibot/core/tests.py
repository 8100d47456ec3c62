"""
Test suite for Core module
Tests: signup flows, admin bootstrap, current user, company review, settings and audit logs
"""
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from logibot.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from logibot.core.models import User, Setting, DashboardSettings, AuditLog
from logibot.core.utils import generate_document_number, get_company_info
from logibot.b2b.services import checkout
from logibot.purchasing.models import Purchase


class SignupTests(TestCase):
    """Test pet owner and company signup"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_register_pet_owner(self):
        """Test pet owner signup creates the user, pets and tokens"""
        data = {
            'email': 'owner@test.com',
            'password': 'secret1',
            'password_confirm': 'secret1',
            'pets': [
                {'name': '초코', 'species': 'dog', 'breed': '푸들', 'birth_year': '2020', 'birth_month': '03'},
                {'name': '  ', 'species': 'cat'},
            ],
        }
        response = self.client.post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)

        user = User.objects.get(username='owner@test.com')
        self.assertEqual(user.display_name, 'owner')
        self.assertEqual(user.pets.count(), 1)
        pet = user.pets.get()
        self.assertEqual(pet.birth_date.isoformat(), '2020-03-01')

    def test_register_requires_named_pet(self):
        """Test signup without any named pet fails"""
        data = {
            'email': 'nopet@test.com',
            'password': 'secret1',
            'password_confirm': 'secret1',
            'pets': [{'name': '', 'species': 'dog'}],
        }
        response = self.client.post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('pets', response.data)

    def test_register_rejects_breed_of_other_species(self):
        """Test signup pets must use a breed of their species"""
        data = {
            'email': 'breed@test.com',
            'password': 'secret1',
            'password_confirm': 'secret1',
            'pets': [{'name': '나비', 'species': 'cat', 'breed': '골든 리트리버'}],
        }
        response = self.client.post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('breed', response.data['pets'][0])
        self.assertFalse(User.objects.filter(username='breed@test.com').exists())

    def test_register_rejects_future_birth_date(self):
        """Test signup pets cannot be born in the future"""
        data = {
            'email': 'future@test.com',
            'password': 'secret1',
            'password_confirm': 'secret1',
            'pets': [{'name': '나비', 'species': 'cat', 'birth_year': str(timezone.localdate().year + 3),
                      'birth_month': '5'}],
        }
        response = self.client.post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('birth_year', response.data['pets'][0])
        self.assertFalse(User.objects.filter(username='future@test.com').exists())

    def test_register_short_password(self):
        """Test signup with a password shorter than 6 characters fails"""
        data = {
            'email': 'short@test.com',
            'password': 'abc',
            'password_confirm': 'abc',
            'pets': [{'name': '나비', 'species': 'cat'}],
        }
        response = self.client.post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)

    def test_register_duplicate_email(self):
        """Test signup with an existing email fails"""
        TestDataFactory.create_user(username='dup@test.com', email='dup@test.com')
        data = {
            'email': 'dup@test.com',
            'password': 'secret1',
            'password_confirm': 'secret1',
            'pets': [{'name': '나비', 'species': 'cat'}],
        }
        response = self.client.post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data)

    def test_company_signup_is_pending(self):
        """Test company signup creates a pending company profile"""
        data = {
            'username': 'acme_corp',
            'email': 'acme@test.com',
            'password': 'password1',
            'password_confirm': 'password1',
            'company_name': 'Acme',
            'business_number': '123-45-67890',
            'ceo_name': 'Park',
            'phone': '02-1234-5678',
        }
        response = self.client.post('/api/v1/auth/company-signup/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['company']['status'], 'pending')
        self.assertTrue(AuditLog.objects.filter(model_name='CompanyProfile', action='create').exists())

    def test_company_signup_invalid_business_number(self):
        """Test company signup rejects a malformed business number"""
        data = {
            'username': 'acme_corp',
            'email': 'acme@test.com',
            'password': 'password1',
            'password_confirm': 'password1',
            'company_name': 'Acme',
            'business_number': '1234567890',
            'ceo_name': 'Park',
            'phone': '02-1234-5678',
        }
        response = self.client.post('/api/v1/auth/company-signup/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('business_number', response.data)

    def test_company_signup_password_needs_digit(self):
        """Test company signup requires letters and digits in the password"""
        data = {
            'username': 'acme_corp',
            'email': 'acme@test.com',
            'password': 'passwordonly',
            'password_confirm': 'passwordonly',
            'company_name': 'Acme',
            'business_number': '123-45-67890',
            'ceo_name': 'Park',
            'phone': '02-1234-5678',
        }
        response = self.client.post('/api/v1/auth/company-signup/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)


class AdminSetupTests(TestCase):
    """Test first administrator bootstrap"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.data = {
            'username': 'root_admin',
            'email': 'admin@test.com',
            'password': 'password1',
            'password_confirm': 'password1',
            'company_name': 'LogiBot HQ',
            'business_number': '111-22-33333',
            'ceo_name': 'Choi',
            'phone': '02-111-2222',
        }

    def test_admin_setup_status(self):
        """Test GET reports whether an admin exists"""
        response = self.client.get('/api/v1/admin-setup/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['admin_exists'])

    def test_admin_setup_creates_approved_admin(self):
        """Test the first admin is created with an approved company"""
        response = self.client.post('/api/v1/admin-setup/', self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        user = User.objects.get(username='root_admin')
        self.assertEqual(user.role, 'admin')
        self.assertTrue(user.is_staff)
        self.assertEqual(user.company_profile.status, 'approved')
        self.assertIsNotNone(user.company_profile.reviewed_at)

    def test_admin_setup_only_once(self):
        """Test admin setup is refused once an admin exists"""
        TestDataFactory.create_admin()
        response = self.client.post('/api/v1/admin-setup/', self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class UserMeTests(TestCase):
    """Test current user endpoint"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_me_requires_auth(self):
        """Test unauthenticated access is rejected"""
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_without_company(self):
        """Test a pet owner has no B2B access"""
        user = TestDataFactory.create_user()
        self.client.authenticate_user(user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['company'])
        self.assertFalse(response.data['is_admin'])
        self.assertFalse(response.data['can_access_b2b'])

    def test_me_with_approved_company(self):
        """Test an approved company can access B2B"""
        company = TestDataFactory.create_company()
        self.client.authenticate_user(company.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertTrue(response.data['can_access_b2b'])
        self.assertEqual(response.data['company']['company_name'], company.company_name)

    def test_me_with_pending_company(self):
        """Test a pending company cannot access B2B"""
        company = TestDataFactory.create_company(status='pending')
        self.client.authenticate_user(company.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertFalse(response.data['can_access_b2b'])


class CompanyReviewTests(TestCase):
    """Test company approval by administrators"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.company = TestDataFactory.create_company(status='pending')

    def test_list_pending_companies(self):
        """Test filtering companies by status"""
        TestDataFactory.create_company(status='approved')
        response = self.client.get('/api/v1/companies/?status=pending')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_approve_company(self):
        """Test approving a company records reviewer and audit log"""
        response = self.client.post(f'/api/v1/companies/{self.company.id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.company.refresh_from_db()
        self.assertEqual(self.company.status, 'approved')
        self.assertEqual(self.company.reviewed_by, self.admin)
        self.assertTrue(AuditLog.objects.filter(action='company_approve').exists())

    def test_reject_company(self):
        """Test rejecting a company"""
        response = self.client.post(f'/api/v1/companies/{self.company.id}/reject/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.company.refresh_from_db()
        self.assertEqual(self.company.status, 'rejected')

    def test_non_admin_cannot_review(self):
        """Test regular users cannot approve companies"""
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.post(f'/api/v1/companies/{self.company.id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class UserAdminTests(TestCase):
    """Test user management endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_create_user(self):
        """Test admins can create users"""
        data = {
            'username': 'staff1',
            'email': 'staff1@test.com',
            'password': 'password123',
            'password_confirm': 'password123',
            'role': 'user',
        }
        response = self.client.post('/api/v1/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(User.objects.filter(username='staff1').exists())

    def test_cannot_delete_self(self):
        """Test admins cannot delete their own account"""
        response = self.client.delete(f'/api/v1/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_other_user(self):
        """Test deleting another user"""
        other = TestDataFactory.create_user()
        response = self.client.delete(f'/api/v1/users/{other.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(id=other.id).exists())

    def test_delete_company_user_with_orders(self):
        """Test users whose company placed B2B orders cannot be deleted"""
        company = TestDataFactory.create_company()
        product = TestDataFactory.create_product(stock=5)
        checkout(company, [{'product': product, 'quantity': 1}])
        response = self.client.delete(f'/api/v1/users/{company.user.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('detail', response.data)
        self.assertTrue(User.objects.filter(id=company.user.id).exists())


class SettingTests(TestCase):
    """Test system settings, company info and dashboard settings"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()

    def test_regular_user_cannot_create_setting(self):
        """Test setting writes are admin only"""
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/v1/settings/', {'key': 'x', 'value': '1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_creates_setting(self):
        """Test admins can create settings"""
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/settings/', {'key': 'x', 'value': '1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_company_info_update(self):
        """Test admins update company info used on documents"""
        self.client.authenticate_user(self.admin)
        response = self.client.put('/api/v1/company-info/', {'name': ' LogiBot ', 'phone': '02-000-0000'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'LogiBot')
        self.assertEqual(Setting.objects.get(key='company_phone').value, '02-000-0000')
        self.assertEqual(get_company_info()['name'], 'LogiBot')

    def test_company_info_update_forbidden(self):
        """Test regular users cannot change company info"""
        self.client.authenticate_user(self.user)
        response = self.client.put('/api/v1/company-info/', {'name': 'Hack'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_dashboard_settings_defaults(self):
        """Test defaults are returned before anything is saved"""
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/dashboard-settings/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['theme_color'], 'default')
        self.assertTrue(all(response.data['widget_visibility'].values()))

    def test_dashboard_settings_upsert(self):
        """Test saving dashboard settings merges visibility with defaults"""
        self.client.authenticate_user(self.user)
        response = self.client.put(
            '/api/v1/dashboard-settings/',
            {'widget_visibility': {'kpi': False}, 'theme_color': 'blue'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        saved = DashboardSettings.objects.get(user=self.user)
        self.assertFalse(saved.widget_visibility['kpi'])
        self.assertTrue(saved.widget_visibility['sales'])
        self.assertEqual(saved.theme_color, 'blue')

    def test_dashboard_settings_unknown_widget(self):
        """Test unknown widget ids are rejected"""
        self.client.authenticate_user(self.user)
        response = self.client.patch(
            '/api/v1/dashboard-settings/', {'widget_visibility': {'weather': True}}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AuditLogTests(TestCase):
    """Test audit log visibility"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        AuditLog.objects.create(user=self.user, action='create', model_name='Product', object_id='1')
        AuditLog.objects.create(user=self.other, action='delete', model_name='Product', object_id='2')
        self.client = AuthenticatedAPIClient()

    def test_user_sees_own_logs(self):
        """Test non-admins only see their own activity"""
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

    def test_admin_sees_all_logs(self):
        """Test admins see every audit log and can filter by action"""
        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.get('/api/v1/audit-logs/?action=delete')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['action'], 'delete')

    def test_detail_forbidden_for_other_user(self):
        """Test users cannot read other users' audit logs"""
        log = AuditLog.objects.get(user=self.other)
        self.client.authenticate_user(self.user)
        response = self.client.get(f'/api/v1/audit-logs/{log.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class DocumentNumberTests(TestCase):
    """Test document number generation"""

    def test_number_format(self):
        """Test numbers carry the prefix and the current date"""
        number = generate_document_number(Purchase, 'purchase_number', 'PUR')
        prefix, day, suffix = number.split('-')
        self.assertEqual(prefix, 'PUR')
        self.assertEqual(len(day), 8)
        self.assertEqual(len(suffix), 8)

    def test_numbers_are_unique(self):
        """Test a number already used is never returned again"""
        supplier = TestDataFactory.create_supplier()
        first = generate_document_number(Purchase, 'purchase_number', 'PUR')
        Purchase.objects.create(purchase_number=first, supplier=supplier, purchase_date='2025-01-01')
        second = generate_document_number(Purchase, 'purchase_number', 'PUR')
        self.assertNotEqual(first, second)
