"""
Test suite for Notifications module
Tests: feed, since polling, unread counts and read flags
"""
from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from logibot.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from logibot.notifications.models import Notification
from logibot.notifications.utils import create_notification


class NotificationAPITests(TestCase):
    """Test Notification API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.first = create_notification('Low stock: Gauze', 'Gauze is at 2', type='low_stock', severity='warning')
        self.second = create_notification('Order placed', 'New B2B order', type='urgent_order')

    def test_feed_newest_first(self):
        """Test the feed lists newest notifications first with an unread count"""
        response = self.client.get('/api/v1/notifications/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([n['id'] for n in response.data['results']], [self.second.id, self.first.id])
        self.assertEqual(response.data['unread_count'], 2)

    def test_filter_by_type(self):
        """Test filtering the feed by type"""
        response = self.client.get('/api/v1/notifications/?type=low_stock')
        self.assertEqual(len(response.data['results']), 1)
        self.assertEqual(response.data['results'][0]['severity'], 'warning')

    def test_since_polling(self):
        """Test since returns only newer notifications"""
        Notification.objects.filter(id=self.first.id).update(created_at=timezone.now() - timedelta(hours=2))
        since = (timezone.now() - timedelta(hours=1)).isoformat()
        response = self.client.get('/api/v1/notifications/', {'since': since})
        self.assertEqual([n['id'] for n in response.data['results']], [self.second.id])

    def test_since_invalid(self):
        """Test a malformed since value is rejected"""
        response = self.client.get('/api/v1/notifications/?since=yesterday')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_mark_read(self):
        """Test marking one notification read"""
        response = self.client.post(f'/api/v1/notifications/{self.first.id}/read/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['read'])
        count = self.client.get('/api/v1/notifications/unread-count/')
        self.assertEqual(count.data['unread_count'], 1)

    def test_mark_all_read(self):
        """Test marking every notification read"""
        response = self.client.post('/api/v1/notifications/read-all/')
        self.assertEqual(response.data['updated'], 2)
        self.assertFalse(Notification.objects.filter(read=False).exists())

    def test_unread_only(self):
        """Test unread=true hides read notifications"""
        self.client.post(f'/api/v1/notifications/{self.second.id}/read/')
        response = self.client.get('/api/v1/notifications/?unread=true')
        self.assertEqual([n['id'] for n in response.data['results']], [self.first.id])

    def test_requires_auth(self):
        """Test the feed requires authentication"""
        self.client.logout()
        response = self.client.get('/api/v1/notifications/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
