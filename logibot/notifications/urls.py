from django.urls import path
from .views import (
    notification_list, notification_unread_count,
    notification_mark_read, notification_mark_all_read
)

urlpatterns = [
    path('notifications/', notification_list, name='notification-list'),
    path('notifications/unread-count/', notification_unread_count, name='notification-unread-count'),
    path('notifications/<int:pk>/read/', notification_mark_read, name='notification-mark-read'),
    path('notifications/read-all/', notification_mark_all_read, name='notification-mark-all-read'),
]
