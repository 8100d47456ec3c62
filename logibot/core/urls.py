from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView, register, company_signup, user_me,
    admin_setup, user_list_create, user_detail,
    company_list, company_detail, company_approve, company_reject,
    setting_list_create, setting_detail, company_info, dashboard_settings,
    audit_log_list, audit_log_detail
)

urlpatterns = [
    # Auth endpoints
    path('auth/register/', register, name='register'),
    path('auth/company-signup/', company_signup, name='company-signup'),
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),
    path('admin-setup/', admin_setup, name='admin-setup'),

    # User endpoints
    path('users/', user_list_create, name='user-list-create'),
    path('users/<int:pk>/', user_detail, name='user-detail'),

    # Company profile endpoints
    path('companies/', company_list, name='company-list'),
    path('companies/<int:pk>/', company_detail, name='company-detail'),
    path('companies/<int:pk>/approve/', company_approve, name='company-approve'),
    path('companies/<int:pk>/reject/', company_reject, name='company-reject'),

    # Setting endpoints
    path('settings/', setting_list_create, name='setting-list-create'),
    path('settings/<int:pk>/', setting_detail, name='setting-detail'),
    path('company-info/', company_info, name='company-info'),
    path('dashboard-settings/', dashboard_settings, name='dashboard-settings'),

    # AuditLog endpoints
    path('audit-logs/', audit_log_list, name='audit-log-list'),
    path('audit-logs/<int:pk>/', audit_log_detail, name='audit-log-detail'),
]
