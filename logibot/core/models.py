from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Extended user model with role and profile fields"""
    ROLE_CHOICES = [
        ('admin', 'Admin'),
        ('user', 'User'),
    ]

    phone = models.CharField(max_length=20, blank=True, null=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='user')
    display_name = models.CharField(max_length=100, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_admin_role(self):
        return self.role == 'admin' or self.is_superuser

    class Meta:
        db_table = 'users'


class CompanyProfile(models.Model):
    """B2B company account attached to a user"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='company_profile')
    username = models.CharField(max_length=20, unique=True)
    company_name = models.CharField(max_length=100)
    business_number = models.CharField(max_length=12, unique=True)
    ceo_name = models.CharField(max_length=50)
    email = models.EmailField(max_length=255)
    phone = models.CharField(max_length=20)
    address = models.CharField(max_length=200, blank=True)
    business_certificate = models.FileField(upload_to='business-certificates/', blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    reviewed_at = models.DateTimeField(null=True, blank=True)
    reviewed_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='reviewed_companies')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.company_name} ({self.business_number})"

    @property
    def is_approved(self):
        return self.status == 'approved'

    class Meta:
        db_table = 'company_profiles'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='idx_company_status'),
        ]


class Setting(models.Model):
    """System settings"""
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    description = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.key

    class Meta:
        db_table = 'settings'


class DashboardSettings(models.Model):
    """Per-user dashboard widget layout and theme"""
    WIDGET_IDS = ['kpi', 'stock-alert', 'sales', 'inventory', 'inventory-viz', 'auto-reorder', 'ai-prediction']
    THEME_CHOICES = [
        ('default', 'Default'),
        ('blue', 'Blue'),
        ('green', 'Green'),
        ('purple', 'Purple'),
        ('orange', 'Orange'),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='dashboard_settings')
    widget_visibility = models.JSONField(default=dict, blank=True)
    widget_sizes = models.JSONField(default=dict, blank=True)
    theme_color = models.CharField(max_length=20, choices=THEME_CHOICES, default='default')
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Dashboard settings for {self.user}"

    @classmethod
    def default_visibility(cls):
        return {widget_id: True for widget_id in cls.WIDGET_IDS}

    class Meta:
        db_table = 'dashboard_settings'


class AuditLog(models.Model):
    """Audit log for critical operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('view', 'View'),
        ('stock_in', 'Stock In'),
        ('stock_out', 'Stock Out'),
        ('stock_adjust', 'Stock Adjustment'),
        ('price_change', 'Price Change'),
        ('status_change', 'Status Change'),
        ('company_approve', 'Company Approved'),
        ('company_reject', 'Company Rejected'),
        ('barcode_scan', 'Barcode Scanned'),
        ('auto_reorder', 'Auto Reorder'),
        ('hometax_submit', 'HomeTax Submitted'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., product name, order number)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., purchase number, quotation number)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='idx_audit_created'),
            models.Index(fields=['action'], name='idx_audit_action'),
            models.Index(fields=['model_name'], name='idx_audit_model'),
            models.Index(fields=['object_reference'], name='idx_audit_reference'),
        ]
