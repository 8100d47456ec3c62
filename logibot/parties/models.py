from django.db import models


class Supplier(models.Model):
    """Trading partners. Suppliers and customers share one table"""
    PARTNER_TYPE_CHOICES = [
        ('supplier', 'Supplier'),
        ('customer', 'Customer'),
        ('both', 'Supplier & Customer'),
    ]

    code = models.CharField(max_length=50, unique=True)
    business_name = models.CharField(max_length=200, db_index=True)
    business_number = models.CharField(max_length=12, blank=True)
    partner_type = models.CharField(max_length=20, choices=PARTNER_TYPE_CHOICES, default='supplier')
    contact_person = models.CharField(max_length=100, blank=True)
    contact_phone = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    bank_account = models.CharField(max_length=100, blank=True)
    invoice_email = models.EmailField(blank=True)
    logistics_manager = models.CharField(max_length=100, blank=True)
    sales_rep = models.CharField(max_length=100, blank=True)
    payment_method = models.CharField(max_length=50, blank=True)
    payment_date = models.CharField(max_length=50, blank=True, help_text='Settlement day, e.g. "end of month" or "25"')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.business_name} ({self.code})"

    class Meta:
        db_table = 'suppliers'
        ordering = ['business_name']
