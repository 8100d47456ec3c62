from django.db import models
from logibot.catalog.models import ProductLineItem
from logibot.core.models import User, CompanyProfile


class B2BOrder(models.Model):
    """Order placed by an approved company through the B2B portal"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('confirmed', 'Confirmed'),
        ('shipped', 'Shipped'),
        ('delivered', 'Delivered'),
        ('cancelled', 'Cancelled'),
    ]

    # Shown to the ordering company
    STATUS_LABELS = {
        'pending': 'Awaiting confirmation',
        'confirmed': 'Preparing shipment',
        'shipped': 'In transit',
        'delivered': 'Delivered',
        'cancelled': 'Cancelled',
    }

    TRANSITIONS = {
        'pending': ['confirmed', 'cancelled'],
        'confirmed': ['shipped', 'cancelled'],
        'shipped': ['delivered'],
        'delivered': [],
        'cancelled': [],
    }

    order_number = models.CharField(max_length=100, unique=True)
    company = models.ForeignKey(CompanyProfile, on_delete=models.PROTECT, related_name='b2b_orders')
    ordered_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='b2b_orders')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    notes = models.TextField(blank=True)
    shipped_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.order_number

    @property
    def status_label(self):
        return self.STATUS_LABELS.get(self.status, self.status)

    def can_transition_to(self, new_status):
        return new_status in self.TRANSITIONS.get(self.status, [])

    class Meta:
        db_table = 'b2b_orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['company', '-created_at'], name='idx_b2b_company_created'),
            models.Index(fields=['status'], name='idx_b2b_status'),
        ]


class B2BOrderItem(ProductLineItem):
    order = models.ForeignKey(B2BOrder, on_delete=models.CASCADE, related_name='items')

    class Meta:
        db_table = 'b2b_order_items'
        ordering = ['id']
