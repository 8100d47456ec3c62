from decimal import Decimal, ROUND_HALF_UP

from django.db import models
from logibot.catalog.models import ProductLineItem
from logibot.parties.models import Supplier
from logibot.core.models import User

VAT_RATE = Decimal('0.1')


def calculate_vat(supply_amount):
    """VAT on a supply amount, rounded half up to whole won"""
    return (Decimal(supply_amount) * VAT_RATE).quantize(Decimal('1'), rounding=ROUND_HALF_UP)


class OutboundOrder(models.Model):
    """Goods issued to a customer. Creating one takes the items out of stock"""
    STATUS_CHOICES = [
        ('preparing', 'Preparing'),
        ('in_transit', 'In Transit'),
        ('completed', 'Completed'),
    ]

    outbound_number = models.CharField(max_length=100, unique=True)
    customer = models.ForeignKey(Supplier, on_delete=models.PROTECT, null=True, blank=True, related_name='outbound_orders')
    customer_name = models.CharField(max_length=200)
    outbound_date = models.DateField()
    tracking_number = models.CharField(max_length=100, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='preparing')
    completed_date = models.DateField(null=True, blank=True)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='outbound_orders')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.outbound_number

    def recalculate_total(self):
        self.total_amount = sum((item.subtotal for item in self.items.all()), 0)
        self.save(update_fields=['total_amount', 'updated_at'])
        return self.total_amount

    class Meta:
        db_table = 'outbound_orders'
        ordering = ['-outbound_date', '-created_at']
        indexes = [
            models.Index(fields=['status'], name='idx_outbound_status'),
            models.Index(fields=['customer', 'outbound_date'], name='idx_outbound_customer_date'),
        ]


class OutboundItem(ProductLineItem):
    outbound = models.ForeignKey(OutboundOrder, on_delete=models.CASCADE, related_name='items')

    class Meta:
        db_table = 'outbound_items'
        ordering = ['id']


class Shipment(models.Model):
    """Delivery tracking for goods on their way to a customer"""
    STATUS_CHOICES = [
        ('preparing', 'Preparing'),
        ('in_transit', 'In Transit'),
        ('delivered', 'Delivered'),
    ]

    TRANSITIONS = {
        'preparing': ['in_transit'],
        'in_transit': ['delivered'],
        'delivered': [],
    }

    shipment_number = models.CharField(max_length=100, unique=True)
    outbound = models.ForeignKey(OutboundOrder, on_delete=models.SET_NULL, null=True, blank=True, related_name='shipments')
    customer_name = models.CharField(max_length=200, blank=True)
    destination = models.CharField(max_length=255, blank=True)
    carrier = models.CharField(max_length=100, blank=True)
    tracking_number = models.CharField(max_length=100, blank=True)
    item_count = models.IntegerField(default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='preparing')
    shipped_date = models.DateField(null=True, blank=True)
    completed_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.shipment_number

    def can_transition_to(self, new_status):
        return new_status in self.TRANSITIONS.get(self.status, [])

    class Meta:
        db_table = 'shipments'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='idx_shipment_status'),
        ]


class Quotation(models.Model):
    STATUS_CHOICES = [
        ('issued', 'Issued'),
        ('approved', 'Approved'),
        ('expired', 'Expired'),
    ]

    quotation_number = models.CharField(max_length=100, unique=True)
    customer = models.ForeignKey(Supplier, on_delete=models.SET_NULL, null=True, blank=True, related_name='quotations')
    customer_name = models.CharField(max_length=200)
    quotation_date = models.DateField()
    valid_until = models.DateField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='issued')
    supply_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    vat_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='quotations')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.quotation_number

    def recalculate_totals(self):
        """supply = sum of lines, VAT 10% rounded half up, total = supply + VAT"""
        self.supply_amount = sum((item.subtotal for item in self.items.all()), Decimal('0'))
        self.vat_amount = calculate_vat(self.supply_amount)
        self.total_amount = self.supply_amount + self.vat_amount
        self.save(update_fields=['supply_amount', 'vat_amount', 'total_amount', 'updated_at'])

    class Meta:
        db_table = 'quotations'
        ordering = ['-quotation_date', '-created_at']
        indexes = [
            models.Index(fields=['status', 'valid_until'], name='idx_quotation_status_valid'),
        ]


class QuotationItem(ProductLineItem):
    quotation = models.ForeignKey(Quotation, on_delete=models.CASCADE, related_name='items')

    class Meta:
        db_table = 'quotation_items'
        ordering = ['id']


class Invoice(models.Model):
    """Tax invoice issued to a customer"""
    invoice_number = models.CharField(max_length=100, unique=True)
    customer = models.ForeignKey(Supplier, on_delete=models.SET_NULL, null=True, blank=True, related_name='invoices')
    customer_name = models.CharField(max_length=200)
    customer_business_number = models.CharField(max_length=12, blank=True)
    outbound = models.ForeignKey(OutboundOrder, on_delete=models.SET_NULL, null=True, blank=True, related_name='invoices')
    issue_date = models.DateField()
    supply_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    tax_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    payment_received = models.BooleanField(default=False)
    payment_date = models.DateField(null=True, blank=True)
    hometax_key = models.CharField(max_length=100, blank=True)
    hometax_sent_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='invoices')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.invoice_number

    def recalculate_totals(self):
        self.supply_amount = sum((item.subtotal for item in self.items.all()), Decimal('0'))
        self.tax_amount = calculate_vat(self.supply_amount)
        self.total_amount = self.supply_amount + self.tax_amount
        self.save(update_fields=['supply_amount', 'tax_amount', 'total_amount', 'updated_at'])

    class Meta:
        db_table = 'invoices'
        ordering = ['-issue_date', '-created_at']
        indexes = [
            models.Index(fields=['customer', 'issue_date'], name='idx_invoice_customer_date'),
            models.Index(fields=['payment_received'], name='idx_invoice_paid'),
        ]


class InvoiceItem(ProductLineItem):
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='items')

    class Meta:
        db_table = 'invoice_items'
        ordering = ['id']
