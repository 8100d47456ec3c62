from django.contrib import admin
from .models import OutboundOrder, OutboundItem, Shipment, Quotation, QuotationItem, Invoice, InvoiceItem


class OutboundItemInline(admin.TabularInline):
    model = OutboundItem
    extra = 0
    readonly_fields = ['subtotal']


class QuotationItemInline(admin.TabularInline):
    model = QuotationItem
    extra = 0
    readonly_fields = ['subtotal']


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    readonly_fields = ['subtotal']


@admin.register(OutboundOrder)
class OutboundOrderAdmin(admin.ModelAdmin):
    list_display = ['outbound_number', 'customer_name', 'outbound_date', 'status', 'tracking_number', 'total_amount']
    list_filter = ['status', 'outbound_date']
    search_fields = ['outbound_number', 'customer_name', 'tracking_number']
    inlines = [OutboundItemInline]


@admin.register(Shipment)
class ShipmentAdmin(admin.ModelAdmin):
    list_display = ['shipment_number', 'customer_name', 'destination', 'status', 'tracking_number', 'shipped_date']
    list_filter = ['status']
    search_fields = ['shipment_number', 'customer_name', 'tracking_number']


@admin.register(Quotation)
class QuotationAdmin(admin.ModelAdmin):
    list_display = ['quotation_number', 'customer_name', 'quotation_date', 'valid_until', 'status', 'total_amount']
    list_filter = ['status']
    search_fields = ['quotation_number', 'customer_name']
    inlines = [QuotationItemInline]


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ['invoice_number', 'customer_name', 'issue_date', 'total_amount', 'payment_received', 'hometax_key']
    list_filter = ['payment_received', 'issue_date']
    search_fields = ['invoice_number', 'customer_name', 'customer_business_number']
    inlines = [InvoiceItemInline]
