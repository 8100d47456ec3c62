from django.contrib import admin
from .models import Purchase, PurchaseItem, PurchaseOrder, PurchaseOrderItem


class PurchaseItemInline(admin.TabularInline):
    model = PurchaseItem
    extra = 0
    readonly_fields = ['subtotal']


class PurchaseOrderItemInline(admin.TabularInline):
    model = PurchaseOrderItem
    extra = 0
    readonly_fields = ['subtotal']


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    list_display = ['purchase_number', 'supplier', 'purchase_date', 'status', 'created_at']
    list_filter = ['status', 'purchase_date']
    search_fields = ['purchase_number', 'supplier__business_name']
    inlines = [PurchaseItemInline]


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'supplier', 'order_date', 'status', 'is_auto_generated', 'total_amount']
    list_filter = ['status', 'is_auto_generated']
    search_fields = ['order_number', 'supplier__business_name']
    inlines = [PurchaseOrderItemInline]
