from django.contrib import admin
from .models import B2BOrder, B2BOrderItem


class B2BOrderItemInline(admin.TabularInline):
    model = B2BOrderItem
    extra = 0
    readonly_fields = ['subtotal']


@admin.register(B2BOrder)
class B2BOrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'company', 'status', 'total_amount', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['order_number', 'company__company_name']
    inlines = [B2BOrderItemInline]
