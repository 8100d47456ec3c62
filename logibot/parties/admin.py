from django.contrib import admin
from .models import Supplier


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['code', 'business_name', 'business_number', 'partner_type', 'contact_person', 'contact_phone', 'is_active']
    list_filter = ['partner_type', 'is_active']
    search_fields = ['code', 'business_name', 'business_number', 'contact_person']
    ordering = ['business_name']
