from django.contrib import admin
from .models import Category, Product


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'description', 'created_at']
    search_fields = ['code', 'name']
    ordering = ['code']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'category', 'price', 'stock', 'safety_stock', 'b2b_enabled', 'is_active']
    list_filter = ['category', 'b2b_enabled', 'is_active', 'created_at']
    search_fields = ['code', 'name', 'description']
    ordering = ['code']
    # Stock changes go through stock movements
    readonly_fields = ['stock', 'created_at', 'updated_at']
