from django.urls import path
from .views import (
    category_list_create, category_detail,
    product_list_create, product_detail, product_lookup, product_image_upload,
    product_qr_code, product_price_card, product_label
)

urlpatterns = [
    # Category endpoints
    path('categories/', category_list_create, name='category-list-create'),
    path('categories/<int:pk>/', category_detail, name='category-detail'),

    # Product endpoints
    path('products/', product_list_create, name='product-list-create'),
    path('products/lookup/', product_lookup, name='product-lookup'),
    path('products/<int:pk>/', product_detail, name='product-detail'),
    path('products/<int:pk>/image/', product_image_upload, name='product-image-upload'),
    path('products/<int:pk>/qr-code/', product_qr_code, name='product-qr-code'),
    path('products/<int:pk>/price-card/', product_price_card, name='product-price-card'),
    path('products/<int:pk>/label/', product_label, name='product-label'),
]
