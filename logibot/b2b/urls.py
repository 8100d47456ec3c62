from django.urls import path
from .views import b2b_product_list, b2b_order_list_create, b2b_order_detail, b2b_order_status, b2b_summary

urlpatterns = [
    path('b2b/products/', b2b_product_list, name='b2b-product-list'),
    path('b2b/orders/', b2b_order_list_create, name='b2b-order-list-create'),
    path('b2b/orders/<int:pk>/', b2b_order_detail, name='b2b-order-detail'),
    path('b2b/orders/<int:pk>/status/', b2b_order_status, name='b2b-order-status'),
    path('b2b/summary/', b2b_summary, name='b2b-summary'),
]
