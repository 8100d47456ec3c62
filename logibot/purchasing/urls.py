from django.urls import path
from .views import (
    purchase_list_create, purchase_detail,
    purchase_order_list_create, purchase_order_detail, purchase_order_status, purchase_order_pdf,
)

urlpatterns = [
    path('purchases/', purchase_list_create, name='purchase-list-create'),
    path('purchases/<int:pk>/', purchase_detail, name='purchase-detail'),
    path('purchase-orders/', purchase_order_list_create, name='purchase-order-list-create'),
    path('purchase-orders/<int:pk>/', purchase_order_detail, name='purchase-order-detail'),
    path('purchase-orders/<int:pk>/status/', purchase_order_status, name='purchase-order-status'),
    path('purchase-orders/<int:pk>/pdf/', purchase_order_pdf, name='purchase-order-pdf'),
]
