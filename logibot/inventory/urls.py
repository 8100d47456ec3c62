from django.urls import path
from .views import (
    stock_movement_list, product_timeline, stock_adjustment,
    stock_alerts, reorder_predictions, stock_auto_reorder,
)

urlpatterns = [
    path('stock/movements/', stock_movement_list, name='stock-movement-list'),
    path('stock/adjustments/', stock_adjustment, name='stock-adjustment'),
    path('stock/alerts/', stock_alerts, name='stock-alerts'),
    path('stock/reorder-predictions/', reorder_predictions, name='reorder-predictions'),
    path('stock/auto-reorder/', stock_auto_reorder, name='stock-auto-reorder'),
    path('products/<int:pk>/timeline/', product_timeline, name='product-timeline'),
]
