from django.urls import path
from .views import dashboard_kpis, inventory_status, monthly_trend, vendor_analytics, export_dataset

urlpatterns = [
    path('reports/dashboard-kpis/', dashboard_kpis, name='dashboard-kpis'),
    path('reports/inventory-status/', inventory_status, name='inventory-status'),
    path('reports/monthly-trend/', monthly_trend, name='monthly-trend'),
    path('reports/vendor-analytics/', vendor_analytics, name='vendor-analytics'),
    path('reports/export/<str:dataset>/', export_dataset, name='export-dataset'),
]
