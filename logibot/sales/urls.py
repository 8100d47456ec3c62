from django.urls import path
from .views import (
    outbound_list_create, outbound_detail, outbound_complete, outbound_tracking,
    shipment_list_create, shipment_detail, shipment_status,
    quotation_list_create, quotation_detail, quotation_pdf, quotation_expire,
    invoice_list_create, invoice_detail, invoice_mark_paid, invoice_hometax,
)

urlpatterns = [
    # Outbound
    path('outbound/', outbound_list_create, name='outbound-list-create'),
    path('outbound/<int:pk>/', outbound_detail, name='outbound-detail'),
    path('outbound/<int:pk>/complete/', outbound_complete, name='outbound-complete'),
    path('outbound/<int:pk>/tracking/', outbound_tracking, name='outbound-tracking'),
    # Shipments
    path('shipments/', shipment_list_create, name='shipment-list-create'),
    path('shipments/<int:pk>/', shipment_detail, name='shipment-detail'),
    path('shipments/<int:pk>/status/', shipment_status, name='shipment-status'),
    # Quotations
    path('quotations/', quotation_list_create, name='quotation-list-create'),
    path('quotations/expire/', quotation_expire, name='quotation-expire'),
    path('quotations/<int:pk>/', quotation_detail, name='quotation-detail'),
    path('quotations/<int:pk>/pdf/', quotation_pdf, name='quotation-pdf'),
    # Invoices
    path('invoices/', invoice_list_create, name='invoice-list-create'),
    path('invoices/<int:pk>/', invoice_detail, name='invoice-detail'),
    path('invoices/<int:pk>/mark-paid/', invoice_mark_paid, name='invoice-mark-paid'),
    path('invoices/<int:pk>/hometax/', invoice_hometax, name='invoice-hometax'),
]
