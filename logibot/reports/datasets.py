"""Tabular datasets offered for export"""
from logibot.b2b.models import B2BOrder
from logibot.catalog.models import Product
from logibot.inventory.models import StockMovement
from logibot.purchasing.models import Purchase, PurchaseOrder
from logibot.sales.models import OutboundOrder, Quotation


def _date(value):
    return value.strftime('%Y-%m-%d') if value else ''


def _datetime(value):
    return value.strftime('%Y-%m-%d %H:%M') if value else ''


def products_dataset():
    headers = ['Code', 'Name', 'Category', 'Price', 'Stock', 'Safety stock', 'B2B', 'Active']
    rows = [
        [p.code, p.name, p.category.name if p.category else '', p.price, p.stock, p.safety_stock,
         'Y' if p.b2b_enabled else 'N', 'Y' if p.is_active else 'N']
        for p in Product.objects.select_related('category').order_by('code')
    ]
    return 'Products', headers, rows


def stock_movements_dataset():
    headers = ['Date', 'Code', 'Product', 'Type', 'Quantity', 'Before', 'After', 'Reason', 'Reference']
    rows = [
        [_datetime(m.created_at), m.product.code, m.product.name, m.get_movement_type_display(), m.quantity,
         m.stock_before, m.stock_after, m.reason, m.reference]
        for m in StockMovement.objects.select_related('product').order_by('-created_at', '-id')
    ]
    return 'Stock movements', headers, rows


def purchases_dataset():
    headers = ['Number', 'Date', 'Supplier', 'Status', 'Items', 'Total']
    rows = [
        [p.purchase_number, _date(p.purchase_date), p.supplier.business_name, p.status,
         len(p.items.all()), p.get_total()]
        for p in Purchase.objects.select_related('supplier').prefetch_related('items').order_by('-purchase_date')
    ]
    return 'Purchases', headers, rows


def purchase_orders_dataset():
    headers = ['Number', 'Order date', 'Expected date', 'Supplier', 'Status', 'Auto', 'Total']
    rows = [
        [o.order_number, _date(o.order_date), _date(o.expected_date), o.supplier.business_name, o.status,
         'Y' if o.is_auto_generated else 'N', o.total_amount]
        for o in PurchaseOrder.objects.select_related('supplier').order_by('-order_date')
    ]
    return 'Purchase orders', headers, rows


def outbound_dataset():
    headers = ['Number', 'Date', 'Customer', 'Status', 'Tracking number', 'Completed', 'Total']
    rows = [
        [o.outbound_number, _date(o.outbound_date), o.customer_name, o.status, o.tracking_number,
         _date(o.completed_date), o.total_amount]
        for o in OutboundOrder.objects.order_by('-outbound_date')
    ]
    return 'Outbound', headers, rows


def quotations_dataset():
    headers = ['Number', 'Date', 'Valid until', 'Customer', 'Status', 'Supply', 'VAT', 'Total']
    rows = [
        [q.quotation_number, _date(q.quotation_date), _date(q.valid_until), q.customer_name, q.status,
         q.supply_amount, q.vat_amount, q.total_amount]
        for q in Quotation.objects.order_by('-quotation_date')
    ]
    return 'Quotations', headers, rows


def b2b_orders_dataset():
    headers = ['Number', 'Date', 'Company', 'Status', 'Total']
    rows = [
        [o.order_number, _datetime(o.created_at), o.company.company_name, o.status_label, o.total_amount]
        for o in B2BOrder.objects.select_related('company').order_by('-created_at')
    ]
    return 'B2B orders', headers, rows


DATASETS = {
    'products': products_dataset,
    'stock-movements': stock_movements_dataset,
    'purchases': purchases_dataset,
    'purchase-orders': purchase_orders_dataset,
    'outbound': outbound_dataset,
    'quotations': quotations_dataset,
    'b2b-orders': b2b_orders_dataset,
}
