"""
Automatic purchase orders for products below safety stock
"""
import logging
from collections import OrderedDict

from django.db import transaction

from logibot.catalog.models import Product
from logibot.parties.models import Supplier
from logibot.purchasing.models import PurchaseItem
from logibot.purchasing.services import create_purchase_order
from .services import build_stock_alert

logger = logging.getLogger(__name__)


def latest_suppliers(product_ids):
    """Map product id to the supplier of its most recent purchase"""
    suppliers = {}
    items = (
        PurchaseItem.objects
        .filter(product_id__in=product_ids, purchase__status='completed')
        .select_related('purchase__supplier')
        .order_by('-purchase__purchase_date', '-purchase__created_at', '-id')
    )
    for item in items:
        suppliers.setdefault(item.product_id, item.purchase.supplier)
    return suppliers


@transaction.atomic
def auto_reorder(product_ids=None, supplier=None, user=None, request=None):
    """
    Create one pending purchase order per supplier for low stock products.

    Products come from ``product_ids`` or, when omitted, every current alert.
    Each product goes to ``supplier`` when given, else to the supplier it was
    last purchased from. Returns ``(orders, skipped_product_ids)``; products
    with no known supplier are skipped.
    """
    queryset = Product.objects.filter(is_active=True).low_stock().select_related('category')
    if product_ids:
        queryset = queryset.filter(id__in=product_ids)
    products = list(queryset.order_by('code'))

    if supplier is not None:
        assignments = {product.id: supplier for product in products}
    else:
        assignments = latest_suppliers([product.id for product in products])

    groups = OrderedDict()
    skipped = []
    for product in products:
        product_supplier = assignments.get(product.id)
        if product_supplier is None:
            skipped.append(product.id)
            continue
        alert = build_stock_alert(product)
        groups.setdefault(product_supplier.id, (product_supplier, []))[1].append({
            'product': product,
            'product_code': product.code,
            'product_name': product.name,
            'quantity': alert['recommended_order'],
            'unit_price': product.price,
        })

    orders = []
    for product_supplier, lines in groups.values():
        orders.append(create_purchase_order(
            supplier=product_supplier,
            lines=lines,
            user=user,
            notes='Auto reorder for products below safety stock',
            is_auto_generated=True,
            request=request,
        ))

    if skipped:
        logger.warning(f"Auto reorder skipped {len(skipped)} product(s) without a known supplier: {skipped}")
    logger.info(f"Auto reorder created {len(orders)} purchase order(s)")
    return orders, skipped


def get_supplier_or_none(supplier_id):
    if supplier_id is None:
        return None
    return Supplier.objects.filter(pk=supplier_id).first()
