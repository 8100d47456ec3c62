"""Purchase order and goods receipt operations"""
import logging

from django.db import transaction
from django.utils import timezone

from logibot.core.exceptions import InvalidStatusTransition
from logibot.core.utils import create_audit_log, generate_document_number
from logibot.inventory.services import stock_in, stock_out
from .models import Purchase, PurchaseItem, PurchaseOrder, PurchaseOrderItem

logger = logging.getLogger(__name__)


@transaction.atomic
def create_purchase_order(supplier, lines, user=None, notes='', order_date=None, expected_date=None,
                          is_auto_generated=False, request=None):
    """Create a pending purchase order from cleaned line dicts"""
    order = PurchaseOrder.objects.create(
        order_number=generate_document_number(PurchaseOrder, 'order_number', 'PO'),
        supplier=supplier,
        order_date=order_date or timezone.localdate(),
        expected_date=expected_date,
        status='pending',
        is_auto_generated=is_auto_generated,
        notes=notes,
        created_by=user if user and user.is_authenticated else None,
    )
    for line in lines:
        PurchaseOrderItem.objects.create(purchase_order=order, **line)
    order.recalculate_total()

    create_audit_log(
        request=request,
        user=user,
        action='auto_reorder' if is_auto_generated else 'create',
        model_name='PurchaseOrder',
        object_id=order.id,
        object_name=supplier.business_name,
        object_reference=order.order_number,
        changes={'items': len(lines), 'total_amount': str(order.total_amount)},
    )
    logger.info(f"Purchase order {order.order_number} created for {supplier.business_name} ({len(lines)} items)")
    return order


@transaction.atomic
def replace_purchase_order_items(order, lines):
    order.items.all().delete()
    for line in lines:
        PurchaseOrderItem.objects.create(purchase_order=order, **line)
    return order.recalculate_total()


@transaction.atomic
def create_purchase(supplier, lines, user=None, purchase_date=None, notes='', purchase_order=None, request=None):
    """Record a goods receipt and add every line to stock"""
    purchase = Purchase.objects.create(
        purchase_number=generate_document_number(Purchase, 'purchase_number', 'PUR'),
        supplier=supplier,
        purchase_order=purchase_order,
        purchase_date=purchase_date or timezone.localdate(),
        status='completed',
        notes=notes,
        created_by=user if user and user.is_authenticated else None,
    )
    for line in lines:
        item = PurchaseItem.objects.create(purchase=purchase, **line)
        if item.product_id:
            stock_in(item.product, item.quantity, reason='purchase', reference=purchase.purchase_number,
                     user=user, request=request)

    create_audit_log(
        request=request,
        user=user,
        action='create',
        model_name='Purchase',
        object_id=purchase.id,
        object_name=supplier.business_name,
        object_reference=purchase.purchase_number,
        changes={'items': len(lines), 'total_amount': str(purchase.get_total())},
    )
    logger.info(f"Purchase {purchase.purchase_number} received from {supplier.business_name}")
    return purchase


@transaction.atomic
def delete_purchase(purchase, user=None, request=None):
    """Delete a purchase, taking completed receipts back out of stock"""
    if purchase.status == 'completed':
        for item in purchase.items.select_related('product'):
            if item.product_id:
                stock_out(item.product, item.quantity, reason='purchase deleted',
                          reference=purchase.purchase_number, user=user, request=request)

    create_audit_log(
        request=request,
        user=user,
        action='delete',
        model_name='Purchase',
        object_id=purchase.id,
        object_name=purchase.supplier.business_name,
        object_reference=purchase.purchase_number,
    )
    purchase.delete()


def change_purchase_order_status(order, new_status, user=None, request=None):
    """Move a purchase order along pending -> confirmed -> completed, or cancel it"""
    if new_status == order.status:
        return order
    if not order.can_transition_to(new_status):
        raise InvalidStatusTransition(order.status, new_status)

    old_status = order.status
    order.status = new_status
    order.save(update_fields=['status', 'updated_at'])
    create_audit_log(
        request=request,
        user=user,
        action='status_change',
        model_name='PurchaseOrder',
        object_id=order.id,
        object_name=order.supplier.business_name,
        object_reference=order.order_number,
        changes={'status': {'old': old_status, 'new': new_status}},
    )
    logger.info(f"Purchase order {order.order_number}: {old_status} -> {new_status}")
    return order
