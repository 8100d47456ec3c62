"""B2B checkout and order fulfilment"""
import logging

from django.db import transaction
from django.db.models import Sum, Count, Q
from django.conf import settings
from django.utils import timezone

from logibot.catalog.models import Product
from logibot.core.exceptions import InsufficientStock, InvalidStatusTransition
from logibot.core.utils import create_audit_log, generate_document_number
from logibot.inventory.services import stock_out
from logibot.notifications.utils import create_notification
from .models import B2BOrder, B2BOrderItem

logger = logging.getLogger(__name__)


@transaction.atomic
def checkout(company, cart, user=None, notes='', request=None):
    """
    Place an order for ``cart``, a list of ``{'product': Product, 'quantity': int}``.

    Prices come from the catalogue. Stock is checked here and taken out when
    the order ships.
    """
    lines = []
    for entry in cart:
        product = entry['product']
        quantity = entry['quantity']
        if quantity > product.stock:
            raise InsufficientStock(product.name, product.stock)
        lines.append({
            'product': product,
            'product_code': product.code,
            'product_name': product.name,
            'quantity': quantity,
            'unit_price': product.price,
        })

    order = B2BOrder.objects.create(
        order_number=generate_document_number(B2BOrder, 'order_number', 'B2B'),
        company=company,
        ordered_by=user if user and user.is_authenticated else None,
        status='pending',
        notes=notes,
    )
    for line in lines:
        B2BOrderItem.objects.create(order=order, **line)
    order.total_amount = sum((item.subtotal for item in order.items.all()), 0)
    order.save(update_fields=['total_amount', 'updated_at'])

    create_notification(
        title=f"New B2B order {order.order_number}",
        message=f"{company.company_name} ordered {len(lines)} item(s), total {int(order.total_amount):,}",
        type='urgent_order',
        severity='warning',
        metadata={'order_id': order.id, 'order_number': order.order_number, 'company_id': company.id},
    )
    create_audit_log(request=request, user=user, action='create', model_name='B2BOrder', object_id=order.id,
                     object_name=company.company_name, object_reference=order.order_number,
                     changes={'total_amount': str(order.total_amount)})
    logger.info(f"B2B order {order.order_number} placed by {company.company_name}")
    return order


@transaction.atomic
def change_order_status(order, new_status, user=None, request=None):
    """Apply an allowed status change. Shipping takes every line out of stock"""
    if not order.can_transition_to(new_status):
        raise InvalidStatusTransition(order.status, new_status)

    if new_status == 'shipped':
        for item in order.items.select_related('product'):
            if item.product_id:
                stock_out(item.product, item.quantity, reason='b2b shipment', reference=order.order_number,
                          user=user, request=request)
        order.shipped_at = timezone.now()
    elif new_status == 'delivered':
        order.delivered_at = timezone.now()

    old_status = order.status
    order.status = new_status
    order.save()

    create_notification(
        title=f"Order {order.order_number}: {order.status_label}",
        message=f"{order.company.company_name} order {order.order_number} is now {order.status_label.lower()}",
        type='order_status',
        severity='warning' if new_status == 'cancelled' else 'info',
        metadata={'order_id': order.id, 'order_number': order.order_number, 'status': new_status},
    )
    create_audit_log(request=request, user=user, action='status_change', model_name='B2BOrder',
                     object_id=order.id, object_name=order.company.company_name,
                     object_reference=order.order_number,
                     changes={'status': {'old': old_status, 'new': new_status}})
    return order


def get_b2b_summary():
    orders = B2BOrder.objects.aggregate(
        total_orders=Count('id'),
        open_orders=Count('id', filter=Q(status__in=['pending', 'confirmed'])),
        revenue=Sum('total_amount', filter=~Q(status='cancelled')),
    )
    low_stock_products = Product.objects.filter(
        is_active=True, b2b_enabled=True, stock__lt=settings.LOW_STOCK_B2B_THRESHOLD
    ).count()
    return {
        'total_orders': orders['total_orders'],
        'pending_orders': orders['open_orders'],
        'revenue': orders['revenue'] or 0,
        'low_stock_products': low_stock_products,
    }
