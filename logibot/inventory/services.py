"""
Stock ledger operations and stock planning calculations

Every change to ``Product.stock`` goes through ``apply_stock_movement`` so the
movement ledger, audit log and low stock notifications stay in step.
"""
import logging
import math
from datetime import timedelta

from django.db import transaction
from django.db.models import Sum, Count
from django.db.models.functions import TruncDate
from django.utils import timezone

from logibot.catalog.models import Product
from logibot.core.exceptions import InsufficientStock
from logibot.core.utils import create_audit_log
from logibot.notifications.utils import create_notification
from .models import StockMovement

logger = logging.getLogger(__name__)

REORDER_MULTIPLIER = 1.5
USAGE_WINDOW_DAYS = 30
PREDICTION_HORIZON_DAYS = 30
ORDER_LEAD_DAYS = 7

AUDIT_ACTIONS = {
    'in': 'stock_in',
    'out': 'stock_out',
    'adjust': 'stock_adjust',
}


def apply_stock_movement(product, delta, movement_type, reason='', reference='', user=None, request=None,
                         counted=None):
    """
    Change a product's stock by ``delta`` and record the movement.

    With ``counted`` the stock is set to that absolute value instead and the
    delta is taken from the locked row. The product row is locked for the
    duration of the change. Raises InsufficientStock when the result would be
    negative.
    """
    with transaction.atomic():
        locked = Product.objects.select_for_update().get(pk=product.pk)
        stock_before = locked.stock
        delta = int(counted) - stock_before if counted is not None else int(delta)
        stock_after = stock_before + delta
        if stock_after < 0:
            logger.warning(f"Stock movement rejected for {locked.code}: {stock_before} available, delta {delta}")
            raise InsufficientStock(locked.name, stock_before)

        locked.stock = stock_after
        locked.save(update_fields=['stock', 'updated_at'])

        movement = StockMovement.objects.create(
            product=locked,
            movement_type=movement_type,
            quantity=delta,
            stock_before=stock_before,
            stock_after=stock_after,
            reason=reason,
            reference=reference or '',
            created_by=user if user and user.is_authenticated else None,
        )

        create_audit_log(
            request=request,
            user=user,
            action=AUDIT_ACTIONS.get(movement_type, 'stock_adjust'),
            model_name='Product',
            object_id=locked.id,
            object_name=locked.name,
            object_reference=reference or None,
            changes={'stock': {'old': stock_before, 'new': stock_after}, 'reason': reason},
        )

        if stock_before >= locked.safety_stock > stock_after:
            severity = 'critical' if stock_after == 0 else 'warning'
            create_notification(
                title=f"Low stock: {locked.name}",
                message=f"{locked.name} ({locked.code}) is at {stock_after}, below safety stock {locked.safety_stock}",
                type='low_stock',
                severity=severity,
                metadata={'product_id': locked.id, 'stock': stock_after, 'safety_stock': locked.safety_stock},
            )

    product.stock = stock_after
    logger.info(f"Stock {movement_type} for {locked.code}: {stock_before} -> {stock_after} ({reference or reason})")
    return movement


def stock_in(product, quantity, reason='', reference='', user=None, request=None):
    return apply_stock_movement(product, abs(int(quantity)), 'in', reason, reference, user, request)


def stock_out(product, quantity, reason='', reference='', user=None, request=None):
    return apply_stock_movement(product, -abs(int(quantity)), 'out', reason, reference, user, request)


def stock_count(product, counted, reason='', reference='', user=None, request=None):
    """Set stock to a counted value, recording the difference as an ``adjust`` movement"""
    return apply_stock_movement(product, 0, 'adjust', reason, reference, user, request, counted=counted)


def build_stock_alert(product):
    """Shortage, recommended order and cost for one low stock product"""
    shortage = product.safety_stock - product.stock
    recommended_order = math.ceil(shortage * REORDER_MULTIPLIER)
    return {
        'product_id': product.id,
        'code': product.code,
        'name': product.name,
        'category': product.category.name if product.category else None,
        'stock': product.stock,
        'safety_stock': product.safety_stock,
        'shortage': shortage,
        'recommended_order': recommended_order,
        'unit_price': product.price,
        'total_cost': product.price * recommended_order,
    }


def get_stock_alerts(queryset=None):
    """Alerts for every active product whose stock is below its safety stock"""
    if queryset is None:
        queryset = Product.objects.filter(is_active=True)
    products = queryset.low_stock().select_related('category').order_by('stock', 'code')
    return [build_stock_alert(product) for product in products]


def get_usage_stats(product_ids, today=None, window_days=USAGE_WINDOW_DAYS):
    """
    Outbound usage over the trailing window, keyed by product id.

    Returns ``{product_id: (total_quantity, active_days)}``.
    """
    if today is None:
        today = timezone.localdate()
    since = today - timedelta(days=window_days)

    outbound = StockMovement.objects.filter(
        product_id__in=product_ids,
        movement_type='out',
        created_at__date__gt=since,
        created_at__date__lte=today,
    )
    totals = {
        row['product_id']: -(row['total'] or 0)
        for row in outbound.values('product_id').annotate(total=Sum('quantity'))
    }
    active_days = {
        row['product_id']: row['days']
        for row in outbound.annotate(day=TruncDate('created_at')).values('product_id').annotate(days=Count('day', distinct=True))
    }
    return {pid: (totals.get(pid, 0), active_days.get(pid, 0)) for pid in product_ids}


def reorder_priority(days_until_stockout):
    if days_until_stockout < 7:
        return 'high'
    if days_until_stockout < 14:
        return 'medium'
    return 'low'


def predict_reorder(product, total_usage, active_days, today):
    """Reorder prediction for one product from its recent outbound usage"""
    average_daily_usage = total_usage / USAGE_WINDOW_DAYS
    divisor = average_daily_usage or 1
    days_until_stockout = math.floor((product.stock - product.safety_stock) / divisor)
    confidence = round(80 + 20 * min(active_days, USAGE_WINDOW_DAYS) / USAGE_WINDOW_DAYS, 1)

    return {
        'product_id': product.id,
        'code': product.code,
        'name': product.name,
        'stock': product.stock,
        'safety_stock': product.safety_stock,
        'average_daily_usage': round(average_daily_usage, 2),
        'days_until_stockout': days_until_stockout,
        'predicted_stockout_date': today + timedelta(days=days_until_stockout),
        'recommended_order_date': today + timedelta(days=max(0, days_until_stockout - ORDER_LEAD_DAYS)),
        'recommended_order_quantity': math.ceil(average_daily_usage * USAGE_WINDOW_DAYS + product.safety_stock),
        'priority': reorder_priority(days_until_stockout),
        'confidence': confidence,
    }


def get_reorder_predictions(today=None):
    """Predictions for products expected to reach safety stock within the horizon, soonest first"""
    if today is None:
        today = timezone.localdate()
    products = list(Product.objects.filter(is_active=True))
    stats = get_usage_stats([p.id for p in products], today=today)

    predictions = []
    for product in products:
        total_usage, active_days = stats[product.id]
        prediction = predict_reorder(product, total_usage, active_days, today)
        if prediction['days_until_stockout'] < PREDICTION_HORIZON_DAYS:
            predictions.append(prediction)

    predictions.sort(key=lambda p: (p['days_until_stockout'], p['code']))
    return predictions
