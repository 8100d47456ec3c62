"""
Dashboard KPIs and analytics aggregates
"""
import logging
from decimal import Decimal

from django.conf import settings
from django.db.models import Sum, Count, F, Q, DecimalField, ExpressionWrapper
from django.db.models.functions import ExtractMonth
from django.utils import timezone

from logibot.b2b.models import B2BOrder
from logibot.catalog.models import Category, Product
from logibot.core.cache_utils import cached_query, DASHBOARD_KPI_CACHE_TTL, REPORTS_CACHE_TTL
from logibot.parties.models import Supplier
from logibot.purchasing.models import PurchaseItem
from logibot.sales.models import OutboundOrder, Invoice

logger = logging.getLogger(__name__)

TOP_N = 5

stock_value_expr = ExpressionWrapper(F('stock') * F('price'), output_field=DecimalField(max_digits=16, decimal_places=2))


def _purchase_items(**filters):
    return PurchaseItem.objects.filter(purchase__status='completed', **filters)


@cached_query(cache_ttl=DASHBOARD_KPI_CACHE_TTL, key_prefix="dashboard_kpis")
def get_dashboard_kpis(year, month):
    """Headline numbers for the dashboard for one calendar month"""
    products = Product.objects.filter(is_active=True)
    totals = products.aggregate(
        product_count=Count('id'),
        total_stock=Sum('stock'),
        stock_value=Sum(stock_value_expr),
    )
    month_sales = OutboundOrder.objects.filter(
        outbound_date__year=year, outbound_date__month=month
    ).aggregate(total=Sum('total_amount'))['total']
    month_purchases = _purchase_items(
        purchase__purchase_date__year=year, purchase__purchase_date__month=month
    ).aggregate(total=Sum('subtotal'))['total']

    return {
        'year': year,
        'month': month,
        'product_count': totals['product_count'],
        'total_stock': totals['total_stock'] or 0,
        'stock_value': totals['stock_value'] or Decimal('0'),
        'low_stock_count': products.low_stock().count(),
        'pending_outbound': OutboundOrder.objects.filter(status__in=['preparing', 'in_transit']).count(),
        'month_sales': month_sales or Decimal('0'),
        'month_purchases': month_purchases or Decimal('0'),
        'pending_b2b_orders': B2BOrder.objects.filter(status='pending').count(),
        'low_stock_threshold_b2b': settings.LOW_STOCK_B2B_THRESHOLD,
    }


def stock_status(stock, safety_stock):
    """critical below half of safety stock, low below it, normal below double, excess otherwise"""
    if stock < 0.5 * safety_stock:
        return 'critical'
    if stock < safety_stock:
        return 'low'
    if stock < 2 * safety_stock:
        return 'normal'
    return 'excess'


@cached_query(cache_ttl=REPORTS_CACHE_TTL, key_prefix="reports")
def get_inventory_status():
    products = Product.objects.filter(is_active=True)

    categories = [
        {
            'category_id': row['id'],
            'code': row['code'],
            'name': row['name'],
            'product_count': row['product_count'],
            'total_stock': row['total_stock'] or 0,
        }
        for row in Category.objects.annotate(
            product_count=Count('products', filter=Q(products__is_active=True)),
            total_stock=Sum('products__stock', filter=Q(products__is_active=True)),
        ).values('id', 'code', 'name', 'product_count', 'total_stock').order_by('code')
    ]
    uncategorised = products.filter(category__isnull=True).aggregate(count=Count('id'), stock=Sum('stock'))
    if uncategorised['count']:
        categories.append({
            'category_id': None,
            'code': None,
            'name': 'Uncategorised',
            'product_count': uncategorised['count'],
            'total_stock': uncategorised['stock'] or 0,
        })

    buckets = {'critical': 0, 'low': 0, 'normal': 0, 'excess': 0}
    for stock, safety_stock in products.values_list('stock', 'safety_stock'):
        buckets[stock_status(stock, safety_stock)] += 1

    top_low = [
        {
            'product_id': product.id,
            'code': product.code,
            'name': product.name,
            'stock': product.stock,
            'safety_stock': product.safety_stock,
            'shortage': product.shortage,
        }
        for product in products.low_stock().annotate(shortage=F('safety_stock') - F('stock')).order_by('-shortage', 'code')[:TOP_N]
    ]

    return {'categories': categories, 'status': buckets, 'top_low_stock': top_low}


@cached_query(cache_ttl=REPORTS_CACHE_TTL, key_prefix="reports")
def get_monthly_trend(year):
    """Outbound sales against purchases for each month of ``year``"""
    sales = {
        row['month']: row['total']
        for row in OutboundOrder.objects.filter(outbound_date__year=year)
        .annotate(month=ExtractMonth('outbound_date')).values('month').annotate(total=Sum('total_amount'))
    }
    purchases = {
        row['month']: row['total']
        for row in _purchase_items(purchase__purchase_date__year=year)
        .annotate(month=ExtractMonth('purchase__purchase_date')).values('month').annotate(total=Sum('subtotal'))
    }
    return {
        'year': year,
        'months': [
            {
                'month': month,
                'sales': sales.get(month) or Decimal('0'),
                'purchases': purchases.get(month) or Decimal('0'),
            }
            for month in range(1, 13)
        ],
    }


@cached_query(cache_ttl=REPORTS_CACHE_TTL, key_prefix="reports")
def get_vendor_analytics(year):
    """Sales (outbound and invoices) and purchases per trading partner"""
    outbound = dict(
        OutboundOrder.objects.filter(outbound_date__year=year, customer__isnull=False)
        .values('customer').annotate(total=Sum('total_amount')).values_list('customer', 'total')
    )
    invoiced = dict(
        Invoice.objects.filter(issue_date__year=year, customer__isnull=False)
        .values('customer').annotate(total=Sum('total_amount')).values_list('customer', 'total')
    )
    purchased = dict(
        _purchase_items(purchase__purchase_date__year=year)
        .values('purchase__supplier').annotate(total=Sum('subtotal')).values_list('purchase__supplier', 'total')
    )

    partner_ids = set(outbound) | set(invoiced) | set(purchased)
    partners = []
    for supplier in Supplier.objects.filter(id__in=partner_ids).order_by('business_name'):
        sales_total = (outbound.get(supplier.id) or Decimal('0')) + (invoiced.get(supplier.id) or Decimal('0'))
        purchase_total = purchased.get(supplier.id) or Decimal('0')
        partners.append({
            'partner_id': supplier.id,
            'code': supplier.code,
            'business_name': supplier.business_name,
            'partner_type': supplier.partner_type,
            'sales_total': sales_total,
            'purchase_total': purchase_total,
            'combined_total': sales_total + purchase_total,
        })

    top = sorted(partners, key=lambda p: p['combined_total'], reverse=True)[:TOP_N]
    return {'year': year, 'partners': partners, 'top_partners': top}
