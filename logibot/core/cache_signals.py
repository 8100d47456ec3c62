"""
Cache invalidation signals
Automatically invalidate report caches when stock or orders change
"""
from django.apps import apps
from django.db.models.signals import post_save, post_delete
import logging

from .cache_utils import invalidate_dashboard_cache

logger = logging.getLogger(__name__)

# Models whose changes affect dashboard KPIs and reports
WATCHED_MODELS = [
    'catalog.Product',
    'inventory.StockMovement',
    'purchasing.Purchase',
    'purchasing.PurchaseOrder',
    'sales.OutboundOrder',
    'sales.Invoice',
    'b2b.B2BOrder',
]


def invalidate_reports_on_change(sender, **kwargs):
    logger.debug(f"{sender.__name__} changed, invalidating dashboard cache")
    invalidate_dashboard_cache()


def connect_cache_signals():
    for label in WATCHED_MODELS:
        model = apps.get_model(label)
        post_save.connect(invalidate_reports_on_change, sender=model, dispatch_uid=f"cache_save_{label}")
        post_delete.connect(invalidate_reports_on_change, sender=model, dispatch_uid=f"cache_delete_{label}")


connect_cache_signals()
