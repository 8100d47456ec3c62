"""Utility functions for audit logging, document numbers and settings"""
import logging
import uuid

from django.contrib.auth import get_user_model
from django.core.paginator import Paginator
from django.utils import timezone
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from .models import AuditLog, Setting

logger = logging.getLogger(__name__)

User = get_user_model()

COMPANY_INFO_DEFAULTS = {
    'company_name': 'LogiBot',
    'company_business_number': '123-45-67890',
    'company_phone': '02-1234-5678',
    'company_fax': '02-1234-5679',
    'company_address': '',
    'company_ceo': '',
}


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None, object_reference=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (create, update, delete, stock_in, etc.)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object (e.g., product name)
        object_reference: Reference identifier (e.g., purchase number)
    """
    try:
        audit_user = None
        if user:
            audit_user = user
        elif request and hasattr(request, 'user'):
            audit_user = request.user

        ip_address = get_client_ip(request) if request else None

        if not action or not model_name or not object_id:
            logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
            return None

        return AuditLog.objects.create(
            user=audit_user if audit_user and audit_user.is_authenticated else None,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            object_reference=object_reference,
            changes=changes or {},
            ip_address=ip_address
        )
    except Exception as e:
        # Don't fail the main operation if audit logging fails
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def generate_document_number(model, field_name, prefix):
    """
    Generate a unique document number such as ``PUR-20250101-1A2B3C4D``.

    Loops until no row of ``model`` uses the number in ``field_name``.
    """
    number = f"{prefix}-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
    while model.objects.filter(**{field_name: number}).exists():
        number = f"{prefix}-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
    return number


def get_company_info():
    """Company details printed on quotations and purchase orders"""
    values = dict(Setting.objects.filter(key__in=COMPANY_INFO_DEFAULTS.keys()).values_list('key', 'value'))
    return {
        key.replace('company_', '', 1): values.get(key) or default
        for key, default in COMPANY_INFO_DEFAULTS.items()
    }


def _positive_int_param(request, name, default):
    value = request.query_params.get(name, default)
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError({name: f"'{value}' is not a whole number"})
    if number < 1:
        raise ValidationError({name: "Must be 1 or more"})
    return number


def paginated_response(request, queryset, serializer_class, default_limit=50):
    """
    Page a queryset with ``page``/``limit`` query params.

    Non numeric or non positive values raise a ValidationError (400).
    """
    page = _positive_int_param(request, 'page', 1)
    limit = _positive_int_param(request, 'limit', default_limit)
    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)

    serializer = serializer_class(page_obj, many=True)
    return Response({
        'results': serializer.data,
        'count': paginator.count,
        'next': page_obj.next_page_number() if page_obj.has_next() else None,
        'previous': page_obj.previous_page_number() if page_obj.has_previous() else None,
        'page': page,
        'page_size': limit,
        'total_pages': paginator.num_pages,
    })


def split_items(request):
    """Separate nested ``items`` from the document fields of a request body"""
    data = request.data.copy()
    items_data = data.pop('items', None)
    return data, items_data
