"""
Domain errors and the API exception handler.

Every error response carries a ``detail`` message the client can show as a
toast. Validation errors keep the per-field structure DRF produces.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class LogiBotError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be processed.'
    default_code = 'logibot_error'


class InsufficientStock(LogiBotError):
    default_detail = 'Insufficient stock.'
    default_code = 'insufficient_stock'

    def __init__(self, product_name=None, available=None, detail=None):
        if detail is None and product_name is not None:
            detail = f"{product_name}: insufficient stock (available: {available})"
        super().__init__(detail=detail)
        self.product_name = product_name
        self.available = available


class InvalidStatusTransition(LogiBotError):
    default_detail = 'Status change is not allowed.'
    default_code = 'invalid_status_transition'

    def __init__(self, current=None, target=None, detail=None):
        if detail is None and current is not None:
            detail = f"Cannot change status from '{current}' to '{target}'"
        super().__init__(detail=detail)


class CompanyNotApproved(LogiBotError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Company account is not approved.'
    default_code = 'company_not_approved'


class HomeTaxError(LogiBotError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'HomeTax submission failed.'
    default_code = 'hometax_error'


def api_exception_handler(exc, context):
    """Wrap DRF's handler so domain errors also report a machine readable code"""
    response = exception_handler(exc, context)
    if response is None:
        view = context.get('view')
        logger.exception(f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}: {exc}")
        return None

    if isinstance(exc, LogiBotError):
        response.data = {'detail': str(exc.detail), 'code': exc.get_codes()}
        logger.warning(f"{exc.__class__.__name__}: {exc.detail}")
    return response
