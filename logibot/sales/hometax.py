"""
HomeTax electronic tax invoice submission.

Without ``HOMETAX_API_KEY`` nothing is sent and a test key is returned, so
invoices can be exercised end to end before the gateway contract is in place.
"""
import logging
import math
import time
from typing import Dict, Any

import requests
from django.conf import settings
from django.utils import timezone

from logibot.core.exceptions import HomeTaxError
from logibot.core.utils import get_company_info

logger = logging.getLogger(__name__)

INVOICE_TYPE_TAX = '01'
PURPOSE_RECEIPT = '02'


def _amount(value):
    return str(int(value))


def build_hometax_payload(invoice, company=None) -> Dict[str, Any]:
    """Translate an invoice into the gateway's request format"""
    if company is None:
        company = get_company_info()

    detail_list = []
    for index, item in enumerate(invoice.items.all(), start=1):
        detail_list.append({
            'serialNum': str(index),
            'itemName': item.product_name,
            'qty': str(item.quantity),
            'unitCost': _amount(item.unit_price),
            'supplyCost': _amount(item.subtotal),
            'tax': str(math.floor(item.subtotal * 10 / 100)),
        })

    return {
        'writeDate': invoice.issue_date.strftime('%Y%m%d'),
        'invoiceType': INVOICE_TYPE_TAX,
        'purposeType': PURPOSE_RECEIPT,
        'modifyCode': '',
        'invoicerCorpNum': company['business_number'],
        'invoicerCorpName': company['name'],
        'invoiceeCorpNum': invoice.customer_business_number,
        'invoiceeCorpName': invoice.customer_name,
        'supplyCostTotal': _amount(invoice.supply_amount),
        'taxTotal': _amount(invoice.tax_amount),
        'totalAmount': _amount(invoice.total_amount),
        'detailList': detail_list,
    }


def submit_invoice(invoice) -> Dict[str, Any]:
    """
    Send an invoice to HomeTax and store the returned key on it.

    Returns a dict with ``success``, ``message``, ``invoice_key`` and ``data``.
    Raises HomeTaxError when the gateway is unreachable or rejects the invoice.
    """
    payload = build_hometax_payload(invoice)
    api_key = settings.HOMETAX_API_KEY

    if not api_key:
        invoice_key = f"TEST-{invoice.invoice_number}-{int(time.time() * 1000)}"
        logger.info(f"HomeTax API key not configured, issued test key for {invoice.invoice_number}")
        result = {
            'success': True,
            'message': 'HomeTax integration ready (API key not configured)',
            'invoice_key': invoice_key,
            'data': payload,
        }
    else:
        headers = {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {api_key}',
        }
        try:
            response = requests.post(
                settings.HOMETAX_ENDPOINT,
                json=payload,
                headers=headers,
                timeout=settings.HOMETAX_TIMEOUT,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"HomeTax request failed for {invoice.invoice_number}: {str(e)}")
            raise HomeTaxError(f"HomeTax request failed: {str(e)}")

        try:
            body = response.json()
        except ValueError:
            body = {}

        if not response.ok:
            message = body.get('message') or 'unknown error'
            logger.error(f"HomeTax rejected {invoice.invoice_number}: {response.status_code} {message}")
            raise HomeTaxError(f"HomeTax API error: {message}")

        invoice_key = body.get('invoiceKey') or body.get('ntsconfirmNum') or ''
        logger.info(f"HomeTax accepted {invoice.invoice_number} with key {invoice_key}")
        result = {
            'success': True,
            'message': 'Sent to HomeTax',
            'invoice_key': invoice_key,
            'data': body,
        }

    invoice.hometax_key = result['invoice_key']
    invoice.hometax_sent_at = timezone.now()
    invoice.save(update_fields=['hometax_key', 'hometax_sent_at', 'updated_at'])
    return result
