"""
Outbound, shipment, quotation and invoice operations
"""
import logging
from datetime import timedelta

from django.db import transaction
from django.utils import timezone

from logibot.core.exceptions import InvalidStatusTransition
from logibot.core.utils import create_audit_log, generate_document_number
from logibot.inventory.services import stock_out
from .models import (
    OutboundOrder, OutboundItem, Shipment, Quotation, QuotationItem, Invoice, InvoiceItem,
)

logger = logging.getLogger(__name__)

QUOTATION_VALID_DAYS = 30


def _user_or_none(user):
    return user if user and user.is_authenticated else None


@transaction.atomic
def create_outbound(customer_name, lines, customer=None, tracking_number='', outbound_date=None, notes='',
                    destination='', user=None, request=None):
    """
    Issue goods to a customer.

    Every line leaves stock through an ``out`` movement. Any shortage raises
    InsufficientStock and nothing is written. With a tracking number the
    order starts in transit and a matching shipment is opened.
    """
    tracking_number = (tracking_number or '').strip()
    order = OutboundOrder.objects.create(
        outbound_number=generate_document_number(OutboundOrder, 'outbound_number', 'OUT'),
        customer=customer,
        customer_name=customer_name or (customer.business_name if customer else ''),
        outbound_date=outbound_date or timezone.localdate(),
        tracking_number=tracking_number,
        status='in_transit' if tracking_number else 'preparing',
        notes=notes,
        created_by=_user_or_none(user),
    )
    for line in lines:
        item = OutboundItem.objects.create(outbound=order, **line)
        stock_out(item.product, item.quantity, reason='outbound', reference=order.outbound_number,
                  user=user, request=request)
    order.recalculate_total()

    if tracking_number:
        create_shipment(outbound=order, tracking_number=tracking_number, destination=destination,
                        status='in_transit')

    create_audit_log(
        request=request,
        user=user,
        action='create',
        model_name='OutboundOrder',
        object_id=order.id,
        object_name=order.customer_name,
        object_reference=order.outbound_number,
        changes={'items': len(lines), 'total_amount': str(order.total_amount)},
    )
    logger.info(f"Outbound {order.outbound_number} created for {order.customer_name} ({order.status})")
    return order


def complete_outbound(order, user=None, request=None):
    if order.status == 'completed':
        raise InvalidStatusTransition(order.status, 'completed')
    old_status = order.status
    order.status = 'completed'
    order.completed_date = timezone.localdate()
    order.save(update_fields=['status', 'completed_date', 'updated_at'])
    create_audit_log(request=request, user=user, action='status_change', model_name='OutboundOrder',
                     object_id=order.id, object_name=order.customer_name, object_reference=order.outbound_number,
                     changes={'status': {'old': old_status, 'new': 'completed'}})
    return order


def update_outbound_tracking(order, tracking_number, user=None, request=None):
    """Set a tracking number. A new number puts the order in transit"""
    tracking_number = (tracking_number or '').strip()
    old_tracking = order.tracking_number
    order.tracking_number = tracking_number
    if tracking_number and tracking_number != old_tracking and order.status != 'completed':
        order.status = 'in_transit'
    order.save(update_fields=['tracking_number', 'status', 'updated_at'])

    if tracking_number and not order.shipments.exists():
        create_shipment(outbound=order, tracking_number=tracking_number, status='in_transit')
    else:
        order.shipments.exclude(status='delivered').update(tracking_number=tracking_number)

    create_audit_log(request=request, user=user, action='update', model_name='OutboundOrder',
                     object_id=order.id, object_name=order.customer_name, object_reference=order.outbound_number,
                     changes={'tracking_number': {'old': old_tracking, 'new': tracking_number}})
    return order


def create_shipment(outbound=None, customer_name='', destination='', carrier='', tracking_number='',
                    item_count=None, status='preparing', notes=''):
    """Open a shipment, copying customer and item count from the outbound order when linked"""
    if outbound is not None:
        customer_name = customer_name or outbound.customer_name
        if item_count is None:
            item_count = sum(item.quantity for item in outbound.items.all())
    today = timezone.localdate()
    shipment = Shipment.objects.create(
        shipment_number=generate_document_number(Shipment, 'shipment_number', 'SHP'),
        outbound=outbound,
        customer_name=customer_name,
        destination=destination,
        carrier=carrier,
        tracking_number=tracking_number,
        item_count=item_count or 0,
        status=status,
        shipped_date=today if status != 'preparing' else None,
        completed_date=today if status == 'delivered' else None,
        notes=notes,
    )
    logger.info(f"Shipment {shipment.shipment_number} opened ({status})")
    return shipment


def change_shipment_status(shipment, new_status, user=None, request=None):
    if new_status == shipment.status:
        return shipment
    if not shipment.can_transition_to(new_status):
        raise InvalidStatusTransition(shipment.status, new_status)

    old_status = shipment.status
    shipment.status = new_status
    today = timezone.localdate()
    if new_status == 'in_transit' and shipment.shipped_date is None:
        shipment.shipped_date = today
    if new_status == 'delivered':
        shipment.completed_date = today
    shipment.save()
    create_audit_log(request=request, user=user, action='status_change', model_name='Shipment',
                     object_id=shipment.id, object_name=shipment.customer_name,
                     object_reference=shipment.shipment_number,
                     changes={'status': {'old': old_status, 'new': new_status}})
    return shipment


@transaction.atomic
def create_quotation(customer_name, lines, customer=None, quotation_date=None, valid_until=None, notes='',
                     user=None, request=None):
    quotation_date = quotation_date or timezone.localdate()
    quotation = Quotation.objects.create(
        quotation_number=generate_document_number(Quotation, 'quotation_number', 'QT'),
        customer=customer,
        customer_name=customer_name or (customer.business_name if customer else ''),
        quotation_date=quotation_date,
        valid_until=valid_until or quotation_date + timedelta(days=QUOTATION_VALID_DAYS),
        status='issued',
        notes=notes,
        created_by=_user_or_none(user),
    )
    for line in lines:
        QuotationItem.objects.create(quotation=quotation, **line)
    quotation.recalculate_totals()

    create_audit_log(request=request, user=user, action='create', model_name='Quotation',
                     object_id=quotation.id, object_name=quotation.customer_name,
                     object_reference=quotation.quotation_number,
                     changes={'total_amount': str(quotation.total_amount)})
    return quotation


@transaction.atomic
def replace_quotation_items(quotation, lines):
    quotation.items.all().delete()
    for line in lines:
        QuotationItem.objects.create(quotation=quotation, **line)
    quotation.recalculate_totals()
    return quotation


def expire_quotations(today=None):
    """Mark issued quotations past their validity date as expired"""
    if today is None:
        today = timezone.localdate()
    expired = Quotation.objects.filter(status='issued', valid_until__lt=today).update(status='expired')
    if expired:
        logger.info(f"Expired {expired} quotation(s)")
    return expired


def outbound_lines(outbound):
    """Line dicts copied from an outbound order"""
    return [
        {
            'product': item.product,
            'product_code': item.product_code,
            'product_name': item.product_name,
            'quantity': item.quantity,
            'unit_price': item.unit_price,
        }
        for item in outbound.items.select_related('product')
    ]


@transaction.atomic
def create_invoice(customer_name, lines=None, customer=None, outbound=None, issue_date=None,
                   customer_business_number='', notes='', user=None, request=None):
    """Issue a tax invoice. Items are copied from the outbound order when none are given"""
    if not lines and outbound is not None:
        lines = outbound_lines(outbound)
    if outbound is not None:
        customer = customer or outbound.customer
        customer_name = customer_name or outbound.customer_name
    if customer is not None:
        customer_name = customer_name or customer.business_name
        customer_business_number = customer_business_number or customer.business_number

    invoice = Invoice.objects.create(
        invoice_number=generate_document_number(Invoice, 'invoice_number', 'INV'),
        customer=customer,
        customer_name=customer_name or '',
        customer_business_number=customer_business_number or '',
        outbound=outbound,
        issue_date=issue_date or timezone.localdate(),
        notes=notes,
        created_by=_user_or_none(user),
    )
    for line in lines or []:
        InvoiceItem.objects.create(invoice=invoice, **line)
    invoice.recalculate_totals()

    create_audit_log(request=request, user=user, action='create', model_name='Invoice',
                     object_id=invoice.id, object_name=invoice.customer_name,
                     object_reference=invoice.invoice_number,
                     changes={'total_amount': str(invoice.total_amount)})
    logger.info(f"Invoice {invoice.invoice_number} issued to {invoice.customer_name}")
    return invoice


@transaction.atomic
def replace_invoice_items(invoice, lines):
    invoice.items.all().delete()
    for line in lines:
        InvoiceItem.objects.create(invoice=invoice, **line)
    invoice.recalculate_totals()
    return invoice


def mark_invoice_paid(invoice, payment_date=None, user=None, request=None):
    invoice.payment_received = True
    invoice.payment_date = payment_date or timezone.localdate()
    invoice.save(update_fields=['payment_received', 'payment_date', 'updated_at'])
    create_audit_log(request=request, user=user, action='status_change', model_name='Invoice',
                     object_id=invoice.id, object_name=invoice.customer_name,
                     object_reference=invoice.invoice_number,
                     changes={'payment_received': True, 'payment_date': str(invoice.payment_date)})
    return invoice
