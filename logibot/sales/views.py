import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.http import FileResponse
from django.shortcuts import get_object_or_404
from django.utils.dateparse import parse_date
from logibot.core.utils import create_audit_log, paginated_response, split_items
from .documents import generate_quotation_pdf
from .hometax import submit_invoice
from .models import OutboundOrder, Shipment, Quotation, Invoice
from .serializers import OutboundOrderSerializer, ShipmentSerializer, QuotationSerializer, InvoiceSerializer
from . import services

logger = logging.getLogger(__name__)


def _filter_dates(request, queryset, field):
    date_from = request.query_params.get('date_from', None)
    if date_from:
        queryset = queryset.filter(**{f'{field}__gte': date_from})
    date_to = request.query_params.get('date_to', None)
    if date_to:
        queryset = queryset.filter(**{f'{field}__lte': date_to})
    return queryset


# Outbound views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def outbound_list_create(request):
    """List outbound orders or issue goods to a customer"""
    if request.method == 'GET':
        queryset = OutboundOrder.objects.select_related('customer').prefetch_related('items').all()

        outbound_status = request.query_params.get('status', None)
        if outbound_status:
            queryset = queryset.filter(status=outbound_status)
        customer = request.query_params.get('customer', None)
        if customer:
            queryset = queryset.filter(customer_id=customer)
        search = request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(
                Q(outbound_number__icontains=search) |
                Q(customer_name__icontains=search) |
                Q(tracking_number__icontains=search)
            )
        queryset = _filter_dates(request, queryset, 'outbound_date')

        return paginated_response(request, queryset.order_by('-outbound_date', '-created_at'), OutboundOrderSerializer)
    else:
        data, items_data = split_items(request)
        serializer = OutboundOrderSerializer(data=data, context={'request': request, 'items_data': items_data})
        if serializer.is_valid():
            order = serializer.save()
            return Response(OutboundOrderSerializer(order).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def outbound_detail(request, pk):
    """Retrieve or update an outbound order"""
    order = get_object_or_404(OutboundOrder, pk=pk)

    if request.method == 'GET':
        serializer = OutboundOrderSerializer(order)
        return Response(serializer.data)
    else:
        data, _ = split_items(request)
        serializer = OutboundOrderSerializer(order, data=data, partial=True, context={'request': request})
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def outbound_complete(request, pk):
    """Mark an outbound order as completed"""
    order = get_object_or_404(OutboundOrder, pk=pk)
    services.complete_outbound(order, user=request.user, request=request)
    return Response(OutboundOrderSerializer(order).data)


@api_view(['POST', 'PATCH'])
@permission_classes([IsAuthenticated])
def outbound_tracking(request, pk):
    """Update the tracking number of an outbound order"""
    order = get_object_or_404(OutboundOrder, pk=pk)
    tracking_number = request.data.get('tracking_number')
    if tracking_number is None:
        return Response({'tracking_number': 'This field is required.'}, status=status.HTTP_400_BAD_REQUEST)
    services.update_outbound_tracking(order, tracking_number, user=request.user, request=request)
    return Response(OutboundOrderSerializer(order).data)


# Shipment views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def shipment_list_create(request):
    """List shipments or open a new one"""
    if request.method == 'GET':
        queryset = Shipment.objects.select_related('outbound').all()
        shipment_status = request.query_params.get('status', None)
        if shipment_status:
            queryset = queryset.filter(status=shipment_status)
        search = request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(
                Q(shipment_number__icontains=search) |
                Q(customer_name__icontains=search) |
                Q(tracking_number__icontains=search) |
                Q(destination__icontains=search)
            )
        return paginated_response(request, queryset.order_by('-created_at'), ShipmentSerializer)
    else:
        serializer = ShipmentSerializer(data=request.data)
        if serializer.is_valid():
            shipment = serializer.save()
            create_audit_log(request=request, action='create', model_name='Shipment', object_id=shipment.id,
                             object_name=shipment.customer_name, object_reference=shipment.shipment_number)
            return Response(ShipmentSerializer(shipment).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def shipment_detail(request, pk):
    """Retrieve, update or delete a shipment"""
    shipment = get_object_or_404(Shipment, pk=pk)

    if request.method == 'GET':
        return Response(ShipmentSerializer(shipment).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ShipmentSerializer(shipment, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='Shipment', object_id=shipment.id,
                         object_name=shipment.customer_name, object_reference=shipment.shipment_number)
        shipment.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def shipment_status(request, pk):
    """Move a shipment along preparing -> in_transit -> delivered"""
    shipment = get_object_or_404(Shipment, pk=pk)
    new_status = request.data.get('status')
    if new_status not in dict(Shipment.STATUS_CHOICES):
        return Response({'status': f"Invalid status '{new_status}'"}, status=status.HTTP_400_BAD_REQUEST)
    services.change_shipment_status(shipment, new_status, user=request.user, request=request)
    return Response(ShipmentSerializer(shipment).data)


# Quotation views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def quotation_list_create(request):
    """List quotations or create a new quotation"""
    if request.method == 'GET':
        queryset = Quotation.objects.prefetch_related('items').all()
        quotation_status = request.query_params.get('status', None)
        if quotation_status:
            queryset = queryset.filter(status=quotation_status)
        search = request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(
                Q(quotation_number__icontains=search) |
                Q(customer_name__icontains=search)
            )
        queryset = _filter_dates(request, queryset, 'quotation_date')
        return paginated_response(request, queryset.order_by('-quotation_date', '-created_at'), QuotationSerializer)
    else:
        data, items_data = split_items(request)
        serializer = QuotationSerializer(data=data, context={'request': request, 'items_data': items_data})
        if serializer.is_valid():
            quotation = serializer.save()
            return Response(QuotationSerializer(quotation).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def quotation_detail(request, pk):
    """Retrieve, update or delete a quotation"""
    quotation = get_object_or_404(Quotation, pk=pk)

    if request.method == 'GET':
        return Response(QuotationSerializer(quotation).data)
    elif request.method in ('PUT', 'PATCH'):
        data, items_data = split_items(request)
        old_status = quotation.status
        serializer = QuotationSerializer(quotation, data=data, partial=request.method == 'PATCH',
                                         context={'request': request, 'items_data': items_data})
        if serializer.is_valid():
            quotation = serializer.save()
            action = 'status_change' if quotation.status != old_status else 'update'
            create_audit_log(request=request, action=action, model_name='Quotation', object_id=quotation.id,
                             object_name=quotation.customer_name, object_reference=quotation.quotation_number,
                             changes={'status': {'old': old_status, 'new': quotation.status}} if action == 'status_change' else None)
            return Response(QuotationSerializer(quotation).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='Quotation', object_id=quotation.id,
                         object_name=quotation.customer_name, object_reference=quotation.quotation_number)
        quotation.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def quotation_pdf(request, pk):
    """Printable quotation"""
    quotation = get_object_or_404(Quotation, pk=pk)
    buffer = generate_quotation_pdf(quotation)
    return FileResponse(buffer, as_attachment=False, filename=f"{quotation.quotation_number}.pdf",
                        content_type='application/pdf')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def quotation_expire(request):
    """Expire issued quotations whose validity date has passed"""
    expired = services.expire_quotations()
    return Response({'expired': expired})


# Invoice views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def invoice_list_create(request):
    """List tax invoices or issue a new one"""
    if request.method == 'GET':
        queryset = Invoice.objects.select_related('outbound').prefetch_related('items').all()
        customer = request.query_params.get('customer', None)
        if customer:
            queryset = queryset.filter(customer_id=customer)
        paid = request.query_params.get('paid', None)
        if paid is not None and paid != '':
            queryset = queryset.filter(payment_received=paid.lower() == 'true')
        search = request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(
                Q(invoice_number__icontains=search) |
                Q(customer_name__icontains=search)
            )
        queryset = _filter_dates(request, queryset, 'issue_date')
        return paginated_response(request, queryset.order_by('-issue_date', '-created_at'), InvoiceSerializer)
    else:
        data, items_data = split_items(request)
        serializer = InvoiceSerializer(data=data, context={'request': request, 'items_data': items_data})
        if serializer.is_valid():
            invoice = serializer.save()
            return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def invoice_detail(request, pk):
    """Retrieve, update or delete a tax invoice"""
    invoice = get_object_or_404(Invoice, pk=pk)

    if request.method == 'GET':
        return Response(InvoiceSerializer(invoice).data)
    elif request.method in ('PUT', 'PATCH'):
        data, items_data = split_items(request)
        serializer = InvoiceSerializer(invoice, data=data, partial=request.method == 'PATCH',
                                       context={'request': request, 'items_data': items_data})
        if serializer.is_valid():
            invoice = serializer.save()
            create_audit_log(request=request, action='update', model_name='Invoice', object_id=invoice.id,
                             object_name=invoice.customer_name, object_reference=invoice.invoice_number)
            return Response(InvoiceSerializer(invoice).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='Invoice', object_id=invoice.id,
                         object_name=invoice.customer_name, object_reference=invoice.invoice_number)
        invoice.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def invoice_mark_paid(request, pk):
    """Record payment of a tax invoice"""
    invoice = get_object_or_404(Invoice, pk=pk)
    payment_date = request.data.get('payment_date')
    parsed_date = None
    if payment_date:
        parsed_date = parse_date(str(payment_date))
        if parsed_date is None:
            return Response({'payment_date': 'Use YYYY-MM-DD.'}, status=status.HTTP_400_BAD_REQUEST)
    services.mark_invoice_paid(invoice, payment_date=parsed_date, user=request.user, request=request)
    return Response(InvoiceSerializer(invoice).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def invoice_hometax(request, pk):
    """Submit a tax invoice to HomeTax"""
    invoice = get_object_or_404(Invoice, pk=pk)
    if not invoice.items.exists():
        return Response({'detail': 'Invoice has no items.'}, status=status.HTTP_400_BAD_REQUEST)

    result = submit_invoice(invoice)
    create_audit_log(request=request, action='hometax_submit', model_name='Invoice', object_id=invoice.id,
                     object_name=invoice.customer_name, object_reference=invoice.invoice_number,
                     changes={'hometax_key': invoice.hometax_key})
    return Response({
        'success': result['success'],
        'message': result['message'],
        'invoice_key': result['invoice_key'],
        'invoice': InvoiceSerializer(invoice).data,
    })
