import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.db.models import Q
from django.http import FileResponse
from django.shortcuts import get_object_or_404
from logibot.core.utils import create_audit_log, paginated_response, split_items
from .documents import generate_purchase_order_pdf
from .models import Purchase, PurchaseOrder
from .serializers import PurchaseSerializer, PurchaseOrderSerializer
from .services import change_purchase_order_status, delete_purchase

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def purchase_list_create(request):
    """List all purchases or create a new purchase"""
    if request.method == 'GET':
        queryset = Purchase.objects.select_related('supplier').prefetch_related('items').all()

        supplier = request.query_params.get('supplier', None)
        if supplier:
            queryset = queryset.filter(supplier_id=supplier)
        purchase_status = request.query_params.get('status', None)
        if purchase_status:
            queryset = queryset.filter(status=purchase_status)
        date_from = request.query_params.get('date_from', None)
        if date_from:
            queryset = queryset.filter(purchase_date__gte=date_from)
        date_to = request.query_params.get('date_to', None)
        if date_to:
            queryset = queryset.filter(purchase_date__lte=date_to)

        return paginated_response(request, queryset.order_by('-purchase_date', '-created_at'), PurchaseSerializer)
    else:
        data, items_data = split_items(request)
        serializer = PurchaseSerializer(data=data, context={'request': request, 'items_data': items_data})
        if serializer.is_valid():
            purchase = serializer.save()
            return Response(PurchaseSerializer(purchase).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def purchase_detail(request, pk):
    """Retrieve, update or delete a purchase"""
    purchase = get_object_or_404(Purchase.objects.select_related('supplier'), pk=pk)

    if request.method == 'GET':
        serializer = PurchaseSerializer(purchase)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        data, _ = split_items(request)
        serializer = PurchaseSerializer(purchase, data=data, partial=True, context={'request': request})
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='Purchase', object_id=purchase.id,
                             object_name=purchase.supplier.business_name, object_reference=purchase.purchase_number)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        # InsufficientStock from the reversal is turned into a 400 by the exception handler
        delete_purchase(purchase, user=request.user, request=request)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def purchase_order_list_create(request):
    """List all purchase orders or create a new one"""
    if request.method == 'GET':
        queryset = PurchaseOrder.objects.select_related('supplier').prefetch_related('items__product').all()

        order_status = request.query_params.get('status', None)
        if order_status:
            queryset = queryset.filter(status=order_status)
        supplier = request.query_params.get('supplier', None)
        if supplier:
            queryset = queryset.filter(supplier_id=supplier)
        search = request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(
                Q(order_number__icontains=search) |
                Q(supplier__business_name__icontains=search) |
                Q(notes__icontains=search)
            )

        return paginated_response(request, queryset.order_by('-order_date', '-created_at'), PurchaseOrderSerializer)
    else:
        data, items_data = split_items(request)
        serializer = PurchaseOrderSerializer(data=data, context={'request': request, 'items_data': items_data})
        if serializer.is_valid():
            order = serializer.save()
            return Response(PurchaseOrderSerializer(order).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def purchase_order_detail(request, pk):
    """Retrieve, update or delete a purchase order"""
    order = get_object_or_404(PurchaseOrder.objects.select_related('supplier'), pk=pk)

    if request.method == 'GET':
        serializer = PurchaseOrderSerializer(order)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        data, items_data = split_items(request)
        new_status = data.pop('status', None)
        serializer = PurchaseOrderSerializer(order, data=data, partial=request.method == 'PATCH',
                                             context={'request': request, 'items_data': items_data})
        if serializer.is_valid():
            # A rejected status change also discards the field edits
            with transaction.atomic():
                order = serializer.save()
                if new_status:
                    change_purchase_order_status(order, new_status, user=request.user, request=request)
            create_audit_log(request=request, action='update', model_name='PurchaseOrder', object_id=order.id,
                             object_name=order.supplier.business_name, object_reference=order.order_number)
            return Response(PurchaseOrderSerializer(order).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='PurchaseOrder', object_id=order.id,
                         object_name=order.supplier.business_name, object_reference=order.order_number)
        order.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def purchase_order_status(request, pk):
    """Change the status of a purchase order"""
    order = get_object_or_404(PurchaseOrder.objects.select_related('supplier'), pk=pk)
    new_status = request.data.get('status')
    if new_status not in dict(PurchaseOrder.STATUS_CHOICES):
        return Response({'status': f"Invalid status '{new_status}'"}, status=status.HTTP_400_BAD_REQUEST)
    change_purchase_order_status(order, new_status, user=request.user, request=request)
    return Response(PurchaseOrderSerializer(order).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def purchase_order_pdf(request, pk):
    """Printable purchase order"""
    order = get_object_or_404(PurchaseOrder.objects.select_related('supplier'), pk=pk)
    buffer = generate_purchase_order_pdf(order)
    return FileResponse(buffer, as_attachment=False, filename=f"{order.order_number}.pdf",
                        content_type='application/pdf')
