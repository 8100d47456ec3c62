from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.db.models.deletion import ProtectedError
from django.shortcuts import get_object_or_404
from logibot.core.utils import create_audit_log
from .models import Supplier
from .serializers import SupplierSerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def supplier_list_create(request):
    """List all trading partners or create a new one"""
    if request.method == 'GET':
        queryset = Supplier.objects.all().order_by('business_name')
        search = request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(
                Q(business_name__icontains=search) |
                Q(code__icontains=search) |
                Q(business_number__icontains=search) |
                Q(contact_person__icontains=search)
            )
        partner_type = request.query_params.get('partner_type', None)
        if partner_type:
            queryset = queryset.filter(Q(partner_type=partner_type) | Q(partner_type='both'))
        active = request.query_params.get('active', None)
        if active is not None and active != '':
            queryset = queryset.filter(is_active=active.lower() == 'true')
        serializer = SupplierSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = SupplierSerializer(data=request.data)
        if serializer.is_valid():
            supplier = serializer.save()
            create_audit_log(request=request, action='create', model_name='Supplier', object_id=supplier.id,
                             object_name=supplier.business_name, object_reference=supplier.code)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def supplier_detail(request, pk):
    """Retrieve, update or delete a trading partner"""
    supplier = get_object_or_404(Supplier, pk=pk)

    if request.method == 'GET':
        serializer = SupplierSerializer(supplier)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SupplierSerializer(supplier, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        try:
            supplier.delete()
        except ProtectedError:
            return Response(
                {'detail': 'This partner has purchase records. Deactivate it instead.'},
                status=status.HTTP_400_BAD_REQUEST
            )
        create_audit_log(request=request, action='delete', model_name='Supplier', object_id=pk,
                         object_name=supplier.business_name, object_reference=supplier.code)
        return Response(status=status.HTTP_204_NO_CONTENT)
