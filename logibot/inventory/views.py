import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from logibot.catalog.models import Product
from logibot.core.utils import paginated_response
from logibot.purchasing.serializers import PurchaseOrderSerializer
from .models import StockMovement
from .reorder import auto_reorder, get_supplier_or_none
from .serializers import StockMovementSerializer, StockAdjustmentSerializer, AutoReorderSerializer
from .services import apply_stock_movement, stock_count, get_stock_alerts, get_reorder_predictions

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stock_movement_list(request):
    """List stock movements with product, type and date filters"""
    queryset = StockMovement.objects.select_related('product', 'created_by').all()

    product = request.query_params.get('product', None)
    if product:
        queryset = queryset.filter(product_id=product)
    movement_type = request.query_params.get('type', None)
    if movement_type:
        queryset = queryset.filter(movement_type=movement_type)
    date_from = request.query_params.get('date_from', None)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    date_to = request.query_params.get('date_to', None)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    return paginated_response(request, queryset.order_by('-created_at', '-id'), StockMovementSerializer)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_timeline(request, pk):
    """Movement history of one product, newest first"""
    product = get_object_or_404(Product, pk=pk)
    movements = product.stock_movements.select_related('created_by').order_by('-created_at', '-id')
    return Response({
        'product_id': product.id,
        'code': product.code,
        'name': product.name,
        'stock': product.stock,
        'safety_stock': product.safety_stock,
        'movements': StockMovementSerializer(movements, many=True).data,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def stock_adjustment(request):
    """Manual stock in, stock out or counted adjustment"""
    serializer = StockAdjustmentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    product = data['product']
    movement_type = data['movement_type']
    if movement_type == 'adjust':
        movement = stock_count(product, data['quantity'], reason=data['reason'], reference=data['reference'],
                               user=request.user, request=request)
    else:
        delta = data['quantity'] if movement_type == 'in' else -data['quantity']
        movement = apply_stock_movement(
            product, delta, movement_type,
            reason=data['reason'], reference=data['reference'],
            user=request.user, request=request,
        )
    return Response(StockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stock_alerts(request):
    """Products below safety stock with recommended order quantities"""
    alerts = get_stock_alerts()
    return Response({
        'results': alerts,
        'count': len(alerts),
        'total_cost': sum((alert['total_cost'] for alert in alerts), 0),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def reorder_predictions(request):
    """Products expected to reach safety stock within 30 days"""
    predictions = get_reorder_predictions()
    return Response({'results': predictions, 'count': len(predictions)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def stock_auto_reorder(request):
    """Create pending purchase orders for low stock products"""
    serializer = AutoReorderSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    supplier_id = serializer.validated_data.get('supplier')
    supplier = get_supplier_or_none(supplier_id)
    if supplier_id is not None and supplier is None:
        return Response({'supplier': f'Supplier {supplier_id} does not exist'}, status=status.HTTP_400_BAD_REQUEST)

    orders, skipped = auto_reorder(
        product_ids=serializer.validated_data.get('product_ids'),
        supplier=supplier,
        user=request.user,
        request=request,
    )
    if not orders and skipped:
        return Response(
            {'detail': 'No supplier is known for the selected products. Specify a supplier.',
             'skipped_products': skipped},
            status=status.HTTP_400_BAD_REQUEST
        )
    return Response({
        'orders': PurchaseOrderSerializer(orders, many=True).data,
        'count': len(orders),
        'skipped_products': skipped,
    }, status=status.HTTP_201_CREATED if orders else status.HTTP_200_OK)
