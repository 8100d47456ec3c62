import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from logibot.catalog.models import Product
from logibot.core.exceptions import CompanyNotApproved
from logibot.core.permissions import IsAdminRole, IsApprovedCompany
from logibot.core.utils import paginated_response
from .models import B2BOrder
from .serializers import B2BProductSerializer, B2BOrderSerializer, CheckoutSerializer, StatusChangeSerializer
from .services import checkout, change_order_status, get_b2b_summary

logger = logging.getLogger(__name__)


def _is_admin(user):
    return user.role == 'admin' or user.is_staff or user.is_superuser


@api_view(['GET'])
@permission_classes([IsApprovedCompany])
def b2b_product_list(request):
    """Products available to order: in stock and enabled for B2B"""
    queryset = Product.objects.select_related('category').filter(is_active=True, b2b_enabled=True, stock__gt=0)
    category = request.query_params.get('category', None)
    if category:
        queryset = queryset.filter(category_id=category)
    search = request.query_params.get('search', None)
    if search:
        queryset = queryset.filter(name__icontains=search)
    queryset = queryset.order_by('category__code', 'name')
    return Response(B2BProductSerializer(queryset, many=True, context={'request': request}).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def b2b_order_list_create(request):
    """A company's own orders (all orders for admins), or checkout of a cart"""
    user = request.user
    if request.method == 'GET':
        queryset = B2BOrder.objects.select_related('company').prefetch_related('items').all()
        if not _is_admin(user):
            profile = getattr(user, 'company_profile', None)
            if profile is None or not profile.is_approved:
                raise CompanyNotApproved()
            queryset = queryset.filter(company=profile)
        else:
            company = request.query_params.get('company', None)
            if company:
                queryset = queryset.filter(company_id=company)
        order_status = request.query_params.get('status', None)
        if order_status:
            queryset = queryset.filter(status=order_status)
        return paginated_response(request, queryset.order_by('-created_at'), B2BOrderSerializer)
    else:
        profile = getattr(user, 'company_profile', None)
        if profile is None or not profile.is_approved:
            raise CompanyNotApproved()
        serializer = CheckoutSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        order = checkout(profile, serializer.validated_data['items'], user=user,
                         notes=serializer.validated_data['notes'], request=request)
        return Response(B2BOrderSerializer(order).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def b2b_order_detail(request, pk):
    order = get_object_or_404(B2BOrder.objects.select_related('company'), pk=pk)
    if not _is_admin(request.user) and order.company.user_id != request.user.id:
        return Response({'detail': 'Not found.'}, status=status.HTTP_404_NOT_FOUND)
    return Response(B2BOrderSerializer(order).data)


@api_view(['POST'])
@permission_classes([IsAdminRole])
def b2b_order_status(request, pk):
    """Confirm, ship, deliver or cancel a B2B order"""
    order = get_object_or_404(B2BOrder.objects.select_related('company'), pk=pk)
    serializer = StatusChangeSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    change_order_status(order, serializer.validated_data['status'], user=request.user, request=request)
    return Response(B2BOrderSerializer(order).data)


@api_view(['GET'])
@permission_classes([IsAdminRole])
def b2b_summary(request):
    """Order counts, revenue and low stock for the B2B dashboard"""
    return Response(get_b2b_summary())
