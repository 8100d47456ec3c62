import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Count
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from logibot.core.utils import create_audit_log, paginated_response
from .filters import ProductFilter
from .label_generator import generate_qr_code, generate_price_card, generate_label_image, png_to_data_url
from .models import Category, Product
from .serializers import CategorySerializer, ProductSerializer, ProductImageSerializer

logger = logging.getLogger(__name__)


def _image_response(request, png, filename):
    """Return a PNG, or a data URL when ``?format=base64`` is requested"""
    if request.query_params.get('format') == 'base64':
        return Response({'image': png_to_data_url(png)})
    response = HttpResponse(png, content_type='image/png')
    response['Content-Disposition'] = f'inline; filename="{filename}"'
    return response


# Category views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def category_list_create(request):
    """List all categories or create a new category"""
    if request.method == 'GET':
        queryset = Category.objects.annotate(annotated_product_count=Count('products')).order_by('code')
        serializer = CategorySerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = CategorySerializer(data=request.data)
        if serializer.is_valid():
            category = serializer.save()
            create_audit_log(request=request, action='create', model_name='Category', object_id=category.id,
                             object_name=category.name, object_reference=category.code)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def category_detail(request, pk):
    """Retrieve, update or delete a category"""
    category = get_object_or_404(Category, pk=pk)

    if request.method == 'GET':
        serializer = CategorySerializer(category)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CategorySerializer(category, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        product_count = category.products.count()
        if product_count:
            return Response(
                {'detail': f'Category {category.code} still has {product_count} product(s).'},
                status=status.HTTP_400_BAD_REQUEST
            )
        create_audit_log(request=request, action='delete', model_name='Category', object_id=category.id,
                         object_name=category.name, object_reference=category.code)
        category.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Product views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_list_create(request):
    """List products with filters and pagination, or create a product"""
    if request.method == 'GET':
        queryset = Product.objects.select_related('category').all()
        filterset = ProductFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        queryset = filterset.qs.order_by('code')

        return paginated_response(request, queryset, ProductSerializer)
    else:
        serializer = ProductSerializer(data=request.data, context={'request': request})
        if serializer.is_valid():
            product = serializer.save()
            create_audit_log(request=request, action='create', model_name='Product', object_id=product.id,
                             object_name=product.name, object_reference=product.code)
            logger.info(f"Product created: {product.code} {product.name}")
            return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    product = get_object_or_404(Product.objects.select_related('category'), pk=pk)

    if request.method == 'GET':
        serializer = ProductSerializer(product)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        old_price = product.price
        serializer = ProductSerializer(product, data=request.data, partial=request.method == 'PATCH',
                                       context={'request': request})
        if serializer.is_valid():
            product = serializer.save()
            if product.price != old_price:
                create_audit_log(
                    request=request,
                    action='price_change',
                    model_name='Product',
                    object_id=product.id,
                    object_name=product.name,
                    object_reference=product.code,
                    changes={'price': {'old': str(old_price), 'new': str(product.price)}},
                )
            return Response(ProductSerializer(product).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='Product', object_id=product.id,
                         object_name=product.name, object_reference=product.code)
        product.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_lookup(request):
    """Find a product by scanned code: exact match first, then case-insensitive"""
    code = request.query_params.get('code', '').strip()
    if not code:
        return Response({'detail': 'code is required'}, status=status.HTTP_400_BAD_REQUEST)

    product = Product.objects.select_related('category').filter(code=code).first()
    if product is None:
        product = Product.objects.select_related('category').filter(code__iexact=code).first()
    if product is None:
        logger.info(f"Scan lookup found no product for code {code}")
        return Response({'detail': f'No product found for code {code}'}, status=status.HTTP_404_NOT_FOUND)

    create_audit_log(request=request, action='barcode_scan', model_name='Product', object_id=product.id,
                     object_name=product.name, object_reference=product.code)
    return Response(ProductSerializer(product).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def product_image_upload(request, pk):
    """Upload or replace a product image"""
    product = get_object_or_404(Product, pk=pk)
    serializer = ProductImageSerializer(product, data=request.data)
    if serializer.is_valid():
        if product.image:
            product.image.delete(save=False)
        serializer.save()
        return Response(ProductSerializer(product).data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_qr_code(request, pk):
    """QR code identifying the product"""
    product = get_object_or_404(Product, pk=pk)
    return _image_response(request, generate_qr_code(product.code, product.name), f"{product.code}_qr.png")


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_price_card(request, pk):
    """Printable shelf price card"""
    product = get_object_or_404(Product, pk=pk)
    barcode_value = request.query_params.get('barcode', '').strip() or product.code
    png = generate_price_card(product.name, product.code, product.price, barcode_value)
    return _image_response(request, png, f"{product.code}_price_card.png")


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_label(request, pk):
    """Code128 barcode label of the product code"""
    product = get_object_or_404(Product, pk=pk)
    return _image_response(request, generate_label_image(product.name, product.code), f"{product.code}_label.png")
