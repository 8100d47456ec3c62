from decimal import Decimal

from rest_framework import serializers
from .models import Category, Product


class CategorySerializer(serializers.ModelSerializer):
    product_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ['id', 'code', 'name', 'description', 'product_count', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_code(self, value):
        value = value.strip().upper()
        if not value:
            raise serializers.ValidationError("Category code is required")
        return value

    def get_product_count(self, obj):
        if hasattr(obj, 'annotated_product_count'):
            return obj.annotated_product_count
        return obj.products.count()


class ProductSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    category_code = serializers.CharField(source='category.code', read_only=True, default=None)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'code', 'name', 'category', 'category_name', 'category_code', 'description',
                  'price', 'stock', 'safety_stock', 'is_low_stock', 'image', 'b2b_enabled', 'is_active',
                  'created_at', 'updated_at']
        read_only_fields = ['image', 'created_at', 'updated_at']

    def validate_code(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Product code is required")
        return value

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Price cannot be negative")
        return value

    def validate_stock(self, value):
        if value < 0:
            raise serializers.ValidationError("Stock cannot be negative")
        return value

    def validate_safety_stock(self, value):
        if value < 0:
            raise serializers.ValidationError("Safety stock cannot be negative")
        return value

    def create(self, validated_data):
        from logibot.inventory.services import stock_in

        initial_stock = validated_data.pop('stock', 0)
        product = Product.objects.create(stock=0, **validated_data)
        if initial_stock > 0:
            request = self.context.get('request')
            stock_in(
                product,
                initial_stock,
                reason='initial stock',
                reference=product.code,
                user=request.user if request else None,
                request=request,
            )
        return product

    def update(self, instance, validated_data):
        # Stock only changes through stock movements
        validated_data.pop('stock', None)
        return super().update(instance, validated_data)


class ProductImageSerializer(serializers.ModelSerializer):
    image = serializers.ImageField()

    class Meta:
        model = Product
        fields = ['id', 'image']


class LineItemInputSerializer(serializers.Serializer):
    """
    One requested line on an order-like document.

    Either ``product`` or ``product_name`` must be given. Code, name and unit
    price default to the product's values.
    """
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all(), required=False, allow_null=True)
    product_code = serializers.CharField(max_length=50, required=False, allow_blank=True)
    product_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    quantity = serializers.IntegerField(min_value=1)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'), required=False)

    def validate(self, attrs):
        product = attrs.get('product')
        if product is None:
            if not attrs.get('product_name', '').strip():
                raise serializers.ValidationError("Each item needs a product or a product name")
            if 'unit_price' not in attrs:
                raise serializers.ValidationError("Unit price is required for items without a product")
        return {
            'product': product,
            'product_code': attrs.get('product_code') or (product.code if product else ''),
            'product_name': (attrs.get('product_name') or '').strip() or product.name,
            'quantity': attrs['quantity'],
            'unit_price': attrs['unit_price'] if 'unit_price' in attrs else product.price,
        }


def validate_line_items(items_data, require_product=False):
    """Validate raw item dicts, returning cleaned values or raising ValidationError"""
    if not items_data:
        raise serializers.ValidationError({'items': 'At least one item is required'})
    serializer = LineItemInputSerializer(data=items_data, many=True)
    if not serializer.is_valid():
        raise serializers.ValidationError({'items': serializer.errors})
    lines = serializer.validated_data
    if require_product and any(line['product'] is None for line in lines):
        raise serializers.ValidationError({'items': 'Every item must reference a product'})
    return lines
