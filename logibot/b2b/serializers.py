from rest_framework import serializers
from logibot.catalog.models import Product
from .models import B2BOrder, B2BOrderItem


class B2BProductSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)

    class Meta:
        model = Product
        fields = ['id', 'code', 'name', 'category', 'category_name', 'description', 'price', 'stock', 'image']
        read_only_fields = fields


class B2BOrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = B2BOrderItem
        fields = ['id', 'product', 'product_code', 'product_name', 'quantity', 'unit_price', 'subtotal']
        read_only_fields = fields


class B2BOrderSerializer(serializers.ModelSerializer):
    items = B2BOrderItemSerializer(many=True, read_only=True)
    company_name = serializers.CharField(source='company.company_name', read_only=True)
    status_label = serializers.CharField(read_only=True)

    class Meta:
        model = B2BOrder
        fields = ['id', 'order_number', 'company', 'company_name', 'status', 'status_label', 'total_amount',
                  'notes', 'items', 'shipped_at', 'delivered_at', 'created_at', 'updated_at']
        read_only_fields = fields


class CartItemSerializer(serializers.Serializer):
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.filter(is_active=True, b2b_enabled=True))
    quantity = serializers.IntegerField(min_value=1)


class CheckoutSerializer(serializers.Serializer):
    items = CartItemSerializer(many=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError('Cart is empty')
        return value


class StatusChangeSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=B2BOrder.STATUS_CHOICES)
