from rest_framework import serializers
from logibot.catalog.models import Product
from .models import StockMovement


class StockMovementSerializer(serializers.ModelSerializer):
    product_code = serializers.CharField(source='product.code', read_only=True)
    product_name = serializers.CharField(source='product.name', read_only=True)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = StockMovement
        fields = ['id', 'product', 'product_code', 'product_name', 'movement_type', 'quantity',
                  'stock_before', 'stock_after', 'reason', 'reference', 'created_by',
                  'created_by_username', 'created_at']
        read_only_fields = fields


class StockAdjustmentSerializer(serializers.Serializer):
    """
    Manual stock change.

    For ``in`` and ``out`` the quantity is the amount moved. For ``adjust`` it is
    the counted stock on hand, and the difference is recorded.
    """
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all())
    movement_type = serializers.ChoiceField(choices=StockMovement.MOVEMENT_TYPE_CHOICES)
    quantity = serializers.IntegerField(min_value=0)
    reason = serializers.CharField(max_length=255, allow_blank=True, required=False, default='')
    reference = serializers.CharField(max_length=100, allow_blank=True, required=False, default='')

    def validate(self, attrs):
        if attrs['movement_type'] in ('in', 'out') and attrs['quantity'] < 1:
            raise serializers.ValidationError({'quantity': 'Quantity must be at least 1'})
        if attrs['movement_type'] == 'adjust' and not attrs.get('reason', '').strip():
            raise serializers.ValidationError({'reason': 'A reason is required for stock adjustments'})
        return attrs


class AutoReorderSerializer(serializers.Serializer):
    product_ids = serializers.ListField(child=serializers.IntegerField(), required=False, allow_empty=True)
    supplier = serializers.IntegerField(required=False, allow_null=True)
