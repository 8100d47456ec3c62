from rest_framework import serializers
from logibot.catalog.serializers import validate_line_items
from .models import Purchase, PurchaseItem, PurchaseOrder, PurchaseOrderItem
from .services import create_purchase, create_purchase_order, replace_purchase_order_items


class PurchaseItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = PurchaseItem
        fields = ['id', 'product', 'product_code', 'product_name', 'quantity', 'unit_price', 'subtotal']
        read_only_fields = fields


class PurchaseSerializer(serializers.ModelSerializer):
    items = PurchaseItemSerializer(many=True, read_only=True)
    supplier_name = serializers.CharField(source='supplier.business_name', read_only=True)
    total_amount = serializers.SerializerMethodField()
    purchase_date = serializers.DateField(required=False)

    class Meta:
        model = Purchase
        fields = ['id', 'purchase_number', 'supplier', 'supplier_name', 'purchase_order', 'purchase_date',
                  'status', 'notes', 'items', 'total_amount', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['purchase_number', 'status', 'created_by', 'created_at', 'updated_at']

    def get_total_amount(self, obj):
        return obj.get_total()

    def validate(self, attrs):
        if self.instance is None:
            # Products are required so received goods reach stock
            attrs['lines'] = validate_line_items(self.context.get('items_data'), require_product=True)
        return attrs

    def create(self, validated_data):
        request = self.context.get('request')
        return create_purchase(
            supplier=validated_data['supplier'],
            lines=validated_data['lines'],
            user=request.user if request else None,
            purchase_date=validated_data.get('purchase_date'),
            notes=validated_data.get('notes', ''),
            purchase_order=validated_data.get('purchase_order'),
            request=request,
        )

    def update(self, instance, validated_data):
        # Items and supplier are fixed once stock has been received
        for field in ('purchase_date', 'notes'):
            if field in validated_data:
                setattr(instance, field, validated_data[field])
        instance.save()
        return instance


class PurchaseOrderItemSerializer(serializers.ModelSerializer):
    current_stock = serializers.IntegerField(source='product.stock', read_only=True, default=None)

    class Meta:
        model = PurchaseOrderItem
        fields = ['id', 'product', 'product_code', 'product_name', 'current_stock', 'quantity', 'unit_price', 'subtotal']
        read_only_fields = fields


class PurchaseOrderSerializer(serializers.ModelSerializer):
    items = PurchaseOrderItemSerializer(many=True, read_only=True)
    supplier_name = serializers.CharField(source='supplier.business_name', read_only=True)
    order_date = serializers.DateField(required=False)

    class Meta:
        model = PurchaseOrder
        fields = ['id', 'order_number', 'supplier', 'supplier_name', 'order_date', 'expected_date', 'status',
                  'is_auto_generated', 'total_amount', 'notes', 'items', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['order_number', 'status', 'is_auto_generated', 'total_amount', 'created_by',
                            'created_at', 'updated_at']

    def validate(self, attrs):
        items_data = self.context.get('items_data')
        if self.instance is None or items_data is not None:
            if self.instance is not None and self.instance.status != 'pending':
                raise serializers.ValidationError({'items': 'Items can only be changed while the order is pending'})
            attrs['lines'] = validate_line_items(items_data)
        return attrs

    def create(self, validated_data):
        request = self.context.get('request')
        return create_purchase_order(
            supplier=validated_data['supplier'],
            lines=validated_data['lines'],
            user=request.user if request else None,
            notes=validated_data.get('notes', ''),
            order_date=validated_data.get('order_date'),
            expected_date=validated_data.get('expected_date'),
            request=request,
        )

    def update(self, instance, validated_data):
        lines = validated_data.pop('lines', None)
        instance = super().update(instance, validated_data)
        if lines is not None:
            replace_purchase_order_items(instance, lines)
        return instance
