from rest_framework import serializers
from logibot.catalog.serializers import validate_line_items
from .models import (
    OutboundOrder, OutboundItem, Shipment, Quotation, QuotationItem, Invoice, InvoiceItem,
)
from . import services

LINE_FIELDS = ['id', 'product', 'product_code', 'product_name', 'quantity', 'unit_price', 'subtotal']


def _request_user(context):
    request = context.get('request')
    return request, (request.user if request else None)


class OutboundItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OutboundItem
        fields = LINE_FIELDS
        read_only_fields = fields


class OutboundOrderSerializer(serializers.ModelSerializer):
    items = OutboundItemSerializer(many=True, read_only=True)
    customer_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    outbound_date = serializers.DateField(required=False)
    destination = serializers.CharField(max_length=255, required=False, allow_blank=True, write_only=True)

    class Meta:
        model = OutboundOrder
        fields = ['id', 'outbound_number', 'customer', 'customer_name', 'outbound_date', 'tracking_number',
                  'destination', 'status', 'completed_date', 'total_amount', 'notes', 'items',
                  'created_by', 'created_at', 'updated_at']
        read_only_fields = ['outbound_number', 'status', 'completed_date', 'total_amount', 'created_by',
                            'created_at', 'updated_at']

    def validate(self, attrs):
        if self.instance is None:
            if not attrs.get('customer') and not attrs.get('customer_name', '').strip():
                raise serializers.ValidationError({'customer': 'A customer is required'})
            attrs['lines'] = validate_line_items(self.context.get('items_data'), require_product=True)
        return attrs

    def create(self, validated_data):
        request, user = _request_user(self.context)
        return services.create_outbound(
            customer_name=validated_data.get('customer_name', ''),
            lines=validated_data['lines'],
            customer=validated_data.get('customer'),
            tracking_number=validated_data.get('tracking_number', ''),
            outbound_date=validated_data.get('outbound_date'),
            notes=validated_data.get('notes', ''),
            destination=validated_data.get('destination', ''),
            user=user,
            request=request,
        )

    def update(self, instance, validated_data):
        # Items and customer are fixed once stock has left
        for field in ('outbound_date', 'notes'):
            if field in validated_data:
                setattr(instance, field, validated_data[field])
        instance.save()
        return instance


class ShipmentSerializer(serializers.ModelSerializer):
    outbound_number = serializers.CharField(source='outbound.outbound_number', read_only=True, default=None)
    item_count = serializers.IntegerField(required=False, min_value=0)

    class Meta:
        model = Shipment
        fields = ['id', 'shipment_number', 'outbound', 'outbound_number', 'customer_name', 'destination',
                  'carrier', 'tracking_number', 'item_count', 'status', 'shipped_date', 'completed_date',
                  'notes', 'created_at', 'updated_at']
        read_only_fields = ['shipment_number', 'status', 'shipped_date', 'completed_date', 'created_at',
                            'updated_at']

    def validate(self, attrs):
        if self.instance is None and not attrs.get('outbound') and not attrs.get('customer_name', '').strip():
            raise serializers.ValidationError({'customer_name': 'A customer name or outbound order is required'})
        return attrs

    def create(self, validated_data):
        return services.create_shipment(**validated_data)


class QuotationItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = QuotationItem
        fields = LINE_FIELDS
        read_only_fields = fields


class QuotationSerializer(serializers.ModelSerializer):
    items = QuotationItemSerializer(many=True, read_only=True)
    customer_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    quotation_date = serializers.DateField(required=False)
    valid_until = serializers.DateField(required=False)

    class Meta:
        model = Quotation
        fields = ['id', 'quotation_number', 'customer', 'customer_name', 'quotation_date', 'valid_until',
                  'status', 'supply_amount', 'vat_amount', 'total_amount', 'notes', 'items',
                  'created_by', 'created_at', 'updated_at']
        read_only_fields = ['quotation_number', 'supply_amount', 'vat_amount', 'total_amount', 'created_by',
                            'created_at', 'updated_at']

    def validate(self, attrs):
        items_data = self.context.get('items_data')
        if self.instance is None:
            if not attrs.get('customer') and not attrs.get('customer_name', '').strip():
                raise serializers.ValidationError({'customer_name': 'A customer is required'})
            attrs['lines'] = validate_line_items(items_data)
        elif items_data is not None:
            attrs['lines'] = validate_line_items(items_data)

        quotation_date = attrs.get('quotation_date') or getattr(self.instance, 'quotation_date', None)
        valid_until = attrs.get('valid_until')
        if quotation_date and valid_until and valid_until < quotation_date:
            raise serializers.ValidationError({'valid_until': 'Validity date cannot be before the quotation date'})
        return attrs

    def create(self, validated_data):
        request, user = _request_user(self.context)
        return services.create_quotation(
            customer_name=validated_data.get('customer_name', ''),
            lines=validated_data['lines'],
            customer=validated_data.get('customer'),
            quotation_date=validated_data.get('quotation_date'),
            valid_until=validated_data.get('valid_until'),
            notes=validated_data.get('notes', ''),
            user=user,
            request=request,
        )

    def update(self, instance, validated_data):
        lines = validated_data.pop('lines', None)
        instance = super().update(instance, validated_data)
        if lines is not None:
            services.replace_quotation_items(instance, lines)
        return instance


class InvoiceItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = InvoiceItem
        fields = LINE_FIELDS
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    items = InvoiceItemSerializer(many=True, read_only=True)
    customer_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    issue_date = serializers.DateField(required=False)
    outbound_number = serializers.CharField(source='outbound.outbound_number', read_only=True, default=None)

    class Meta:
        model = Invoice
        fields = ['id', 'invoice_number', 'customer', 'customer_name', 'customer_business_number', 'outbound',
                  'outbound_number', 'issue_date', 'supply_amount', 'tax_amount', 'total_amount',
                  'payment_received', 'payment_date', 'hometax_key', 'hometax_sent_at', 'notes', 'items',
                  'created_by', 'created_at', 'updated_at']
        read_only_fields = ['invoice_number', 'supply_amount', 'tax_amount', 'total_amount', 'payment_received',
                            'payment_date', 'hometax_key', 'hometax_sent_at', 'created_by', 'created_at',
                            'updated_at']

    def validate(self, attrs):
        items_data = self.context.get('items_data')
        if self.instance is None:
            outbound = attrs.get('outbound')
            if not outbound and not attrs.get('customer') and not attrs.get('customer_name', '').strip():
                raise serializers.ValidationError({'customer_name': 'A customer is required'})
            if items_data or not outbound:
                attrs['lines'] = validate_line_items(items_data)
        elif items_data is not None:
            if self.instance.hometax_key:
                raise serializers.ValidationError({'items': 'Items cannot change after HomeTax submission'})
            attrs['lines'] = validate_line_items(items_data)
        return attrs

    def create(self, validated_data):
        request, user = _request_user(self.context)
        return services.create_invoice(
            customer_name=validated_data.get('customer_name', ''),
            lines=validated_data.get('lines'),
            customer=validated_data.get('customer'),
            outbound=validated_data.get('outbound'),
            issue_date=validated_data.get('issue_date'),
            customer_business_number=validated_data.get('customer_business_number', ''),
            notes=validated_data.get('notes', ''),
            user=user,
            request=request,
        )

    def update(self, instance, validated_data):
        lines = validated_data.pop('lines', None)
        instance = super().update(instance, validated_data)
        if lines is not None:
            services.replace_invoice_items(instance, lines)
        return instance
