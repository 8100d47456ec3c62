import uuid

from rest_framework import serializers
from logibot.core.serializers import BUSINESS_NUMBER_RE
from .models import Supplier


class SupplierSerializer(serializers.ModelSerializer):
    code = serializers.CharField(max_length=50, required=False, allow_blank=True)
    business_number = serializers.RegexField(
        BUSINESS_NUMBER_RE, required=False, allow_blank=True,
        error_messages={'invalid': 'Business number must look like 123-45-67890'}
    )

    class Meta:
        model = Supplier
        fields = ['id', 'code', 'business_name', 'business_number', 'partner_type', 'contact_person',
                  'contact_phone', 'address', 'bank_account', 'invoice_email', 'logistics_manager',
                  'sales_rep', 'payment_method', 'payment_date', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_code(self, value):
        value = value.strip().upper()
        if not value:
            return value
        queryset = Supplier.objects.filter(code=value)
        if self.instance:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError("A partner with this code already exists")
        return value

    def create(self, validated_data):
        if not validated_data.get('code'):
            code = f"VND-{str(uuid.uuid4())[:8].upper()}"
            while Supplier.objects.filter(code=code).exists():
                code = f"VND-{str(uuid.uuid4())[:8].upper()}"
            validated_data['code'] = code
        return super().create(validated_data)

    def update(self, instance, validated_data):
        if 'code' in validated_data and not validated_data['code']:
            validated_data.pop('code')
        return super().update(instance, validated_data)
