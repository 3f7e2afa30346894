from django.db.models import Q
from rest_framework import serializers
from .models import TestTemplate, LabInfo, InventoryItem, InventoryTransaction


class TemplateFieldSerializer(serializers.Serializer):
    fieldName = serializers.CharField()
    fieldType = serializers.CharField(required=False, default='string')
    defaultValue = serializers.CharField(required=False, allow_blank=True, default='')
    unit = serializers.CharField(required=False, allow_blank=True, default='')
    range = serializers.CharField(required=False, allow_blank=True, default='')
    category = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)


class TestTemplateSerializer(serializers.ModelSerializer):
    result_fields = serializers.ListField(child=TemplateFieldSerializer(), required=False)

    class Meta:
        model = TestTemplate
        fields = [
            'id', 'test_code', 'test_name', 'test_price', 'category', 'specimen', 'performed',
            'reported', 'test_type', 'result_fields', 'is_diagnostic_test', 'report_extras',
            'scale_config', 'visual_scale', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        # Uniqueness is checked together in validate() to give one message
        extra_kwargs = {
            'test_code': {'validators': []},
            'test_name': {'validators': []},
        }

    def validate(self, attrs):
        name = attrs.get('test_name')
        code = attrs.get('test_code')
        clash = Q()
        if name is not None:
            clash |= Q(test_name=name)
        if code is not None:
            clash |= Q(test_code=code)
        if clash:
            existing = TestTemplate.objects.filter(clash)
            if self.instance is not None:
                existing = existing.exclude(pk=self.instance.pk)
            if existing.exists():
                raise serializers.ValidationError({'message': 'Test already exists'})
        return attrs


class TestTemplateSearchSerializer(serializers.ModelSerializer):
    class Meta:
        model = TestTemplate
        fields = ['id', 'test_code', 'test_name', 'test_price', 'category', 'test_type']


class LabInfoSerializer(serializers.ModelSerializer):
    class Meta:
        model = LabInfo
        fields = [
            'id', 'lab_name', 'phone_number', 'email', 'address', 'logo_url',
            'website', 'description', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']


class InventoryItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = InventoryItem
        fields = ['id', 'item_code', 'item_name', 'description', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {'item_code': {'validators': []}}

    def validate_item_code(self, value):
        existing = InventoryItem.objects.filter(item_code=value)
        if self.instance is not None:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise serializers.ValidationError("Item ID already exists")
        return value


class InventoryTransactionSerializer(serializers.ModelSerializer):
    item_code = serializers.CharField(source='item.item_code', read_only=True)

    class Meta:
        model = InventoryTransaction
        fields = [
            'id', 'date', 'item', 'item_code', 'item_name', 'quantity',
            'transaction_type', 'remarks', 'created_at'
        ]
        read_only_fields = fields


class StockMovementSerializer(serializers.Serializer):
    """Input for add/remove stock."""
    item = serializers.PrimaryKeyRelatedField(queryset=InventoryItem.objects.all())
    quantity = serializers.IntegerField(min_value=1)
    date = serializers.DateTimeField(required=False)
    remarks = serializers.CharField(required=False, allow_blank=True, default='')
