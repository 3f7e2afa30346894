from django.contrib import admin
from .models import TestTemplate, LabInfo, InventoryItem, InventoryTransaction


@admin.register(TestTemplate)
class TestTemplateAdmin(admin.ModelAdmin):
    list_display = ('test_code', 'test_name', 'category', 'test_type', 'test_price')
    list_filter = ('category', 'test_type', 'is_diagnostic_test')
    search_fields = ('test_name', 'category')


@admin.register(LabInfo)
class LabInfoAdmin(admin.ModelAdmin):
    list_display = ('lab_name', 'phone_number', 'email')


class InventoryTransactionInline(admin.TabularInline):
    model = InventoryTransaction
    extra = 0


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ('item_code', 'item_name')
    search_fields = ('item_code', 'item_name')
    inlines = [InventoryTransactionInline]


@admin.register(InventoryTransaction)
class InventoryTransactionAdmin(admin.ModelAdmin):
    list_display = ('item_name', 'transaction_type', 'quantity', 'date')
    list_filter = ('transaction_type',)
