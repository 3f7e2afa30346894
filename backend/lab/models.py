from django.db import models
from django.core.validators import MinValueValidator
from core.models import BaseModel


class TestType(models.TextChoices):
    ROUTINE = 'routine', 'Routine'
    SPECIAL = 'special', 'Special'


class TestTemplate(BaseModel):
    """
    A catalog entry: what a test costs, how it is commissioned and which
    result fields the technician fills in.
    """
    test_code = models.PositiveIntegerField(unique=True)
    test_name = models.CharField(max_length=255, unique=True)
    test_price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    category = models.CharField(max_length=100)
    specimen = models.CharField(max_length=100)
    performed = models.CharField(max_length=255)
    reported = models.CharField(max_length=255)
    test_type = models.CharField(max_length=10, choices=TestType.choices, default=TestType.ROUTINE)

    # [{"fieldName": "Hb", "fieldType": "string", "defaultValue": "", "unit": "g/dl", "range": "12-16", "category": ""}]
    result_fields = models.JSONField(default=list, blank=True)

    # Diagnostic tests (ECG, X-Ray, ...) have no result fields to enter
    is_diagnostic_test = models.BooleanField(default=False)
    report_extras = models.JSONField(default=dict, blank=True)
    scale_config = models.JSONField(default=dict, blank=True)
    visual_scale = models.JSONField(default=dict, blank=True)

    def __str__(self):
        return f"{self.test_name} ({self.category})"


class LabInfo(BaseModel):
    lab_name = models.CharField(max_length=255)
    phone_number = models.CharField(max_length=30)
    email = models.CharField(max_length=255)
    address = models.TextField(blank=True, default='')
    logo_url = models.URLField(max_length=500, blank=True, default='')
    website = models.CharField(max_length=255, blank=True, default='')
    description = models.TextField(blank=True, default='')

    def __str__(self):
        return self.lab_name


class InventoryItem(BaseModel):
    item_code = models.CharField(max_length=50, unique=True)
    item_name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')

    def __str__(self):
        return f"{self.item_code} - {self.item_name}"


class InventoryTransaction(BaseModel):
    class TransactionType(models.TextChoices):
        ADDITION = 'addition', 'Addition'
        REMOVAL = 'removal', 'Removal'

    date = models.DateTimeField()
    item = models.ForeignKey(InventoryItem, on_delete=models.PROTECT, related_name='transactions')
    # Copy of the name at the time of the transaction
    item_name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField()
    transaction_type = models.CharField(max_length=10, choices=TransactionType.choices)
    remarks = models.TextField(blank=True, default='')

    def __str__(self):
        return f"{self.item_name} - {self.transaction_type} - {self.quantity}"
