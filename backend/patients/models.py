from decimal import Decimal, ROUND_HALF_UP
from django.db import models
from django.db.models import Sum
from django.conf import settings
from django.core.validators import MinValueValidator
from django.utils import timezone
from core.models import BaseModel, RefCounter
from lab.models import TestTemplate, TestType

ZERO = Decimal('0.00')
CENT = Decimal('0.01')


def self_referral_label():
    return settings.SELF_REFERRAL_LABEL


def next_ref_no():
    """6-digit zero padded patient reference number."""
    seq = RefCounter.next_value('patient_ref', start=settings.PATIENT_REF_START)
    return str(seq).zfill(6)


def next_case_no(day=None):
    """Daily case number, e.g. 20240115-007."""
    day = day or timezone.localdate()
    stamp = day.strftime('%Y%m%d')
    seq = RefCounter.next_value(f'patient_case_{stamp}')
    return f"{stamp}-{seq:03d}"


class Patient(BaseModel):
    class Gender(models.TextChoices):
        MALE = 'Male', 'Male'
        FEMALE = 'Female', 'Female'
        OTHER = 'Other', 'Other'

    class PaymentStatus(models.TextChoices):
        PAID = 'Paid', 'Paid'
        NOT_PAID = 'Not Paid', 'Not Paid'
        PARTIALLY_PAID = 'Partially Paid', 'Partially Paid'

    class ResultStatus(models.TextChoices):
        PENDING = 'Pending', 'Pending'
        ADDED = 'Added', 'Added'

    ref_no = models.CharField(max_length=20, unique=True)
    case_no = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=255)
    age = models.PositiveIntegerField()
    gender = models.CharField(max_length=10, choices=Gender.choices)
    phone = models.CharField(max_length=20)
    father_husband_name = models.CharField(max_length=255, blank=True, default='')
    nic_no = models.CharField(max_length=30, blank=True, default='')
    specimen = models.CharField(max_length=100, default='Taken in Lab')

    payment_status = models.CharField(max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.NOT_PAID)
    result_status = models.CharField(max_length=10, choices=ResultStatus.choices, default=ResultStatus.PENDING)

    # Referring doctor's display name, or the self-referral label
    referenced_by = models.CharField(max_length=255, default=self_referral_label, db_index=True)
    # {"routine": 20.0, "special": 10.0}: the doctor's rates when the patient registered
    doctor_commission_snapshot = models.JSONField(default=dict, blank=True)

    patient_registered_by = models.CharField(max_length=255, blank=True, default='')
    payment_status_updated_by = models.CharField(max_length=255, blank=True, default='')
    result_added_by = models.CharField(max_length=255, blank=True, null=True)
    final_report_approved_by = models.CharField(max_length=255, blank=True, null=True)

    total = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    discount_percentage = models.DecimalField(max_digits=7, decimal_places=2, default=ZERO)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    net_total = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    paid_amount = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO, validators=[MinValueValidator(0)])
    due_amount = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)

    class Meta:
        indexes = [models.Index(fields=['referenced_by', 'created_at'], name='patient_referral_created_idx')]

    def __str__(self):
        return f"{self.name} ({self.ref_no})"

    @property
    def is_self_referral(self):
        return self.referenced_by == settings.SELF_REFERRAL_LABEL

    def apply_discount(self, percentage=None, amount=None):
        """
        Set the discount from either a percentage or an absolute amount and
        derive the other one.
        """
        total = self.total or ZERO
        if amount is not None:
            self.discount_amount = Decimal(amount).quantize(CENT, ROUND_HALF_UP)
            if total > 0:
                self.discount_percentage = (self.discount_amount / total * 100).quantize(CENT, ROUND_HALF_UP)
            else:
                self.discount_percentage = ZERO
        elif percentage is not None:
            self.discount_percentage = Decimal(percentage).quantize(CENT, ROUND_HALF_UP)
            self.discount_amount = (total * self.discount_percentage / 100).quantize(CENT, ROUND_HALF_UP)

    def recalculate_totals(self):
        """
        Re-derive total from the line items and the amounts that depend on it.
        Net and due never go below zero.
        """
        self.total = self.tests.aggregate(total=Sum('price'))['total'] or ZERO
        self.refresh_balances()

    @property
    def has_pending_results(self):
        # Diagnostic tests never get entered results
        required = [t for t in self.tests.all() if not (t.test and t.test.is_diagnostic_test)]
        return len(self.results.all()) < len(required)

    def refresh_balances(self):
        self.net_total = max(ZERO, (self.total or ZERO) - (self.discount_amount or ZERO))
        self.due_amount = max(ZERO, self.net_total - (self.paid_amount or ZERO))


class PatientTest(BaseModel):
    """
    A test ordered at registration, priced from the catalog at that moment.
    """
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='tests')
    test = models.ForeignKey(TestTemplate, on_delete=models.SET_NULL, null=True, blank=True, related_name='patient_tests')
    test_name = models.CharField(max_length=255)
    test_type = models.CharField(max_length=10, choices=TestType.choices, default=TestType.ROUTINE)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['position', 'created_at']

    def __str__(self):
        return f"{self.test_name} - {self.price}"


class PatientResult(BaseModel):
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='results')
    test = models.ForeignKey(TestTemplate, on_delete=models.CASCADE, related_name='patient_results')
    test_name = models.CharField(max_length=255)
    # [{"fieldName": "Hb", "defaultValue": "13.2", "unit": "g/dl", "range": "12-16"}]
    values = models.JSONField(default=list, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['patient', 'test'], name='unique_result_per_patient_test'),
        ]

    def __str__(self):
        return f"{self.test_name} result for {self.patient.name}"

    @property
    def is_filled(self):
        return any((str(v.get('defaultValue') or '')).strip() for v in self.values or [])
