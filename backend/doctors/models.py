from decimal import Decimal
from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from core.models import BaseModel


class Doctor(BaseModel):
    name = models.CharField(max_length=255)

    clinic_name = models.CharField(max_length=255, blank=True, default='')
    phone = models.CharField(max_length=20, blank=True, default='')
    email = models.CharField(max_length=255, blank=True, default='')
    address = models.TextField(blank=True, default='')
    specialty = models.CharField(max_length=255, blank=True, default='')
    cnic = models.CharField(max_length=30, blank=True, default='')
    notes = models.TextField(blank=True, default='')

    # Commission percentages, set by the lab admin
    routine_percentage = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    special_percentage = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(0), MaxValueValidator(100)]
    )

    def __str__(self):
        return self.name

    def commission_snapshot(self):
        """Current rates, frozen onto a patient at registration time."""
        return {
            'routine': float(self.routine_percentage or 0),
            'special': float(self.special_percentage or 0),
        }
