from django.db import models
from django.core.validators import MinValueValidator
from core.models import BaseModel


class DailyExpense(BaseModel):
    date = models.DateField()
    description = models.CharField(max_length=500)
    amount = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])

    def __str__(self):
        return f"{self.date} - {self.description}: {self.amount}"
