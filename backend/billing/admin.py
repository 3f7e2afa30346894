from django.contrib import admin
from .models import DailyExpense


@admin.register(DailyExpense)
class DailyExpenseAdmin(admin.ModelAdmin):
    list_display = ('date', 'description', 'amount')
    list_filter = ('date',)
    search_fields = ('description',)
