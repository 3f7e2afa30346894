from django.contrib import admin
from .models import Patient, PatientTest, PatientResult


class PatientTestInline(admin.TabularInline):
    model = PatientTest
    extra = 0


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('ref_no', 'case_no', 'name', 'phone', 'referenced_by', 'net_total', 'payment_status', 'result_status', 'created_at')
    search_fields = ('name', 'phone', 'ref_no', 'case_no')
    list_filter = ('payment_status', 'result_status', 'gender')
    inlines = [PatientTestInline]


@admin.register(PatientResult)
class PatientResultAdmin(admin.ModelAdmin):
    list_display = ('patient', 'test_name', 'updated_at')
    search_fields = ('patient__name', 'test_name')
