from django.contrib import admin
from .models import Doctor


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ('name', 'clinic_name', 'routine_percentage', 'special_percentage')
    search_fields = ('name', 'clinic_name')
