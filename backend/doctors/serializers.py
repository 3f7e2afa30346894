from rest_framework import serializers
from .models import Doctor


class DoctorSerializer(serializers.ModelSerializer):
    doctor_id = serializers.UUIDField(source='id', read_only=True)

    class Meta:
        model = Doctor
        fields = [
            'id', 'doctor_id', 'name', 'clinic_name', 'phone', 'email', 'address',
            'specialty', 'cnic', 'notes', 'routine_percentage', 'special_percentage',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'doctor_id', 'created_at', 'updated_at']

    def validate_name(self, value):
        cleaned = value.strip()
        if not cleaned:
            raise serializers.ValidationError("Doctor name is required")
        return cleaned
