from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    u_id = serializers.UUIDField(source='id', read_only=True)
    password = serializers.CharField(write_only=True, required=False)
    permissions = serializers.ListField(child=serializers.CharField(), read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'u_id', 'username', 'full_name', 'email', 'role', 'permissions',
            'is_active', 'date_joined', 'password'
        ]
        read_only_fields = ['id', 'u_id', 'date_joined', 'permissions']

    def validate_password(self, value):
        validate_password(value)
        return value
