from rest_framework import viewsets, filters, permissions

from core.permissions import IsLabStaff, IsAdminRole
from .models import Doctor
from .serializers import DoctorSerializer


class DoctorViewSet(viewsets.ModelViewSet):
    """
    Referring doctors. Any staff member can look doctors up at registration;
    only admins change them or their commission rates.
    """
    queryset = Doctor.objects.all().order_by('name')
    serializer_class = DoctorSerializer
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name', 'clinic_name', 'specialty']
    ordering_fields = ['name', 'created_at']
    pagination_class = None

    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            return [IsLabStaff()]
        return [IsAdminRole()]
