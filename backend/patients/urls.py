from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import PatientViewSet, PublicReportView

router = DefaultRouter()
router.register(r'records', PatientViewSet, basename='patient')

urlpatterns = [
    path('public-report/', PublicReportView.as_view(), name='public-report'),
    path('', include(router.urls)),
]
