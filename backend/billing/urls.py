from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import DailyExpenseViewSet

router = DefaultRouter()
router.register(r'expenses', DailyExpenseViewSet)

urlpatterns = [
    path('', include(router.urls)),
]
