from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import (
    TestTemplateViewSet, LabInfoView, InventoryItemViewSet, InventoryTransactionViewSet
)

router = DefaultRouter()
router.register(r'tests', TestTemplateViewSet)
router.register(r'inventory/items', InventoryItemViewSet)
router.register(r'inventory/transactions', InventoryTransactionViewSet)

urlpatterns = [
    path('info/', LabInfoView.as_view(), name='lab-info'),
    path('', include(router.urls)),
]
