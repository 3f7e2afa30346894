import logging
from datetime import timezone as dt_timezone

from rest_framework import viewsets, permissions, filters, status, mixins
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView
from django.db.models import Q, CharField
from django.db.models.functions import Cast
from django.utils import timezone
from dateutil import parser as date_parser

from core.permissions import IsLabStaff, IsAdminRole, HasRole
from .models import TestTemplate, LabInfo, InventoryItem, InventoryTransaction
from .serializers import (
    TestTemplateSerializer, TestTemplateSearchSerializer, LabInfoSerializer,
    InventoryItemSerializer, InventoryTransactionSerializer, StockMovementSerializer
)
from . import inventory

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 20

CanManageInventory = HasRole('SENIOR_RECEPTIONIST')


class TestTemplateViewSet(viewsets.ModelViewSet):
    queryset = TestTemplate.objects.all().order_by('test_code')
    serializer_class = TestTemplateSerializer
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['test_name', 'category']
    ordering_fields = ['test_code', 'test_name', 'test_price']
    pagination_class = None

    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            return [IsLabStaff()]
        return [IsAdminRole()]

    def perform_create(self, serializer):
        template = serializer.save()
        logger.info(f"Test created: {template.test_name} ({template.test_code})")

    @action(detail=False, methods=['get'])
    def search(self, request):
        """
        Match name or category partially; numeric queries also match the code,
        exactly or as a substring ("110" finds 1101).
        """
        q = (request.query_params.get('q') or '').strip()
        if not q:
            return Response([])

        conditions = Q(test_name__icontains=q) | Q(category__icontains=q)
        qs = TestTemplate.objects.all()
        if q.isdigit():
            qs = qs.annotate(code_text=Cast('test_code', output_field=CharField()))
            conditions |= Q(test_code=int(q)) | Q(code_text__contains=q)

        tests = qs.filter(conditions).order_by('test_code')[:SEARCH_LIMIT]
        return Response(TestTemplateSearchSerializer(tests, many=True).data)


class LabInfoView(APIView):
    """
    The lab's letterhead details. There is only ever one row.
    """

    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            return [IsLabStaff()]
        return [IsAdminRole()]

    def get(self, request):
        lab_info = LabInfo.objects.order_by('created_at').first()
        if lab_info is None:
            return Response({})
        return Response(LabInfoSerializer(lab_info).data)

    def put(self, request):
        lab_info = LabInfo.objects.order_by('created_at').first()
        serializer = LabInfoSerializer(lab_info, data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        if lab_info is None:
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.data)

    post = put


class InventoryItemViewSet(viewsets.ModelViewSet):
    queryset = InventoryItem.objects.all().order_by('-created_at')
    serializer_class = InventoryItemSerializer
    permission_classes = [CanManageInventory]
    filter_backends = [filters.SearchFilter]
    search_fields = ['item_code', 'item_name']
    pagination_class = None

    def destroy(self, request, *args, **kwargs):
        item = self.get_object()
        if item.transactions.exists():
            return Response(
                {'error': 'Cannot delete item with existing transactions'},
                status=status.HTTP_400_BAD_REQUEST
            )
        item.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['get'])
    def stock(self, request):
        return Response({'stockLevels': inventory.stock_levels()})

    @action(detail=False, methods=['get'], url_path='stock-levels-with-totals')
    def stock_levels_with_totals(self, request):
        return Response({'stockLevels': inventory.stock_levels(with_totals=True)})


class InventoryTransactionViewSet(mixins.ListModelMixin,
                                  mixins.RetrieveModelMixin,
                                  mixins.DestroyModelMixin,
                                  viewsets.GenericViewSet):
    """
    The stock ledger. Rows are appended through add/remove only.
    """
    queryset = InventoryTransaction.objects.select_related('item').order_by('-date', '-created_at')
    serializer_class = InventoryTransactionSerializer
    permission_classes = [CanManageInventory]
    pagination_class = None

    def _move_stock(self, request, transaction_type):
        serializer = StockMovementSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            entry = inventory.record_transaction(
                item=data['item'],
                transaction_type=transaction_type,
                quantity=data['quantity'],
                date=data.get('date') or timezone.now(),
                remarks=data.get('remarks', ''),
            )
        except inventory.InsufficientStock as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(self.get_serializer(entry).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['post'])
    def add(self, request):
        return self._move_stock(request, InventoryTransaction.TransactionType.ADDITION)

    @action(detail=False, methods=['post'])
    def remove(self, request):
        return self._move_stock(request, InventoryTransaction.TransactionType.REMOVAL)

    @action(detail=False, methods=['get'])
    def report(self, request):
        qs = InventoryTransaction.objects.select_related('item').order_by('date', 'created_at')
        start_date = request.query_params.get('startDate')
        end_date = request.query_params.get('endDate')
        if start_date and end_date:
            try:
                start = date_parser.isoparse(start_date)
                end = date_parser.isoparse(end_date)
            except ValueError:
                return Response({'error': 'startDate and endDate must be ISO dates'}, status=status.HTTP_400_BAD_REQUEST)
            if timezone.is_naive(start):
                start = timezone.make_aware(start, dt_timezone.utc)
            if timezone.is_naive(end):
                end = timezone.make_aware(end, dt_timezone.utc)
            qs = qs.filter(date__gte=start, date__lte=end)
        return Response(self.get_serializer(qs, many=True).data)

    @action(detail=False, methods=['get'], url_path='daily-summary')
    def daily_summary(self, request):
        return Response({'dailySummary': inventory.daily_summary()})
