import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from dateutil import parser as date_parser

from core.permissions import HasRole
from .models import DailyExpense
from .serializers import DailyExpenseSerializer

logger = logging.getLogger(__name__)


class DailyExpenseViewSet(viewsets.ModelViewSet):
    queryset = DailyExpense.objects.all().order_by('-date', '-created_at')
    serializer_class = DailyExpenseSerializer
    permission_classes = [HasRole('SENIOR_RECEPTIONIST')]
    pagination_class = None

    def get_queryset(self):
        queryset = DailyExpense.objects.all().order_by('-date', '-created_at')

        month = self.request.query_params.get('month')
        year = self.request.query_params.get('year')
        if month and year and month.isdigit() and year.isdigit():
            queryset = queryset.filter(date__month=int(month), date__year=int(year))

        return queryset

    def perform_create(self, serializer):
        expense = serializer.save()
        logger.info(f"Expense recorded: {expense.description} {expense.amount} on {expense.date}")

    @action(detail=False, methods=['get'], url_path='date-range')
    def date_range(self, request):
        """
        Expenses between startDate and endDate (inclusive). Without both
        dates every expense is returned.
        """
        queryset = DailyExpense.objects.all().order_by('-date', '-created_at')
        start_date = request.query_params.get('startDate')
        end_date = request.query_params.get('endDate')
        if start_date and end_date:
            try:
                start = date_parser.isoparse(start_date).date()
                end = date_parser.isoparse(end_date).date()
            except ValueError:
                return Response({'error': 'startDate and endDate must be ISO dates'}, status=status.HTTP_400_BAD_REQUEST)
            queryset = queryset.filter(date__gte=start, date__lte=end)
        return Response(self.get_serializer(queryset, many=True).data)
