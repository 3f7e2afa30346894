import logging

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status

from core.permissions import IsAdminRole
from labcms.utils import export_to_csv
from patients.serializers import PatientSerializer
from .builders import (
    ReportFilters, ReportParameterError,
    build_doctor_statement, build_doctor_test_breakdown, build_lab_referral_summary
)
from .repository import PatientRepository

logger = logging.getLogger(__name__)


class BaseReportView(APIView):
    """
    Validates the report filters, then builds. Bad filters are a 400; anything
    that fails after that is logged and reported as a bare 500.
    """
    permission_classes = [IsAdminRole]
    report_name = None
    require_doctor = True
    repository_class = PatientRepository

    def get(self, request):
        try:
            filters = ReportFilters.from_query_params(request.query_params, require_doctor=self.require_doctor)
        except ReportParameterError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            data = self.build(filters, self.repository_class())
        except Exception:
            logger.exception(
                f"{self.report_name} failed (doctorName={filters.doctor_name!r}, "
                f"startDate={filters.start_date!r}, endDate={filters.end_date!r})"
            )
            return Response({'error': 'Server error'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        if request.query_params.get('export') == 'csv':
            table = self.csv_rows(data)
            if table is not None:
                headers, rows = table
                return export_to_csv(self.report_name, headers, rows)
        return Response(data)

    def build(self, filters, repository):
        raise NotImplementedError

    def csv_rows(self, data):
        return None


class DoctorStatementView(BaseReportView):
    report_name = 'doctor_statement'

    def build(self, filters, repository):
        return build_doctor_statement(filters, repository)

    def csv_rows(self, data):
        headers = [
            "Doctor", "Start Date", "End Date", "Routine Tests", "Special Tests",
            "Total Billing", "Doctor Share", "Lab Revenue"
        ]
        row = [
            data['doctorName'], data['startDate'], data['endDate'], data['totalRoutineTests'],
            data['totalSpecialTests'], data['totalBilling'], data['totalDoctorShare'], data['labRevenue']
        ]
        return headers, [row]


class DoctorTestBreakdownView(BaseReportView):
    report_name = 'doctor_test_breakdown'

    def build(self, filters, repository):
        return build_doctor_test_breakdown(filters, repository)

    def csv_rows(self, data):
        headers = ["Test", "Type", "Times Referred", "Final Amount", "Commission"]
        rows = [
            [r['testName'], r['testType'], r['timesReferred'], r['totalFinalAmount'], r['totalCommission']]
            for r in data['breakdown']
        ]
        rows.append(["Total", "", "", data['totalBilling'], data['totalDoctorShare']])
        return headers, rows


class LabReferralSummaryView(BaseReportView):
    report_name = 'lab_referral_summary'
    require_doctor = False

    def build(self, filters, repository):
        return build_lab_referral_summary(filters, repository)

    def csv_rows(self, data):
        headers = ["Doctor", "Patients", "Total Billing", "Doctor Share", "Lab Revenue"]
        rows = [
            [r['doctorName'], r['totalPatients'], r['totalBilling'], r['totalDoctorShare'], r['labRevenue']]
            for r in data['summary']
        ]
        rows.append([
            "Grand Total", sum(r['totalPatients'] for r in data['summary']),
            data['grandTotalBilling'], data['grandTotalDoctorShare'], data['grandLabRevenue']
        ])
        return headers, rows


class DoctorPatientsView(BaseReportView):
    """Raw patients of one doctor, oldest first, for the printable tables."""
    report_name = 'doctor_patients'

    def build(self, filters, repository):
        qs = repository.referred_queryset(filters.start, filters.end, doctor_name=filters.doctor_name)
        return {'patients': PatientSerializer(qs.prefetch_related('tests__test', 'results__test'), many=True).data}


class LabReferralPatientsView(BaseReportView):
    """Raw referred patients across all doctors, self referrals excluded."""
    report_name = 'lab_referral_patients'
    require_doctor = False

    def build(self, filters, repository):
        qs = repository.referred_queryset(filters.start, filters.end, exclude_self=True)
        return {'patients': PatientSerializer(qs.prefetch_related('tests__test', 'results__test'), many=True).data}
