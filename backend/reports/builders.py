"""
Commission report builders.

Each builder fetches the referred patients for a date window, runs every
patient through ``compute_patient_share`` and groups the results: per doctor
statement, per test name breakdown, and per doctor referral summary.
"""
from dataclasses import dataclass
from datetime import datetime, time, timezone as dt_timezone
from typing import Optional

from dateutil import parser as date_parser

from .commission import SPECIAL, compute_patient_share, round2
from .repository import PatientRepository


END_OF_DAY = time(23, 59, 59, 999000, tzinfo=dt_timezone.utc)


class ReportParameterError(Exception):
    """Query parameters that make a report impossible to build."""


class MissingReportParameters(ReportParameterError):
    def __init__(self, missing, message):
        self.missing = list(missing)
        super().__init__(message)


class InvalidReportDate(ReportParameterError):
    pass


def _parse_date(name, value):
    try:
        return date_parser.isoparse(value)
    except (ValueError, OverflowError):
        raise InvalidReportDate(f"{name} must be an ISO date (YYYY-MM-DD)")


@dataclass(frozen=True)
class ReportFilters:
    start_date: str
    end_date: str
    start: datetime
    end: datetime
    doctor_name: Optional[str] = None

    @classmethod
    def from_query_params(cls, params, require_doctor=True):
        """
        Validate ``doctorName``/``startDate``/``endDate``. The window starts at
        ``startDate`` and runs to the last millisecond of ``endDate`` (UTC).
        """
        doctor_name = (params.get('doctorName') or '').strip() or None
        start_date = (params.get('startDate') or '').strip()
        end_date = (params.get('endDate') or '').strip()

        if require_doctor:
            missing = [n for n, v in (('doctorName', doctor_name), ('startDate', start_date), ('endDate', end_date)) if not v]
            if missing:
                raise MissingReportParameters(missing, "doctorName, startDate, and endDate are required")
        else:
            missing = [n for n, v in (('startDate', start_date), ('endDate', end_date)) if not v]
            if missing:
                raise MissingReportParameters(missing, "startDate and endDate are required")

        start = _parse_date('startDate', start_date)
        if start.tzinfo is None:
            start = start.replace(tzinfo=dt_timezone.utc)
        end = datetime.combine(_parse_date('endDate', end_date).date(), END_OF_DAY)

        return cls(start_date=start_date, end_date=end_date, start=start, end=end, doctor_name=doctor_name)


def _fetch(filters, repository, exclude_self=False):
    repository = repository or PatientRepository()
    return repository.find_referred(
        filters.start, filters.end,
        doctor_name=filters.doctor_name,
        exclude_self=exclude_self,
    )


def build_doctor_statement(filters, repository=None):
    patients = _fetch(filters, repository)

    routine_tests = 0
    special_tests = 0
    total_billing = 0.0
    total_doctor_share = 0.0
    for patient in patients:
        share = compute_patient_share(patient)
        for test in share.tests:
            if test.test_type == SPECIAL:
                special_tests += 1
            else:
                routine_tests += 1
        total_billing += share.total_billing
        total_doctor_share += share.total_doctor_share

    total_billing = round2(total_billing)
    total_doctor_share = round2(total_doctor_share)
    return {
        'doctorName': filters.doctor_name,
        'startDate': filters.start_date,
        'endDate': filters.end_date,
        'totalRoutineTests': routine_tests,
        'totalSpecialTests': special_tests,
        'totalBilling': total_billing,
        'totalDoctorShare': total_doctor_share,
        'labRevenue': round2(total_billing - total_doctor_share),
    }


def build_doctor_test_breakdown(filters, repository=None):
    patients = _fetch(filters, repository)

    # Keyed by name: the same test ordered for different patients is one row
    rows = {}
    for patient in patients:
        for test in compute_patient_share(patient).tests:
            row = rows.get(test.test_name)
            if row is None:
                row = rows[test.test_name] = {
                    'testName': test.test_name,
                    'testType': test.test_type,
                    'timesReferred': 0,
                    'totalFinalAmount': 0.0,
                    'totalCommission': 0.0,
                }
            row['timesReferred'] += 1
            row['totalFinalAmount'] += test.final_test_amount
            row['totalCommission'] += test.doctor_share

    breakdown = [
        {**row, 'totalFinalAmount': round2(row['totalFinalAmount']), 'totalCommission': round2(row['totalCommission'])}
        for row in rows.values()
    ]
    total_billing = round2(sum(r['totalFinalAmount'] for r in breakdown))
    total_doctor_share = round2(sum(r['totalCommission'] for r in breakdown))
    return {
        'doctorName': filters.doctor_name,
        'startDate': filters.start_date,
        'endDate': filters.end_date,
        'breakdown': breakdown,
        'totalBilling': total_billing,
        'totalDoctorShare': total_doctor_share,
        'labRevenue': round2(total_billing - total_doctor_share),
    }


def build_lab_referral_summary(filters, repository=None):
    # Self referrals are never fetched
    patients = _fetch(filters, repository, exclude_self=True)

    doctors = {}
    for patient in patients:
        name = patient.referenced_by
        row = doctors.get(name)
        if row is None:
            row = doctors[name] = {'doctorName': name, 'totalBilling': 0.0, 'totalDoctorShare': 0.0, 'totalPatients': 0}
        share = compute_patient_share(patient)
        row['totalBilling'] += share.total_billing
        row['totalDoctorShare'] += share.total_doctor_share
        row['totalPatients'] += 1

    summary = []
    for row in doctors.values():
        billing = round2(row['totalBilling'])
        doctor_share = round2(row['totalDoctorShare'])
        summary.append({
            **row,
            'totalBilling': billing,
            'totalDoctorShare': doctor_share,
            'labRevenue': round2(billing - doctor_share),
        })

    grand_billing = round2(sum(r['totalBilling'] for r in summary))
    grand_doctor_share = round2(sum(r['totalDoctorShare'] for r in summary))
    return {
        'startDate': filters.start_date,
        'endDate': filters.end_date,
        'summary': summary,
        'grandTotalBilling': grand_billing,
        'grandTotalDoctorShare': grand_doctor_share,
        'grandLabRevenue': round2(grand_billing - grand_doctor_share),
    }
