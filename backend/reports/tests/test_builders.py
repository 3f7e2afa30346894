from datetime import datetime, timezone

import pytest

from reports.builders import (
    ReportFilters, MissingReportParameters, InvalidReportDate,
    build_doctor_statement, build_doctor_test_breakdown, build_lab_referral_summary
)
from reports.commission import BilledTest, PatientBillingSnapshot, round2


class FakeRepository:
    """Filters like the real repository, over an in-memory list."""

    def __init__(self, patients):
        self.patients = patients
        self.calls = []

    def find_referred(self, start, end, doctor_name=None, exclude_self=False):
        self.calls.append({'doctor_name': doctor_name, 'exclude_self': exclude_self})
        rows = [p for p in self.patients if start <= p.created_at <= end]
        if doctor_name:
            rows = [p for p in rows if p.referenced_by == doctor_name]
        if exclude_self:
            rows = [p for p in rows if p.referenced_by != 'Self']
        return rows


def at(day, hour=10):
    return datetime(2024, 1, day, hour, tzinfo=timezone.utc)


def snapshot(referenced_by, tests, discount=0, rates=(20, 10), created_at=None):
    return PatientBillingSnapshot(
        total=sum(price for _, price, _ in tests),
        discount_amount=discount,
        doctor_commission_snapshot={'routine': rates[0], 'special': rates[1]},
        tests=tuple(BilledTest(test_id=None, test_name=n, test_type=t, price=p) for n, p, t in tests),
        referenced_by=referenced_by,
        created_at=created_at or at(10),
    )


def filters(doctor='Dr. Khan', start='2024-01-01', end='2024-01-31'):
    params = {'startDate': start, 'endDate': end}
    if doctor:
        params['doctorName'] = doctor
    return ReportFilters.from_query_params(params, require_doctor=doctor is not None)


class TestReportFilters:

    def test_end_date_covers_the_whole_day(self):
        f = filters(start='2024-01-01', end='2024-01-31')

        assert f.start == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert f.end == datetime(2024, 1, 31, 23, 59, 59, 999000, tzinfo=timezone.utc)

    def test_missing_doctor_is_reported(self):
        with pytest.raises(MissingReportParameters) as exc:
            ReportFilters.from_query_params({'startDate': '2024-01-01', 'endDate': '2024-01-02'})

        assert exc.value.missing == ['doctorName']
        assert str(exc.value) == "doctorName, startDate, and endDate are required"

    def test_dates_only_needed_for_referral_summary(self):
        with pytest.raises(MissingReportParameters) as exc:
            ReportFilters.from_query_params({'startDate': '2024-01-01'}, require_doctor=False)

        assert exc.value.missing == ['endDate']
        assert str(exc.value) == "startDate and endDate are required"

    def test_rejects_garbage_dates(self):
        with pytest.raises(InvalidReportDate):
            ReportFilters.from_query_params({'doctorName': 'X', 'startDate': 'yesterday', 'endDate': '2024-01-02'})


class TestDoctorStatement:

    def test_counts_and_totals(self):
        repo = FakeRepository([
            snapshot('Dr. Khan', [('CBC', 500, 'routine'), ('MRI', 500, 'special')], discount=100),
            snapshot('Dr. Khan', [('CBC', 300, 'routine')]),
            snapshot('Dr. Ali', [('CBC', 999, 'routine')]),
        ])

        data = build_doctor_statement(filters(), repo)

        assert data == {
            'doctorName': 'Dr. Khan',
            'startDate': '2024-01-01',
            'endDate': '2024-01-31',
            'totalRoutineTests': 2,
            'totalSpecialTests': 1,
            'totalBilling': 1200.0,
            'totalDoctorShare': 195.0,
            'labRevenue': 1005.0,
        }

    def test_patients_outside_window_are_ignored(self):
        repo = FakeRepository([
            snapshot('Dr. Khan', [('CBC', 500, 'routine')], created_at=at(31, hour=23)),
            snapshot('Dr. Khan', [('CBC', 500, 'routine')], created_at=datetime(2024, 2, 1, tzinfo=timezone.utc)),
        ])

        data = build_doctor_statement(filters(), repo)

        assert data['totalRoutineTests'] == 1
        assert data['totalBilling'] == 500.0

    def test_no_patients(self):
        data = build_doctor_statement(filters(), FakeRepository([]))

        assert data['totalBilling'] == 0
        assert data['labRevenue'] == 0

    def test_same_input_same_output(self):
        repo = FakeRepository([snapshot('Dr. Khan', [('CBC', 123.45, 'routine')], discount=3.21)])

        assert build_doctor_statement(filters(), repo) == build_doctor_statement(filters(), repo)


class TestDoctorTestBreakdown:

    def test_same_test_name_merges_across_patients(self):
        repo = FakeRepository([
            snapshot('Dr. Khan', [('CBC', 500, 'routine')]),
            snapshot('Dr. Khan', [('CBC', 800, 'routine'), ('MRI', 1000, 'special')]),
        ])

        data = build_doctor_test_breakdown(filters(), repo)

        assert data['breakdown'] == [
            {'testName': 'CBC', 'testType': 'routine', 'timesReferred': 2, 'totalFinalAmount': 1300.0, 'totalCommission': 260.0},
            {'testName': 'MRI', 'testType': 'special', 'timesReferred': 1, 'totalFinalAmount': 1000.0, 'totalCommission': 100.0},
        ]
        assert data['totalBilling'] == 2300.0
        assert data['totalDoctorShare'] == 360.0
        assert data['labRevenue'] == 1940.0

    def test_grand_totals_come_from_rounded_rows(self):
        repo = FakeRepository([
            snapshot('Dr. Khan', [('A', 66.67, 'routine')], rates=(50, 0)),
            snapshot('Dr. Khan', [('B', 66.67, 'routine')], rates=(50, 0)),
        ])

        data = build_doctor_test_breakdown(filters(), repo)

        assert [r['totalCommission'] for r in data['breakdown']] == [33.34, 33.34]
        assert data['totalDoctorShare'] == 66.68


class TestLabReferralSummary:

    def test_self_referrals_are_never_fetched(self):
        repo = FakeRepository([
            snapshot('Self', [('CBC', 1000, 'routine')]),
            snapshot('Dr. Khan', [('CBC', 500, 'routine')]),
        ])

        data = build_lab_referral_summary(filters(doctor=None), repo)

        assert repo.calls == [{'doctor_name': None, 'exclude_self': True}]
        assert [r['doctorName'] for r in data['summary']] == ['Dr. Khan']
        assert data['grandTotalBilling'] == 500.0

    def test_groups_by_doctor(self):
        repo = FakeRepository([
            snapshot('Dr. Khan', [('CBC', 500, 'routine')]),
            snapshot('Dr. Ali', [('MRI', 1000, 'special')], rates=(30, 15)),
            snapshot('Dr. Khan', [('LFT', 250, 'routine')], discount=50),
        ])

        data = build_lab_referral_summary(filters(doctor=None), repo)

        assert data['summary'] == [
            {'doctorName': 'Dr. Khan', 'totalBilling': 700.0, 'totalDoctorShare': 140.0, 'totalPatients': 2, 'labRevenue': 560.0},
            {'doctorName': 'Dr. Ali', 'totalBilling': 1000.0, 'totalDoctorShare': 150.0, 'totalPatients': 1, 'labRevenue': 850.0},
        ]
        assert data['grandTotalBilling'] == 1700.0
        assert data['grandTotalDoctorShare'] == 290.0
        assert data['grandLabRevenue'] == 1410.0

    def test_doctor_name_narrows_to_one_doctor(self):
        repo = FakeRepository([
            snapshot('Dr. Khan', [('CBC', 500, 'routine')]),
            snapshot('Dr. Ali', [('CBC', 500, 'routine')]),
        ])

        data = build_lab_referral_summary(filters(doctor='Dr. Ali'), repo)

        assert [r['doctorName'] for r in data['summary']] == ['Dr. Ali']

    def test_self_by_name_is_still_excluded(self):
        repo = FakeRepository([snapshot('Self', [('CBC', 1000, 'routine')])])

        data = build_lab_referral_summary(filters(doctor='Self'), repo)

        assert repo.calls == [{'doctor_name': 'Self', 'exclude_self': True}]
        assert data['summary'] == []
        assert data['grandTotalBilling'] == 0
        assert data['grandLabRevenue'] == 0

    def test_lab_revenue_identity_at_every_level(self):
        repo = FakeRepository([
            snapshot('Dr. Khan', [('A', 333.33, 'routine'), ('B', 129.99, 'special')], discount=17.5),
            snapshot('Dr. Ali', [('C', 77.77, 'routine')], discount=7.77, rates=(12.5, 7.5)),
            snapshot('Dr. Ali', [('D', 1010.1, 'special')], discount=1.01, rates=(12.5, 7.5)),
        ])

        data = build_lab_referral_summary(filters(doctor=None), repo)

        for row in data['summary']:
            assert row['labRevenue'] == round2(row['totalBilling'] - row['totalDoctorShare'])
        assert data['grandLabRevenue'] == round2(data['grandTotalBilling'] - data['grandTotalDoctorShare'])
