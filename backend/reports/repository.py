from django.conf import settings

from patients.models import Patient
from .commission import PatientBillingSnapshot, BilledTest


class PatientRepository:
    """
    Read-only access to referred patients for the commission reports.
    """

    def referred_queryset(self, start, end, doctor_name=None, exclude_self=False):
        """
        Patients created in ``[start, end]``, oldest first.

        ``doctor_name`` narrows to one referrer. ``exclude_self`` drops self
        referrals at the query level, even when ``doctor_name`` names them.
        """
        qs = Patient.objects.filter(created_at__gte=start, created_at__lte=end)
        if doctor_name:
            qs = qs.filter(referenced_by=doctor_name)
        if exclude_self:
            qs = qs.exclude(referenced_by=settings.SELF_REFERRAL_LABEL)
        return qs.order_by('created_at', 'id')

    def find_referred(self, start, end, doctor_name=None, exclude_self=False):
        qs = self.referred_queryset(start, end, doctor_name=doctor_name, exclude_self=exclude_self)
        return [to_snapshot(p) for p in qs.prefetch_related('tests')]


def to_snapshot(patient):
    return PatientBillingSnapshot(
        total=_as_float(patient.total),
        discount_amount=_as_float(patient.discount_amount),
        doctor_commission_snapshot=patient.doctor_commission_snapshot or {},
        tests=tuple(
            BilledTest(
                test_id=str(t.test_id) if t.test_id else None,
                test_name=t.test_name,
                test_type=t.test_type,
                price=_as_float(t.price),
            )
            for t in patient.tests.all()
        ),
        referenced_by=patient.referenced_by,
        created_at=patient.created_at,
    )


def _as_float(value):
    return float(value) if value is not None else None
