"""
Doctor commission engine.

A patient's stored discount is turned into one percentage and applied to every
ordered test; the doctor's commission is then taken from each discounted test
amount using the rates frozen on the patient at registration.

Everything here is a pure function of a ``PatientBillingSnapshot``: no database
access, no side effects.
"""
import math
from dataclasses import dataclass, field
from typing import Optional

ROUTINE = 'routine'
SPECIAL = 'special'


def round2(value):
    """
    Round to 2 decimal places, halves away from zero.

    The half is judged on the float product ``value * 100``, so 1.005
    (100.49999999999999 cents) becomes 1.0 while 33.335 becomes 33.34.
    """
    value = float(value)
    return math.copysign(math.floor(abs(value) * 100 + 0.5), value) / 100


def _number(value):
    return float(value) if value is not None else 0.0


@dataclass(frozen=True)
class BilledTest:
    test_id: Optional[str]
    test_name: str
    test_type: Optional[str]
    price: Optional[float]


@dataclass(frozen=True)
class PatientBillingSnapshot:
    total: Optional[float]
    discount_amount: Optional[float]
    doctor_commission_snapshot: Optional[dict]
    tests: tuple = ()
    referenced_by: str = ''
    created_at: object = None


@dataclass(frozen=True)
class PerTestShare:
    test_id: Optional[str]
    test_name: str
    test_type: str
    original_price: float
    final_test_amount: float
    commission_percent: float
    doctor_share: float


@dataclass(frozen=True)
class PatientShareResult:
    tests: list = field(default_factory=list)
    total_billing: float = 0.0
    total_doctor_share: float = 0.0

    @property
    def lab_revenue(self):
        return round2(self.total_billing - self.total_doctor_share)


def normalize_test_type(test_type):
    """Anything that is not exactly "special" is commissioned as routine."""
    return SPECIAL if test_type == SPECIAL else ROUTINE


def commission_percent_for(snapshot, test_type):
    snapshot = snapshot or {}
    key = SPECIAL if test_type == SPECIAL else ROUTINE
    return _number(snapshot.get(key))


def compute_patient_share(patient: PatientBillingSnapshot) -> PatientShareResult:
    total = _number(patient.total)
    if total == 0:
        return PatientShareResult(tests=[], total_billing=0.0, total_doctor_share=0.0)

    # Always derived from the absolute amount; a stored percentage may disagree
    discount_percent = (_number(patient.discount_amount) / total) * 100

    shares = []
    for test in patient.tests or ():
        original_price = _number(test.price)
        discounted_amount = original_price - (original_price * discount_percent / 100)
        final_test_amount = round2(discounted_amount)

        test_type = normalize_test_type(test.test_type)
        commission_percent = commission_percent_for(patient.doctor_commission_snapshot, test_type)
        doctor_share = round2(final_test_amount * commission_percent / 100)

        shares.append(PerTestShare(
            test_id=test.test_id,
            test_name=test.test_name,
            test_type=test_type,
            original_price=original_price,
            final_test_amount=final_test_amount,
            commission_percent=commission_percent,
            doctor_share=doctor_share,
        ))

    # Totals are rounded once, from the already rounded per-test values
    return PatientShareResult(
        tests=shares,
        total_billing=round2(sum(s.final_test_amount for s in shares)),
        total_doctor_share=round2(sum(s.doctor_share for s in shares)),
    )
