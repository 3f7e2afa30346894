from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from core.events import EventPublisher
from doctors.models import Doctor
from lab.models import TestTemplate
from patients.views import PatientViewSet

User = get_user_model()


class RecordingPublisher(EventPublisher):
    def __init__(self):
        self.events = []

    def publish(self, event, payload):
        self.events.append((event, payload))

    def names(self):
        return [name for name, _ in self.events]


@pytest.fixture(autouse=True)
def events(monkeypatch):
    publisher = RecordingPublisher()
    monkeypatch.setattr(PatientViewSet, 'event_publisher', publisher)
    return publisher


@pytest.fixture
def api_client():
    return APIClient()


def _user(username, role):
    return User.objects.create_user(username=username, password='Str0ng-pass!', role=role, full_name=username.title())


@pytest.fixture
def admin_user(db):
    return _user('admin', User.Role.ADMIN)


@pytest.fixture
def receptionist(db):
    return _user('reception', User.Role.JUNIOR_RECEPTIONIST)


@pytest.fixture
def senior_receptionist(db):
    return _user('senior', User.Role.SENIOR_RECEPTIONIST)


@pytest.fixture
def lab_tech(db):
    return _user('tech', User.Role.JUNIOR_LAB_TECH)


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture
def reception_client(receptionist):
    client = APIClient()
    client.force_authenticate(user=receptionist)
    return client


@pytest.fixture
def lab_client(lab_tech):
    client = APIClient()
    client.force_authenticate(user=lab_tech)
    return client


@pytest.fixture
def make_template(db):
    counter = {'code': 1000}

    def make(name, price, test_type='routine', **extra):
        counter['code'] += 1
        defaults = {
            'test_code': counter['code'],
            'category': 'Haematology',
            'specimen': 'Blood',
            'performed': 'Daily',
            'reported': 'Same day',
            'result_fields': [{'fieldName': 'Result', 'fieldType': 'string', 'defaultValue': '', 'unit': '', 'range': ''}],
        }
        defaults.update(extra)
        return TestTemplate.objects.create(
            test_name=name, test_price=Decimal(str(price)), test_type=test_type, **defaults
        )

    return make


@pytest.fixture
def doctor(db):
    return Doctor.objects.create(
        name='Dr. Ayesha Khan',
        clinic_name='City Clinic',
        routine_percentage=Decimal('20.00'),
        special_percentage=Decimal('10.00'),
    )
