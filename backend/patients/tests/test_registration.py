from datetime import timedelta
from decimal import Decimal

import pytest
from django.urls import reverse

from doctors.models import Doctor
from patients.models import Patient, PatientTest
from reports.repository import PatientRepository

pytestmark = pytest.mark.django_db


@pytest.fixture
def catalog(make_template):
    return {
        'cbc': make_template('CBC', 500),
        'mri': make_template('MRI Brain', 3000, test_type='special'),
        'ecg': make_template('ECG', 400, is_diagnostic_test=True, result_fields=[]),
    }


def registration(tests, **extra):
    payload = {
        'name': 'Ahmed Raza',
        'age': 42,
        'gender': 'Male',
        'phone': '03001234567',
        'patient_registered_by': 'Reception',
        'selected_tests': [{'test_id': str(t.id)} for t in tests],
    }
    payload.update(extra)
    return payload


def register(client, tests, **extra):
    return client.post(reverse('patient-list'), registration(tests, **extra), format='json')


class TestRegistration:

    def test_prices_come_from_catalog(self, reception_client, catalog, events):
        payload = registration([catalog['cbc'], catalog['mri']])
        payload['selected_tests'][0]['price'] = 1

        response = reception_client.post(reverse('patient-list'), payload, format='json')

        assert response.status_code == 201
        data = response.json()
        assert [(t['test_name'], t['price'], t['test_type']) for t in data['tests']] == [
            ('CBC', '500.00', 'routine'), ('MRI Brain', '3000.00', 'special'),
        ]
        assert data['total'] == '3500.00'
        assert data['net_total'] == '3500.00'
        assert data['due_amount'] == '3500.00'
        assert data['referenced_by'] == 'Self'
        assert data['doctor_commission_snapshot'] == {'routine': 0.0, 'special': 0.0}
        assert events.names() == ['patientRegistered']

    def test_reference_and_case_numbers(self, reception_client, catalog):
        first = register(reception_client, [catalog['cbc']]).json()
        second = register(reception_client, [catalog['cbc']]).json()

        assert first['ref_no'] == '100001'
        assert second['ref_no'] == '100002'
        assert first['case_no'].endswith('-001')
        assert second['case_no'].endswith('-002')

    def test_snapshot_is_frozen_at_registration(self, reception_client, catalog, doctor):
        response = register(reception_client, [catalog['cbc']], referenced_by=doctor.name)
        patient = Patient.objects.get(pk=response.json()['id'])

        Doctor.objects.filter(pk=doctor.pk).update(routine_percentage=Decimal('50.00'))
        patient.refresh_from_db()

        assert patient.doctor_commission_snapshot == {'routine': 20.0, 'special': 10.0}

    def test_unknown_doctor_earns_nothing(self, reception_client, catalog):
        response = register(reception_client, [catalog['cbc']], referenced_by='Dr. Nobody')

        assert response.json()['doctor_commission_snapshot'] == {'routine': 0.0, 'special': 0.0}

    def test_discount_amount_derives_percentage(self, reception_client, catalog):
        response = register(reception_client, [catalog['cbc'], catalog['mri']], discount_amount='350', paid_amount='1000')

        data = response.json()
        assert data['discount_percentage'] == '10.00'
        assert data['net_total'] == '3150.00'
        assert data['due_amount'] == '2150.00'

    def test_requires_a_test(self, reception_client):
        response = reception_client.post(reverse('patient-list'), registration([]), format='json')

        assert response.status_code == 400
        assert 'selected_tests' in response.json()

    def test_rejects_unknown_gender(self, reception_client, catalog):
        response = register(reception_client, [catalog['cbc']], gender='Robot')

        assert response.status_code == 400
        assert 'gender' in response.json()

    def test_requires_login(self, api_client, catalog):
        response = register(api_client, [catalog['cbc']])

        assert response.status_code == 401


class TestPatientChanges:

    @pytest.fixture
    def patient(self, reception_client, catalog, doctor):
        response = register(reception_client, [catalog['cbc'], catalog['mri']], referenced_by=doctor.name, discount_amount='500')
        return Patient.objects.get(pk=response.json()['id'])

    def test_changing_referrer_recaptures_snapshot(self, reception_client, patient):
        Doctor.objects.create(name='Dr. Saleem', routine_percentage=Decimal('30'), special_percentage=Decimal('25'))

        response = reception_client.patch(
            reverse('patient-detail', args=[patient.id]), {'referenced_by': 'Dr. Saleem'}, format='json'
        )

        assert response.status_code == 200
        assert response.json()['doctor_commission_snapshot'] == {'routine': 30.0, 'special': 25.0}

    def test_discount_percentage_derives_amount(self, reception_client, patient):
        response = reception_client.patch(
            reverse('patient-detail', args=[patient.id]), {'discount_percentage': '20'}, format='json'
        )

        data = response.json()
        assert data['discount_amount'] == '700.00'
        assert data['net_total'] == '2800.00'

    def test_payment_update(self, reception_client, patient, events):
        response = reception_client.patch(
            reverse('patient-payment', args=[patient.id]),
            {'payment_status': 'Partially Paid', 'payment_status_updated_by': 'Cashier', 'paid_amount': '1000'},
            format='json'
        )

        assert response.status_code == 200
        updated = response.json()['updatedPatient']
        assert updated['payment_status'] == 'Partially Paid'
        assert updated['due_amount'] == '2000.00'
        assert events.events[-1] == (
            'paymentUpdated',
            {'patientId': str(patient.id), 'patientName': patient.name, 'paymentStatus': 'Partially Paid'},
        )

    def test_payment_needs_updater(self, reception_client, patient):
        response = reception_client.patch(
            reverse('patient-payment', args=[patient.id]), {'payment_status': 'Paid'}, format='json'
        )

        assert response.status_code == 400
        assert 'payment_status_updated_by' in response.json()

    def test_payment_status_is_closed_set(self, reception_client, patient):
        response = reception_client.patch(
            reverse('patient-payment', args=[patient.id]),
            {'payment_status': 'Maybe', 'payment_status_updated_by': 'Cashier'}, format='json'
        )

        assert response.status_code == 400

    def test_remove_test_rebalances(self, reception_client, patient, catalog, events):
        response = reception_client.delete(
            reverse('patient-remove-test', args=[patient.id, catalog['mri'].id])
        )

        assert response.status_code == 200
        data = response.json()['patient']
        assert [t['test_name'] for t in data['tests']] == ['CBC']
        assert data['total'] == '500.00'
        assert data['discount_amount'] == '500.00'
        assert data['net_total'] == '0.00'
        assert data['due_amount'] == '0.00'
        assert events.names()[-1] == 'testDeleted'

    def test_remove_unknown_test_is_404(self, reception_client, patient, make_template):
        other = make_template('Lipid Profile', 900)

        response = reception_client.delete(reverse('patient-remove-test', args=[patient.id, other.id]))

        assert response.status_code == 404

    def test_delete_needs_senior_role(self, reception_client, patient):
        response = reception_client.delete(reverse('patient-detail', args=[patient.id]))

        assert response.status_code == 403

    def test_delete_publishes_event(self, admin_client, patient, events):
        response = admin_client.delete(reverse('patient-detail', args=[patient.id]))

        assert response.status_code == 204
        assert not Patient.objects.filter(pk=patient.pk).exists()
        assert events.events[-1] == ('patientDeleted', {'patientId': str(patient.id), 'patientName': patient.name})

    def test_delete_removes_patient_from_reports(self, admin_client, patient):
        window = (patient.created_at - timedelta(days=1), patient.created_at + timedelta(days=1))
        assert PatientRepository().find_referred(*window)

        admin_client.delete(reverse('patient-detail', args=[patient.id]))

        assert not PatientTest.objects.filter(patient_id=patient.pk).exists()
        assert PatientRepository().find_referred(*window) == []

    def test_search_by_name(self, reception_client, patient):
        response = reception_client.get(reverse('patient-search'), {'q': 'ahmed'})

        assert [p['name'] for p in response.json()] == ['Ahmed Raza']
        assert reception_client.get(reverse('patient-search'), {'q': ''}).json() == []
