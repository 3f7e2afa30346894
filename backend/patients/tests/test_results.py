import pytest
from django.urls import reverse

from patients.models import Patient

pytestmark = pytest.mark.django_db


@pytest.fixture
def cbc(make_template):
    return make_template('CBC', 800, result_fields=[
        {'fieldName': 'Hb', 'fieldType': 'string', 'defaultValue': '', 'unit': 'g/dl', 'range': '12-16'},
        {'fieldName': 'WBC', 'fieldType': 'string', 'defaultValue': '', 'unit': '/cmm', 'range': '4000-11000'},
    ])


@pytest.fixture
def ecg(make_template):
    return make_template('ECG', 600, is_diagnostic_test=True, result_fields=[])


@pytest.fixture
def patient(reception_client, cbc, ecg):
    response = reception_client.post(reverse('patient-list'), {
        'name': 'Fatima Noor', 'age': 29, 'gender': 'Female', 'phone': '03211234567',
        'selected_tests': [{'test_id': str(cbc.id)}, {'test_id': str(ecg.id)}],
    }, format='json')
    assert response.status_code == 201
    return Patient.objects.get(pk=response.json()['id'])


def result_payload(test, hb='13.1', socket_id='sock-1'):
    return {
        'tests': [{
            'test_id': str(test.id),
            'test_name': test.test_name,
            'values': [{'fieldName': 'Hb', 'defaultValue': hb, 'unit': 'g/dl', 'range': '12-16'}],
        }],
        'result_added_by': 'Tech One',
        'socket_id': socket_id,
    }


class TestResultEntry:

    def test_pending_ignores_diagnostic_tests(self, lab_client, patient, cbc):
        pending = lab_client.get(reverse('patient-pending-results')).json()
        assert [p['name'] for p in pending] == ['Fatima Noor']

        lab_client.patch(reverse('patient-save-results', args=[patient.id]), result_payload(cbc), format='json')

        assert lab_client.get(reverse('patient-pending-results')).json() == []
        added = lab_client.get(reverse('patient-added-results')).json()
        assert [p['name'] for p in added] == ['Fatima Noor']

    def test_save_publishes_with_socket_id(self, lab_client, patient, cbc, events):
        response = lab_client.patch(reverse('patient-save-results', args=[patient.id]), result_payload(cbc), format='json')

        assert response.status_code == 200
        patient.refresh_from_db()
        assert patient.result_status == 'Added'
        assert patient.result_added_by == 'Tech One'
        assert events.events[-1] == ('resultAdded', {
            'patientId': str(patient.id),
            'patientName': 'Fatima Noor',
            'resultStatus': 'Added',
            'triggeredBySocketId': 'sock-1',
        })

    def test_saving_twice_updates_in_place(self, lab_client, patient, cbc):
        url = reverse('patient-save-results', args=[patient.id])
        lab_client.patch(url, result_payload(cbc, hb='11.0'), format='json')
        lab_client.patch(url, result_payload(cbc, hb='12.5'), format='json')

        results = list(patient.results.all())
        assert len(results) == 1
        assert results[0].values[0]['defaultValue'] == '12.5'

    def test_tests_with_fields_merges_saved_values(self, lab_client, patient, cbc):
        lab_client.patch(reverse('patient-save-results', args=[patient.id]), result_payload(cbc, hb='14.2'), format='json')

        data = lab_client.get(reverse('patient-tests-with-fields', args=[patient.id])).json()

        cbc_fields = next(t['fields'] for t in data['tests'] if t['test_name'] == 'CBC')
        assert [(f['fieldName'], f['defaultValue'], f['unit']) for f in cbc_fields] == [
            ('Hb', '14.2', 'g/dl'), ('WBC', '', '/cmm'),
        ]

    def test_reset(self, lab_client, patient, cbc, events):
        lab_client.patch(reverse('patient-save-results', args=[patient.id]), result_payload(cbc), format='json')

        response = lab_client.post(reverse('patient-reset-results', args=[patient.id]))

        assert response.status_code == 200
        assert response.json()['patient']['result_status'] == 'Pending'
        assert response.json()['patient']['results'] == []
        assert events.names()[-1] == 'resultReset'

    def test_receptionist_cannot_enter_results(self, reception_client, patient, cbc):
        response = reception_client.patch(
            reverse('patient-save-results', args=[patient.id]), result_payload(cbc), format='json'
        )

        assert response.status_code == 403


class TestPublicReport:

    def lookup(self, api_client, **body):
        return api_client.post(reverse('public-report'), body, format='json')

    def test_needs_number_and_phone(self, api_client, patient):
        response = self.lookup(api_client, patientNumber=patient.ref_no)

        assert response.status_code == 400
        assert response.json()['message'] == 'Patient number and phone are required'

    def test_registration_report_hides_diagnostic_tests(self, api_client, patient):
        response = self.lookup(api_client, patientNumber=patient.ref_no, phone='03211234567', name='fatima noor')

        assert response.status_code == 200
        data = response.json()
        assert [t['testName'] for t in data['registrationReport']['tests']] == ['CBC']
        assert data['finalReport'] is None
        assert data['hasResults'] is False

    def test_final_report_after_results(self, api_client, lab_client, patient, cbc):
        lab_client.patch(reverse('patient-save-results', args=[patient.id]), result_payload(cbc), format='json')

        data = self.lookup(api_client, patientNumber=patient.ref_no, phone='03211234567').json()

        assert data['hasResults'] is True
        assert data['finalReport']['resultAddedBy'] == 'Tech One'
        assert data['finalReport']['tests'][0]['fields'][0]['defaultValue'] == '13.1'

    def test_wrong_name_is_404(self, api_client, patient):
        response = self.lookup(api_client, patientNumber=patient.ref_no, phone='03211234567', name='Someone Else')

        assert response.status_code == 404
