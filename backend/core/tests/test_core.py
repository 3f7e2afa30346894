from io import StringIO

import pytest
from asgiref.sync import async_to_sync
from django.core.management import call_command

from core.events import SocketIOEventPublisher, EventPublishingMixin
from core.models import RefCounter
from labcms import sio as labcms_sio
from patients.models import Patient


@pytest.mark.django_db
class TestRefCounter:

    def test_starts_after_start_value(self):
        assert RefCounter.next_value('patient_ref', start=100000) == 100001
        assert RefCounter.next_value('patient_ref', start=100000) == 100002

    def test_sequences_are_independent(self):
        RefCounter.next_value('a')
        RefCounter.next_value('a')

        assert RefCounter.next_value('b') == 1


class FailingServer:
    async def emit(self, event, payload):
        raise ConnectionError("no transport")


class RecordingServer:
    def __init__(self):
        self.emitted = []

    async def emit(self, event, payload):
        self.emitted.append((event, payload))


class TestEvents:

    def test_socketio_publisher_emits(self):
        server = RecordingServer()

        SocketIOEventPublisher(server).publish('patientRegistered', {'patientId': '1'})

        assert server.emitted == [('patientRegistered', {'patientId': '1'})]

    def test_emit_failure_does_not_propagate(self):
        SocketIOEventPublisher(FailingServer()).publish('patientDeleted', {})

    def test_publisher_is_injected(self, events):
        class View(EventPublishingMixin):
            pass

        view = View()
        view.event_publisher = events
        view.publish_event('resultReset', {'patientId': '9'})

        assert events.events == [('resultReset', {'patientId': '9'})]


@pytest.mark.django_db
class TestFlushData:

    def test_keeps_catalog_and_restarts_sequences(self, make_template):
        template = make_template('CBC', 500)
        Patient.objects.create(ref_no='100001', case_no='20240101-001', name='A', age=1, gender='Male', phone='1')
        RefCounter.next_value('patient_ref', start=100000)

        out = StringIO()
        call_command('flush_data', stdout=out)

        assert not Patient.objects.exists()
        assert not RefCounter.objects.exists()
        assert type(template).objects.filter(pk=template.pk).exists()
        assert 'Successfully flushed' in out.getvalue()


class TestSocketRooms:

    @pytest.fixture
    def entered(self, monkeypatch):
        calls = []

        async def enter_room(sid, room):
            calls.append((sid, room))

        monkeypatch.setattr(labcms_sio.sio, 'enter_room', enter_room)
        return calls

    @pytest.mark.parametrize('room', ['reception', 'results', 'patient:42'])
    def test_known_rooms_are_joined(self, entered, room):
        assert async_to_sync(labcms_sio.join_room)('sid-1', room) is True
        assert entered == [('sid-1', room)]

    @pytest.mark.parametrize('room', ['admin', '', None, ['reception']])
    def test_unknown_rooms_are_refused(self, entered, room):
        assert async_to_sync(labcms_sio.join_room)('sid-1', room) is False
        assert entered == []

    def test_wildcard_origin_is_passed_as_string(self, settings):
        settings.SOCKETIO_CORS_ORIGINS = ['*']
        assert labcms_sio.allowed_origins() == '*'

        settings.SOCKETIO_CORS_ORIGINS = ['https://lab.example.com']
        assert labcms_sio.allowed_origins() == ['https://lab.example.com']
