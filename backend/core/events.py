"""
Real-time event publishing.

Views that announce state changes receive an ``EventPublisher`` explicitly
through their ``event_publisher`` attribute instead of reaching for a global
socket handle. The default publisher pushes to every connected socket.io
client; tests swap in a recording publisher.
"""
import logging

from asgiref.sync import async_to_sync

logger = logging.getLogger(__name__)


class EventPublisher:
    def publish(self, event, payload):
        raise NotImplementedError


class NullEventPublisher(EventPublisher):
    def publish(self, event, payload):
        logger.debug(f"Dropping event {event}: {payload}")


class SocketIOEventPublisher(EventPublisher):
    def __init__(self, server):
        self.server = server

    def publish(self, event, payload):
        # Emission is best effort: the state change is already saved.
        try:
            async_to_sync(self.server.emit)(event, payload)
        except Exception as e:
            logger.warning(f"Socket emit error for {event}: {e}")


def default_event_publisher():
    from labcms.sio import sio
    return SocketIOEventPublisher(sio)


class EventPublishingMixin:
    """
    Gives a view an injectable ``event_publisher``.
    """
    event_publisher = None

    def get_event_publisher(self):
        if self.event_publisher is None:
            self.event_publisher = default_event_publisher()
        return self.event_publisher

    def publish_event(self, event, payload):
        self.get_event_publisher().publish(event, payload)
