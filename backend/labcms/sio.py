import logging

import socketio
from django.conf import settings

logger = logging.getLogger(__name__)

# Screens that follow live patient and result changes
ROOMS = ('reception', 'results', 'reports')


def allowed_origins():
    origins = settings.SOCKETIO_CORS_ORIGINS
    return '*' if origins == ['*'] else origins


def is_known_room(room):
    return isinstance(room, str) and (room in ROOMS or room.startswith('patient:'))


sio = socketio.AsyncServer(async_mode='asgi', cors_allowed_origins=allowed_origins())


@sio.event
async def connect(sid, environ):
    logger.info(f"Socket client connected: {sid}")


@sio.event
async def disconnect(sid):
    logger.info(f"Socket client disconnected: {sid}")


@sio.event
async def join_room(sid, room):
    """Returns the acknowledgement sent back to the client."""
    if not is_known_room(room):
        logger.warning(f"Socket {sid} asked for unknown room {room!r}")
        return False
    await sio.enter_room(sid, room)
    logger.debug(f"Socket {sid} joined {room}")
    return True


@sio.event
async def leave_room(sid, room):
    if not is_known_room(room):
        return False
    await sio.leave_room(sid, room)
    return True
