"""
ASGI config for labcms project.

It exposes the ASGI callable as a module-level variable named ``application``.
The Django app is wrapped by the Socket.IO server so both share one port.
"""

import os

from django.core.asgi import get_asgi_application
import socketio

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'labcms.settings')

django_asgi_app = get_asgi_application()

from .sio import sio  # noqa: E402

application = socketio.ASGIApp(sio, django_asgi_app)
