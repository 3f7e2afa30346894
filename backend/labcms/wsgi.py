"""
WSGI config for labcms project.

Real-time events need the ASGI entry point (``labcms.asgi``); this one serves
plain HTTP only.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'labcms.settings')

application = get_wsgi_application()
