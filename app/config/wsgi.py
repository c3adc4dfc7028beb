"""
WSGI config for the Django application.

The service is primarily served over ASGI (see config.asgi). Under WSGI the
async webhook view still works; Django runs it in an event loop per request,
so slow webhook handlers occupy a worker for their full duration.

This file exposes the WSGI callable as a module-level variable named `application`.

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/wsgi/
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
