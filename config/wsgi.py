"""WSGI entrypoint; production deployments point DJANGO_SETTINGS_MODULE at config.settings.prod."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

application = get_wsgi_application()
