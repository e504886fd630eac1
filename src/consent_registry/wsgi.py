"""WSGI config for consent_registry project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "consent_registry.settings")

application = get_wsgi_application()
