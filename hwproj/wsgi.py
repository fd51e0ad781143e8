"""WSGI config for hwproj project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "hwproj.settings")

application = get_wsgi_application()
