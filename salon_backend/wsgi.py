"""
WSGI config for the salon_backend project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "salon_backend.settings")

application = get_wsgi_application()
