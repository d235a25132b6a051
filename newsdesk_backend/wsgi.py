"""
WSGI config for newsdesk_backend project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'newsdesk_backend.settings')

application = get_wsgi_application()
