"""
WSGI config for the wakacard project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'wakacard.settings')

application = get_wsgi_application()
