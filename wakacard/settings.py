"""
Django settings for the wakacard project.

Values that differ between deployments are read from the environment.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'insecure-development-key')

DEBUG = os.environ.get('DJANGO_DEBUG', '0').lower() in ('1', 'true', 'yes')

ALLOWED_HOSTS = [h.strip() for h in os.environ.get('DJANGO_ALLOWED_HOSTS', '*').split(',') if h.strip()]

INSTALLED_APPS = [
    'statcard.apps.StatcardConfig',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'wakacard.urls'

WSGI_APPLICATION = 'wakacard.wsgi.application'

# The app keeps no data; the test runner still expects a database alias.
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Wakapi upstream
WAKAPI_BASE_URL = os.environ.get('WAKAPI_BASE_URL', 'https://wakapi.dev')
WAKAPI_TIMEOUT = float(os.environ['WAKAPI_TIMEOUT']) if os.environ.get('WAKAPI_TIMEOUT') else None

# Shared caches may serve a card for 30 minutes and a stale one for another hour
STATCARD_CACHE_CONTROL = 'public, max-age=0, s-maxage=1800, stale-while-revalidate=3600'

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'statcard': {
            'handlers': ['console'],
            'level': os.environ.get('STATCARD_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}
