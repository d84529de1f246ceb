"""
Settings used by the test suite.

Secrets are injected before the main settings module is evaluated so the
mandatory-secret check is exercised the same way as in production.
"""

import os
import tempfile

os.environ.setdefault('SECRET_KEY', 'funrun-test-secret-key')
os.environ.setdefault('JWT_SECRET_KEY', 'funrun-test-jwt-secret-key')
os.environ.setdefault('DEBUG', 'False')
os.environ.setdefault('SECURE_SSL_REDIRECT', 'False')

from .settings import *  # noqa: E402,F401,F403

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

ALLOWED_HOSTS = ['testserver', 'localhost']

MEDIA_ROOT = tempfile.mkdtemp(prefix='funrun_media_')

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'funrun-tests',
    }
}
