"""
Django Settings - Testing Configuration
"""

import tempfile

from .base import *

DEBUG = False
TESTING = True

# Use faster password hasher
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

# Database - in-memory SQLite
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []
REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {}

# Use sync Celery
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_RESULT_BACKEND = 'cache+memory://'
CELERY_BROKER_URL = 'memory://'

# Fast deterministic in-process cache for tests.
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "offboarding-tests-cache",
    }
}

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}
MEDIA_ROOT = tempfile.mkdtemp(prefix='offboarding-test-media-')

# Disable logging during tests
LOGGING = {}

# Email - In-memory backend
EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

OFFBOARDING_DEPARTMENT_EMAILS = {
    'it': 'it@company.co.za',
    'hr': 'hr@company.co.za',
    'human capital': 'hr@company.co.za',
    'finance': 'finance@company.co.za',
    'payroll': 'payroll@company.co.za',
}
OFFBOARDING_DEFAULT_DEPARTMENT_EMAIL = 'hr@company.co.za'
OFFBOARDING_ESCALATION_EMAILS = ['hr@company.co.za', 'admin@company.co.za']
