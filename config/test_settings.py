"""
Settings used by the test suite.
"""
from .settings import *  # noqa: F401,F403

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

RATE_LIMIT_ENABLED = False

LOGGING['loggers']['catalog']['level'] = 'CRITICAL'  # noqa: F405
LOGGING['loggers']['orders']['level'] = 'CRITICAL'  # noqa: F405
LOGGING['loggers']['core']['level'] = 'CRITICAL'  # noqa: F405
LOGGING['loggers']['django']['level'] = 'ERROR'  # noqa: F405
