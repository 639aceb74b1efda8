"""
Test settings for the SuperArticles backend.
"""

from .base import *

DEBUG = False
ENVIRONMENT = 'test'

ALLOWED_HOSTS = ['testserver', 'localhost']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'test-default',
    },
    'ratelimit': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'test-ratelimit',
    },
}

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

CELERY_TASK_ALWAYS_EAGER = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

CRON_SECRET = 'test-cron-secret'
ADMIN_TOKEN = 'test-admin-token'
ENCRYPTION_SECRET = 'test-encryption-secret'
SITE_BASE_URL = 'https://articles.test'
LIFECYCLE_NOTIFICATIONS_ENABLED = True

AUTH_COOKIE_SECURE = False

LOGGING['handlers'] = {
    'console': {
        'class': 'logging.StreamHandler',
        'formatter': 'verbose',
        'filters': ['request_id'],
    },
}
LOGGING['loggers']['django']['handlers'] = ['console']
LOGGING['loggers']['apps']['handlers'] = ['console']
LOGGING['loggers']['django']['level'] = 'WARNING'
