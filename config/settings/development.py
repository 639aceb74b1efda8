"""
Development settings for the SuperArticles backend.
"""

from .base import *

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = True

ALLOWED_HOSTS = ['localhost', '127.0.0.1', '[::1]', 'testserver']

# Print emails (security codes, renewal reminders) to the console
EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

# Disable HTTPS-only cookies in development
SECURE_SSL_REDIRECT = False
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False
AUTH_COOKIE_SECURE = False

# Local-memory cache so development doesn't need Redis
CACHES['default'] = {
    'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    'LOCATION': 'superarticles-default',
}

# Predictable trigger secrets for local curl testing
CRON_SECRET = CRON_SECRET or 'dev-cron-secret'
ADMIN_TOKEN = ADMIN_TOKEN or 'dev-admin-token'

# Development logging - more verbose
LOGGING['root']['level'] = 'DEBUG'
LOGGING['loggers']['apps']['level'] = 'DEBUG'

LOGGING['handlers']['file'] = {
    'class': 'logging.FileHandler',
    'filename': LOG_DIR / 'django.log',
    'formatter': 'verbose',
    'filters': ['request_id'],
    'mode': 'a',
}
