"""
Celery configuration for the SuperArticles backend.

The daily article lifecycle sweep runs here when triggered by Celery beat.
Request IDs travel in task headers so worker logs correlate with the
HTTP request that queued the task.
"""

import os

from celery import Celery
from celery.signals import task_postrun, task_prerun

# Set default Django settings module
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

app = Celery('superarticles')

# Load configuration from Django settings with CELERY namespace
app.config_from_object('django.conf:settings', namespace='CELERY')

# Auto-discover tasks from all installed apps
app.autodiscover_tasks()

app.conf.task_routes = {
    'apps.articles.tasks.*': {'queue': 'lifecycle'},
}
app.conf.task_default_queue = 'default'


@task_prerun.connect
def setup_task_request_context(task_id, task, args, kwargs, **signals_kwargs):
    """Bind the request ID carried in task headers to the worker thread."""
    from apps.core.middleware import setup_celery_request_context

    headers = getattr(task.request, 'headers', None) or {}
    setup_celery_request_context(headers)


@task_postrun.connect
def cleanup_task_request_context(task_id, task, args, kwargs, retval, state, **signals_kwargs):
    """Drop the request context once the task finishes."""
    from apps.core.middleware import clear_request_context

    clear_request_context()
