"""
Celery configuration for the Babuji Chaay POS backend.
"""

import os

from celery import Celery
from celery.schedules import crontab

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.development")

app = Celery("babuji_chaay")

# - namespace='CELERY' means all celery-related configuration keys
#   should have a `CELERY_` prefix.
app.config_from_object("django.conf:settings", namespace="CELERY")

# Load task modules from all registered Django apps.
app.autodiscover_tasks()

# Celery Beat Schedule for periodic tasks (CELERY_TIMEZONE is the shop's zone)
app.conf.beat_schedule = {
    # Rebuild yesterday's and today's daily summaries after closing time
    "rebuild-daily-sales-summaries": {
        "task": "apps.reporting.tasks.rebuild_daily_sales_summaries",
        "schedule": crontab(hour=0, minute=15),
        "options": {"queue": "reports", "priority": 7},
    },
}

# Task routing configuration
app.conf.task_routes = {
    "apps.reporting.tasks.*": {"queue": "reports", "priority": 7},
}
