from __future__ import annotations
import os
from celery import Celery

# ensure Django settings are set for Celery
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "condo_project.settings")

celery_app = Celery("condo_project")

# read config from Django settings, using CELERY_ prefix
# (CELERY_BROKER_URL, CELERY_BEAT_SCHEDULE, CELERY_TASK_ALWAYS_EAGER ...)
celery_app.config_from_object("django.conf:settings", namespace="CELERY")

# autoload condo_core/tasks.py
celery_app.autodiscover_tasks()
