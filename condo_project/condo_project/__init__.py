# The Celery app lives in condo_project/celery.py and is exposed here
# so workers started with "celery -A condo_project worker -l info"
# pick up Django settings and the tasks of every installed app
from .celery import celery_app

# 'from condo_project import *' only exports celery_app
__all__ = ("celery_app",)
