# Celery instance is defined in sl_project/celery.py
# It points the worker at Django settings and discovers ledger tasks
from .celery import celery_app

# 'from sl_project import *', only exports celery_app
__all__ = ("celery_app",)
