""" Run a worker with: "celery -A sl_project worker -l info"
    -A sl_project imports sl_project/__init__.py,
    which exposes celery_app. """
from __future__ import annotations
import os
from celery import Celery

# ensure Django settings are set for Celery
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "sl_project.settings")

celery_app = Celery("sl_project")

# read config from Django settings, using CELERY_ prefix
celery_app.config_from_object("django.conf:settings", namespace="CELERY")

# picks up ledger_core/tasks.py
celery_app.autodiscover_tasks()
