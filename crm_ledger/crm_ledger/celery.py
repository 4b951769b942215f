from __future__ import annotations
import os
from celery import Celery

# ensure Django settings are set for Celery
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "crm_ledger.settings")

celery_app = Celery("crm_ledger")

# read config from Django settings, using CELERY_ prefix
celery_app.config_from_object("django.conf:settings", namespace="CELERY")

# load ledger_core/tasks.py (and any other installed app's tasks module)
celery_app.autodiscover_tasks()
