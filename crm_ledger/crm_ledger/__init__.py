# Celery instance is defined in crm_ledger/celery.py
# It points the celery_app object at the Django settings
from .celery import celery_app

# 'from crm_ledger import *' only exports celery_app
__all__ = ("celery_app",)

""" Workers are started with "celery -A crm_ledger worker -l info"
    -A crm_ledger imports crm_ledger/__init__.py,
    which exposes celery_app. """
