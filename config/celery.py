"""Celery app for the notification backend.

Workers run the push fan-out that `apps.notifications.signals` enqueues
after a notification is committed:

    celery -A config worker -l info
"""

from __future__ import annotations

import os

from celery import Celery

from config.env import load_env

load_env()
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("vendor_ops")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks(["apps.notifications", "apps.push"])
