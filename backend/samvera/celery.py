"""Celery application for the Samvera backend."""
import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "samvera.settings")

app = Celery("samvera")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
