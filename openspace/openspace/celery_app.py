# openspace/celery_app.py
import os

from celery import Celery
from celery.schedules import crontab

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "openspace.settings")

app = Celery("openspace")

# Read CELERY_* settings from Django settings.py (namespace)
app.config_from_object("django.conf:settings", namespace="CELERY")

# Auto-discover tasks.py in installed apps
app.autodiscover_tasks()

app.conf.beat_schedule = {
    # Pending earnings whose available_date has passed become withdrawable
    "release-due-earnings-hourly": {
        "task": "spaces_app.release_due_earnings",
        "schedule": crontab(minute=5),
    },
    # Send due notifications every minute
    "send-due-notifications": {
        "task": "notifications.tasks.send_due_notifications",
        "schedule": crontab(),
    },
    # Drop stale, unused OTP codes once a day
    "purge-expired-otps-daily": {
        "task": "spaces_app.purge_expired_otps",
        "schedule": crontab(hour=4, minute=0),
    },
}
