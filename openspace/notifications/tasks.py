import logging

from celery import shared_task
from django.utils import timezone

from .models import OutboundNotification
from .services import NotificationService

logger = logging.getLogger(__name__)


def send_due_notifications(limit: int = 200) -> dict:
    """
    Deliver queued notifications scheduled up to now.
    Returns a small summary dict for tests/monitoring.
    """
    now = timezone.now()
    due = list(
        OutboundNotification.objects.select_related("user")
        .filter(status=OutboundNotification.STATUS_QUEUED, scheduled_for__lte=now)
        .order_by("scheduled_for")[:limit]
    )

    for notif in due:
        NotificationService.deliver(notif)

    summary = {"processed": len(due), "sent": 0, "failed": 0, "skipped": 0}
    for notif in due:
        if notif.status == OutboundNotification.STATUS_SENT:
            summary["sent"] += 1
        elif notif.status == OutboundNotification.STATUS_SKIPPED:
            summary["skipped"] += 1
        else:
            summary["failed"] += 1

    if due:
        logger.info("Notifications delivered: %s", summary)
    return summary


@shared_task(name="notifications.tasks.send_due_notifications")
def task_send_due_notifications() -> dict:
    return send_due_notifications()
