from celery import shared_task

from spaces_app.services.earnings import release_due_earnings
from spaces_app.services.verification import purge_expired_otps


@shared_task(name="spaces_app.release_due_earnings")
def task_release_due_earnings() -> int:
    """Pending earnings past their available_date become withdrawable."""
    return release_due_earnings()


@shared_task(name="spaces_app.purge_expired_otps")
def task_purge_expired_otps() -> int:
    return purge_expired_otps()
