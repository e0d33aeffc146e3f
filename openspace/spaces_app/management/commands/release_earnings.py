from django.core.management.base import BaseCommand

from spaces_app.services.earnings import release_due_earnings


class Command(BaseCommand):
    help = "Release pending earnings whose available date has passed (same job Celery beat runs hourly)"

    def handle(self, *args, **options):
        count = release_due_earnings()
        self.stdout.write(self.style.SUCCESS(f"Released {count} earnings."))
