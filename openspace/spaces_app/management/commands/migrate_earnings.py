from django.core.management.base import BaseCommand

from spaces_app.models import Booking, Earning
from spaces_app.services.earnings import migrate_online_earnings


class Command(BaseCommand):
    help = "Make pending card/GCash/Maya earnings available now (one-off data fix)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Only report how many earnings would change.",
        )

    def handle(self, *args, **options):
        if options["dry_run"]:
            count = Earning.objects.filter(
                status=Earning.STATUS_PENDING,
                payment_method__in=Booking.ONLINE_METHODS,
            ).count()
            self.stdout.write(f"{count} earnings would be made available.")
            return

        count = migrate_online_earnings()
        self.stdout.write(self.style.SUCCESS(f"Updated {count} earnings to available."))
