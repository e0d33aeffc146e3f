from django.core.management.base import BaseCommand

from notifications.models import NotificationTemplate

TEMPLATES = [
    {
        "key": "booking.new",
        "subject": "New booking request for {{ room.title }}",
        "body": (
            "Hi {{ user.first_name }},\n\n"
            "{{ guest_name }} requested to book \"{{ room.title }}\" "
            "from {{ check_in }} to {{ check_out }}.\n"
            "Booking ID: {{ booking_id }}\n\n"
            "Please confirm or reject it from your host dashboard.\n"
        ),
    },
    {
        "key": "booking.requested",
        "subject": "Booking request sent for {{ room.title }}",
        "body": (
            "Hi {{ user.first_name }},\n\n"
            "Your booking request for \"{{ room.title }}\" ({{ check_in }} to {{ check_out }}) "
            "was sent to the host.\n"
            "Booking ID: {{ booking_id }}\n"
        ),
    },
    {
        "key": "booking.confirmed",
        "subject": "Your booking for {{ room.title }} is confirmed",
        "body": (
            "Hi {{ user.first_name }},\n\n"
            "Good news: your stay at \"{{ room.title }}\" from {{ check_in }} to {{ check_out }} "
            "is confirmed.\n"
        ),
    },
    {
        "key": "booking.rejected",
        "subject": "Your booking for {{ room.title }} was declined",
        "body": (
            "Hi {{ user.first_name }},\n\n"
            "The host declined your booking for \"{{ room.title }}\".\n"
            "Reason: {{ reason }}\n"
        ),
    },
    {
        "key": "booking.cancelled",
        "subject": "Booking {{ booking_id }} was cancelled",
        "body": (
            "Hi {{ user.first_name }},\n\n"
            "The booking for \"{{ room.title }}\" ({{ check_in }} to {{ check_out }}) was cancelled.\n"
            "{% if reason %}Reason: {{ reason }}\n{% endif %}"
        ),
    },
    {
        "key": "booking.completed",
        "subject": "Thanks for staying at {{ room.title }}",
        "body": (
            "Hi {{ user.first_name }},\n\n"
            "Your stay at \"{{ room.title }}\" is complete. We hope to see you again.\n"
        ),
    },
    {
        "key": "room.approved",
        "subject": "\"{{ room.title }}\" is now live",
        "body": (
            "Hi {{ user.first_name }},\n\n"
            "Your space \"{{ room.title }}\" was approved and is now visible to guests.\n"
        ),
    },
    {
        "key": "room.rejected",
        "subject": "\"{{ room.title }}\" was not approved",
        "body": (
            "Hi {{ user.first_name }},\n\n"
            "Your space \"{{ room.title }}\" was not approved.\n"
            "Reason: {{ reason }}\n"
        ),
    },
    {
        "key": "id.approved",
        "subject": "Your ID has been verified",
        "body": (
            "Hi {{ user.first_name }},\n\n"
            "Your identification document was approved.\n"
        ),
    },
    {
        "key": "id.rejected",
        "subject": "Your ID verification was rejected",
        "body": (
            "Hi {{ user.first_name }},\n\n"
            "We could not verify your identification document.\n"
            "Reason: {{ reason }}\n"
        ),
    },
    {
        "key": "payout.processed",
        "subject": "Payout {{ payout_id }} processed",
        "body": (
            "Hi {{ user.first_name }},\n\n"
            "A payout of PHP {{ amount }} ({{ payout_id }}) was processed to your {{ method }} account.\n"
        ),
    },
]


class Command(BaseCommand):
    help = "Seed default notification templates"

    def add_arguments(self, parser):
        parser.add_argument(
            "--update",
            action="store_true",
            help="Overwrite subject/body of templates that already exist.",
        )

    def handle(self, *args, **options):
        created = 0
        updated = 0
        for t in TEMPLATES:
            defaults = {"subject": t["subject"], "body": t["body"], "channel": "email", "is_active": True}
            if options["update"]:
                _, was_created = NotificationTemplate.objects.update_or_create(key=t["key"], defaults=defaults)
                updated += 0 if was_created else 1
            else:
                _, was_created = NotificationTemplate.objects.get_or_create(key=t["key"], defaults=defaults)
            if was_created:
                created += 1
        self.stdout.write(self.style.SUCCESS(f"Seeded templates. New created: {created}, updated: {updated}"))
