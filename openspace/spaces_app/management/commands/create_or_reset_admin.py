import os

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from spaces_app.models import UserProfile


class Command(BaseCommand):
    help = "Create or reset the platform admin from ADMIN_EMAIL / ADMIN_PASSWORD"

    def handle(self, *args, **options):
        if os.environ.get("CREATE_ADMIN") != "1":
            self.stdout.write("CREATE_ADMIN not enabled; skipping.")
            return

        email = os.environ.get("ADMIN_EMAIL", "admin@openspace.ph").strip().lower()
        password = os.environ.get("ADMIN_PASSWORD")
        if not password:
            self.stderr.write("ADMIN_PASSWORD is not set; refusing to create an admin without one.")
            return

        User = get_user_model()
        user = User.objects.filter(email__iexact=email).first()

        if not user:
            user = User.objects.create_superuser(username=email, email=email, password=password)
            message = f"Admin created: {email}"
        else:
            user.is_staff = True
            user.is_superuser = True
            user.is_active = True
            user.set_password(password)
            user.save()
            message = f"Admin password reset: {email}"

        profile, _ = UserProfile.objects.get_or_create(user=user)
        profile.role = UserProfile.ROLE_ADMIN
        profile.verification_level = UserProfile.LEVEL_ADMIN
        profile.email_verified = True
        profile.save()
        self.stdout.write(message)
