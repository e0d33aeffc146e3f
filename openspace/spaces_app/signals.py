from django.contrib.auth.models import User
from django.db.models.signals import post_save
from django.dispatch import receiver

from spaces_app.models import UserProfile


@receiver(post_save, sender=User)
def create_profile_for_new_user(sender, instance: User, created, **kwargs):
    """Every account gets a profile; superusers created from the shell become admins."""
    if not created:
        return
    defaults = {}
    if instance.is_staff:
        defaults = {"role": UserProfile.ROLE_ADMIN, "verification_level": UserProfile.LEVEL_ADMIN}
    UserProfile.objects.get_or_create(user=instance, defaults=defaults)
