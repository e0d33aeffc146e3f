"""
Account self-service: profile edits, password change and password reset.

Reset tokens come from Django's default_token_generator, so a link dies once
PASSWORD_RESET_TIMEOUT passes or the password changes, whichever is first.
The token handed out is "<uidb64>.<token>".
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.contrib.auth import authenticate, password_validation
from django.contrib.auth.models import User
from django.contrib.auth.tokens import default_token_generator
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils.encoding import force_bytes, force_str
from django.utils.http import urlsafe_base64_decode, urlsafe_base64_encode
from rest_framework.exceptions import ValidationError

from notifications.services import send_mail
from spaces_app.api.exceptions import APIError
from spaces_app.models import UserProfile
from spaces_app.services.verification import refresh_verification_level

logger = logging.getLogger(__name__)

INVALID_RESET_TOKEN = "Invalid or expired reset token"


# ---------- Profile ----------

def _set_phone(profile: UserProfile, phone: str) -> None:
    if phone == profile.phone_number:
        return
    profile.phone_number = phone
    # Same rule as registration: a supplied number counts as confirmed
    profile.phone_verified = bool(phone)


@transaction.atomic
def update_profile(user: User, data: dict) -> User:
    """Apply the editable account fields present in `data`."""
    for field in ("first_name", "last_name"):
        if field in data:
            setattr(user, field, data[field])
    user.save(update_fields=["first_name", "last_name"])

    profile = user.profile
    if "phone_number" in data:
        _set_phone(profile, data["phone_number"])
    if "profile_image" in data:
        profile.profile_image = data["profile_image"]
    if profile.role == UserProfile.ROLE_HOST:
        if "host_bio" in data:
            profile.host_bio = data["host_bio"]
        if "host_languages" in data:
            profile.host_languages = data["host_languages"]
    profile.save()
    refresh_verification_level(profile)

    logger.info("User %s updated their profile", user.pk)
    return user


# ---------- Passwords ----------

def _check_new_password(password: str, user: User, field: str) -> None:
    if len(password or "") < 8:
        raise ValidationError({field: ["Password must be at least 8 characters long."]})
    try:
        password_validation.validate_password(password, user=user)
    except DjangoValidationError as e:
        raise ValidationError({field: list(e.messages)})


def change_password(user: User, current_password: str, new_password: str, request=None) -> User:
    if authenticate(request, username=user.username, password=current_password) is None:
        raise APIError("Current password is incorrect", code="invalid_credentials", status_code=401)
    _check_new_password(new_password, user, "new_password")
    user.set_password(new_password)
    user.save(update_fields=["password"])
    logger.info("User %s changed their password", user.pk)
    return user


def make_reset_token(user: User) -> str:
    uidb64 = urlsafe_base64_encode(force_bytes(user.pk))
    return f"{uidb64}.{default_token_generator.make_token(user)}"


def request_password_reset(email: str) -> bool:
    """
    Email a reset link when the address belongs to an active account.
    The caller answers the same way either way.
    """
    user = User.objects.filter(email__iexact=(email or "").strip()).first()
    if user is None or not user.is_active:
        logger.info("Password reset requested for unknown or inactive email")
        return False

    token = make_reset_token(user)
    minutes = settings.PASSWORD_RESET_TIMEOUT // 60
    send_mail(
        subject="Reset your OpenSpace password",
        message=(
            f"Hi {user.first_name or 'there'},\n\n"
            f"Use the link below to choose a new password:\n"
            f"{settings.FRONTEND_URL}/reset-password/{token}\n\n"
            f"The link expires in {minutes} minutes.\n"
        ),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[user.email],
    )
    logger.info("Password reset link sent to user %s", user.pk)
    return True


def user_for_reset_token(token: str) -> User:
    uidb64, _, raw = (token or "").partition(".")
    try:
        pk = force_str(urlsafe_base64_decode(uidb64))
        user = User.objects.get(pk=pk, is_active=True)
    except (ValueError, TypeError, OverflowError, User.DoesNotExist):
        raise APIError(INVALID_RESET_TOKEN, code="invalid_token")
    if not default_token_generator.check_token(user, raw):
        raise APIError(INVALID_RESET_TOKEN, code="invalid_token")
    return user


def reset_password(token: str, password: str) -> User:
    user = user_for_reset_token(token)
    _check_new_password(password, user, "password")
    user.set_password(password)
    user.save(update_fields=["password"])
    logger.info("User %s reset their password", user.pk)
    return user


# ---------- Admin edits ----------

ADMIN_PROFILE_FIELDS = (
    "role",
    "verification_level",
    "email_verified",
    "phone_verified",
    "profile_image",
)


@transaction.atomic
def admin_update_user(user: User, actor, data: dict) -> User:
    """Admins may correct names, contact details, role and verification flags."""
    profile = user.profile
    if profile.role == UserProfile.ROLE_ADMIN or user.is_staff:
        if data.get("role", UserProfile.ROLE_ADMIN) != UserProfile.ROLE_ADMIN:
            raise APIError("Admins cannot be demoted here", code="target_is_admin", status_code=403)
    elif data.get("role") == UserProfile.ROLE_ADMIN:
        raise APIError("Use the create-admin endpoint for admin accounts", code="invalid_role")

    for field in ("first_name", "last_name"):
        if field in data:
            setattr(user, field, data[field])
    user.save(update_fields=["first_name", "last_name"])

    if "phone_number" in data:
        profile.phone_number = data["phone_number"]
    for field in ADMIN_PROFILE_FIELDS:
        if field in data:
            setattr(profile, field, data[field])
    if profile.role == UserProfile.ROLE_HOST and profile.host_since is None:
        profile.host_since = user.date_joined
    profile.save()

    logger.info("User %s updated by admin %s: %s", user.pk, actor.pk, sorted(data))
    return user
