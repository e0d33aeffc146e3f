"""Admin moderation: accounts, ID documents and room listings."""
from __future__ import annotations

import logging

from django.conf import settings
from django.contrib.auth.models import User
from django.db import transaction
from django.utils import timezone
from django.utils.crypto import constant_time_compare

from notifications.services import NotificationService
from spaces_app.api.exceptions import APIError
from spaces_app.models import Room, UserProfile

logger = logging.getLogger(__name__)

DEFAULT_BAN_REASON = "Banned by admin"
DEFAULT_ROOM_REJECTION = "Room does not meet our standards"


def _ensure_not_admin(user: User, action: str) -> None:
    if user.is_staff or user.profile.role == UserProfile.ROLE_ADMIN:
        raise APIError(f"Admins cannot be {action}", code="target_is_admin", status_code=403)


# ---------- Users ----------

def ban_user(user: User, actor, reason: str = "") -> User:
    _ensure_not_admin(user, "banned")
    profile = user.profile
    with transaction.atomic():
        user.is_active = False
        user.save(update_fields=["is_active"])
        profile.ban_reason = (reason or DEFAULT_BAN_REASON).strip()[:255]
        profile.banned_at = timezone.now()
        profile.save(update_fields=["ban_reason", "banned_at", "updated_at"])
    logger.info("User %s banned by %s: %s", user.pk, actor.pk, profile.ban_reason)
    return user


def unban_user(user: User, actor) -> User:
    profile = user.profile
    with transaction.atomic():
        user.is_active = True
        user.save(update_fields=["is_active"])
        profile.ban_reason = ""
        profile.banned_at = None
        profile.save(update_fields=["ban_reason", "banned_at", "updated_at"])
    logger.info("User %s unbanned by %s", user.pk, actor.pk)
    return user


def delete_user(user: User, actor) -> None:
    _ensure_not_admin(user, "deleted")
    user_id = user.pk
    user.delete()
    logger.info("User %s deleted by %s", user_id, actor.pk)


def dashboard_counts() -> dict:
    profiles = UserProfile.objects.all()
    return {
        "total_users": profiles.count(),
        "verified_users": profiles.filter(verification_level=UserProfile.LEVEL_VERIFIED).count(),
        "unverified_users": profiles.filter(verification_level=UserProfile.LEVEL_BASIC).count(),
        "banned_users": profiles.filter(user__is_active=False).count(),
        "pending_verifications": profiles.filter(
            id_verification_status=UserProfile.ID_PENDING
        ).count(),
        "hosts": profiles.filter(role=UserProfile.ROLE_HOST).count(),
        "total_spaces": Room.objects.count(),
        "pending_spaces": Room.objects.pending().count(),
    }


# ---------- ID documents ----------

def decide_id_verification(user: User, actor, approved: bool, rejection_reason: str = "") -> UserProfile:
    """
    Approve or reject the uploaded ID. Approval also lifts the account to
    verified once email and phone are confirmed.
    """
    profile = user.profile
    if not profile.id_image and not profile.id_number:
        raise APIError("User has not uploaded an ID document", code="no_id_document")

    if approved:
        profile.id_verification_status = UserProfile.ID_APPROVED
        profile.id_verified_at = timezone.now()
        profile.id_rejection_reason = ""
        if (
            profile.email_verified
            and profile.phone_verified
            and profile.verification_level == UserProfile.LEVEL_BASIC
        ):
            profile.verification_level = UserProfile.LEVEL_VERIFIED
    else:
        reason = (rejection_reason or "").strip()
        if not reason:
            raise APIError("Rejection reason is required", code="reason_required")
        profile.id_verification_status = UserProfile.ID_REJECTED
        profile.id_verified_at = None
        profile.id_rejection_reason = reason[:255]

    profile.save()
    logger.info(
        "ID verification for user %s %s by %s",
        user.pk, profile.id_verification_status, actor.pk,
    )
    NotificationService.queue_if_active(
        user,
        "id.approved" if approved else "id.rejected",
        {"user": {"first_name": user.first_name}, "reason": profile.id_rejection_reason},
    )
    return profile


# ---------- Rooms ----------

def decide_room(room: Room, actor, approved: bool, rejection_reason: str = "") -> Room:
    if approved:
        room.status = Room.STATUS_APPROVED
        room.rejection_reason = ""
    else:
        room.status = Room.STATUS_REJECTED
        room.rejection_reason = ((rejection_reason or "").strip() or DEFAULT_ROOM_REJECTION)[:255]
    room.save(update_fields=["status", "rejection_reason", "updated_at"])

    logger.info("Room %s %s by %s", room.pk, room.status, actor.pk)
    NotificationService.queue_if_active(
        room.host,
        "room.approved" if approved else "room.rejected",
        {
            "user": {"first_name": room.host.first_name},
            "room": {"title": room.title},
            "reason": room.rejection_reason,
        },
    )
    return room


# ---------- Admin accounts ----------

def admin_exists() -> bool:
    return User.objects.filter(is_staff=True).exists() or UserProfile.objects.filter(
        role=UserProfile.ROLE_ADMIN
    ).exists()


@transaction.atomic
def create_admin(*, email: str, password: str, first_name: str = "", last_name: str = "") -> User:
    email = email.strip().lower()
    if User.objects.filter(email__iexact=email).exists():
        raise APIError("A user with this email already exists", code="email_taken")

    user = User.objects.create_user(
        username=email,
        email=email,
        password=password,
        first_name=first_name,
        last_name=last_name,
        is_staff=True,
    )
    profile = user.profile
    profile.role = UserProfile.ROLE_ADMIN
    profile.verification_level = UserProfile.LEVEL_ADMIN
    profile.email_verified = True
    profile.email_verified_at = timezone.now()
    profile.save()
    logger.info("Admin account %s created", user.pk)
    return user


def initial_admin_setup(*, setup_code: str, **fields) -> User:
    """First admin bootstrap, guarded by ADMIN_SETUP_CODE and only while no admin exists."""
    expected = getattr(settings, "ADMIN_SETUP_CODE", "")
    if not expected or not constant_time_compare(setup_code or "", expected):
        raise APIError("Invalid setup code", code="invalid_setup_code", status_code=403)
    if admin_exists():
        raise APIError("An admin account already exists", code="admin_exists", status_code=403)
    return create_admin(**fields)
