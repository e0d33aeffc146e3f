"""
Email verification codes.

A code is six digits, lives OTP_TTL_MINUTES (15 by default) and can be used
once. Issuing a new code retires every older live code for the user.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django.utils.crypto import get_random_string

from notifications.services import send_mail
from spaces_app.api.exceptions import APIError
from spaces_app.models import EmailOTP, UserProfile

logger = logging.getLogger(__name__)


@dataclass
class VerifyResult:
    ok: bool
    message: str
    status_code: int = 200


def generate_code() -> str:
    return get_random_string(6, allowed_chars="0123456789")


def issue_email_otp(user) -> EmailOTP:
    """Retire live codes, create a fresh one and email it."""
    code = generate_code()
    ttl = int(getattr(settings, "OTP_TTL_MINUTES", 15))

    with transaction.atomic():
        EmailOTP.objects.filter(user=user, used_at__isnull=True).update(used_at=timezone.now())
        otp = EmailOTP.create_for(user, code, ttl_minutes=ttl)

    # Delivered right away; the queued pipeline is for non-urgent mail
    send_mail(
        subject="Your OpenSpace verification code",
        message=(
            f"Hi {user.first_name or 'there'},\n\n"
            f"Your verification code is: {code}\n"
            f"It expires in {ttl} minutes.\n"
        ),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[user.email],
    )
    logger.info("Issued email OTP for user %s", user.pk)
    return otp


def ensure_not_verified(user) -> None:
    profile = user.profile
    if profile.email_verified:
        raise APIError("Email is already verified", code="already_verified")


def verify_email_otp(user, code: str) -> VerifyResult:
    """
    Check `code` against the user's live OTP.
    Wrong codes count towards OTP_MAX_ATTEMPTS; past it the code is dead.
    """
    max_attempts = int(getattr(settings, "OTP_MAX_ATTEMPTS", 5))

    otp = (
        EmailOTP.objects
        .filter(user=user, used_at__isnull=True)
        .order_by("-created_at")
        .first()
    )
    if otp is None:
        return VerifyResult(False, "No active code. Please request a new one.", 400)

    if otp.is_expired:
        otp.delete()
        return VerifyResult(False, "OTP has expired. Please request a new one.", 400)

    if otp.attempts >= max_attempts:
        return VerifyResult(False, "Too many attempts. Please request a new code.", 429)

    if not otp.matches(code):
        otp.attempts = (otp.attempts or 0) + 1
        otp.save(update_fields=["attempts"])
        logger.warning("Invalid OTP for user %s (attempt %s)", user.pk, otp.attempts)
        return VerifyResult(False, "Invalid OTP", 400)

    otp.mark_used()

    profile = user.profile
    profile.email_verified = True
    profile.email_verified_at = timezone.now()
    profile.save(update_fields=["email_verified", "email_verified_at", "updated_at"])
    refresh_verification_level(profile)

    logger.info("Email verified for user %s", user.pk)
    return VerifyResult(True, "Email verified successfully")


def refresh_verification_level(profile: UserProfile) -> None:
    """A basic account becomes verified once email, phone and ID all check out."""
    if profile.verification_level != UserProfile.LEVEL_BASIC:
        return
    if (
        profile.email_verified
        and profile.phone_verified
        and profile.id_verification_status == UserProfile.ID_APPROVED
    ):
        profile.verification_level = UserProfile.LEVEL_VERIFIED
        profile.save(update_fields=["verification_level", "updated_at"])


def purge_expired_otps() -> int:
    """Delete codes that expired or were used more than a day ago."""
    cutoff = timezone.now() - timedelta(days=1)
    expired, _ = EmailOTP.objects.filter(expires_at__lt=timezone.now()).delete()
    used, _ = EmailOTP.objects.filter(used_at__lt=cutoff).delete()
    return expired + used
