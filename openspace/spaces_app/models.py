from datetime import datetime, time, timedelta
from decimal import Decimal

from django.conf import settings
from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxLengthValidator
from django.db import models
from django.utils import timezone


MONEY = {"max_digits": 12, "decimal_places": 2}


# -----------
# UserProfile
# -----------
class UserProfile(models.Model):
    ROLE_USER = "user"
    ROLE_HOST = "host"
    ROLE_ADMIN = "admin"
    ROLE_CHOICES = (
        (ROLE_USER, "User"),
        (ROLE_HOST, "Host"),
        (ROLE_ADMIN, "Admin"),
    )

    LEVEL_BASIC = "basic"
    LEVEL_VERIFIED = "verified"
    LEVEL_ADMIN = "admin"
    LEVEL_CHOICES = (
        (LEVEL_BASIC, "Basic"),
        (LEVEL_VERIFIED, "Verified"),
        (LEVEL_ADMIN, "Admin"),
    )

    # "" means no document was ever uploaded
    ID_NONE = ""
    ID_PENDING = "pending"
    ID_APPROVED = "approved"
    ID_REJECTED = "rejected"
    ID_STATUS_CHOICES = (
        (ID_NONE, "Not submitted"),
        (ID_PENDING, "Pending"),
        (ID_APPROVED, "Approved"),
        (ID_REJECTED, "Rejected"),
    )

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    phone_number = models.CharField(max_length=20, blank=True, default="")
    profile_image = models.URLField(max_length=500, blank=True, default="")

    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_USER, db_index=True)
    verification_level = models.CharField(max_length=10, choices=LEVEL_CHOICES, default=LEVEL_BASIC)

    email_verified = models.BooleanField(default=False)
    email_verified_at = models.DateTimeField(null=True, blank=True)
    phone_verified = models.BooleanField(default=False)

    # Ban bookkeeping; the flag itself is User.is_active
    ban_reason = models.CharField(max_length=255, blank=True, default="")
    banned_at = models.DateTimeField(null=True, blank=True)

    # --- Identification document ---
    id_type = models.CharField(max_length=50, blank=True, default="")
    id_number = models.CharField(max_length=100, blank=True, default="")
    id_image = models.URLField(max_length=500, blank=True, default="")
    id_uploaded_at = models.DateTimeField(null=True, blank=True)
    id_verification_status = models.CharField(
        max_length=10,
        choices=ID_STATUS_CHOICES,
        blank=True,
        default=ID_NONE,
        db_index=True,
    )
    id_verified_at = models.DateTimeField(null=True, blank=True)
    id_rejection_reason = models.CharField(max_length=255, blank=True, default="")

    # --- Host info ---
    host_bio = models.TextField(blank=True, default="")
    host_languages = models.JSONField(blank=True, default=list)
    host_since = models.DateTimeField(null=True, blank=True)
    response_rate = models.FloatField(null=True, blank=True)
    response_time = models.FloatField(null=True, blank=True, help_text="Average response time in hours.")
    acceptance_rate = models.FloatField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_host(self) -> bool:
        return self.role == self.ROLE_HOST

    @property
    def is_banned(self) -> bool:
        return not self.user.is_active

    def __str__(self):
        return f"Profile for {self.user.email or self.user.username} [{self.role}]"


# ----
# Room
# ----
class RoomQuerySet(models.QuerySet):
    def approved(self):
        """Rooms that are visible on the public marketplace."""
        return self.filter(status=Room.STATUS_APPROVED)

    def pending(self):
        return self.filter(status=Room.STATUS_PENDING)


class Room(models.Model):
    TYPE_CHOICES = (
        ("stay", "Stay"),
        ("conference", "Conference room"),
        ("event", "Event venue"),
    )

    STATUS_PENDING = "pending"
    STATUS_APPROVED = "approved"
    STATUS_REJECTED = "rejected"
    STATUS_CHOICES = (
        (STATUS_PENDING, "Pending"),      # waiting for an admin decision
        (STATUS_APPROVED, "Approved"),    # live on the marketplace
        (STATUS_REJECTED, "Rejected"),
    )

    host = models.ForeignKey(User, on_delete=models.CASCADE, related_name="rooms")
    title = models.CharField(max_length=100)
    description = models.TextField()
    room_type = models.CharField(max_length=20, choices=TYPE_CHOICES)

    base_price = models.DecimalField(**MONEY, validators=[MinValueValidator(Decimal("0"))])
    cleaning_fee = models.DecimalField(**MONEY, default=0, validators=[MinValueValidator(Decimal("0"))])
    service_fee = models.DecimalField(**MONEY, default=0, validators=[MinValueValidator(Decimal("0"))])
    tax = models.DecimalField(**MONEY, default=0, validators=[MinValueValidator(Decimal("0"))])

    address = models.CharField(max_length=255)
    city = models.CharField(max_length=100, db_index=True)
    state = models.CharField(max_length=100)
    country = models.CharField(max_length=100)
    zip_code = models.CharField(max_length=20)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)

    amenities = models.JSONField(blank=True, default=list)
    images = models.JSONField(blank=True, default=list, help_text="List of image URLs.")

    max_guests = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    bedrooms = models.PositiveIntegerField(null=True, blank=True)
    beds = models.PositiveIntegerField(null=True, blank=True)
    bathrooms = models.PositiveIntegerField(null=True, blank=True)

    available_from = models.DateField(null=True, blank=True)
    available_until = models.DateField(null=True, blank=True)
    # ISO dates (YYYY-MM-DD) the host blocked out
    unavailable_dates = models.JSONField(blank=True, default=list)

    check_in_time = models.CharField(max_length=5, default="14:00")
    check_out_time = models.CharField(max_length=5, default="12:00")
    cancellation_policy = models.CharField(max_length=50, blank=True, default="moderate")
    instant_booking = models.BooleanField(default=False)
    additional_rules = models.JSONField(blank=True, default=list)

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    rejection_reason = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = RoomQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]

    @property
    def is_listed(self) -> bool:
        return self.status == self.STATUS_APPROVED

    def clean(self):
        super().clean()
        if (
            self.available_from
            and self.available_until
            and self.available_from > self.available_until
        ):
            raise ValidationError(
                {"available_until": "available_until cannot be before available_from."}
            )

    def __str__(self):
        return self.title


# -------
# Booking
# -------
class Booking(models.Model):
    STATUS_PENDING = "pending"
    STATUS_CONFIRMED = "confirmed"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"
    STATUS_REJECTED = "rejected"
    STATUS_CHOICES = (
        (STATUS_PENDING, "Pending"),
        (STATUS_CONFIRMED, "Confirmed"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
        (STATUS_REJECTED, "Rejected"),
    )
    ACTIVE_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED)

    PAYMENT_PENDING = "pending"
    PAYMENT_PAID = "paid"
    PAYMENT_REFUNDED = "refunded"
    PAYMENT_CANCELLED = "cancelled"
    PAYMENT_STATUS_CHOICES = (
        (PAYMENT_PENDING, "Pending"),
        (PAYMENT_PAID, "Paid"),
        (PAYMENT_REFUNDED, "Refunded"),
        (PAYMENT_CANCELLED, "Cancelled"),
    )

    METHOD_PROPERTY = "property"
    METHOD_CARD = "card"
    METHOD_GCASH = "gcash"
    METHOD_MAYA = "maya"
    PAYMENT_METHOD_CHOICES = (
        (METHOD_PROPERTY, "Pay at property"),
        (METHOD_CARD, "Card"),
        (METHOD_GCASH, "GCash"),
        (METHOD_MAYA, "Maya"),
    )
    ONLINE_METHODS = (METHOD_CARD, METHOD_GCASH, METHOD_MAYA)

    CANCELLED_BY_CHOICES = (
        ("user", "Guest"),
        ("host", "Host"),
        ("admin", "Admin"),
    )

    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name="bookings")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="bookings")
    host = models.ForeignKey(User, on_delete=models.CASCADE, related_name="hosted_bookings")

    check_in = models.DateField()
    check_out = models.DateField()
    check_in_time = models.CharField(max_length=5, blank=True, default="")
    check_out_time = models.CharField(max_length=5, blank=True, default="")

    adults = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    children = models.PositiveIntegerField(default=0)
    infants = models.PositiveIntegerField(default=0)

    total_price = models.DecimalField(**MONEY, validators=[MinValueValidator(Decimal("0"))])
    base_price = models.DecimalField(**MONEY, default=0)
    cleaning_fee = models.DecimalField(**MONEY, default=0)
    service_fee = models.DecimalField(**MONEY, default=0)
    tax = models.DecimalField(**MONEY, default=0)
    discount = models.DecimalField(**MONEY, default=0)

    payment_method = models.CharField(max_length=10, choices=PAYMENT_METHOD_CHOICES, default=METHOD_PROPERTY)
    payment_status = models.CharField(
        max_length=10, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_PENDING, db_index=True
    )
    payment_reference = models.CharField(max_length=100, blank=True, default="")
    payment_date = models.DateTimeField(null=True, blank=True)
    payment_amount = models.DecimalField(**MONEY, null=True, blank=True)
    payment_recorded_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    booking_status = models.CharField(
        max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True
    )
    rejection_reason = models.CharField(max_length=255, blank=True, default="")

    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.CharField(max_length=10, choices=CANCELLED_BY_CHOICES, blank=True, default="")
    cancellation_reason = models.CharField(max_length=255, blank=True, default="")
    refund_amount = models.DecimalField(**MONEY, null=True, blank=True)

    is_cancellable = models.BooleanField(default=True)
    cancellation_deadline = models.DateTimeField(null=True, blank=True)
    special_requests = models.TextField(blank=True, default="", validators=[MaxLengthValidator(1000)])

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "booking_status"], name="booking_user_status_idx"),
            models.Index(fields=["host", "booking_status"], name="booking_host_status_idx"),
            models.Index(fields=["room", "check_in", "check_out"], name="booking_room_dates_idx"),
        ]

    @property
    def guest_count(self) -> int:
        return int(self.adults or 0) + int(self.children or 0)

    def save(self, *args, **kwargs):
        # Guests may cancel until 24h before check-in; late bookings are locked in
        if self._state.adding and self.check_in and self.cancellation_deadline is None:
            check_in_at = timezone.make_aware(
                datetime.combine(self.check_in, time.min)
            )
            if check_in_at - timezone.now() <= timedelta(hours=24):
                self.is_cancellable = False
            else:
                self.cancellation_deadline = check_in_at - timedelta(hours=24)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"Booking #{self.pk} {self.room_id} {self.check_in}→{self.check_out} [{self.booking_status}]"


# -------
# Earning
# -------
class EarningQuerySet(models.QuerySet):
    def for_host(self, user):
        return self.filter(host=user)

    def due(self, now=None):
        """Pending earnings whose hold period is over."""
        now = now or timezone.now()
        return self.filter(status=Earning.STATUS_PENDING, available_date__lte=now)


class Earning(models.Model):
    STATUS_PENDING = "pending"
    STATUS_AVAILABLE = "available"
    STATUS_PAID_OUT = "paid_out"
    STATUS_CHOICES = (
        (STATUS_PENDING, "Pending"),
        (STATUS_AVAILABLE, "Available"),
        (STATUS_PAID_OUT, "Paid out"),
    )

    host = models.ForeignKey(User, on_delete=models.CASCADE, related_name="earnings")
    # One row per booking, except when a partial payout splits it in two
    booking = models.ForeignKey(
        Booking,
        on_delete=models.CASCADE,
        related_name="earnings",
    )
    amount = models.DecimalField(**MONEY)
    platform_fee = models.DecimalField(**MONEY)
    host_payout = models.DecimalField(**MONEY)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    payment_method = models.CharField(max_length=10, choices=Booking.PAYMENT_METHOD_CHOICES)
    available_date = models.DateTimeField()
    paid_out_at = models.DateTimeField(null=True, blank=True)
    payout_id = models.CharField(max_length=64, blank=True, default="", db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = EarningQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["host", "status"], name="earning_host_status_idx"),
        ]

    def __str__(self):
        return f"Earning {self.pk} {self.host_payout} for booking {self.booking_id} [{self.status}]"


# -----
# EmailOTP
# -----
class EmailOTP(models.Model):
    """
    One-time email verification codes (6-digit).
    A user has at most one live code: issuing a new one retires the others.
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="email_otps",
    )
    code = models.CharField(max_length=6)
    created_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField()
    used_at = models.DateTimeField(null=True, blank=True)
    attempts = models.PositiveIntegerField(default=0)

    class Meta:
        indexes = [
            models.Index(fields=["user", "created_at"], name="emailotp_user_created_idx"),
        ]

    @property
    def is_expired(self) -> bool:
        """True if this code is past its expiry time."""
        return timezone.now() >= self.expires_at

    def matches(self, value: str) -> bool:
        return self.code == (value or "").strip()

    def mark_used(self) -> None:
        self.used_at = timezone.now()
        self.save(update_fields=["used_at"])

    @classmethod
    def create_for(cls, user, code: str, ttl_minutes: int = 15):
        """Creates a fresh OTP that expires after `ttl_minutes`."""
        expires_at = timezone.now() + timedelta(minutes=ttl_minutes)
        return cls.objects.create(
            user=user,
            code=str(code).strip(),
            expires_at=expires_at,
        )
