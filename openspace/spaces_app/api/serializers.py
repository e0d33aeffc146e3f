from django.contrib.auth import get_user_model, password_validation
from django.utils import timezone
from rest_framework import serializers

from spaces_app.models import Booking, Earning, Room, UserProfile
from spaces_app.validators import (
    normalise_phone,
    sanitize_html_description,
    validate_clock_time,
    validate_iso_dates,
    validate_listing_title,
    validate_price,
)

User = get_user_model()


# --------------------
# Users / profiles
# --------------------

class UserProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = UserProfile
        fields = [
            "role",
            "verification_level",
            "phone_number",
            "profile_image",
            "email_verified",
            "email_verified_at",
            "phone_verified",
            "id_type",
            "id_verification_status",
            "id_uploaded_at",
            "id_verified_at",
            "id_rejection_reason",
            "host_bio",
            "host_languages",
            "host_since",
            "response_rate",
            "response_time",
            "acceptance_rate",
        ]
        read_only_fields = fields


class UserSerializer(serializers.ModelSerializer):
    """Account as the owner (or an admin) sees it."""
    profile = UserProfileSerializer(read_only=True)
    is_banned = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "email", "first_name", "last_name", "is_banned", "date_joined", "profile"]
        read_only_fields = fields

    def get_is_banned(self, obj) -> bool:
        return not obj.is_active


class AdminUserSerializer(UserSerializer):
    ban_reason = serializers.CharField(source="profile.ban_reason", read_only=True)
    banned_at = serializers.DateTimeField(source="profile.banned_at", read_only=True)
    id_number = serializers.CharField(source="profile.id_number", read_only=True)
    id_image = serializers.CharField(source="profile.id_image", read_only=True)

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ["ban_reason", "banned_at", "id_number", "id_image", "last_login"]
        read_only_fields = fields


class HostSummarySerializer(serializers.ModelSerializer):
    """Public view of a host on a listing."""
    host_since = serializers.DateTimeField(source="profile.host_since", read_only=True)
    host_bio = serializers.CharField(source="profile.host_bio", read_only=True)
    is_verified = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "first_name", "last_name", "host_since", "host_bio", "is_verified"]

    def get_is_verified(self, obj) -> bool:
        return obj.profile.verification_level == UserProfile.LEVEL_VERIFIED


class RegistrationSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150)
    phone_number = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_email(self, value):
        value = value.strip().lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("User already exists with this email")
        return value

    def validate_password(self, value):
        if len(value or "") < 8:
            raise serializers.ValidationError("Password must be at least 8 characters long.")
        password_validation.validate_password(value)
        return value

    def validate_phone_number(self, value):
        return normalise_phone(value)

    def create(self, validated):
        phone = validated.pop("phone_number", "")
        email = validated.pop("email")
        user = User.objects.create_user(
            username=email,
            email=email,
            password=validated.pop("password"),
            **validated,
        )
        profile = user.profile
        profile.phone_number = phone
        # A number given at sign-up is taken as confirmed
        profile.phone_verified = bool(phone)
        profile.save(update_fields=["phone_number", "phone_verified", "updated_at"])
        return user


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class ProfileUpdateSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=150, required=False)
    last_name = serializers.CharField(max_length=150, required=False)
    phone_number = serializers.CharField(required=False, allow_blank=True)
    profile_image = serializers.URLField(max_length=500, required=False, allow_blank=True)
    host_bio = serializers.CharField(required=False, allow_blank=True)
    host_languages = serializers.ListField(child=serializers.CharField(max_length=50), required=False)

    def validate_phone_number(self, value):
        return normalise_phone(value)


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True)


class PasswordResetRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()


class PasswordResetConfirmSerializer(serializers.Serializer):
    token = serializers.CharField()
    password = serializers.CharField(write_only=True)


class IDVerificationUploadSerializer(serializers.Serializer):
    ID_TYPES = ("passport", "drivers_license", "national_id", "umid", "sss", "philhealth", "postal_id", "voters_id")

    id_type = serializers.ChoiceField(choices=[(t, t) for t in ID_TYPES])
    id_number = serializers.CharField(max_length=100)
    id_image = serializers.URLField(max_length=500)


class BecomeHostSerializer(serializers.Serializer):
    host_bio = serializers.CharField(required=False, allow_blank=True, default="")
    host_languages = serializers.ListField(
        child=serializers.CharField(max_length=50), required=False, default=list
    )


# --------------------
# Email OTP
# --------------------

class EmailOTPResendSerializer(serializers.Serializer):
    email = serializers.EmailField()


class EmailOTPVerifySerializer(serializers.Serializer):
    email = serializers.EmailField()
    otp = serializers.CharField(max_length=6)

    def validate_otp(self, value):
        value = (value or "").strip()
        if len(value) != 6 or not value.isdigit():
            raise serializers.ValidationError("OTP must be a 6-digit number.")
        return value


# --------------------
# Rooms
# --------------------

class RoomSerializer(serializers.ModelSerializer):
    host = HostSummarySerializer(read_only=True)
    unavailable_dates = serializers.ListField(child=serializers.CharField(), required=False)
    images = serializers.ListField(child=serializers.URLField(max_length=500), required=False)
    amenities = serializers.ListField(child=serializers.CharField(max_length=100), required=False)

    class Meta:
        model = Room
        fields = [
            "id",
            "title",
            "description",
            "room_type",
            "host",
            "base_price",
            "cleaning_fee",
            "service_fee",
            "tax",
            "address",
            "city",
            "state",
            "country",
            "zip_code",
            "latitude",
            "longitude",
            "amenities",
            "images",
            "max_guests",
            "bedrooms",
            "beds",
            "bathrooms",
            "available_from",
            "available_until",
            "unavailable_dates",
            "check_in_time",
            "check_out_time",
            "cancellation_policy",
            "instant_booking",
            "additional_rules",
            "status",
            "rejection_reason",
            "created_at",
            "updated_at",
        ]
        # status moves only through the admin approval endpoint
        read_only_fields = ["id", "host", "status", "rejection_reason", "created_at", "updated_at"]

    def validate_title(self, value):
        return validate_listing_title(value)

    def validate_description(self, value):
        return sanitize_html_description(value)

    def validate_base_price(self, value):
        return validate_price(value)

    def validate_check_in_time(self, value):
        return validate_clock_time(value)

    def validate_check_out_time(self, value):
        return validate_clock_time(value)

    def validate_unavailable_dates(self, value):
        return validate_iso_dates(value)

    def validate(self, attrs):
        available_from = attrs.get("available_from", getattr(self.instance, "available_from", None))
        available_until = attrs.get("available_until", getattr(self.instance, "available_until", None))
        if available_from and available_until and available_from > available_until:
            raise serializers.ValidationError(
                {"available_until": "available_until cannot be before available_from."}
            )
        return attrs


class RoomDecisionSerializer(serializers.Serializer):
    approved = serializers.BooleanField()
    rejection_reason = serializers.CharField(required=False, allow_blank=True, default="")


class RoomAvailabilitySerializer(serializers.Serializer):
    """Host edits to the availability window; null dates mean open-ended."""
    available_from = serializers.DateField(required=False, allow_null=True)
    available_until = serializers.DateField(required=False, allow_null=True)
    unavailable_dates = serializers.ListField(child=serializers.CharField(), required=False)

    def validate_unavailable_dates(self, value):
        return validate_iso_dates(value)

    def validate(self, attrs):
        room = self.context["room"]
        available_from = attrs.get("available_from", room.available_from)
        available_until = attrs.get("available_until", room.available_until)
        if available_from and available_until and available_from > available_until:
            raise serializers.ValidationError(
                {"available_until": "available_until cannot be before available_from."}
            )
        return attrs


# --------------------
# Bookings
# --------------------

class BookingRoomSerializer(serializers.ModelSerializer):
    class Meta:
        model = Room
        fields = ["id", "title", "room_type", "city", "address", "images"]


class BookingGuestSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "email", "first_name", "last_name"]


class BookingSerializer(serializers.ModelSerializer):
    room = BookingRoomSerializer(read_only=True)
    user = BookingGuestSerializer(read_only=True)
    host = BookingGuestSerializer(read_only=True)
    nights = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "room",
            "user",
            "host",
            "check_in",
            "check_out",
            "check_in_time",
            "check_out_time",
            "nights",
            "adults",
            "children",
            "infants",
            "total_price",
            "base_price",
            "cleaning_fee",
            "service_fee",
            "tax",
            "discount",
            "payment_method",
            "payment_status",
            "payment_date",
            "payment_amount",
            "booking_status",
            "rejection_reason",
            "cancelled_at",
            "cancelled_by",
            "cancellation_reason",
            "refund_amount",
            "is_cancellable",
            "cancellation_deadline",
            "special_requests",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_nights(self, obj) -> int:
        return (obj.check_out - obj.check_in).days


class BookingCreateSerializer(serializers.Serializer):
    room = serializers.PrimaryKeyRelatedField(queryset=Room.objects.all())
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    check_in_time = serializers.CharField(required=False, allow_blank=True, default="")
    check_out_time = serializers.CharField(required=False, allow_blank=True, default="")
    adults = serializers.IntegerField(min_value=1, default=1)
    children = serializers.IntegerField(min_value=0, default=0)
    infants = serializers.IntegerField(min_value=0, default=0)
    payment_method = serializers.ChoiceField(
        choices=Booking.PAYMENT_METHOD_CHOICES, default=Booking.METHOD_PROPERTY
    )
    special_requests = serializers.CharField(required=False, allow_blank=True, max_length=1000, default="")

    def validate_check_in_time(self, value):
        return validate_clock_time(value)

    def validate_check_out_time(self, value):
        return validate_clock_time(value)


class BookingReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255, default="")


class BookingPaymentSerializer(serializers.Serializer):
    booking_id = serializers.IntegerField()
    method = serializers.ChoiceField(choices=[(m, m) for m in Booking.ONLINE_METHODS])
    details = serializers.DictField(child=serializers.CharField(allow_blank=True))


class AdminBookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Booking.STATUS_CHOICES)
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255, default="")


# --------------------
# Earnings
# --------------------

class EarningSerializer(serializers.ModelSerializer):
    booking_id = serializers.IntegerField(read_only=True)
    room_title = serializers.CharField(source="booking.room.title", read_only=True)
    check_in = serializers.DateField(source="booking.check_in", read_only=True)
    check_out = serializers.DateField(source="booking.check_out", read_only=True)

    class Meta:
        model = Earning
        fields = [
            "id",
            "booking_id",
            "room_title",
            "check_in",
            "check_out",
            "amount",
            "platform_fee",
            "host_payout",
            "status",
            "payment_method",
            "available_date",
            "paid_out_at",
            "payout_id",
            "created_at",
        ]
        read_only_fields = fields


class AdminEarningSerializer(EarningSerializer):
    """Ledger row with the people involved, for the admin transaction history."""
    host = BookingGuestSerializer(read_only=True)
    guest = BookingGuestSerializer(source="booking.user", read_only=True)
    booking_total = serializers.DecimalField(
        source="booking.total_price", max_digits=12, decimal_places=2, read_only=True
    )

    class Meta(EarningSerializer.Meta):
        fields = EarningSerializer.Meta.fields + ["host", "guest", "booking_total"]
        read_only_fields = fields


class TopHostsQuerySerializer(serializers.Serializer):
    PERIODS = ("all", "month", "year")

    limit = serializers.IntegerField(min_value=1, max_value=100, default=10)
    period = serializers.ChoiceField(choices=[(p, p) for p in PERIODS], default="all")


class DateRangeSerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):
        if attrs["end_date"] < attrs["start_date"]:
            raise serializers.ValidationError({"end_date": "end_date cannot be before start_date."})
        return attrs


class PayoutRequestSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    method = serializers.ChoiceField(choices=[(m, m) for m in Booking.ONLINE_METHODS])
    account_details = serializers.DictField(child=serializers.CharField(allow_blank=True))

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Amount must be greater than zero.")
        return value


class AdminPayoutSerializer(serializers.Serializer):
    host_id = serializers.IntegerField()
    earning_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    payout_id = serializers.CharField(required=False, allow_blank=True, max_length=64, default="")


# --------------------
# Admin
# --------------------

class BanSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255, default="")


class AdminUserUpdateSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=150, required=False)
    last_name = serializers.CharField(max_length=150, required=False)
    phone_number = serializers.CharField(required=False, allow_blank=True)
    profile_image = serializers.URLField(max_length=500, required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=UserProfile.ROLE_CHOICES, required=False)
    verification_level = serializers.ChoiceField(choices=UserProfile.LEVEL_CHOICES, required=False)
    email_verified = serializers.BooleanField(required=False)
    phone_verified = serializers.BooleanField(required=False)

    def validate_phone_number(self, value):
        return normalise_phone(value)


class IDDecisionSerializer(serializers.Serializer):
    approved = serializers.BooleanField()
    rejection_reason = serializers.CharField(required=False, allow_blank=True, max_length=255, default="")


class CreateAdminSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    first_name = serializers.CharField(required=False, allow_blank=True, default="")
    last_name = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_password(self, value):
        if len(value or "") < 8:
            raise serializers.ValidationError("Password must be at least 8 characters long.")
        return value


class InitialAdminSetupSerializer(CreateAdminSerializer):
    setup_code = serializers.CharField()


def parse_year(value) -> int:
    """Statement years run from 2000 to the current year."""
    try:
        year = int(value)
    except (TypeError, ValueError):
        raise serializers.ValidationError({"year": "Invalid year."})
    if year < 2000 or year > timezone.localdate().year:
        raise serializers.ValidationError({"year": "Invalid year."})
    return year

