from datetime import date, timedelta

from django.conf import settings
from django.utils import timezone
from rest_framework import serializers


def validate_stay_dates(check_in: date, check_out: date) -> None:
    """Check-in today or later, check-out strictly after check-in, at most MAX_STAY_NIGHTS nights."""
    if check_in < timezone.localdate():
        raise serializers.ValidationError({"check_in": ["Check-in date cannot be in the past."]})
    if check_out <= check_in:
        raise serializers.ValidationError({"check_out": ["Check-out date must be after check-in date."]})
    max_nights = int(getattr(settings, "MAX_STAY_NIGHTS", 90))
    if (check_out - check_in).days > max_nights:
        raise serializers.ValidationError(
            {"check_out": [f"A stay cannot be longer than {max_nights} nights."]}
        )


def validate_within_availability(room, check_in: date, check_out: date) -> None:
    """The stay must sit inside the room's availability window and avoid blocked dates."""
    if room.available_from and check_in < room.available_from:
        raise serializers.ValidationError(
            f"This space is only available from {room.available_from.isoformat()}."
        )
    if room.available_until and check_out > room.available_until:
        raise serializers.ValidationError(
            f"This space is only available until {room.available_until.isoformat()}."
        )

    blocked = set(room.unavailable_dates or [])
    if not blocked:
        return
    day = check_in
    while day < check_out:
        if day.isoformat() in blocked:
            raise serializers.ValidationError(
                f"This space is not available on {day.isoformat()}."
            )
        day += timedelta(days=1)


def validate_guest_capacity(room, adults: int, children: int = 0) -> None:
    if (adults or 0) < 1:
        raise serializers.ValidationError({"adults": ["At least one adult is required."]})
    total = int(adults or 0) + int(children or 0)
    if total > room.max_guests:
        raise serializers.ValidationError(
            f"This space allows a maximum of {room.max_guests} guests."
        )


def validate_no_booking_conflict(room, check_in: date, check_out: date, booking_qs) -> None:
    """
    Ensure no overlapping active (pending/confirmed) bookings for a room.
    Check-out day is free for the next check-in.
    """
    clash = (
        booking_qs.filter(room=room, booking_status__in=("pending", "confirmed"))
        .filter(check_in__lt=check_out, check_out__gt=check_in)
        .exists()
    )
    if clash:
        raise serializers.ValidationError("Room is not available for the selected dates.")
