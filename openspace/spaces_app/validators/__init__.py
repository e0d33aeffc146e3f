"""
Public facade for custom validators.

Usage everywhere:
    from spaces_app.validators import validate_price, validate_no_booking_conflict, ...
"""

# --- BOOKING ---
from .booking import (
    validate_stay_dates,
    validate_within_availability,
    validate_guest_capacity,
    validate_no_booking_conflict,
)

# --- PAYMENT DETAILS ---
from .payment import (
    validate_card_details,
    validate_mobile_wallet,
    validate_method_details,
)

# --- LISTING / PROFILE FIELDS ---
from .listing import (
    validate_listing_title,
    sanitize_html_description,
    validate_price,
    validate_clock_time,
    validate_iso_dates,
    normalise_phone,
    validate_numeric_range,
)

__all__ = [
    # booking
    "validate_stay_dates", "validate_within_availability", "validate_guest_capacity",
    "validate_no_booking_conflict",
    # payment
    "validate_card_details", "validate_mobile_wallet", "validate_method_details",
    # listing / profile
    "validate_listing_title", "sanitize_html_description", "validate_price", "validate_clock_time", "validate_iso_dates",
    "normalise_phone", "validate_numeric_range",
]
