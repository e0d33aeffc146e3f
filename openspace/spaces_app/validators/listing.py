import re
from datetime import date
from decimal import Decimal, InvalidOperation

import bleach
from rest_framework import serializers

TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


# ------------- Listing fields -------------

def validate_listing_title(value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise serializers.ValidationError("Title is required.")
    if len(value) > 100:
        raise serializers.ValidationError("Title cannot be more than 100 characters.")
    return value


# Description: plain text plus a few formatting tags
DESCRIPTION_TAGS = ["b", "strong", "i", "em", "ul", "ol", "li", "br", "p"]


def sanitize_html_description(value, min_len=20, max_len=4000) -> str:
    if not value or not isinstance(value, str):
        raise serializers.ValidationError("Description is required.")
    cleaned = bleach.clean(value, tags=DESCRIPTION_TAGS, attributes={}, strip=True).strip()
    text_only = bleach.clean(cleaned, tags=[], strip=True)
    if len(text_only.strip()) < min_len:
        raise serializers.ValidationError(f"Description must be at least {min_len} characters.")
    if len(cleaned) > max_len:
        raise serializers.ValidationError(f"Description must be no more than {max_len} characters.")
    return cleaned


def validate_price(value, *, min_val: float = 0.0, max_val: float = 10_000_000.0) -> Decimal:
    """Ensure price is a Decimal within range."""
    try:
        dec = Decimal(str(value))
    except (InvalidOperation, TypeError):
        raise serializers.ValidationError("Enter a valid price.")
    if dec < Decimal(str(min_val)) or dec > Decimal(str(max_val)):
        raise serializers.ValidationError(f"Price must be between {min_val} and {max_val}.")
    return dec.quantize(Decimal("0.01"))


def validate_clock_time(value: str) -> str:
    """HH:MM, 24h clock."""
    value = (value or "").strip()
    if value and not TIME_RE.match(value):
        raise serializers.ValidationError("Use HH:MM (24h) format.")
    return value


def validate_iso_dates(values) -> list:
    """Normalise a list of YYYY-MM-DD strings (or dates) to sorted unique ISO strings."""
    out = set()
    for raw in values or []:
        if isinstance(raw, date):
            out.add(raw.isoformat())
            continue
        try:
            out.add(date.fromisoformat(str(raw)[:10]).isoformat())
        except ValueError:
            raise serializers.ValidationError(f"'{raw}' is not a valid date (YYYY-MM-DD).")
    return sorted(out)


# ------------- Profile -------------

def normalise_phone(value: str) -> str:
    """Keep digits and an optional leading '+'."""
    value = (value or "").strip()
    value = re.sub(r"[^\d+]", "", value)
    if value and len(value.replace("+", "")) < 7:
        raise serializers.ValidationError("Enter a valid phone number.")
    return value


# ------------- Ranges -------------

def validate_numeric_range(min_v, max_v, *, label_min="min", label_max="max"):
    """Ensure min <= max when both provided."""
    if min_v is None or max_v is None:
        return
    try:
        if Decimal(str(min_v)) > Decimal(str(max_v)):
            raise serializers.ValidationError({label_min: f"{label_min} cannot be greater than {label_max}."})
    except (InvalidOperation, TypeError):
        raise serializers.ValidationError("Enter valid numeric bounds.")
    return (min_v, max_v)
