import re
from datetime import date

from django.utils import timezone
from rest_framework import serializers

CARD_RE = re.compile(r"^[45]\d{15}$")
EXPIRY_RE = re.compile(r"^(0[1-9]|1[0-2])/(\d{2})$")
CVV_RE = re.compile(r"^\d{3,4}$")
PH_MOBILE_RE = re.compile(r"^09\d{9}$")


def _digits(value) -> str:
    return re.sub(r"[\s-]", "", str(value or ""))


def validate_card_details(details: dict) -> dict:
    """
    Card number: 16 digits starting with 4 (Visa) or 5 (Mastercard).
    Expiry: MM/YY and not in the past. CVV: 3-4 digits. Holder name required.
    """
    details = details or {}
    errors = {}

    number = _digits(details.get("card_number"))
    if not CARD_RE.match(number):
        errors["card_number"] = ["Enter a valid 16-digit Visa or Mastercard number."]

    expiry = str(details.get("expiry_date") or "").strip()
    match = EXPIRY_RE.match(expiry)
    if not match:
        errors["expiry_date"] = ["Use MM/YY format."]
    else:
        month, year = int(match.group(1)), 2000 + int(match.group(2))
        today = timezone.localdate()
        if date(year, month, 1) < date(today.year, today.month, 1):
            errors["expiry_date"] = ["Card has expired."]

    if not CVV_RE.match(str(details.get("cvv") or "").strip()):
        errors["cvv"] = ["CVV must be 3 or 4 digits."]

    holder = str(details.get("card_holder") or "").strip()
    if not holder:
        errors["card_holder"] = ["Card holder name is required."]

    if errors:
        raise serializers.ValidationError(errors)

    return {"card_last4": number[-4:], "card_holder": holder}


def validate_mobile_wallet(details: dict) -> dict:
    """GCash / Maya: Philippine mobile number 09XXXXXXXXX plus an account name."""
    details = details or {}
    errors = {}

    mobile = _digits(details.get("mobile_number"))
    if not PH_MOBILE_RE.match(mobile):
        errors["mobile_number"] = ["Enter a valid mobile number (09XXXXXXXXX)."]

    name = str(details.get("account_name") or "").strip()
    if not name:
        errors["account_name"] = ["Account name is required."]

    if errors:
        raise serializers.ValidationError(errors)

    return {"mobile_number": mobile, "account_name": name}


def validate_method_details(method: str, details: dict) -> dict:
    """Dispatch on method; returns the sanitised details worth keeping."""
    if method == "card":
        return validate_card_details(details)
    if method in ("gcash", "maya"):
        return validate_mobile_wallet(details)
    raise serializers.ValidationError({"method": [f"Unsupported payment method '{method}'."]})
