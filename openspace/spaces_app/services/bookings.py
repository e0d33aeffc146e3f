"""
Booking lifecycle.

Allowed moves:
    pending   --confirm-->  confirmed
    pending   --reject--->  rejected
    confirmed --complete->  completed
    pending/confirmed --cancel--> cancelled

Each move is one conditional UPDATE on (id, booking_status), so two
concurrent requests cannot both move the same booking.
"""
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from django.db import transaction
from django.utils import timezone

from notifications.services import NotificationService
from spaces_app.api.exceptions import APIError, InvalidTransition
from spaces_app.models import Booking, Earning, Room
from spaces_app.services import earnings as earnings_service
from spaces_app.validators import (
    validate_guest_capacity,
    validate_method_details,
    validate_no_booking_conflict,
    validate_stay_dates,
    validate_within_availability,
)

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    Booking.STATUS_PENDING: {
        Booking.STATUS_CONFIRMED,
        Booking.STATUS_REJECTED,
        Booking.STATUS_CANCELLED,
    },
    Booking.STATUS_CONFIRMED: {
        Booking.STATUS_COMPLETED,
        Booking.STATUS_CANCELLED,
    },
    Booking.STATUS_COMPLETED: set(),
    Booking.STATUS_CANCELLED: set(),
    Booking.STATUS_REJECTED: set(),
}


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, set())


def _sources_for(target: str) -> list[str]:
    return [src for src, targets in ALLOWED_TRANSITIONS.items() if target in targets]


def _transition(booking: Booking, target: str, **changes) -> Booking:
    """
    Move `booking` to `target` if its stored status still allows it.
    Raises InvalidTransition naming the current status otherwise.
    """
    sources = _sources_for(target)
    now = timezone.now()
    updated = Booking.objects.filter(pk=booking.pk, booking_status__in=sources).update(
        booking_status=target, updated_at=now, **changes
    )
    if updated == 0:
        current = (
            Booking.objects.filter(pk=booking.pk).values_list("booking_status", flat=True).first()
        )
        raise InvalidTransition(
            f"Cannot {_verb(target)} a booking with status '{current}'",
        )

    booking.refresh_from_db()
    logger.info("Booking %s -> %s", booking.pk, target)
    return booking


def _verb(target: str) -> str:
    return {
        Booking.STATUS_CONFIRMED: "confirm",
        Booking.STATUS_REJECTED: "reject",
        Booking.STATUS_COMPLETED: "complete",
        Booking.STATUS_CANCELLED: "cancel",
    }.get(target, f"move to '{target}'")


def _notify(user, key: str, booking: Booking, **extra) -> None:
    NotificationService.queue_if_active(
        user,
        key,
        {
            "user": {"first_name": user.first_name},
            "room": {"title": booking.room.title},
            "booking_id": booking.pk,
            "check_in": booking.check_in.isoformat(),
            "check_out": booking.check_out.isoformat(),
            **extra,
        },
    )


# ------------------------------------------------------------------
# Creation
# ------------------------------------------------------------------
def quote(room: Room, check_in: date, check_out: date) -> dict:
    """Price breakdown for a stay: nightly rate times nights plus the room's flat fees."""
    nights = (check_out - check_in).days
    base = room.base_price * nights
    total = base + room.cleaning_fee + room.service_fee + room.tax
    return {
        "nights": nights,
        "base_price": base,
        "cleaning_fee": room.cleaning_fee,
        "service_fee": room.service_fee,
        "tax": room.tax,
        "total_price": total,
    }


@transaction.atomic
def create_booking(user, room: Room, data: dict) -> Booking:
    # Lock the room row so two guests cannot grab the same dates
    room = Room.objects.select_for_update().get(pk=room.pk)

    if room.status != Room.STATUS_APPROVED:
        raise APIError("This space is not available for booking", code="room_unavailable")
    if room.host_id == user.pk:
        raise APIError("You cannot book your own space", code="own_room")

    check_in, check_out = data["check_in"], data["check_out"]
    validate_stay_dates(check_in, check_out)
    validate_within_availability(room, check_in, check_out)
    validate_guest_capacity(room, data.get("adults", 1), data.get("children", 0))
    validate_no_booking_conflict(room, check_in, check_out, Booking.objects.all())

    price = quote(room, check_in, check_out)
    discount = Decimal(data.get("discount") or 0)
    booking = Booking.objects.create(
        room=room,
        user=user,
        host_id=room.host_id,
        check_in=check_in,
        check_out=check_out,
        check_in_time=data.get("check_in_time") or room.check_in_time,
        check_out_time=data.get("check_out_time") or room.check_out_time,
        adults=data.get("adults", 1),
        children=data.get("children", 0),
        infants=data.get("infants", 0),
        base_price=price["base_price"],
        cleaning_fee=price["cleaning_fee"],
        service_fee=price["service_fee"],
        tax=price["tax"],
        discount=discount,
        total_price=max(price["total_price"] - discount, Decimal("0")),
        payment_method=data.get("payment_method", Booking.METHOD_PROPERTY),
        special_requests=data.get("special_requests", ""),
    )
    logger.info("Booking %s created by user %s for room %s", booking.pk, user.pk, room.pk)

    transaction.on_commit(lambda: _notify(room.host, "booking.new", booking, guest_name=user.get_full_name()))
    transaction.on_commit(lambda: _notify(user, "booking.requested", booking))
    return booking


# ------------------------------------------------------------------
# Host / admin actions
# ------------------------------------------------------------------
def confirm_booking(booking: Booking, actor) -> Booking:
    booking = _transition(booking, Booking.STATUS_CONFIRMED)
    _notify(booking.user, "booking.confirmed", booking)
    return booking


def reject_booking(booking: Booking, actor, reason: str) -> Booking:
    reason = (reason or "").strip()
    if not reason:
        raise APIError("Rejection reason is required", code="reason_required")
    booking = _transition(booking, Booking.STATUS_REJECTED, rejection_reason=reason[:255])
    _notify(booking.user, "booking.rejected", booking, reason=reason)
    return booking


@transaction.atomic
def complete_booking(booking: Booking, actor) -> Booking:
    """
    Close a confirmed stay. Pay-at-property bookings that were never marked
    paid get their payment recorded here; the host's earning is released.
    """
    booking = _transition(booking, Booking.STATUS_COMPLETED)

    if (
        booking.payment_method == Booking.METHOD_PROPERTY
        and booking.payment_status == Booking.PAYMENT_PENDING
    ):
        _record_payment(booking, actor)

    if booking.payment_status == Booking.PAYMENT_PAID:
        earnings_service.create_earning_for_booking(booking)
        earnings_service.release_booking_earnings(booking)

    transaction.on_commit(lambda: _notify(booking.user, "booking.completed", booking))
    return booking


def _record_payment(booking: Booking, actor) -> bool:
    now = timezone.now()
    updated = Booking.objects.filter(
        pk=booking.pk, payment_status=Booking.PAYMENT_PENDING
    ).update(
        payment_status=Booking.PAYMENT_PAID,
        payment_date=now,
        payment_amount=booking.total_price,
        payment_recorded_by=actor,
        updated_at=now,
    )
    booking.refresh_from_db()
    return bool(updated)


@transaction.atomic
def mark_payment_received(booking: Booking, actor) -> Booking:
    """Host collected the money at the property. Booking status is untouched."""
    if booking.payment_method != Booking.METHOD_PROPERTY:
        raise APIError(
            "Only pay-at-property bookings can be marked as paid", code="not_property_payment"
        )
    if booking.booking_status not in Booking.ACTIVE_STATUSES:
        raise InvalidTransition(
            f"Cannot mark payment for a booking with status '{booking.booking_status}'"
        )
    if booking.payment_status != Booking.PAYMENT_PENDING:
        raise APIError(
            f"Payment is already '{booking.payment_status}'", code="payment_not_pending"
        )

    if not _record_payment(booking, actor):
        raise APIError("Payment was already recorded", code="payment_not_pending")

    earnings_service.create_earning_for_booking(booking)
    logger.info("Payment for booking %s recorded by user %s", booking.pk, actor.pk)
    return booking


# ------------------------------------------------------------------
# Cancellation
# ------------------------------------------------------------------
def cancelled_by_role(booking: Booking, actor) -> str:
    if actor.is_staff:
        return "admin"
    if actor.pk == booking.host_id:
        return "host"
    return "user"


def compute_refund(booking: Booking, cancelled_by: str, today: Optional[date] = None) -> Decimal:
    """
    Nothing to refund unless the booking was paid.
    Host/admin cancellations refund in full. Guests: 7+ days before check-in
    full refund, 3-7 days half, later nothing.
    """
    if booking.payment_status != Booking.PAYMENT_PAID:
        return Decimal("0")

    paid = booking.payment_amount if booking.payment_amount is not None else booking.total_price
    if cancelled_by in ("host", "admin"):
        return paid

    today = today or timezone.localdate()
    days_before = (booking.check_in - today).days
    if days_before >= 7:
        return paid
    if days_before >= 3:
        return (paid * Decimal("0.5")).quantize(Decimal("0.01"))
    return Decimal("0")


def can_cancel(booking: Booking, actor) -> dict:
    role = cancelled_by_role(booking, actor)
    if booking.booking_status not in Booking.ACTIVE_STATUSES:
        return {"can_cancel": False, "reason": f"Booking is already {booking.booking_status}"}
    if role == "user" and not booking.is_cancellable:
        return {
            "can_cancel": False,
            "reason": "Bookings within 24 hours of check-in cannot be cancelled",
        }
    if role == "user" and booking.cancellation_deadline and timezone.now() > booking.cancellation_deadline:
        return {"can_cancel": False, "reason": "The cancellation deadline has passed"}
    return {
        "can_cancel": True,
        "refund_amount": compute_refund(booking, role),
        "cancellation_deadline": booking.cancellation_deadline,
    }


@transaction.atomic
def cancel_booking(booking: Booking, actor, reason: str = "") -> Booking:
    check = can_cancel(booking, actor)
    if not check["can_cancel"]:
        if booking.booking_status not in Booking.ACTIVE_STATUSES:
            raise InvalidTransition(check["reason"])
        raise APIError(check["reason"], code="not_cancellable")

    role = cancelled_by_role(booking, actor)
    refund = compute_refund(booking, role)
    changes = {
        "cancelled_at": timezone.now(),
        "cancelled_by": role,
        "cancellation_reason": (reason or "")[:255],
        "refund_amount": refund,
    }
    if refund > 0:
        changes["payment_status"] = Booking.PAYMENT_REFUNDED
    elif booking.payment_status == Booking.PAYMENT_PENDING:
        changes["payment_status"] = Booking.PAYMENT_CANCELLED

    booking = _transition(booking, Booking.STATUS_CANCELLED, **changes)
    earnings_service.reconcile_cancelled_earnings(booking, refund)

    other = booking.host if role == "user" else booking.user
    transaction.on_commit(lambda: _notify(other, "booking.cancelled", booking, reason=reason or ""))
    return booking


# ------------------------------------------------------------------
# Online payment (simulated settlement)
# ------------------------------------------------------------------
@transaction.atomic
def pay_online(booking: Booking, user, method: str, details: dict) -> Booking:
    """
    Card / GCash / Maya checkout. Details are validated, no money moves.
    A paid online booking is confirmed on the spot.
    """
    if booking.user_id != user.pk:
        raise APIError("You can only pay for your own bookings", code="forbidden", status_code=403)
    if method not in Booking.ONLINE_METHODS:
        raise APIError(f"Unsupported payment method '{method}'", code="invalid_method")
    if booking.booking_status not in Booking.ACTIVE_STATUSES:
        raise InvalidTransition(
            f"Cannot pay for a booking with status '{booking.booking_status}'"
        )
    if booking.payment_status != Booking.PAYMENT_PENDING:
        raise APIError(f"Payment is already '{booking.payment_status}'", code="payment_not_pending")

    sanitised = validate_method_details(method, details)

    now = timezone.now()
    reference = sanitised.get("card_last4") or sanitised.get("mobile_number", "")
    updated = Booking.objects.filter(
        pk=booking.pk,
        payment_status=Booking.PAYMENT_PENDING,
        booking_status__in=Booking.ACTIVE_STATUSES,
    ).update(
        payment_method=method,
        payment_status=Booking.PAYMENT_PAID,
        payment_date=now,
        payment_amount=booking.total_price,
        payment_reference=f"{method}:{reference}",
        booking_status=Booking.STATUS_CONFIRMED,
        updated_at=now,
    )
    if updated == 0:
        booking.refresh_from_db()
        raise InvalidTransition(
            f"Cannot pay for a booking with status '{booking.booking_status}'"
        )

    booking.refresh_from_db()
    earnings_service.create_earning_for_booking(booking)
    logger.info("Online payment (%s) for booking %s", method, booking.pk)
    transaction.on_commit(lambda: _notify(booking.user, "booking.confirmed", booking))
    return booking


# ------------------------------------------------------------------
# Admin override
# ------------------------------------------------------------------
def admin_set_status(booking: Booking, actor, target: str, reason: str = "") -> Booking:
    """Admins drive the same table; nothing outside it is allowed."""
    if target == Booking.STATUS_CONFIRMED:
        return confirm_booking(booking, actor)
    if target == Booking.STATUS_REJECTED:
        return reject_booking(booking, actor, reason)
    if target == Booking.STATUS_COMPLETED:
        return complete_booking(booking, actor)
    if target == Booking.STATUS_CANCELLED:
        return cancel_booking(booking, actor, reason)
    raise InvalidTransition(
        f"Cannot move a booking with status '{booking.booking_status}' to '{target}'"
    )


def admin_delete_booking(booking: Booking, actor) -> None:
    if booking.booking_status == Booking.STATUS_CONFIRMED:
        raise APIError("Cannot delete a confirmed booking", code="booking_confirmed")
    if booking.earnings.filter(status=Earning.STATUS_PAID_OUT).exists():
        raise APIError("Cannot delete a booking that has been paid out", code="booking_paid_out")
    booking_id = booking.pk
    booking.delete()
    logger.info("Booking %s deleted by admin %s", booking_id, actor.pk)


# ------------------------------------------------------------------
# Availability
# ------------------------------------------------------------------
def room_availability(room: Room, start: date, end: date) -> dict:
    """
    Whether [start, end) can be booked, with the reasons it cannot: the
    availability window, blocked dates and overlapping active bookings.
    """
    outside_window = bool(
        (room.available_from and start < room.available_from)
        or (room.available_until and end > room.available_until)
    )
    blocked = [
        day for day in (room.unavailable_dates or [])
        if start.isoformat() <= day < end.isoformat()
    ]
    overlapping = list(
        room.bookings.filter(
            booking_status__in=Booking.ACTIVE_STATUSES,
            check_in__lt=end,
            check_out__gt=start,
        )
        .order_by("check_in")
        .values("check_in", "check_out")
    )
    return {
        "is_available": not (outside_window or blocked or overlapping),
        "outside_availability_window": outside_window,
        "available_from": room.available_from,
        "available_until": room.available_until,
        "unavailable_dates_in_range": blocked,
        "existing_bookings": overlapping,
    }


def update_room_availability(room: Room, actor, changes: dict) -> Room:
    for field in ("available_from", "available_until", "unavailable_dates"):
        if field in changes:
            setattr(room, field, changes[field])
    room.save(update_fields=["available_from", "available_until", "unavailable_dates", "updated_at"])
    logger.info("Availability of room %s updated by %s", room.pk, actor.pk)
    return room
