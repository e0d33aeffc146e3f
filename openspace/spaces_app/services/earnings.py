"""
Host earnings ledger.

One Earning per paid booking: amount is the booking total, the platform keeps
PLATFORM_FEE_RATE of it and the rest is the host payout. An earning moves
pending -> available -> paid_out and never back.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Max, Q, Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone
from django.utils.crypto import get_random_string

from notifications.services import NotificationService
from spaces_app.api.exceptions import PayoutError
from spaces_app.models import Booking, Earning

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def _money(value) -> Decimal:
    return Decimal(value or 0).quantize(CENT, rounding=ROUND_HALF_UP)


def platform_fee_rate() -> Decimal:
    return Decimal(str(getattr(settings, "PLATFORM_FEE_RATE", "0.10")))


def split_amount(amount) -> tuple[Decimal, Decimal]:
    """Returns (platform_fee, host_payout) for a booking amount."""
    amount = _money(amount)
    fee = _money(amount * platform_fee_rate())
    return fee, amount - fee


def _start_of_day(day: date) -> datetime:
    return timezone.make_aware(datetime.combine(day, time.min))


def new_payout_id() -> str:
    return f"PO-{timezone.now():%Y%m%d}-{get_random_string(8).upper()}"


# ------------------------------------------------------------------
# Creating / releasing
# ------------------------------------------------------------------
def create_earning_for_booking(booking: Booking) -> Earning:
    """
    Record the host's share of a paid booking. Safe to call twice: the
    existing earning is returned instead of a duplicate.
    """
    existing = Earning.objects.filter(booking=booking).order_by("created_at").first()
    if existing is not None:
        return existing

    amount = _money(booking.payment_amount if booking.payment_amount is not None else booking.total_price)
    fee, payout = split_amount(amount)
    hold_days = int(getattr(settings, "EARNINGS_HOLD_DAYS", 1))

    earning = Earning.objects.create(
        host_id=booking.host_id,
        booking=booking,
        amount=amount,
        platform_fee=fee,
        host_payout=payout,
        status=Earning.STATUS_PENDING,
        payment_method=booking.payment_method,
        available_date=_start_of_day(booking.check_out + timedelta(days=hold_days)),
    )
    logger.info(
        "Earning %s created for booking %s (payout %s, fee %s)",
        earning.pk, booking.pk, payout, fee,
    )
    return earning


def release_booking_earnings(booking: Booking, now: Optional[datetime] = None) -> int:
    """Completed stay: the booking's pending earning becomes available right away."""
    now = now or timezone.now()
    return Earning.objects.filter(
        booking=booking, status=Earning.STATUS_PENDING
    ).update(status=Earning.STATUS_AVAILABLE, available_date=now, updated_at=now)


def release_due_earnings(now: Optional[datetime] = None) -> int:
    """Flip every pending earning whose available_date has passed. Returns the count."""
    now = now or timezone.now()
    count = Earning.objects.due(now).update(status=Earning.STATUS_AVAILABLE, updated_at=now)
    if count:
        logger.info("Released %s earnings to available", count)
    return count


def migrate_online_earnings(now: Optional[datetime] = None) -> int:
    """
    One-off fix for earnings recorded before online payments were released
    immediately: pending card/e-wallet earnings become available now.
    """
    now = now or timezone.now()
    return Earning.objects.filter(
        status=Earning.STATUS_PENDING,
        payment_method__in=Booking.ONLINE_METHODS,
    ).update(status=Earning.STATUS_AVAILABLE, available_date=now, updated_at=now)


@transaction.atomic
def reconcile_cancelled_earnings(booking: Booking, refund) -> Optional[Earning]:
    """
    Shrink the open (pending/available) earnings of a cancelled booking to
    what the platform kept: the amount paid minus the refund, less anything
    already paid out. Returns the surviving open earning, if any.
    """
    rows = list(
        Earning.objects.select_for_update()
        .filter(booking=booking)
        .order_by("created_at", "pk")
    )
    if not rows:
        return None

    paid = booking.payment_amount if booking.payment_amount is not None else booking.total_price
    retained = max(_money(paid) - _money(refund), ZERO)
    paid_out = sum((e.amount for e in rows if e.status == Earning.STATUS_PAID_OUT), ZERO)
    open_rows = [e for e in rows if e.status != Earning.STATUS_PAID_OUT]
    remaining = retained - paid_out

    if remaining < ZERO:
        logger.warning(
            "Booking %s refunded %s but %s was already paid out to host %s",
            booking.pk, refund, paid_out, booking.host_id,
        )

    if remaining <= ZERO:
        Earning.objects.filter(pk__in=[e.pk for e in open_rows]).delete()
        logger.info("Removed %s open earnings of cancelled booking %s", len(open_rows), booking.pk)
        return None

    if not open_rows:
        return None

    keep, extra = open_rows[0], open_rows[1:]
    Earning.objects.filter(pk__in=[e.pk for e in extra]).delete()
    fee, payout = split_amount(remaining)
    keep.amount = remaining
    keep.platform_fee = fee
    keep.host_payout = payout
    keep.save(update_fields=["amount", "platform_fee", "host_payout", "updated_at"])
    logger.info(
        "Earning %s of cancelled booking %s reduced to %s (payout %s)",
        keep.pk, booking.pk, remaining, payout,
    )
    return keep


# ------------------------------------------------------------------
# Reporting
# ------------------------------------------------------------------
def _totals_by_status(qs) -> dict:
    agg = qs.aggregate(
        total=Sum("host_payout"),
        pending=Sum("host_payout", filter=Q(status=Earning.STATUS_PENDING)),
        available=Sum("host_payout", filter=Q(status=Earning.STATUS_AVAILABLE)),
        paid_out=Sum("host_payout", filter=Q(status=Earning.STATUS_PAID_OUT)),
    )
    return {key: _money(value) for key, value in agg.items()}


def monthly_totals(qs, *, since: Optional[datetime] = None) -> list[dict]:
    """Group host payouts by the month the earning was recorded."""
    if since is not None:
        qs = qs.filter(created_at__gte=since)
    rows = (
        qs.annotate(month=TruncMonth("created_at"))
        .values("month")
        .annotate(total=Sum("host_payout"), count=Count("id"))
        .order_by("month")
    )
    return [
        {
            "year": row["month"].year,
            "month": row["month"].month,
            "total": _money(row["total"]),
            "count": row["count"],
        }
        for row in rows
    ]


def host_summary(user) -> dict:
    """
    Balance overview for a host. total always equals
    pending + available + paid_out.
    """
    qs = Earning.objects.for_host(user)
    totals = _totals_by_status(qs)

    last = (
        qs.filter(status=Earning.STATUS_PAID_OUT, paid_out_at__isnull=False)
        .order_by("-paid_out_at")
        .first()
    )

    today = timezone.localdate()
    first_of_month = today.replace(day=1)
    since_month = first_of_month.month - 11
    since_year = first_of_month.year + (since_month - 1) // 12
    since_month = (since_month - 1) % 12 + 1
    since = _start_of_day(date(since_year, since_month, 1))

    return {
        **totals,
        "last_payout": _money(last.host_payout) if last else None,
        "last_payout_date": last.paid_out_at if last else None,
        "monthly": monthly_totals(qs, since=since),
    }


def earnings_in_range(user, start: date, end: date) -> dict:
    qs = Earning.objects.for_host(user).filter(
        created_at__gte=_start_of_day(start),
        created_at__lt=_start_of_day(end + timedelta(days=1)),
    )
    return {
        "start_date": start,
        "end_date": end,
        "summary": _totals_by_status(qs),
        "earnings": qs.select_related("booking", "booking__room").order_by("-created_at"),
    }


def yearly_statement(user, year: int) -> dict:
    qs = Earning.objects.for_host(user).filter(created_at__year=year)
    by_month = {row["month"]: row for row in monthly_totals(qs)}
    months = []
    for month in range(1, 13):
        row = by_month.get(month)
        months.append({
            "month": month,
            "total": row["total"] if row else ZERO,
            "count": row["count"] if row else 0,
        })
    totals = _totals_by_status(qs)
    return {
        "year": year,
        "total": totals["total"],
        "platform_fees": _money(qs.aggregate(v=Sum("platform_fee"))["v"]),
        "gross": _money(qs.aggregate(v=Sum("amount"))["v"]),
        "months": months,
    }


def platform_summary() -> dict:
    """Admin view of the ledger: fees the platform kept, gross volume, host balances."""
    agg = Earning.objects.aggregate(
        gross=Sum("amount"),
        platform_fees=Sum("platform_fee"),
        host_payouts=Sum("host_payout"),
        earnings=Count("id"),
        hosts=Count("host", distinct=True),
    )
    return {
        "gross_volume": _money(agg["gross"]),
        "platform_fees": _money(agg["platform_fees"]),
        "host_payouts": _money(agg["host_payouts"]),
        "earnings_count": agg["earnings"],
        "hosts_count": agg["hosts"],
        "by_status": _totals_by_status(Earning.objects.all()),
        "monthly_fees": [
            {"year": row["month"].year, "month": row["month"].month, "platform_fees": _money(row["fees"])}
            for row in Earning.objects.annotate(month=TruncMonth("created_at"))
            .values("month")
            .annotate(fees=Sum("platform_fee"))
            .order_by("month")
        ],
    }


def top_hosts(limit: int = 10, period: str = "all") -> list[dict]:
    """Hosts ranked by what they earned in the period ("all", "month" or "year")."""
    qs = Earning.objects.all()
    today = timezone.localdate()
    if period == "month":
        qs = qs.filter(created_at__gte=_start_of_day(today.replace(day=1)))
    elif period == "year":
        qs = qs.filter(created_at__gte=_start_of_day(today.replace(month=1, day=1)))

    rows = (
        qs.values("host_id", "host__first_name", "host__last_name", "host__email")
        .annotate(
            total_earnings=Sum("host_payout"),
            platform_fees=Sum("platform_fee"),
            bookings=Count("booking", distinct=True),
        )
        .order_by("-total_earnings", "host_id")[:limit]
    )
    return [
        {
            "host_id": row["host_id"],
            "first_name": row["host__first_name"],
            "last_name": row["host__last_name"],
            "email": row["host__email"],
            "total_earnings": _money(row["total_earnings"]),
            "platform_fees": _money(row["platform_fees"]),
            "bookings_count": row["bookings"],
        }
        for row in rows
    ]


def host_payout_details(host) -> dict:
    """Admin view of one host: balances, what can be paid out now and past payouts."""
    qs = Earning.objects.for_host(host)
    payouts = (
        qs.filter(status=Earning.STATUS_PAID_OUT)
        .values("payout_id")
        .annotate(total=Sum("host_payout"), earnings=Count("id"), paid_out_at=Max("paid_out_at"))
        .order_by("-paid_out_at")
    )
    return {
        "host_id": host.pk,
        "host_name": f"{host.first_name} {host.last_name}".strip(),
        "email": host.email,
        "summary": _totals_by_status(qs),
        "available_earnings": qs.filter(status=Earning.STATUS_AVAILABLE)
        .select_related("booking", "booking__room")
        .order_by("-created_at"),
        "payouts": [
            {
                "payout_id": row["payout_id"],
                "total": _money(row["total"]),
                "earnings_count": row["earnings"],
                "paid_out_at": row["paid_out_at"],
            }
            for row in payouts
        ],
    }


# ------------------------------------------------------------------
# Payouts
# ------------------------------------------------------------------
def process_admin_payout(host_id: int, earning_ids: Iterable[int], payout_id: str = "") -> int:
    """
    Admin marks specific available earnings of one host as paid out.
    Earnings in any other status are left alone.
    """
    payout_id = payout_id or new_payout_id()
    now = timezone.now()
    count = Earning.objects.filter(
        host_id=host_id,
        pk__in=list(earning_ids),
        status=Earning.STATUS_AVAILABLE,
    ).update(
        status=Earning.STATUS_PAID_OUT,
        paid_out_at=now,
        payout_id=payout_id,
        updated_at=now,
    )
    if count == 0:
        raise PayoutError("No available earnings found to process", code="no_available_earnings")
    logger.info("Admin payout %s: %s earnings for host %s", payout_id, count, host_id)
    return count


@transaction.atomic
def request_payout(user, amount, method: str) -> dict:
    """
    Withdraw `amount` from the host's available balance.

    Available earnings are consumed oldest first. If the last one is only
    partly needed it is split: the consumed part becomes a paid_out row and
    the remainder stays available on the original row.
    """
    amount = _money(amount)
    if amount <= ZERO:
        raise PayoutError("Amount must be greater than zero", code="invalid_amount")

    earnings = list(
        Earning.objects.select_for_update()
        .filter(host=user, status=Earning.STATUS_AVAILABLE)
        .order_by("available_date", "created_at", "pk")
    )
    available = sum((e.host_payout for e in earnings), ZERO)
    if amount > available:
        raise PayoutError(
            f"Requested amount exceeds available balance of {available}",
            code="insufficient_balance",
        )

    payout_id = new_payout_id()
    now = timezone.now()
    remaining = amount
    consumed = []

    for earning in earnings:
        if remaining <= ZERO:
            break

        if earning.host_payout <= remaining:
            earning.status = Earning.STATUS_PAID_OUT
            earning.paid_out_at = now
            earning.payout_id = payout_id
            earning.save(update_fields=["status", "paid_out_at", "payout_id", "updated_at"])
            remaining -= earning.host_payout
            consumed.append(earning.pk)
            continue

        # Partial: carve the paid share out of this earning
        ratio = remaining / earning.host_payout
        paid_amount = _money(earning.amount * ratio)
        paid_fee = paid_amount - remaining
        paid = Earning.objects.create(
            host=earning.host,
            booking=earning.booking,
            amount=paid_amount,
            platform_fee=paid_fee,
            host_payout=remaining,
            status=Earning.STATUS_PAID_OUT,
            payment_method=earning.payment_method,
            available_date=earning.available_date,
            paid_out_at=now,
            payout_id=payout_id,
        )
        # Statements group on created_at; the split part belongs to the original month
        Earning.objects.filter(pk=paid.pk).update(created_at=earning.created_at)
        earning.amount -= paid_amount
        earning.platform_fee -= paid_fee
        earning.host_payout -= remaining
        earning.save(update_fields=["amount", "platform_fee", "host_payout", "updated_at"])
        consumed.append(paid.pk)
        remaining = ZERO

    logger.info("Payout %s requested by host %s: %s via %s", payout_id, user.pk, amount, method)
    NotificationService.queue_if_active(
        user,
        "payout.processed",
        {
            "user": {"first_name": user.first_name},
            "payout_id": payout_id,
            "amount": str(amount),
            "method": method,
        },
    )
    return {
        "payout_id": payout_id,
        "amount": amount,
        "method": method,
        "earning_ids": consumed,
        "remaining_balance": available - amount,
        "processed_at": now,
    }
