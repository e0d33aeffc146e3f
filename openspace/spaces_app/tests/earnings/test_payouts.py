from datetime import timedelta
from decimal import Decimal

import pytest
from django.db.models import Sum
from django.urls import reverse
from django.utils import timezone

from notifications.models import NotificationTemplate, OutboundNotification
from spaces_app.models import Booking, Earning

GCASH = {"mobile_number": "09171234567", "account_name": "Hector Host"}


@pytest.fixture
def available_earning(booking_factory, host):
    """Available earning with an explicit available_date so payout order is known."""
    def make(total, days_ago):
        booking = booking_factory(
            total_price=total,
            booking_status=Booking.STATUS_COMPLETED,
            payment_status=Booking.PAYMENT_PAID,
            payment_amount=Decimal(total),
        )
        amount = Decimal(total)
        return Earning.objects.create(
            host=host,
            booking=booking,
            amount=amount,
            platform_fee=amount / 10,
            host_payout=amount - amount / 10,
            status=Earning.STATUS_AVAILABLE,
            payment_method=booking.payment_method,
            available_date=timezone.now() - timedelta(days=days_ago),
        )

    return make


def _request(client, amount, method="gcash", details=GCASH):
    return client.post(
        reverse("api:earning-request-payout"),
        {"amount": amount, "method": method, "account_details": details},
        format="json",
    )


@pytest.mark.django_db
def test_full_payout_consumes_oldest_first(client_for, host, available_earning):
    old = available_earning("1000.00", days_ago=5)   # 900 payout
    new = available_earning("2000.00", days_ago=1)   # 1800 payout

    r = _request(client_for(host), "900.00")
    assert r.status_code == 200, r.data
    data = r.data["data"]
    assert data["payout_id"].startswith("PO-")
    assert data["remaining_balance"] == Decimal("1800.00")

    old.refresh_from_db()
    new.refresh_from_db()
    assert old.status == Earning.STATUS_PAID_OUT
    assert old.payout_id == data["payout_id"]
    assert new.status == Earning.STATUS_AVAILABLE


@pytest.mark.django_db
def test_partial_payout_splits_the_last_earning(client_for, host, available_earning):
    earning = available_earning("1000.00", days_ago=2)   # 900 payout

    r = _request(client_for(host), "300.00")
    assert r.status_code == 200, r.data

    paid = Earning.objects.get(status=Earning.STATUS_PAID_OUT)
    earning.refresh_from_db()

    assert paid.booking_id == earning.booking_id
    assert paid.host_payout == Decimal("300.00")
    assert earning.host_payout == Decimal("600.00")
    assert earning.status == Earning.STATUS_AVAILABLE

    # nothing is created or lost by the split
    totals = Earning.objects.filter(booking=earning.booking).aggregate(
        amount=Sum("amount"), fee=Sum("platform_fee"), payout=Sum("host_payout")
    )
    assert totals["amount"] == Decimal("1000.00")
    assert totals["fee"] == Decimal("100.00")
    assert totals["payout"] == Decimal("900.00")
    assert paid.amount == paid.platform_fee + paid.host_payout


@pytest.mark.django_db
def test_summary_total_is_unchanged_by_a_payout(client_for, host, available_earning):
    available_earning("1000.00", days_ago=3)
    available_earning("500.00", days_ago=1)
    client = client_for(host)

    before = client.get(reverse("api:earning-summary")).data["data"]
    assert _request(client, "1000.00").status_code == 200
    after = client.get(reverse("api:earning-summary")).data["data"]

    assert after["total"] == before["total"] == Decimal("1350.00")
    assert after["paid_out"] == Decimal("1000.00")
    assert after["available"] == Decimal("350.00")
    assert after["last_payout"] is not None


@pytest.mark.django_db
def test_payout_above_balance_is_refused(client_for, host, available_earning):
    available_earning("1000.00", days_ago=1)

    r = _request(client_for(host), "900.01")
    assert r.status_code == 400
    assert r.data["code"] == "insufficient_balance"
    assert Earning.objects.filter(status=Earning.STATUS_PAID_OUT).count() == 0


@pytest.mark.django_db
def test_payout_details_are_validated(client_for, host, available_earning):
    available_earning("1000.00", days_ago=1)

    r = _request(client_for(host), "100.00", details={"mobile_number": "12", "account_name": ""})
    assert r.status_code == 400
    assert set(r.data["errors"]) == {"mobile_number", "account_name"}

    r = _request(client_for(host), "0")
    assert r.status_code == 400
    assert "amount" in r.data["errors"]


@pytest.mark.django_db
def test_payout_notifies_host(client_for, host, available_earning):
    NotificationTemplate.objects.create(key="payout.processed", subject="Payout {{ payout_id }}", body="{{ amount }}")
    available_earning("1000.00", days_ago=1)

    r = _request(client_for(host), "450.00")
    assert r.status_code == 200

    notif = OutboundNotification.objects.get(user=host)
    assert notif.template_key == "payout.processed"
    assert notif.context["amount"] == "450.00"


@pytest.mark.django_db
def test_admin_processes_selected_earnings(client_for, admin_user, host, available_earning):
    first = available_earning("1000.00", days_ago=2)
    second = available_earning("400.00", days_ago=1)

    r = client_for(admin_user).post(
        reverse("api:earning-admin-process-payout"),
        {"host_id": host.id, "earning_ids": [first.id, second.id], "payout_id": "BANK-778"},
        format="json",
    )
    assert r.status_code == 200, r.data
    assert r.data["data"] == {"processed": 2}

    first.refresh_from_db()
    assert first.status == Earning.STATUS_PAID_OUT
    assert first.payout_id == "BANK-778"
    assert first.paid_out_at is not None


@pytest.mark.django_db
def test_admin_payout_with_nothing_available(client_for, admin_user, host, available_earning):
    earning = available_earning("1000.00", days_ago=1)
    Earning.objects.filter(pk=earning.pk).update(status=Earning.STATUS_PENDING)

    r = client_for(admin_user).post(
        reverse("api:earning-admin-process-payout"),
        {"host_id": host.id, "earning_ids": [earning.id]},
        format="json",
    )
    assert r.status_code == 400
    assert r.data["code"] == "no_available_earnings"


@pytest.mark.django_db
def test_only_admins_process_payouts(client_for, host, available_earning):
    earning = available_earning("1000.00", days_ago=1)
    r = client_for(host).post(
        reverse("api:earning-admin-process-payout"),
        {"host_id": host.id, "earning_ids": [earning.id]},
        format="json",
    )
    assert r.status_code == 403


@pytest.mark.django_db
def test_partial_payout_leaves_past_statements_alone(client_for, host, available_earning):
    earning = available_earning("1000.00", days_ago=400)
    recorded = timezone.now() - timedelta(days=400)
    Earning.objects.filter(pk=earning.pk).update(created_at=recorded)
    client = client_for(host)

    def statement(year):
        return client.get(reverse("api:earning-statement", args=[year])).data["data"]

    before = statement(recorded.year)
    assert before["total"] == Decimal("900.00")

    assert _request(client, "300.00").status_code == 200

    after = statement(recorded.year)
    assert after["total"] == Decimal("900.00")
    assert after["gross"] == Decimal("1000.00")
    assert [m["total"] for m in after["months"]] == [m["total"] for m in before["months"]]

    paid = Earning.objects.get(status=Earning.STATUS_PAID_OUT)
    assert paid.created_at == Earning.objects.get(pk=earning.pk).created_at
    if recorded.year != timezone.now().year:
        assert statement(timezone.now().year)["total"] == Decimal("0.00")
