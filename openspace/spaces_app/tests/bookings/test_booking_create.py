from datetime import timedelta
from decimal import Decimal

import pytest
from django.urls import reverse
from django.utils import timezone

from notifications.models import NotificationTemplate, OutboundNotification
from spaces_app.models import Booking, Room


def _payload(room, days_ahead=10, nights=2, **overrides):
    check_in = timezone.localdate() + timedelta(days=days_ahead)
    payload = {
        "room": room.id,
        "check_in": check_in.isoformat(),
        "check_out": (check_in + timedelta(days=nights)).isoformat(),
        "adults": 2,
    }
    payload.update(overrides)
    return payload


@pytest.mark.django_db
def test_booking_totals_are_computed_server_side(client_for, guest, room_factory):
    room = room_factory(cleaning_fee=Decimal("150.00"), service_fee=Decimal("100.00"), tax=Decimal("50.00"))

    r = client_for(guest).post(
        reverse("api:booking-create"), _payload(room, nights=3, total_price="1.00"), format="json"
    )
    assert r.status_code == 201, r.data

    data = r.data["data"]
    assert data["nights"] == 3
    assert data["booking_status"] == Booking.STATUS_PENDING
    assert data["payment_status"] == Booking.PAYMENT_PENDING
    assert Decimal(str(data["base_price"])) == Decimal("3000.00")
    assert Decimal(str(data["total_price"])) == Decimal("3300.00")
    assert data["check_in_time"] == "14:00"

    booking = Booking.objects.get(pk=data["id"])
    assert booking.host_id == room.host_id
    assert booking.is_cancellable is True
    assert booking.cancellation_deadline is not None


@pytest.mark.django_db
def test_overlap_is_rejected_but_back_to_back_is_fine(client_for, guest, user_factory, room_factory):
    room = room_factory()
    assert client_for(guest).post(reverse("api:booking-create"), _payload(room), format="json").status_code == 201

    other = user_factory()
    clash = client_for(other).post(
        reverse("api:booking-create"), _payload(room, days_ahead=11), format="json"
    )
    assert clash.status_code == 400
    assert clash.data["message"] == "Room is not available for the selected dates."

    # check-out day is free for the next check-in
    next_stay = client_for(other).post(
        reverse("api:booking-create"), _payload(room, days_ahead=12), format="json"
    )
    assert next_stay.status_code == 201, next_stay.data


@pytest.mark.django_db
def test_cannot_book_pending_room_or_own_room(client_for, guest, host, room_factory):
    pending = room_factory(status=Room.STATUS_PENDING)
    r = client_for(guest).post(reverse("api:booking-create"), _payload(pending), format="json")
    assert r.status_code == 400
    assert r.data["code"] == "room_unavailable"

    own = room_factory()
    r = client_for(host).post(reverse("api:booking-create"), _payload(own), format="json")
    assert r.status_code == 400
    assert r.data["code"] == "own_room"


@pytest.mark.django_db
def test_date_and_capacity_rules(client_for, guest, room_factory):
    room = room_factory(max_guests=2)
    client = client_for(guest)

    past = client.post(reverse("api:booking-create"), _payload(room, days_ahead=-1), format="json")
    assert past.status_code == 400
    assert "check_in" in past.data["errors"]

    zero_nights = client.post(reverse("api:booking-create"), _payload(room, nights=0), format="json")
    assert zero_nights.status_code == 400
    assert "check_out" in zero_nights.data["errors"]

    crowded = client.post(
        reverse("api:booking-create"), _payload(room, adults=2, children=1), format="json"
    )
    assert crowded.status_code == 400
    assert "maximum of 2 guests" in crowded.data["message"]


@pytest.mark.django_db
def test_blocked_dates_and_availability_window(client_for, guest, room_factory):
    today = timezone.localdate()
    room = room_factory(
        available_until=today + timedelta(days=20),
        unavailable_dates=[(today + timedelta(days=11)).isoformat()],
    )
    client = client_for(guest)

    blocked = client.post(reverse("api:booking-create"), _payload(room, days_ahead=10), format="json")
    assert blocked.status_code == 400
    assert "not available on" in blocked.data["message"]

    too_late = client.post(reverse("api:booking-create"), _payload(room, days_ahead=19, nights=3), format="json")
    assert too_late.status_code == 400


@pytest.mark.django_db
def test_late_booking_is_not_cancellable(client_for, guest, room_factory):
    room = room_factory()
    r = client_for(guest).post(reverse("api:booking-create"), _payload(room, days_ahead=0, nights=1), format="json")
    assert r.status_code == 201, r.data
    assert r.data["data"]["is_cancellable"] is False
    assert r.data["data"]["cancellation_deadline"] is None


@pytest.mark.django_db(transaction=True)
def test_host_and_guest_are_notified(client_for, guest, room_factory):
    NotificationTemplate.objects.create(key="booking.new", subject="New booking", body="{{ guest_name }}")
    NotificationTemplate.objects.create(key="booking.requested", subject="Requested", body="{{ room.title }}")
    room = room_factory()

    r = client_for(guest).post(reverse("api:booking-create"), _payload(room), format="json")
    assert r.status_code == 201

    keys = dict(OutboundNotification.objects.values_list("template_key", "user_id"))
    assert keys == {"booking.new": room.host_id, "booking.requested": guest.id}


@pytest.mark.django_db
def test_overlong_stay_is_refused(client_for, guest, room_factory):
    room = room_factory()
    r = client_for(guest).post(reverse("api:booking-create"), _payload(room, nights=91), format="json")
    assert r.status_code == 400
    assert r.data["message"] == "A stay cannot be longer than 90 nights."
