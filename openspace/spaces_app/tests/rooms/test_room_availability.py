from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone

from spaces_app.models import Booking, Room


def _day(offset):
    return timezone.localdate() + timedelta(days=offset)


@pytest.mark.django_db
def test_availability_reports_bookings_and_blocked_dates(api_client, room_factory, booking_factory):
    room = room_factory(unavailable_dates=[_day(20).isoformat(), _day(40).isoformat()])
    booking_factory(room=room, days_ahead=10, nights=3, booking_status=Booking.STATUS_CONFIRMED)
    booking_factory(room=room, days_ahead=14, nights=2, booking_status=Booking.STATUS_CANCELLED)

    url = reverse("api:room-availability", args=[room.id])

    free = api_client.get(url, {"start_date": _day(13), "end_date": _day(16)})
    assert free.status_code == 200, free.data
    assert free.data["data"]["is_available"] is True

    busy = api_client.get(url, {"start_date": _day(11), "end_date": _day(21)})
    data = busy.data["data"]
    assert data["is_available"] is False
    assert data["unavailable_dates_in_range"] == [_day(20).isoformat()]
    assert data["existing_bookings"] == [{"check_in": _day(10), "check_out": _day(13)}]


@pytest.mark.django_db
def test_availability_outside_the_window(api_client, room_factory):
    room = room_factory(available_from=_day(5), available_until=_day(30))
    r = api_client.get(
        reverse("api:room-availability", args=[room.id]), {"start_date": _day(25), "end_date": _day(35)}
    )
    assert r.data["data"]["is_available"] is False
    assert r.data["data"]["outside_availability_window"] is True


@pytest.mark.django_db
def test_availability_needs_both_dates(api_client, room_factory):
    room = room_factory()
    r = api_client.get(reverse("api:room-availability", args=[room.id]), {"start_date": _day(1)})
    assert r.status_code == 400
    assert "end_date" in r.data["errors"]


@pytest.mark.django_db
def test_unlisted_room_availability_is_hidden(api_client, room_factory):
    room = room_factory(status=Room.STATUS_PENDING)
    r = api_client.get(
        reverse("api:room-availability", args=[room.id]), {"start_date": _day(1), "end_date": _day(2)}
    )
    assert r.status_code == 404


@pytest.mark.django_db
def test_host_updates_availability(client_for, host, room_factory):
    room = room_factory()
    r = client_for(host).put(
        reverse("api:room-availability", args=[room.id]),
        {
            "available_from": _day(1).isoformat(),
            "available_until": _day(60).isoformat(),
            "unavailable_dates": [_day(9).isoformat(), _day(7).isoformat()],
        },
        format="json",
    )
    assert r.status_code == 200, r.data
    room.refresh_from_db()
    assert room.available_from == _day(1)
    assert room.available_until == _day(60)
    assert room.unavailable_dates == [_day(7).isoformat(), _day(9).isoformat()]

    # null reopens the window
    r = client_for(host).patch(
        reverse("api:room-availability", args=[room.id]), {"available_until": None}, format="json"
    )
    assert r.status_code == 200
    room.refresh_from_db()
    assert room.available_until is None
    assert room.available_from == _day(1)


@pytest.mark.django_db
def test_availability_update_checks_order_and_owner(client_for, host, guest, room_factory):
    room = room_factory(available_from=_day(10))
    url = reverse("api:room-availability", args=[room.id])

    r = client_for(host).patch(url, {"available_until": _day(5).isoformat()}, format="json")
    assert r.status_code == 400
    assert "available_until" in r.data["errors"]

    r = client_for(guest).patch(url, {"unavailable_dates": []}, format="json")
    assert r.status_code == 403


@pytest.mark.django_db
def test_rooms_by_host_shows_only_approved_listings(api_client, host, room_factory, guest):
    listed = room_factory(title="Listed loft")
    room_factory(title="Waiting loft", status=Room.STATUS_PENDING)

    r = api_client.get(reverse("api:room-by-host", args=[host.id]))
    assert r.status_code == 200, r.data
    assert [row["id"] for row in r.data["data"]] == [listed.id]
    assert r.data["data"][0]["host"]["id"] == host.id

    assert api_client.get(reverse("api:room-by-host", args=[guest.id])).status_code == 404


@pytest.mark.django_db
def test_room_description_is_sanitised(client_for, host):
    r = client_for(host).post(
        reverse("api:room-list"),
        {
            "title": "Loft with a view",
            "description": "<p>Bright <b>loft</b> by the bay.</p><script>steal()</script><a href='x'>link</a>",
            "room_type": "stay",
            "base_price": "1500.00",
            "address": "1 Roxas Blvd",
            "city": "Pasay",
            "state": "Metro Manila",
            "country": "Philippines",
            "zip_code": "1300",
        },
        format="json",
    )
    assert r.status_code == 201, r.data
    description = Room.objects.get(pk=r.data["data"]["id"]).description
    assert "<p>Bright <b>loft</b> by the bay.</p>" in description
    assert "<script" not in description
    assert "<a" not in description


@pytest.mark.django_db
def test_room_description_too_short_after_stripping(client_for, host, room_factory):
    room = room_factory()
    r = client_for(host).patch(
        reverse("api:room-detail", args=[room.id]), {"description": "<b></b><i>tiny</i>"}, format="json"
    )
    assert r.status_code == 400
    assert "description" in r.data["errors"]
