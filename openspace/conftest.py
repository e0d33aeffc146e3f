# openspace/conftest.py
import os
import uuid
from datetime import timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from spaces_app.models import Booking, Room, UserProfile


@pytest.fixture(autouse=True)
def clear_cache_between_tests(settings):
    # Throttle counters must not leak across tests
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def unique_cache_location_for_session(settings):
    caches = settings.CACHES.copy()
    default = caches.get("default", {}).copy()
    default["LOCATION"] = f"pytest-cache-{os.getpid()}-{uuid.uuid4()}"
    caches["default"] = default
    settings.CACHES = caches


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def user_factory(db):
    """
    Usage:
      u = user_factory()
      host = user_factory(email="host@example.com", role="host", verified=True)
    """
    User = get_user_model()
    counter = {"n": 0}

    def make_user(
        *,
        email=None,
        password="pass12345",
        first_name="Test",
        last_name="User",
        role=UserProfile.ROLE_USER,
        verified=False,
        email_verified=True,
        **extra,
    ):
        counter["n"] += 1
        if email is None:
            email = f"user{counter['n']}@example.com"

        u = User.objects.create_user(
            username=email,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            **extra,
        )

        profile = u.profile
        profile.role = role
        profile.email_verified = bool(email_verified)
        if email_verified:
            profile.email_verified_at = timezone.now()
        if verified:
            profile.verification_level = UserProfile.LEVEL_VERIFIED
            profile.phone_verified = True
            profile.id_verification_status = UserProfile.ID_APPROVED
        if role == UserProfile.ROLE_HOST:
            profile.host_since = timezone.now()
        profile.save()
        return u

    return make_user


@pytest.fixture
def guest(user_factory):
    return user_factory(email="guest@example.com", first_name="Gina")


@pytest.fixture
def host(user_factory):
    return user_factory(
        email="host@example.com",
        first_name="Hector",
        role=UserProfile.ROLE_HOST,
        verified=True,
    )


@pytest.fixture
def admin_user(user_factory):
    return user_factory(
        email="admin@example.com",
        first_name="Ada",
        role=UserProfile.ROLE_ADMIN,
        is_staff=True,
    )


@pytest.fixture
def client_for(db):
    """
    Returns a factory producing an APIClient authenticated as `user`.
    Uses force_authenticate so tests don't depend on the token round trip.
    """
    def make(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    return make


@pytest.fixture
def bearer_client(db):
    """APIClient carrying a real access token in the Authorization header."""
    def make(user):
        client = APIClient()
        token = RefreshToken.for_user(user).access_token
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        return client

    return make


@pytest.fixture
def room_factory(db, host):
    """
    Usage:
      room = room_factory()
      room2 = room_factory(host=other_host, base_price="2500.00", status=Room.STATUS_PENDING)
    """
    def make_room(
        *,
        host=host,
        title="Sunny loft in Makati",
        description="Bright loft close to the business district.",
        room_type="stay",
        base_price="1000.00",
        status=Room.STATUS_APPROVED,
        **overrides,
    ):
        fields = {
            "address": "123 Ayala Avenue",
            "city": "Makati",
            "state": "Metro Manila",
            "country": "Philippines",
            "zip_code": "1226",
            "max_guests": 4,
        }
        fields.update(overrides)
        return Room.objects.create(
            host=host,
            title=title,
            description=description,
            room_type=room_type,
            base_price=Decimal(base_price),
            status=status,
            **fields,
        )

    return make_room


@pytest.fixture
def booking_factory(db, room_factory, guest):
    """
    Booking rows written straight to the DB (no service rules applied).

    Usage:
      b = booking_factory()
      b = booking_factory(days_ahead=2, booking_status=Booking.STATUS_CONFIRMED)
    """
    def make_booking(*, room=None, user=None, days_ahead=10, nights=2, total_price="2000.00", **overrides):
        room = room or room_factory()
        check_in = timezone.localdate() + timedelta(days=days_ahead)
        fields = {
            "check_in": check_in,
            "check_out": check_in + timedelta(days=nights),
            "adults": 1,
            "total_price": Decimal(total_price),
            "base_price": Decimal(total_price),
        }
        fields.update(overrides)
        return Booking.objects.create(room=room, user=user or guest, host=room.host, **fields)

    return make_booking
