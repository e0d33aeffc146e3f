import re

import pytest
from django.contrib.auth import get_user_model
from django.core import mail
from django.urls import reverse
from rest_framework.test import APIClient

from spaces_app.models import Room, UserProfile

User = get_user_model()


def _code_from_last_mail() -> str:
    return re.search(r"\b(\d{6})\b", mail.outbox[-1].body).group(1)


@pytest.mark.django_db
def test_new_account_can_become_host_and_list_a_room(api_client, client_for, admin_user):
    r = api_client.post(
        reverse("api:auth-register"),
        {
            "email": "owner@example.com",
            "password": "Str0ng!Passw0rd",
            "first_name": "Olivia",
            "last_name": "Santos",
            "phone_number": "0917 555 1234",
        },
        format="json",
    )
    assert r.status_code == 201, r.data
    assert r.data["data"]["user"]["profile"]["phone_verified"] is True

    owner = APIClient()
    owner.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['data']['access']}")

    # Not verified yet: hosting is refused
    r = owner.post(reverse("api:auth-become-host"), {}, format="json")
    assert r.status_code == 403

    r = api_client.post(
        reverse("api:otp-verify"),
        {"email": "owner@example.com", "otp": _code_from_last_mail()},
        format="json",
    )
    assert r.status_code == 200, r.data

    r = owner.post(
        reverse("api:auth-id-upload"),
        {"id_type": "national_id", "id_number": "N-778899", "id_image": "https://cdn.example.com/n.jpg"},
        format="json",
    )
    assert r.status_code == 200, r.data

    user = User.objects.get(email="owner@example.com")
    r = client_for(admin_user).patch(
        reverse("api:admin-verification-decide", args=[user.id]), {"approved": True}, format="json"
    )
    assert r.status_code == 200, r.data
    assert r.data["data"]["profile"]["verification_level"] == UserProfile.LEVEL_VERIFIED

    r = owner.post(reverse("api:auth-become-host"), {"host_bio": "Two flats in Cebu"}, format="json")
    assert r.status_code == 200, r.data
    assert r.data["data"]["profile"]["role"] == UserProfile.ROLE_HOST

    r = owner.post(
        reverse("api:room-list"),
        {
            "title": "Seaview flat in Cebu",
            "description": "Two bedrooms, balcony and a view of the harbour.",
            "room_type": "stay",
            "base_price": "2500.00",
            "address": "12 Osmena Blvd",
            "city": "Cebu City",
            "state": "Cebu",
            "country": "Philippines",
            "zip_code": "6000",
            "max_guests": 4,
        },
        format="json",
    )
    assert r.status_code == 201, r.data
    room = Room.objects.get(pk=r.data["data"]["id"])
    assert room.host == user
    assert room.status == Room.STATUS_PENDING


@pytest.mark.django_db
def test_account_without_phone_stays_basic_until_a_number_is_added(api_client, client_for, admin_user):
    r = api_client.post(
        reverse("api:auth-register"),
        {
            "email": "nophone@example.com",
            "password": "Str0ng!Passw0rd",
            "first_name": "Paolo",
            "last_name": "Cruz",
        },
        format="json",
    )
    assert r.status_code == 201, r.data
    assert r.data["data"]["user"]["profile"]["phone_verified"] is False

    user = User.objects.get(email="nophone@example.com")
    api_client.post(
        reverse("api:otp-verify"),
        {"email": "nophone@example.com", "otp": _code_from_last_mail()},
        format="json",
    )
    client_for(user).post(
        reverse("api:auth-id-upload"),
        {"id_type": "passport", "id_number": "P-1", "id_image": "https://cdn.example.com/p.jpg"},
        format="json",
    )
    client_for(admin_user).patch(
        reverse("api:admin-verification-decide", args=[user.id]), {"approved": True}, format="json"
    )
    user.profile.refresh_from_db()
    assert user.profile.verification_level == UserProfile.LEVEL_BASIC

    r = client_for(user).patch(reverse("api:auth-me"), {"phone_number": "+63 918 222 3333"}, format="json")
    assert r.status_code == 200, r.data
    assert r.data["data"]["profile"]["phone_verified"] is True
    assert r.data["data"]["profile"]["verification_level"] == UserProfile.LEVEL_VERIFIED
