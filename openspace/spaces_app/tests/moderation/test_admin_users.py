import pytest
from django.contrib.auth import get_user_model
from django.urls import reverse

from notifications.models import NotificationTemplate, OutboundNotification
from spaces_app.models import Booking, Room, UserProfile

User = get_user_model()


@pytest.mark.django_db
def test_ban_and_unban(client_for, admin_user, user_factory):
    target = user_factory(email="target@example.com")
    admin = client_for(admin_user)

    r = admin.patch(reverse("api:admin-user-ban", args=[target.id]), {}, format="json")
    assert r.status_code == 200, r.data
    assert r.data["data"]["is_banned"] is True
    assert r.data["data"]["ban_reason"] == "Banned by admin"

    target.refresh_from_db()
    assert target.is_active is False
    assert target.profile.banned_at is not None

    r = admin.patch(reverse("api:admin-user-unban", args=[target.id]), {}, format="json")
    assert r.status_code == 200
    target.refresh_from_db()
    assert target.is_active is True
    assert target.profile.ban_reason == ""


@pytest.mark.django_db
def test_auth_alias_routes_reach_the_same_actions(client_for, admin_user, user_factory):
    target = user_factory()
    r = client_for(admin_user).patch(
        reverse("api:auth-admin-ban", args=[target.id]), {"reason": "Chargebacks"}, format="json"
    )
    assert r.status_code == 200
    target.profile.refresh_from_db()
    assert target.profile.ban_reason == "Chargebacks"


@pytest.mark.django_db
def test_admins_cannot_be_banned_or_deleted(client_for, admin_user, user_factory):
    other_admin = user_factory(is_staff=True, role=UserProfile.ROLE_ADMIN)
    admin = client_for(admin_user)

    r = admin.patch(reverse("api:admin-user-ban", args=[other_admin.id]), {}, format="json")
    assert r.status_code == 403
    assert r.data["code"] == "target_is_admin"

    r = admin.delete(reverse("api:admin-user-detail", args=[other_admin.id]))
    assert r.status_code == 403
    assert User.objects.filter(pk=other_admin.pk).exists()


@pytest.mark.django_db
def test_delete_user_removes_their_rooms(client_for, admin_user, host, room_factory):
    room = room_factory()
    r = client_for(admin_user).delete(reverse("api:admin-user-detail", args=[host.id]))
    assert r.status_code == 200
    assert not User.objects.filter(pk=host.pk).exists()
    assert not Room.objects.filter(pk=room.pk).exists()


@pytest.mark.django_db
def test_admin_endpoints_reject_regular_users(client_for, user_factory):
    client = client_for(user_factory())
    assert client.get(reverse("api:admin-dashboard")).status_code == 403
    assert client.get(reverse("api:admin-users")).status_code == 403
    assert client.get(reverse("api:admin-bookings")).status_code == 403


@pytest.mark.django_db
def test_dashboard_counts(client_for, admin_user, user_factory, room_factory):
    user_factory(verified=True)
    banned = user_factory()
    banned.is_active = False
    banned.save()
    room_factory(status=Room.STATUS_PENDING)

    r = client_for(admin_user).get(reverse("api:admin-dashboard"))
    assert r.status_code == 200
    data = r.data["data"]
    # admin + host (via room_factory) + two users
    assert data["total_users"] == 4
    assert data["banned_users"] == 1
    assert data["pending_spaces"] == 1
    assert data["hosts"] == 1


@pytest.mark.django_db
def test_user_list_filters(client_for, admin_user, user_factory):
    user_factory(email="maria@example.com", first_name="Maria")
    banned = user_factory(email="spammer@example.com")
    banned.is_active = False
    banned.save()
    admin = client_for(admin_user)

    r = admin.get(reverse("api:admin-users"), {"banned": "true"})
    assert [row["email"] for row in r.data["data"]] == ["spammer@example.com"]

    r = admin.get(reverse("api:admin-users"), {"search": "mari"})
    assert [row["email"] for row in r.data["data"]] == ["maria@example.com"]


@pytest.mark.django_db
def test_id_upload_then_admin_approval_verifies_account(client_for, admin_user, user_factory):
    NotificationTemplate.objects.create(key="id.approved", subject="ID approved", body="Hi {{ user.first_name }}")
    applicant = user_factory(email="applicant@example.com")
    applicant.profile.phone_verified = True
    applicant.profile.save()

    r = client_for(applicant).post(
        reverse("api:auth-id-upload"),
        {"id_type": "passport", "id_number": "P1234567", "id_image": "https://cdn.example.com/id.jpg"},
        format="json",
    )
    assert r.status_code == 200, r.data
    assert r.data["data"]["profile"]["id_verification_status"] == UserProfile.ID_PENDING

    pending = client_for(admin_user).get(reverse("api:admin-verifications-pending"))
    assert [row["id"] for row in pending.data["data"]] == [applicant.id]

    r = client_for(admin_user).patch(
        reverse("api:admin-verification-decide", args=[applicant.id]), {"approved": True}, format="json"
    )
    assert r.status_code == 200, r.data

    applicant.profile.refresh_from_db()
    assert applicant.profile.id_verification_status == UserProfile.ID_APPROVED
    assert applicant.profile.verification_level == UserProfile.LEVEL_VERIFIED
    assert OutboundNotification.objects.filter(user=applicant, template_key="id.approved").exists()


@pytest.mark.django_db
def test_id_rejection_needs_a_reason(client_for, admin_user, user_factory):
    applicant = user_factory()
    profile = applicant.profile
    profile.id_type = "passport"
    profile.id_number = "P1"
    profile.id_verification_status = UserProfile.ID_PENDING
    profile.save()
    url = reverse("api:admin-verification-decide", args=[applicant.id])

    r = client_for(admin_user).patch(url, {"approved": False}, format="json")
    assert r.status_code == 400
    assert r.data["code"] == "reason_required"

    r = client_for(admin_user).patch(url, {"approved": False, "rejection_reason": "Blurry photo"}, format="json")
    assert r.status_code == 200
    profile.refresh_from_db()
    assert profile.id_verification_status == UserProfile.ID_REJECTED
    assert profile.id_rejection_reason == "Blurry photo"
    assert profile.verification_level == UserProfile.LEVEL_BASIC


@pytest.mark.django_db
def test_decision_without_document_is_refused(client_for, admin_user, user_factory):
    applicant = user_factory()
    r = client_for(admin_user).patch(
        reverse("api:admin-verification-decide", args=[applicant.id]), {"approved": True}, format="json"
    )
    assert r.status_code == 400
    assert r.data["code"] == "no_id_document"


@pytest.mark.django_db
def test_become_host_requires_verified_account(client_for, user_factory):
    basic = user_factory()
    r = client_for(basic).post(reverse("api:auth-become-host"), {}, format="json")
    assert r.status_code == 403

    verified = user_factory(verified=True)
    r = client_for(verified).post(
        reverse("api:auth-become-host"), {"host_bio": "Superhost", "host_languages": ["en", "tl"]}, format="json"
    )
    assert r.status_code == 200, r.data
    verified.profile.refresh_from_db()
    assert verified.profile.role == UserProfile.ROLE_HOST
    assert verified.profile.host_languages == ["en", "tl"]
    assert verified.profile.host_since is not None

    again = client_for(verified).post(reverse("api:auth-become-host"), {}, format="json")
    assert again.status_code == 400
    assert again.data["code"] == "already_host"


@pytest.mark.django_db
def test_admin_updates_user_details_and_flags(client_for, admin_user, user_factory):
    target = user_factory(email="fixme@example.com", first_name="Jon")

    r = client_for(admin_user).patch(
        reverse("api:admin-user-detail", args=[target.id]),
        {"first_name": "John", "phone_number": "0917 000 1111", "phone_verified": True, "role": "host"},
        format="json",
    )
    assert r.status_code == 200, r.data
    assert r.data["message"] == "User updated successfully"

    target.refresh_from_db()
    assert target.first_name == "John"
    assert target.profile.phone_number == "09170001111"
    assert target.profile.phone_verified is True
    assert target.profile.role == UserProfile.ROLE_HOST
    assert target.profile.host_since is not None


@pytest.mark.django_db
def test_admin_update_cannot_promote_or_demote_admins(client_for, admin_user, user_factory):
    plain = user_factory()
    other_admin = user_factory(role=UserProfile.ROLE_ADMIN, is_staff=True)
    admin = client_for(admin_user)

    r = admin.patch(reverse("api:admin-user-detail", args=[plain.id]), {"role": "admin"}, format="json")
    assert r.status_code == 400
    assert r.data["code"] == "invalid_role"

    r = admin.patch(reverse("api:admin-user-detail", args=[other_admin.id]), {"role": "user"}, format="json")
    assert r.status_code == 403
    assert r.data["code"] == "target_is_admin"


@pytest.mark.django_db
def test_admin_user_update_is_admin_only(client_for, guest, user_factory):
    target = user_factory()
    r = client_for(guest).patch(reverse("api:admin-user-detail", args=[target.id]), {"first_name": "X"}, format="json")
    assert r.status_code == 403


@pytest.mark.django_db
def test_admin_deletes_pending_or_closed_bookings_only(client_for, admin_user, booking_factory):
    admin = client_for(admin_user)
    pending = booking_factory()
    confirmed = booking_factory(days_ahead=30, booking_status=Booking.STATUS_CONFIRMED)

    r = admin.delete(reverse("api:admin-booking-detail", args=[confirmed.id]))
    assert r.status_code == 400
    assert r.data["message"] == "Cannot delete a confirmed booking"
    assert Booking.objects.filter(pk=confirmed.pk).exists()

    r = admin.get(reverse("api:admin-booking-detail", args=[pending.id]))
    assert r.status_code == 200
    assert r.data["data"]["id"] == pending.id

    r = admin.delete(reverse("api:admin-booking-detail", args=[pending.id]))
    assert r.status_code == 200, r.data
    assert not Booking.objects.filter(pk=pending.pk).exists()
