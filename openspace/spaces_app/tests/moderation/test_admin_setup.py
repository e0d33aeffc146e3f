import pytest
from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.urls import reverse

from spaces_app.models import UserProfile

User = get_user_model()


def _setup(client, code="setup-code-for-tests", email="first.admin@example.com"):
    return client.post(
        reverse("api:admin-initial-setup"),
        {"setup_code": code, "email": email, "password": "Adm1n-Passw0rd", "first_name": "First"},
        format="json",
    )


@pytest.mark.django_db
def test_initial_setup_creates_first_admin(api_client):
    assert api_client.get(reverse("api:admin-check-exists")).data["data"] == {"admin_exists": False}

    r = _setup(api_client)
    assert r.status_code == 201, r.data
    assert r.data["data"]["access"]

    admin = User.objects.get(email="first.admin@example.com")
    assert admin.is_staff is True
    assert admin.profile.role == UserProfile.ROLE_ADMIN
    assert admin.profile.verification_level == UserProfile.LEVEL_ADMIN
    assert api_client.get(reverse("api:admin-check-exists")).data["data"] == {"admin_exists": True}


@pytest.mark.django_db
def test_initial_setup_rejects_wrong_code(api_client):
    r = _setup(api_client, code="guess")
    assert r.status_code == 403
    assert r.data["code"] == "invalid_setup_code"
    assert not User.objects.filter(email="first.admin@example.com").exists()


@pytest.mark.django_db
def test_initial_setup_only_works_once(api_client, admin_user):
    r = _setup(api_client, email="second@example.com")
    assert r.status_code == 403
    assert r.data["code"] == "admin_exists"


@pytest.mark.django_db
def test_initial_setup_disabled_without_configured_code(api_client, settings):
    settings.ADMIN_SETUP_CODE = ""
    r = _setup(api_client, code="anything")
    assert r.status_code == 403
    assert r.data["code"] == "invalid_setup_code"
    assert not User.objects.filter(is_staff=True).exists()


@pytest.mark.django_db
def test_admin_creates_another_admin(client_for, admin_user, user_factory):
    r = client_for(admin_user).post(
        reverse("api:admin-create-admin"),
        {"email": "Ops@Example.com", "password": "Another-Adm1n"},
        format="json",
    )
    assert r.status_code == 201, r.data
    assert User.objects.get(email="ops@example.com").is_staff is True

    dup = client_for(admin_user).post(
        reverse("api:admin-create-admin"),
        {"email": "ops@example.com", "password": "Another-Adm1n"},
        format="json",
    )
    assert dup.status_code == 400
    assert dup.data["code"] == "email_taken"

    regular = client_for(user_factory()).post(
        reverse("api:admin-create-admin"),
        {"email": "sneaky@example.com", "password": "Another-Adm1n"},
        format="json",
    )
    assert regular.status_code == 403


@pytest.mark.django_db
def test_create_or_reset_admin_command(monkeypatch):
    monkeypatch.setenv("CREATE_ADMIN", "1")
    monkeypatch.setenv("ADMIN_EMAIL", "Root@OpenSpace.ph")
    monkeypatch.setenv("ADMIN_PASSWORD", "first-pass-123")

    call_command("create_or_reset_admin")
    admin = User.objects.get(email="root@openspace.ph")
    assert admin.is_superuser and admin.check_password("first-pass-123")
    assert admin.profile.role == UserProfile.ROLE_ADMIN

    monkeypatch.setenv("ADMIN_PASSWORD", "second-pass-456")
    call_command("create_or_reset_admin")
    admin.refresh_from_db()
    assert admin.check_password("second-pass-456")
    assert User.objects.filter(email="root@openspace.ph").count() == 1


@pytest.mark.django_db
def test_create_or_reset_admin_is_opt_in(monkeypatch):
    monkeypatch.delenv("CREATE_ADMIN", raising=False)
    call_command("create_or_reset_admin")
    assert not User.objects.filter(is_staff=True).exists()
