from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="UserProfile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("phone_number", models.CharField(blank=True, default="", max_length=20)),
                ("profile_image", models.URLField(blank=True, default="", max_length=500)),
                ("role", models.CharField(choices=[("user", "User"), ("host", "Host"), ("admin", "Admin")], db_index=True, default="user", max_length=10)),
                ("verification_level", models.CharField(choices=[("basic", "Basic"), ("verified", "Verified"), ("admin", "Admin")], default="basic", max_length=10)),
                ("email_verified", models.BooleanField(default=False)),
                ("email_verified_at", models.DateTimeField(blank=True, null=True)),
                ("phone_verified", models.BooleanField(default=False)),
                ("ban_reason", models.CharField(blank=True, default="", max_length=255)),
                ("banned_at", models.DateTimeField(blank=True, null=True)),
                ("id_type", models.CharField(blank=True, default="", max_length=50)),
                ("id_number", models.CharField(blank=True, default="", max_length=100)),
                ("id_image", models.URLField(blank=True, default="", max_length=500)),
                ("id_uploaded_at", models.DateTimeField(blank=True, null=True)),
                ("id_verification_status", models.CharField(blank=True, choices=[("", "Not submitted"), ("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")], db_index=True, default="", max_length=10)),
                ("id_verified_at", models.DateTimeField(blank=True, null=True)),
                ("id_rejection_reason", models.CharField(blank=True, default="", max_length=255)),
                ("host_bio", models.TextField(blank=True, default="")),
                ("host_languages", models.JSONField(blank=True, default=list)),
                ("host_since", models.DateTimeField(blank=True, null=True)),
                ("response_rate", models.FloatField(blank=True, null=True)),
                ("response_time", models.FloatField(blank=True, help_text="Average response time in hours.", null=True)),
                ("acceptance_rate", models.FloatField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="profile", to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name="Room",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=100)),
                ("description", models.TextField()),
                ("room_type", models.CharField(choices=[("stay", "Stay"), ("conference", "Conference room"), ("event", "Event venue")], max_length=20)),
                ("base_price", models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal("0"))])),
                ("cleaning_fee", models.DecimalField(decimal_places=2, default=0, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal("0"))])),
                ("service_fee", models.DecimalField(decimal_places=2, default=0, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal("0"))])),
                ("tax", models.DecimalField(decimal_places=2, default=0, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal("0"))])),
                ("address", models.CharField(max_length=255)),
                ("city", models.CharField(db_index=True, max_length=100)),
                ("state", models.CharField(max_length=100)),
                ("country", models.CharField(max_length=100)),
                ("zip_code", models.CharField(max_length=20)),
                ("latitude", models.FloatField(blank=True, null=True)),
                ("longitude", models.FloatField(blank=True, null=True)),
                ("amenities", models.JSONField(blank=True, default=list)),
                ("images", models.JSONField(blank=True, default=list, help_text="List of image URLs.")),
                ("max_guests", models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ("bedrooms", models.PositiveIntegerField(blank=True, null=True)),
                ("beds", models.PositiveIntegerField(blank=True, null=True)),
                ("bathrooms", models.PositiveIntegerField(blank=True, null=True)),
                ("available_from", models.DateField(blank=True, null=True)),
                ("available_until", models.DateField(blank=True, null=True)),
                ("unavailable_dates", models.JSONField(blank=True, default=list)),
                ("check_in_time", models.CharField(default="14:00", max_length=5)),
                ("check_out_time", models.CharField(default="12:00", max_length=5)),
                ("cancellation_policy", models.CharField(blank=True, default="moderate", max_length=50)),
                ("instant_booking", models.BooleanField(default=False)),
                ("additional_rules", models.JSONField(blank=True, default=list)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")], db_index=True, default="pending", max_length=10)),
                ("rejection_reason", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("host", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="rooms", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("check_in", models.DateField()),
                ("check_out", models.DateField()),
                ("check_in_time", models.CharField(blank=True, default="", max_length=5)),
                ("check_out_time", models.CharField(blank=True, default="", max_length=5)),
                ("adults", models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ("children", models.PositiveIntegerField(default=0)),
                ("infants", models.PositiveIntegerField(default=0)),
                ("total_price", models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal("0"))])),
                ("base_price", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("cleaning_fee", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("service_fee", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("tax", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("discount", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("payment_method", models.CharField(choices=[("property", "Pay at property"), ("card", "Card"), ("gcash", "GCash"), ("maya", "Maya")], default="property", max_length=10)),
                ("payment_status", models.CharField(choices=[("pending", "Pending"), ("paid", "Paid"), ("refunded", "Refunded"), ("cancelled", "Cancelled")], db_index=True, default="pending", max_length=10)),
                ("payment_reference", models.CharField(blank=True, default="", max_length=100)),
                ("payment_date", models.DateTimeField(blank=True, null=True)),
                ("payment_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("booking_status", models.CharField(choices=[("pending", "Pending"), ("confirmed", "Confirmed"), ("completed", "Completed"), ("cancelled", "Cancelled"), ("rejected", "Rejected")], db_index=True, default="pending", max_length=10)),
                ("rejection_reason", models.CharField(blank=True, default="", max_length=255)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_by", models.CharField(blank=True, choices=[("user", "Guest"), ("host", "Host"), ("admin", "Admin")], default="", max_length=10)),
                ("cancellation_reason", models.CharField(blank=True, default="", max_length=255)),
                ("refund_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("is_cancellable", models.BooleanField(default=True)),
                ("cancellation_deadline", models.DateTimeField(blank=True, null=True)),
                ("special_requests", models.TextField(blank=True, default="", validators=[django.core.validators.MaxLengthValidator(1000)])),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("host", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="hosted_bookings", to=settings.AUTH_USER_MODEL)),
                ("payment_recorded_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("room", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="bookings", to="spaces_app.room")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="bookings", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "booking_status"], name="booking_user_status_idx"),
                    models.Index(fields=["host", "booking_status"], name="booking_host_status_idx"),
                    models.Index(fields=["room", "check_in", "check_out"], name="booking_room_dates_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Earning",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("platform_fee", models.DecimalField(decimal_places=2, max_digits=12)),
                ("host_payout", models.DecimalField(decimal_places=2, max_digits=12)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("available", "Available"), ("paid_out", "Paid out")], db_index=True, default="pending", max_length=10)),
                ("payment_method", models.CharField(choices=[("property", "Pay at property"), ("card", "Card"), ("gcash", "GCash"), ("maya", "Maya")], max_length=10)),
                ("available_date", models.DateTimeField()),
                ("paid_out_at", models.DateTimeField(blank=True, null=True)),
                ("payout_id", models.CharField(blank=True, db_index=True, default="", max_length=64)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("booking", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="earnings", to="spaces_app.booking")),
                ("host", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="earnings", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["host", "status"], name="earning_host_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="EmailOTP",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=6)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("expires_at", models.DateTimeField()),
                ("used_at", models.DateTimeField(blank=True, null=True)),
                ("attempts", models.PositiveIntegerField(default=0)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="email_otps", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["user", "created_at"], name="emailotp_user_created_idx"),
                ],
            },
        ),
    ]
