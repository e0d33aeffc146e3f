from django.contrib import admin, messages

from spaces_app.models import Booking, EmailOTP, Earning, Room, UserProfile


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ---------- Actions ----------

@admin.action(description="Approve selected rooms")
def approve_rooms(modeladmin, request, queryset):
    updated = queryset.update(status=Room.STATUS_APPROVED, rejection_reason="")
    messages.success(request, f"{updated} room(s) approved.")


@admin.action(description="Reject selected rooms")
def reject_rooms(modeladmin, request, queryset):
    updated = queryset.update(
        status=Room.STATUS_REJECTED,
        rejection_reason="Room does not meet our standards",
    )
    messages.success(request, f"{updated} room(s) rejected.")


# ---------- ModelAdmins ----------

@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ("title", "host", "room_type", "city", "base_price", "status", "created_at")
    list_filter = ("status", "room_type", "instant_booking")
    search_fields = ("title", "city", "address", "host__email")
    readonly_fields = ("created_at", "updated_at")
    actions = [approve_rooms, reject_rooms]

    fieldsets = (
        ("Core listing", {
            "fields": ("title", "description", "room_type", "host", "status", "rejection_reason"),
        }),
        ("Pricing", {
            "fields": ("base_price", "cleaning_fee", "service_fee", "tax"),
        }),
        ("Location", {
            "fields": ("address", "city", "state", "country", "zip_code", "latitude", "longitude"),
        }),
        ("Capacity", {
            "fields": ("max_guests", "bedrooms", "beds", "bathrooms", "amenities", "images"),
        }),
        ("Availability & rules", {
            "fields": (
                "available_from",
                "available_until",
                "unavailable_dates",
                "check_in_time",
                "check_out_time",
                "cancellation_policy",
                "instant_booking",
                "additional_rules",
            ),
        }),
        ("Timestamps", {
            "fields": ("created_at", "updated_at"),
        }),
    )


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "room",
        "user",
        "check_in",
        "check_out",
        "total_price",
        "payment_method",
        "payment_status",
        "booking_status",
    )
    list_filter = ("booking_status", "payment_status", "payment_method")
    search_fields = ("room__title", "user__email", "host__email")
    # Status fields move only through the API so the transition rules hold
    readonly_fields = ("booking_status", "payment_status", "created_at", "updated_at")


@admin.register(Earning)
class EarningAdmin(ReadOnlyAdmin):
    list_display = ("id", "host", "booking", "amount", "platform_fee", "host_payout", "status", "available_date")
    list_filter = ("status", "payment_method")
    search_fields = ("host__email", "payout_id")


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = (
        "user",
        "role",
        "verification_level",
        "email_verified",
        "phone_verified",
        "id_verification_status",
    )
    list_filter = ("role", "verification_level", "id_verification_status", "email_verified")
    search_fields = ("user__email", "user__first_name", "user__last_name", "phone_number")


@admin.register(EmailOTP)
class EmailOTPAdmin(ReadOnlyAdmin):
    list_display = ("user", "created_at", "expires_at", "used_at", "attempts")
    search_fields = ("user__email",)
