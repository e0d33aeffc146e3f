from django.contrib import admin

from notifications.models import DeliveryAttempt, NotificationTemplate, OutboundNotification


@admin.register(NotificationTemplate)
class NotificationTemplateAdmin(admin.ModelAdmin):
    list_display = ("key", "channel", "subject", "is_active")
    list_filter = ("channel", "is_active")
    search_fields = ("key", "subject")


class DeliveryAttemptInline(admin.TabularInline):
    model = DeliveryAttempt
    extra = 0
    readonly_fields = ("provider", "success", "response", "created_at")


@admin.register(OutboundNotification)
class OutboundNotificationAdmin(admin.ModelAdmin):
    list_display = ("user", "channel", "template_key", "status", "scheduled_for", "sent_at")
    list_filter = ("channel", "status")
    search_fields = ("user__email", "template_key")
    inlines = [DeliveryAttemptInline]
