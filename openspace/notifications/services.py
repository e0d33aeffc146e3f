import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.db import transaction
from django.template import Context, Template
from django.utils import timezone

from .models import DeliveryAttempt, NotificationTemplate, OutboundNotification

logger = logging.getLogger(__name__)


def send_mail(subject, message, from_email, recipient_list, *, html_message=None):
    """
    Single wrapper used across the project (tests patch this one).
    Same signature as django.core.mail.send_mail plus optional html.
    """
    email = EmailMultiAlternatives(
        subject=subject,
        body=message,
        from_email=from_email,
        to=recipient_list,
    )

    if html_message:
        email.attach_alternative(html_message, "text/html")

    return email.send()


class EmailTransport:
    @staticmethod
    def send(to_email: str, subject: str, body: str, *, html_message: str | None = None):
        from_email = getattr(settings, "DEFAULT_FROM_EMAIL", None) or "noreply@openspace.ph"
        sent = send_mail(
            subject=subject,
            message=body,
            from_email=from_email,
            recipient_list=[to_email],
            html_message=html_message,
        )
        return {"sent": sent}


class NotificationService:
    @staticmethod
    def render(template_obj: NotificationTemplate, context_dict: dict):
        subject_tpl = Template(template_obj.subject or "")
        body_tpl = Template(template_obj.body or "")
        ctx = Context(context_dict or {})
        return subject_tpl.render(ctx), body_tpl.render(ctx)

    @staticmethod
    def queue(user, template_key: str, context: dict, scheduled_for=None, channel="email"):
        scheduled_for = scheduled_for or timezone.now()
        return OutboundNotification.objects.create(
            user=user,
            template_key=template_key,
            context=context,
            scheduled_for=scheduled_for,
            channel=channel,
        )

    @staticmethod
    def queue_if_active(user, template_key: str, context: dict | None = None):
        """Queue only when an active template exists for the key."""
        exists = NotificationTemplate.objects.filter(
            key=template_key,
            channel=NotificationTemplate.CHANNEL_EMAIL,
            is_active=True,
        ).exists()
        if not exists:
            return None
        return NotificationService.queue(user, template_key, context or {})

    @staticmethod
    @transaction.atomic
    def deliver(notification: OutboundNotification):
        if not notification.user.email:
            notification.status = OutboundNotification.STATUS_SKIPPED
            notification.error = "User has no email address"
            notification.save(update_fields=["status", "error"])
            return

        tpl = NotificationTemplate.objects.filter(
            key=notification.template_key,
            channel=notification.channel,
            is_active=True,
        ).first()

        if not tpl:
            notification.status = OutboundNotification.STATUS_FAILED
            notification.error = f"Template not found: {notification.template_key}"
            notification.save(update_fields=["status", "error"])
            return

        subject, body = NotificationService.render(tpl, notification.context)

        try:
            res = EmailTransport.send(notification.user.email, subject, body)
        except Exception as exc:
            # SMTP failures are recorded on the row; the batch keeps going
            logger.warning("Delivery of notification %s failed: %s", notification.pk, exc)
            DeliveryAttempt.objects.create(
                notification=notification,
                provider=notification.channel,
                success=False,
                response=str(exc),
            )
            notification.status = OutboundNotification.STATUS_FAILED
            notification.error = str(exc)
            notification.save(update_fields=["status", "error"])
            return

        DeliveryAttempt.objects.create(
            notification=notification,
            provider=notification.channel,
            success=bool(res.get("sent")),
            response=str(res),
        )

        if res.get("sent"):
            notification.status = OutboundNotification.STATUS_SENT
            notification.sent_at = timezone.now()
            notification.save(update_fields=["status", "sent_at"])
        else:
            notification.status = OutboundNotification.STATUS_FAILED
            notification.error = "Provider reported failure"
            notification.save(update_fields=["status", "error"])
