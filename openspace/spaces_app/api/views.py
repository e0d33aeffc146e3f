import logging

from django.conf import settings
from django.contrib.auth import authenticate, get_user_model
from django.db import connection
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import generics, status
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from spaces_app.api.exceptions import APIError
from spaces_app.api.filters import (
    AdminEarningFilter,
    AdminUserFilter,
    BookingFilter,
    EarningFilter,
    RoomFilter,
)
from spaces_app.api.pagination import AdminListPagination
from spaces_app.api.permissions import (
    IsBookingHostOrAdmin,
    IsBookingParticipant,
    IsHost,
    IsRoomHostOrReadOnly,
    IsVerifiedHost,
)
from spaces_app.api.serializers import (
    AdminBookingStatusSerializer,
    AdminEarningSerializer,
    AdminPayoutSerializer,
    AdminUserSerializer,
    AdminUserUpdateSerializer,
    BanSerializer,
    BecomeHostSerializer,
    BookingCreateSerializer,
    BookingPaymentSerializer,
    BookingReasonSerializer,
    BookingSerializer,
    ChangePasswordSerializer,
    CreateAdminSerializer,
    DateRangeSerializer,
    EarningSerializer,
    EmailOTPResendSerializer,
    EmailOTPVerifySerializer,
    IDDecisionSerializer,
    IDVerificationUploadSerializer,
    InitialAdminSetupSerializer,
    LoginSerializer,
    PasswordResetConfirmSerializer,
    PasswordResetRequestSerializer,
    PayoutRequestSerializer,
    ProfileUpdateSerializer,
    RegistrationSerializer,
    RoomAvailabilitySerializer,
    RoomDecisionSerializer,
    RoomSerializer,
    TopHostsQuerySerializer,
    UserSerializer,
    parse_year,
)
from spaces_app.api.throttling import (
    LoginThrottle,
    OTPResendThrottle,
    OTPVerifyThrottle,
    PasswordResetConfirmThrottle,
    PasswordResetThrottle,
    RegisterThrottle,
)
from spaces_app.models import Booking, Earning, Room, UserProfile
from spaces_app.services import accounts
from spaces_app.services import bookings as booking_service
from spaces_app.services import earnings as earnings_service
from spaces_app.services import moderation
from spaces_app.services.verification import (
    ensure_not_verified,
    issue_email_otp,
    verify_email_otp,
)
from spaces_app.validators import validate_method_details

logger = logging.getLogger(__name__)
User = get_user_model()


def ok(data=None, message=None, status_code=status.HTTP_200_OK, **extra):
    """Success envelope: {"success": true, "data"?, "message"?}."""
    body = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return Response(body, status=status_code)


def _tokens_for(user) -> dict:
    refresh = RefreshToken.for_user(user)
    return {"refresh": str(refresh), "access": str(refresh.access_token)}


def _set_auth_cookie(response, access: str):
    lifetime = settings.SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"]
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        access,
        max_age=int(lifetime.total_seconds()),
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite=settings.AUTH_COOKIE_SAMESITE,
    )
    return response


class EnvelopeListMixin:
    """Unpaginated fallbacks still answer with the envelope."""

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response(serializer.data)
        serializer = self.get_serializer(queryset, many=True)
        return ok(serializer.data)


# --------------------
# Health
# --------------------
class HealthCheckView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        # Minimal DB ping (read-only, fast)
        db_ok = True
        try:
            with connection.cursor() as cur:
                cur.execute("SELECT 1")
        except Exception:
            logger.exception("Health check: database unreachable")
            db_ok = False
        return ok({"status": "ok" if db_ok else "degraded", "db": db_ok, "time": timezone.now()})


# --------------------
# Auth
# --------------------
class RegisterView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [RegisterThrottle]

    def post(self, request):
        ser = RegistrationSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        user = ser.save()
        logger.info("User %s registered", user.pk)

        issue_email_otp(user)

        tokens = _tokens_for(user)
        response = ok(
            {"user": UserSerializer(user).data, **tokens},
            message="Registration successful. Check your email for the verification code.",
            status_code=status.HTTP_201_CREATED,
        )
        return _set_auth_cookie(response, tokens["access"])


class LoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [LoginThrottle]

    def post(self, request):
        ser = LoginSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        email = ser.validated_data["email"].strip().lower()
        password = ser.validated_data["password"]

        account = User.objects.filter(email__iexact=email).select_related("profile").first()
        if account is None:
            raise APIError("Invalid credentials", code="invalid_credentials", status_code=401)

        # Banned accounts are turned away before the password is even checked
        if not account.is_active:
            logger.warning("Login attempt by banned user %s", account.pk)
            reason = account.profile.ban_reason or "Banned by admin"
            raise PermissionDenied(f"Your account has been banned. Reason: {reason}")

        user = authenticate(request, username=account.username, password=password)
        if user is None:
            raise APIError("Invalid credentials", code="invalid_credentials", status_code=401)

        user.last_login = timezone.now()
        user.save(update_fields=["last_login"])

        tokens = _tokens_for(user)
        response = ok({"user": UserSerializer(user).data, **tokens}, message="Login successful")
        return _set_auth_cookie(response, tokens["access"])


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        refresh = request.data.get("refresh")
        if refresh:
            try:
                RefreshToken(refresh).blacklist()
            except TokenError:
                raise APIError("Invalid or expired refresh token.", code="invalid_token")
        response = ok(message="Logged out")
        response.delete_cookie(settings.AUTH_COOKIE_NAME, samesite=settings.AUTH_COOKIE_SAMESITE)
        return response


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return ok(UserSerializer(request.user).data)

    def patch(self, request):
        ser = ProfileUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        user = accounts.update_profile(request.user, ser.validated_data)
        return ok(UserSerializer(user).data, message="Profile updated successfully")

    put = patch


class ChangePasswordView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        ser = ChangePasswordSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        user = accounts.change_password(
            request.user,
            ser.validated_data["current_password"],
            ser.validated_data["new_password"],
            request=request,
        )
        # Fresh pair for the new password
        tokens = _tokens_for(user)
        response = ok(tokens, message="Password updated successfully")
        return _set_auth_cookie(response, tokens["access"])


class PasswordResetRequestView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [PasswordResetThrottle]

    def post(self, request):
        ser = PasswordResetRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        accounts.request_password_reset(ser.validated_data["email"])
        return ok(message="If your email is registered, you will receive a password reset link")


class PasswordResetValidateView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [PasswordResetConfirmThrottle]

    def get(self, request, token):
        accounts.user_for_reset_token(token)
        return ok(message="Token is valid")


class PasswordResetConfirmView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [PasswordResetConfirmThrottle]

    def post(self, request):
        ser = PasswordResetConfirmSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        accounts.reset_password(ser.validated_data["token"], ser.validated_data["password"])
        return ok(message="Password has been reset. Please log in.")


class IDVerificationUploadView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        ser = IDVerificationUploadSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        profile = request.user.profile
        if profile.id_verification_status == UserProfile.ID_APPROVED:
            raise APIError("Your ID is already verified", code="already_verified")

        profile.id_type = ser.validated_data["id_type"]
        profile.id_number = ser.validated_data["id_number"]
        profile.id_image = ser.validated_data["id_image"]
        profile.id_uploaded_at = timezone.now()
        profile.id_verification_status = UserProfile.ID_PENDING
        profile.id_rejection_reason = ""
        profile.save()
        logger.info("User %s uploaded an ID document", request.user.pk)

        return ok(
            UserSerializer(request.user).data,
            message="ID uploaded successfully. Awaiting admin verification.",
        )


class BecomeHostView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        profile = request.user.profile
        if profile.role == UserProfile.ROLE_HOST:
            raise APIError("You are already a host", code="already_host")
        if profile.verification_level != UserProfile.LEVEL_VERIFIED:
            raise PermissionDenied("You must be a verified user to become a host")

        ser = BecomeHostSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        profile.role = UserProfile.ROLE_HOST
        profile.host_since = timezone.now()
        profile.host_bio = ser.validated_data["host_bio"]
        profile.host_languages = ser.validated_data["host_languages"]
        profile.save()
        logger.info("User %s became a host", request.user.pk)

        return ok(UserSerializer(request.user).data, message="You are now a host")


# --------------------
# Email verification
# --------------------
class EmailOTPSendView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_classes = [OTPResendThrottle]

    def post(self, request):
        ensure_not_verified(request.user)
        otp = issue_email_otp(request.user)
        data = {"email": request.user.email, "expires_at": otp.expires_at}
        if settings.OTP_ECHO_IN_RESPONSE:
            data["otp"] = otp.code
        return ok(data, message="OTP sent to your email")


class EmailOTPResendView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [OTPResendThrottle]

    def post(self, request):
        ser = EmailOTPResendSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        user = User.objects.filter(email__iexact=ser.validated_data["email"]).first()
        if user is None:
            raise NotFound("User not found")

        ensure_not_verified(user)
        otp = issue_email_otp(user)
        data = {"email": user.email, "expires_at": otp.expires_at}
        if settings.OTP_ECHO_IN_RESPONSE:
            data["otp"] = otp.code
        return ok(data, message="A new OTP has been sent to your email")


class EmailOTPVerifyView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [OTPVerifyThrottle]

    def post(self, request):
        ser = EmailOTPVerifySerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        user = User.objects.filter(email__iexact=ser.validated_data["email"]).first()
        if user is None:
            raise NotFound("User not found")

        ensure_not_verified(user)
        result = verify_email_otp(user, ser.validated_data["otp"])
        if not result.ok:
            code = "too_many_attempts" if result.status_code == 429 else "invalid_otp"
            raise APIError(result.message, code=code, status_code=result.status_code)

        return ok({"email_verified": True}, message=result.message)


# --------------------
# Rooms
# --------------------
class RoomListCreateView(EnvelopeListMixin, generics.ListCreateAPIView):
    """Public marketplace list (approved only) / hosts create listings."""
    serializer_class = RoomSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = RoomFilter

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsVerifiedHost()]
        return [AllowAny()]

    def get_queryset(self):
        return Room.objects.approved().select_related("host", "host__profile")

    def create(self, request, *args, **kwargs):
        ser = self.get_serializer(data=request.data)
        ser.is_valid(raise_exception=True)
        room = ser.save(host=request.user, status=Room.STATUS_PENDING)
        logger.info("Room %s listed by host %s", room.pk, request.user.pk)
        return ok(
            ser.data,
            message="Space submitted. It will be visible once an admin approves it.",
            status_code=status.HTTP_201_CREATED,
        )


class RoomDetailView(APIView):
    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAuthenticated(), IsRoomHostOrReadOnly()]

    def get_object(self, pk):
        room = get_object_or_404(Room.objects.select_related("host", "host__profile"), pk=pk)
        self.check_object_permissions(self.request, room)
        return room

    def get(self, request, pk):
        room = self.get_object(pk)
        user = request.user
        # Non-approved rooms exist only for their host and admins
        if not room.is_listed and not (
            user.is_authenticated and (user.is_staff or room.host_id == user.pk)
        ):
            raise NotFound("Room not found")
        return ok(RoomSerializer(room).data)

    def put(self, request, pk):
        return self._update(request, pk, partial=False)

    def patch(self, request, pk):
        return self._update(request, pk, partial=True)

    def _update(self, request, pk, partial):
        room = self.get_object(pk)
        ser = RoomSerializer(room, data=request.data, partial=partial)
        ser.is_valid(raise_exception=True)
        ser.save()
        return ok(ser.data, message="Room updated successfully")

    def delete(self, request, pk):
        room = self.get_object(pk)
        if room.bookings.filter(booking_status__in=Booking.ACTIVE_STATUSES).exists():
            raise APIError("Cannot delete a room with active bookings", code="room_has_bookings")
        room.delete()
        logger.info("Room %s deleted by %s", pk, request.user.pk)
        return ok(message="Room deleted successfully")


class RoomAvailabilityView(RoomDetailView):
    """GET is public for listed rooms; PUT/PATCH belong to the host (or an admin)."""
    http_method_names = ["get", "put", "patch", "head", "options"]

    def get(self, request, pk):
        room = self.get_object(pk)
        if not room.is_listed and not (
            request.user.is_authenticated and (request.user.is_staff or room.host_id == request.user.pk)
        ):
            raise NotFound("Room not found")
        ser = DateRangeSerializer(data=request.query_params)
        ser.is_valid(raise_exception=True)
        return ok(
            booking_service.room_availability(
                room, ser.validated_data["start_date"], ser.validated_data["end_date"]
            )
        )

    def _update(self, request, pk, partial):
        room = self.get_object(pk)
        ser = RoomAvailabilitySerializer(data=request.data, context={"room": room})
        ser.is_valid(raise_exception=True)
        room = booking_service.update_room_availability(room, request.user, ser.validated_data)
        return ok(RoomSerializer(room).data, message="Room availability updated successfully")


class HostRoomsView(EnvelopeListMixin, generics.ListAPIView):
    """A host's approved listings, as guests see them."""
    serializer_class = RoomSerializer
    permission_classes = [AllowAny]

    def get_queryset(self):
        host = get_object_or_404(User, pk=self.kwargs["host_id"], profile__role=UserProfile.ROLE_HOST)
        return Room.objects.approved().filter(host=host).select_related("host", "host__profile")


class MyListingsView(EnvelopeListMixin, generics.ListAPIView):
    serializer_class = RoomSerializer
    permission_classes = [IsHost]

    def get_queryset(self):
        qs = Room.objects.filter(host=self.request.user).select_related("host", "host__profile")
        status_param = self.request.query_params.get("status")
        if status_param:
            qs = qs.filter(status=status_param)
        return qs


class AdminPendingRoomsView(EnvelopeListMixin, generics.ListAPIView):
    serializer_class = RoomSerializer
    permission_classes = [IsAdminUser]
    pagination_class = AdminListPagination

    def get_queryset(self):
        # oldest first: first come, first reviewed
        return Room.objects.pending().select_related("host", "host__profile").order_by("created_at")


class AdminRoomDecisionView(APIView):
    permission_classes = [IsAdminUser]

    def put(self, request, pk):
        room = get_object_or_404(Room, pk=pk)
        ser = RoomDecisionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        room = moderation.decide_room(
            room,
            request.user,
            approved=ser.validated_data["approved"],
            rejection_reason=ser.validated_data["rejection_reason"],
        )
        message = "Room approved successfully" if room.is_listed else "Room rejected"
        return ok(RoomSerializer(room).data, message=message)

    patch = put


# --------------------
# Bookings
# --------------------
class BookingCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        ser = BookingCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        room = data.pop("room")
        booking = booking_service.create_booking(request.user, room, data)
        return ok(
            BookingSerializer(booking).data,
            message="Booking created successfully",
            status_code=status.HTTP_201_CREATED,
        )


class MyBookingsView(EnvelopeListMixin, generics.ListAPIView):
    serializer_class = BookingSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend]
    filterset_class = BookingFilter

    def get_queryset(self):
        return Booking.objects.filter(user=self.request.user).select_related("room", "user", "host")


class HostBookingsView(MyBookingsView):
    permission_classes = [IsHost]

    def get_queryset(self):
        return Booking.objects.filter(host=self.request.user).select_related("room", "user", "host")


class BookingDetailView(APIView):
    permission_classes = [IsAuthenticated, IsBookingParticipant]

    def get_object(self, pk):
        booking = get_object_or_404(Booking.objects.select_related("room", "user", "host"), pk=pk)
        self.check_object_permissions(self.request, booking)
        return booking

    def get(self, request, pk):
        return ok(BookingSerializer(self.get_object(pk)).data)


class BookingCanCancelView(BookingDetailView):
    def get(self, request, pk):
        booking = self.get_object(pk)
        return ok(booking_service.can_cancel(booking, request.user))


class BookingCancelView(BookingDetailView):
    def patch(self, request, pk):
        booking = self.get_object(pk)
        ser = BookingReasonSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        booking = booking_service.cancel_booking(booking, request.user, ser.validated_data["reason"])
        return ok(BookingSerializer(booking).data, message="Booking cancelled successfully")


class HostBookingActionView(BookingDetailView):
    """PATCH /api/bookings/<id>/<action> for the room's host (or an admin)."""
    permission_classes = [IsAuthenticated, IsBookingHostOrAdmin]
    booking_action = None

    def patch(self, request, pk):
        booking = self.get_object(pk)
        actor = request.user

        if self.booking_action == "confirm":
            booking = booking_service.confirm_booking(booking, actor)
            message = "Booking confirmed successfully"
        elif self.booking_action == "reject":
            ser = BookingReasonSerializer(data=request.data)
            ser.is_valid(raise_exception=True)
            booking = booking_service.reject_booking(booking, actor, ser.validated_data["reason"])
            message = "Booking rejected"
        elif self.booking_action == "complete":
            booking = booking_service.complete_booking(booking, actor)
            message = "Booking marked as completed"
        elif self.booking_action == "mark-paid":
            booking = booking_service.mark_payment_received(booking, actor)
            message = "Payment marked as received"
        else:
            raise NotFound()

        return ok(BookingSerializer(booking).data, message=message)


class BookingPaymentView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        ser = BookingPaymentSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        booking = get_object_or_404(Booking, pk=ser.validated_data["booking_id"])
        booking = booking_service.pay_online(
            booking,
            request.user,
            ser.validated_data["method"],
            ser.validated_data["details"],
        )
        return ok(BookingSerializer(booking).data, message="Payment successful")


# --------------------
# Earnings
# --------------------
class EarningListView(EnvelopeListMixin, generics.ListAPIView):
    serializer_class = EarningSerializer
    permission_classes = [IsHost]
    filter_backends = [DjangoFilterBackend]
    filterset_class = EarningFilter

    def get_queryset(self):
        return Earning.objects.for_host(self.request.user).select_related("booking", "booking__room")


class EarningSummaryView(APIView):
    permission_classes = [IsHost]

    def get(self, request):
        return ok(earnings_service.host_summary(request.user))


class EarningDateRangeView(APIView):
    permission_classes = [IsHost]

    def get(self, request):
        ser = DateRangeSerializer(data=request.query_params)
        ser.is_valid(raise_exception=True)
        result = earnings_service.earnings_in_range(
            request.user, ser.validated_data["start_date"], ser.validated_data["end_date"]
        )
        result["earnings"] = EarningSerializer(result["earnings"], many=True).data
        return ok(result)


class EarningStatementView(APIView):
    permission_classes = [IsHost]

    def get(self, request, year):
        return ok(earnings_service.yearly_statement(request.user, parse_year(year)))


class BookingEarningView(APIView):
    permission_classes = [IsHost]

    def get(self, request, booking_id):
        qs = Earning.objects.filter(booking_id=booking_id).select_related("booking", "booking__room")
        if not request.user.is_staff:
            qs = qs.filter(host=request.user)
        earnings = list(qs.order_by("created_at"))
        if not earnings:
            raise NotFound("Earning not found for this booking")
        return ok(EarningSerializer(earnings, many=True).data)


class PayoutRequestView(APIView):
    permission_classes = [IsHost]

    def post(self, request):
        ser = PayoutRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        method = ser.validated_data["method"]
        validate_method_details(method, ser.validated_data["account_details"])
        result = earnings_service.request_payout(request.user, ser.validated_data["amount"], method)
        return ok(result, message="Payout request processed")


class AdminProcessPayoutView(APIView):
    permission_classes = [IsAdminUser]

    def post(self, request):
        ser = AdminPayoutSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        count = earnings_service.process_admin_payout(
            ser.validated_data["host_id"],
            ser.validated_data["earning_ids"],
            ser.validated_data["payout_id"],
        )
        return ok({"processed": count}, message=f"Processed {count} earnings for payout")


class AdminReleaseEarningsView(APIView):
    permission_classes = [IsAdminUser]

    def patch(self, request):
        count = earnings_service.release_due_earnings()
        return ok({"updated": count}, message=f"Updated {count} earnings to available")


class AdminEarningsSummaryView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request):
        return ok(earnings_service.platform_summary())


class AdminEarningTransactionsView(EnvelopeListMixin, generics.ListAPIView):
    """Every ledger row, newest first."""
    serializer_class = AdminEarningSerializer
    permission_classes = [IsAdminUser]
    pagination_class = AdminListPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = AdminEarningFilter

    def get_queryset(self):
        return Earning.objects.select_related(
            "host", "booking", "booking__room", "booking__user"
        ).order_by("-created_at", "-id")


class AdminHostPayoutDetailsView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request, host_id):
        host = get_object_or_404(User, pk=host_id, profile__role=UserProfile.ROLE_HOST)
        details = earnings_service.host_payout_details(host)
        details["available_earnings"] = EarningSerializer(details["available_earnings"], many=True).data
        return ok(details)


class AdminTopHostsView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request):
        ser = TopHostsQuerySerializer(data=request.query_params)
        ser.is_valid(raise_exception=True)
        return ok(
            earnings_service.top_hosts(ser.validated_data["limit"], ser.validated_data["period"]),
            period=ser.validated_data["period"],
        )


# --------------------
# Admin: users & verification
# --------------------
class AdminDashboardView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request):
        return ok(moderation.dashboard_counts())


class AdminUserListView(EnvelopeListMixin, generics.ListAPIView):
    serializer_class = AdminUserSerializer
    permission_classes = [IsAdminUser]
    pagination_class = AdminListPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = AdminUserFilter

    def get_queryset(self):
        return User.objects.select_related("profile").order_by("-date_joined")


class AdminUserDetailView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request, pk):
        user = get_object_or_404(User.objects.select_related("profile"), pk=pk)
        return ok(AdminUserSerializer(user).data)

    def patch(self, request, pk):
        user = get_object_or_404(User.objects.select_related("profile"), pk=pk)
        ser = AdminUserUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        user = accounts.admin_update_user(user, request.user, ser.validated_data)
        return ok(AdminUserSerializer(user).data, message="User updated successfully")

    put = patch

    def delete(self, request, pk):
        user = get_object_or_404(User, pk=pk)
        moderation.delete_user(user, request.user)
        return ok(message="User deleted successfully")


class AdminBanUserView(APIView):
    permission_classes = [IsAdminUser]

    def patch(self, request, pk):
        user = get_object_or_404(User.objects.select_related("profile"), pk=pk)
        ser = BanSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        user = moderation.ban_user(user, request.user, ser.validated_data["reason"])
        return ok(AdminUserSerializer(user).data, message="User banned successfully")


class AdminUnbanUserView(APIView):
    permission_classes = [IsAdminUser]

    def patch(self, request, pk):
        user = get_object_or_404(User.objects.select_related("profile"), pk=pk)
        user = moderation.unban_user(user, request.user)
        return ok(AdminUserSerializer(user).data, message="User unbanned successfully")


class AdminPendingVerificationsView(AdminUserListView):
    def get_queryset(self):
        return (
            User.objects.select_related("profile")
            .filter(profile__id_verification_status=UserProfile.ID_PENDING)
            .order_by("profile__id_uploaded_at")
        )


class AdminIDVerificationView(APIView):
    permission_classes = [IsAdminUser]

    def patch(self, request, pk):
        user = get_object_or_404(User.objects.select_related("profile"), pk=pk)
        ser = IDDecisionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        moderation.decide_id_verification(
            user,
            request.user,
            approved=ser.validated_data["approved"],
            rejection_reason=ser.validated_data["rejection_reason"],
        )
        message = "ID verified successfully" if ser.validated_data["approved"] else "ID verification rejected"
        return ok(AdminUserSerializer(user).data, message=message)


class AdminBookingListView(EnvelopeListMixin, generics.ListAPIView):
    serializer_class = BookingSerializer
    permission_classes = [IsAdminUser]
    pagination_class = AdminListPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = BookingFilter

    def get_queryset(self):
        return Booking.objects.select_related("room", "user", "host")


class AdminBookingStatusView(APIView):
    permission_classes = [IsAdminUser]

    def patch(self, request, pk):
        booking = get_object_or_404(Booking, pk=pk)
        ser = AdminBookingStatusSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        booking = booking_service.admin_set_status(
            booking,
            request.user,
            ser.validated_data["status"],
            ser.validated_data["reason"],
        )
        return ok(BookingSerializer(booking).data, message="Booking status updated")


class AdminBookingDetailView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request, pk):
        booking = get_object_or_404(Booking.objects.select_related("room", "user", "host"), pk=pk)
        return ok(BookingSerializer(booking).data)

    def delete(self, request, pk):
        booking = get_object_or_404(Booking, pk=pk)
        booking_service.admin_delete_booking(booking, request.user)
        return ok(message="Booking deleted successfully")


# --------------------
# Admin accounts
# --------------------
class CheckAdminExistsView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        return ok({"admin_exists": moderation.admin_exists()})


class InitialAdminSetupView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [LoginThrottle]

    def post(self, request):
        ser = InitialAdminSetupSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        user = moderation.initial_admin_setup(setup_code=data.pop("setup_code"), **data)
        tokens = _tokens_for(user)
        return ok(
            {"user": UserSerializer(user).data, **tokens},
            message="Admin account created",
            status_code=status.HTTP_201_CREATED,
        )


class CreateAdminView(APIView):
    permission_classes = [IsAdminUser]

    def post(self, request):
        ser = CreateAdminSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        user = moderation.create_admin(**ser.validated_data)
        return ok(
            UserSerializer(user).data,
            message="Admin account created",
            status_code=status.HTTP_201_CREATED,
        )
