from django.urls import path

from spaces_app.api import views

app_name = "api"

urlpatterns = [
    path("health", views.HealthCheckView.as_view(), name="health"),

    # ---------- Auth ----------
    path("auth/register", views.RegisterView.as_view(), name="auth-register"),
    path("auth/login", views.LoginView.as_view(), name="auth-login"),
    path("auth/logout", views.LogoutView.as_view(), name="auth-logout"),
    path("auth/me", views.MeView.as_view(), name="auth-me"),
    path("auth/update-password", views.ChangePasswordView.as_view(), name="auth-update-password"),
    path("auth/forgot-password", views.PasswordResetRequestView.as_view(), name="auth-forgot-password"),
    path(
        "auth/validate-reset-token/<str:token>",
        views.PasswordResetValidateView.as_view(),
        name="auth-validate-reset-token",
    ),
    path("auth/reset-password", views.PasswordResetConfirmView.as_view(), name="auth-reset-password"),
    path("auth/id-verification/upload", views.IDVerificationUploadView.as_view(), name="auth-id-upload"),
    path("auth/become-host", views.BecomeHostView.as_view(), name="auth-become-host"),

    # Admin actions reachable under /auth/admin/ as well
    path("auth/admin/ban/<int:pk>", views.AdminBanUserView.as_view(), name="auth-admin-ban"),
    path("auth/admin/unban/<int:pk>", views.AdminUnbanUserView.as_view(), name="auth-admin-unban"),
    path("auth/admin/user/<int:pk>", views.AdminUserDetailView.as_view(), name="auth-admin-user"),
    path(
        "auth/admin/id-verification/<int:pk>",
        views.AdminIDVerificationView.as_view(),
        name="auth-admin-id-verification",
    ),

    # ---------- Email verification ----------
    path("email-verification/send-otp", views.EmailOTPSendView.as_view(), name="otp-send"),
    path("email-verification/resend-otp", views.EmailOTPResendView.as_view(), name="otp-resend"),
    path("email-verification/verify-otp", views.EmailOTPVerifyView.as_view(), name="otp-verify"),

    # ---------- Rooms ----------
    path("rooms", views.RoomListCreateView.as_view(), name="room-list"),
    path("rooms/my/listings", views.MyListingsView.as_view(), name="room-my-listings"),
    path("rooms/admin/pending", views.AdminPendingRoomsView.as_view(), name="room-admin-pending"),
    path("rooms/admin/approve/<int:pk>", views.AdminRoomDecisionView.as_view(), name="room-admin-approve"),
    path("rooms/host/<int:host_id>", views.HostRoomsView.as_view(), name="room-by-host"),
    path("rooms/<int:pk>", views.RoomDetailView.as_view(), name="room-detail"),
    path("rooms/<int:pk>/availability", views.RoomAvailabilityView.as_view(), name="room-availability"),

    # ---------- Bookings ----------
    path("bookings", views.BookingCreateView.as_view(), name="booking-create"),
    path("bookings/payment", views.BookingPaymentView.as_view(), name="booking-payment"),
    path("bookings/my/bookings", views.MyBookingsView.as_view(), name="booking-mine"),
    path("bookings/host/bookings", views.HostBookingsView.as_view(), name="booking-host"),
    path("bookings/<int:pk>", views.BookingDetailView.as_view(), name="booking-detail"),
    path("bookings/<int:pk>/can-cancel", views.BookingCanCancelView.as_view(), name="booking-can-cancel"),
    path("bookings/<int:pk>/cancel", views.BookingCancelView.as_view(), name="booking-cancel"),
    path(
        "bookings/<int:pk>/confirm",
        views.HostBookingActionView.as_view(booking_action="confirm"),
        name="booking-confirm",
    ),
    path(
        "bookings/<int:pk>/reject",
        views.HostBookingActionView.as_view(booking_action="reject"),
        name="booking-reject",
    ),
    path(
        "bookings/<int:pk>/complete",
        views.HostBookingActionView.as_view(booking_action="complete"),
        name="booking-complete",
    ),
    path(
        "bookings/<int:pk>/mark-paid",
        views.HostBookingActionView.as_view(booking_action="mark-paid"),
        name="booking-mark-paid",
    ),

    # ---------- Earnings ----------
    path("earnings", views.EarningListView.as_view(), name="earning-list"),
    path("earnings/summary", views.EarningSummaryView.as_view(), name="earning-summary"),
    path("earnings/date-range", views.EarningDateRangeView.as_view(), name="earning-date-range"),
    path("earnings/statement/<int:year>", views.EarningStatementView.as_view(), name="earning-statement"),
    path("earnings/booking/<int:booking_id>", views.BookingEarningView.as_view(), name="earning-booking"),
    path("earnings/request-payout", views.PayoutRequestView.as_view(), name="earning-request-payout"),
    path(
        "earnings/admin/process-payout",
        views.AdminProcessPayoutView.as_view(),
        name="earning-admin-process-payout",
    ),
    path(
        "earnings/admin/update-status",
        views.AdminReleaseEarningsView.as_view(),
        name="earning-admin-update-status",
    ),

    # ---------- Admin ----------
    path("admin/dashboard", views.AdminDashboardView.as_view(), name="admin-dashboard"),
    path("admin/users", views.AdminUserListView.as_view(), name="admin-users"),
    path("admin/users/create-admin", views.CreateAdminView.as_view(), name="admin-create-admin"),
    path("admin/users/<int:pk>", views.AdminUserDetailView.as_view(), name="admin-user-detail"),
    path("admin/users/<int:pk>/ban", views.AdminBanUserView.as_view(), name="admin-user-ban"),
    path("admin/users/<int:pk>/unban", views.AdminUnbanUserView.as_view(), name="admin-user-unban"),
    path(
        "admin/verifications/pending",
        views.AdminPendingVerificationsView.as_view(),
        name="admin-verifications-pending",
    ),
    path(
        "admin/verifications/<int:pk>",
        views.AdminIDVerificationView.as_view(),
        name="admin-verification-decide",
    ),
    path("admin/bookings", views.AdminBookingListView.as_view(), name="admin-bookings"),
    path("admin/bookings/<int:pk>", views.AdminBookingDetailView.as_view(), name="admin-booking-detail"),
    path("admin/bookings/<int:pk>/status", views.AdminBookingStatusView.as_view(), name="admin-booking-status"),
    path("admin/earnings/summary", views.AdminEarningsSummaryView.as_view(), name="admin-earnings-summary"),
    path(
        "admin/earnings/transactions",
        views.AdminEarningTransactionsView.as_view(),
        name="admin-earnings-transactions",
    ),
    path("admin/earnings/top-hosts", views.AdminTopHostsView.as_view(), name="admin-earnings-top-hosts"),
    path(
        "admin/earnings/hosts/<int:host_id>",
        views.AdminHostPayoutDetailsView.as_view(),
        name="admin-earnings-host",
    ),
    path("admin/check-admin-exists", views.CheckAdminExistsView.as_view(), name="admin-check-exists"),
    path("admin/initial-admin-setup", views.InitialAdminSetupView.as_view(), name="admin-initial-setup"),
]
