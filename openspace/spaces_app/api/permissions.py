from rest_framework import permissions

from spaces_app.models import UserProfile


def _profile(user):
    return getattr(user, "profile", None)


class IsHost(permissions.BasePermission):
    """Users whose profile role is host (staff always pass)."""
    message = "Only hosts can perform this action."

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        if user.is_staff:
            return True
        profile = _profile(user)
        return bool(profile and profile.role == UserProfile.ROLE_HOST)


class IsVerifiedHost(IsHost):
    message = "Only verified hosts can list spaces."

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        if request.user.is_staff:
            return True
        return _profile(request.user).verification_level == UserProfile.LEVEL_VERIFIED


class IsRoomHostOrReadOnly(permissions.BasePermission):
    """Read for all; write only by the room's host or staff."""
    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True
        return obj.host_id == request.user.id or bool(request.user and request.user.is_staff)


class IsBookingHostOrAdmin(permissions.BasePermission):
    message = "Only the host of this space can manage the booking."

    def has_object_permission(self, request, view, obj):
        return obj.host_id == request.user.id or request.user.is_staff


class IsBookingParticipant(permissions.BasePermission):
    """Guest, host or staff."""
    def has_object_permission(self, request, view, obj):
        user = request.user
        return obj.user_id == user.id or obj.host_id == user.id or user.is_staff
