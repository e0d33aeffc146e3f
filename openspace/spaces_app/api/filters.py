from datetime import timedelta

import django_filters
from django.contrib.auth import get_user_model
from django.db.models import Q

from spaces_app.models import Booking, Earning, Room, UserProfile
from spaces_app.validators import validate_numeric_range

# Longest stay the date filter will expand night by night
MAX_FILTER_NIGHTS = 90


class RoomFilter(django_filters.FilterSet):
    room_type = django_filters.ChoiceFilter(choices=Room.TYPE_CHOICES)
    city = django_filters.CharFilter(field_name="city", lookup_expr="icontains")
    min_price = django_filters.NumberFilter(field_name="base_price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="base_price", lookup_expr="lte")
    guests = django_filters.NumberFilter(field_name="max_guests", lookup_expr="gte")
    amenities = django_filters.CharFilter(method="filter_amenities")
    search = django_filters.CharFilter(method="filter_search")
    check_in = django_filters.DateFilter(method="filter_noop")
    check_out = django_filters.DateFilter(method="filter_noop")

    class Meta:
        model = Room
        fields = ["room_type", "city", "instant_booking"]

    def filter_amenities(self, queryset, name, value):
        """Comma separated; a room must offer every one of them."""
        for amenity in [a.strip() for a in value.split(",") if a.strip()]:
            queryset = queryset.filter(amenities__icontains=f'"{amenity}"')
        return queryset

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(title__icontains=value) | Q(description__icontains=value) | Q(city__icontains=value)
        )

    def filter_noop(self, queryset, name, value):
        # applied together in filter_queryset
        return queryset

    def filter_queryset(self, queryset):
        validate_numeric_range(
            self.form.cleaned_data.get("min_price"),
            self.form.cleaned_data.get("max_price"),
            label_min="min_price",
            label_max="max_price",
        )
        queryset = super().filter_queryset(queryset)
        check_in = self.form.cleaned_data.get("check_in")
        check_out = self.form.cleaned_data.get("check_out")
        if check_in and check_out and check_out > check_in:
            queryset = self._available_between(queryset, check_in, check_out)
        return queryset

    @staticmethod
    def _available_between(queryset, check_in, check_out):
        queryset = queryset.filter(
            Q(available_from__isnull=True) | Q(available_from__lte=check_in),
            Q(available_until__isnull=True) | Q(available_until__gte=check_out),
        )

        busy = Booking.objects.filter(
            booking_status__in=Booking.ACTIVE_STATUSES,
            check_in__lt=check_out,
            check_out__gt=check_in,
        ).values("room_id")
        queryset = queryset.exclude(pk__in=busy)

        day = check_in
        nights = 0
        while day < check_out and nights < MAX_FILTER_NIGHTS:
            queryset = queryset.exclude(unavailable_dates__icontains=f'"{day.isoformat()}"')
            day += timedelta(days=1)
            nights += 1
        return queryset


class BookingFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(field_name="booking_status", choices=Booking.STATUS_CHOICES)
    payment_status = django_filters.ChoiceFilter(choices=Booking.PAYMENT_STATUS_CHOICES)

    class Meta:
        model = Booking
        fields = ["status", "payment_status", "room"]


class EarningFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=Earning.STATUS_CHOICES)

    class Meta:
        model = Earning
        fields = ["status", "payment_method"]


class AdminEarningFilter(EarningFilter):
    host = django_filters.NumberFilter(field_name="host_id")
    start_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    end_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")


class AdminUserFilter(django_filters.FilterSet):
    role = django_filters.ChoiceFilter(field_name="profile__role", choices=UserProfile.ROLE_CHOICES)
    verification_level = django_filters.ChoiceFilter(
        field_name="profile__verification_level", choices=UserProfile.LEVEL_CHOICES
    )
    banned = django_filters.BooleanFilter(method="filter_banned")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = get_user_model()
        fields = ["role", "verification_level", "banned"]

    def filter_banned(self, queryset, name, value):
        return queryset.filter(is_active=not value)

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(email__icontains=value) | Q(first_name__icontains=value) | Q(last_name__icontains=value)
        )
