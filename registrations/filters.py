"""
Query filters for registration lists and exports.
"""

from django.db.models import Q
from django_filters import rest_framework as filters

from .models import GroupRegistration, IndividualRegistration, RegistrationStatus


class IndividualRegistrationFilter(filters.FilterSet):
    """Filter for individual registrations."""

    status = filters.ChoiceFilter(choices=RegistrationStatus.CHOICES)
    field_office = filters.NumberFilter(field_name='field_office_id')
    search = filters.CharFilter(method='filter_search')
    submitted_after = filters.DateTimeFilter(field_name='submitted_at', lookup_expr='gte')
    submitted_before = filters.DateTimeFilter(field_name='submitted_at', lookup_expr='lte')

    class Meta:
        model = IndividualRegistration
        fields = ['status', 'field_office', 'gender']

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(full_name__icontains=value)
            | Q(email__icontains=value)
            | Q(contact_number__icontains=value)
            | Q(or_number__icontains=value)
        )


class GroupRegistrationFilter(filters.FilterSet):
    """Filter for group registrations."""

    status = filters.ChoiceFilter(choices=RegistrationStatus.CHOICES)
    field_office = filters.NumberFilter(field_name='field_office_id')
    search = filters.CharFilter(method='filter_search')
    submitted_after = filters.DateTimeFilter(field_name='submitted_at', lookup_expr='gte')
    submitted_before = filters.DateTimeFilter(field_name='submitted_at', lookup_expr='lte')

    class Meta:
        model = GroupRegistration
        fields = ['status', 'field_office']

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(agency_name__icontains=value)
            | Q(contact_person__icontains=value)
            | Q(contact_number__icontains=value)
            | Q(or_number__icontains=value)
        )
