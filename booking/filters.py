# booking/filters.py

from django_filters import rest_framework as filters

from .models import Appointment


class AppointmentFilter(filters.FilterSet):
    """
    ListAppointments query params:
      artist - artist member id
      start  - appointments starting at or after this instant
      end    - appointments ending at or before this instant
      status - exact status
    """
    artist = filters.NumberFilter(field_name="artist_id")
    start = filters.IsoDateTimeFilter(field_name="start_time", lookup_expr="gte")
    end = filters.IsoDateTimeFilter(field_name="end_time", lookup_expr="lte")
    status = filters.ChoiceFilter(choices=Appointment.STATUS_CHOICES)

    class Meta:
        model = Appointment
        fields = ["artist", "start", "end", "status"]
