from rest_framework import serializers

from bookings.utils import DateHelper


class IsoDateField(serializers.DateField):
    """
    DateField that also accepts full ISO 8601 datetimes.

    Browsers send "2025-08-15T00:00:00.000Z" for date pickers; the value is
    converted to UTC before its calendar date is kept.
    """

    def to_internal_value(self, value):
        if isinstance(value, str) and "T" in value:
            try:
                return DateHelper.parse_iso_date(value)
            except ValueError:
                self.fail("invalid", format="YYYY-MM-DD or an ISO 8601 datetime")
        return super().to_internal_value(value)
