from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple
import pytz
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils import timezone


class BusinessClock:
    """
    Resolves wall-clock instants to the business's local civil time.

    The business runs on a fixed UTC offset, so local time is a pure function
    of the instant: no DST lookups. All cutoff and "today"/"tomorrow"
    decisions go through this class.
    """

    def __init__(
        self,
        utc_offset_minutes: Optional[int] = None,
        cutoff_hour: Optional[int] = None,
        cutoff_minute: Optional[int] = None,
    ):
        if utc_offset_minutes is None:
            utc_offset_minutes = getattr(settings, "BUSINESS_UTC_OFFSET_MINUTES", 60)
        if cutoff_hour is None:
            cutoff_hour = getattr(settings, "ORDER_CUTOFF_HOUR", 22)
        if cutoff_minute is None:
            cutoff_minute = getattr(settings, "ORDER_CUTOFF_MINUTE", 0)

        self.utc_offset_minutes = utc_offset_minutes
        self.cutoff = time(hour=cutoff_hour, minute=cutoff_minute)
        self.business_tz = pytz.FixedOffset(utc_offset_minutes)

    def to_local(self, dt: Optional[datetime] = None) -> datetime:
        """Convert an instant to business-local time. Naive input is taken as UTC."""
        if dt is None:
            dt = timezone.now()
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=pytz.utc)
        return dt.astimezone(self.business_tz)

    def local_today(self, now: Optional[datetime] = None) -> date:
        return self.to_local(now).date()

    def local_tomorrow(self, now: Optional[datetime] = None) -> date:
        return self.local_today(now) + timedelta(days=1)

    def is_past_cutoff(self, now: Optional[datetime] = None) -> bool:
        """
        True once the local wall clock has reached the cutoff hour:minute.

        Applies to the act of ordering "right now", whichever delivery date
        is requested.
        """
        local_now = self.to_local(now)
        return (local_now.hour, local_now.minute) >= (self.cutoff.hour, self.cutoff.minute)

    def local_hour(self, now: Optional[datetime] = None) -> int:
        return self.to_local(now).hour

    def local_day_bounds(self, day: date) -> Tuple[datetime, datetime]:
        """UTC instants [start, end) covering one business-local calendar day."""
        start_local = self.business_tz.localize(datetime.combine(day, time.min))
        end_local = start_local + timedelta(days=1)
        return start_local.astimezone(pytz.utc), end_local.astimezone(pytz.utc)

    @staticmethod
    def weekday_index(day: date) -> int:
        """Weekday index with 0 = Sunday ... 6 = Saturday, as stored on meals."""
        return day.isoweekday() % 7


def get_business_clock() -> BusinessClock:
    return BusinessClock()


def beat_timezone_name(utc_offset_minutes: int) -> str:
    """
    IANA zone name matching a fixed business offset, for CELERY_TIMEZONE.

    Etc/GMT zones carry the inverted sign: +01:00 is "Etc/GMT-1". Only
    whole-hour offsets have such a zone.
    """
    if utc_offset_minutes % 60:
        raise ImproperlyConfigured(
            f"BUSINESS_UTC_OFFSET_MINUTES={utc_offset_minutes} is not a whole hour; "
            "set CELERY_TIMEZONE explicitly"
        )
    hours = utc_offset_minutes // 60
    if not -12 <= hours <= 14:
        raise ImproperlyConfigured(f"BUSINESS_UTC_OFFSET_MINUTES={utc_offset_minutes} is out of range")
    if hours == 0:
        return "UTC"
    return f"Etc/GMT{-hours:+d}"
