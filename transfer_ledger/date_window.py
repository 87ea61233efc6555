"""
Date Window Module

Inclusive calendar-day windows shared by every period-filtered view. The
start day counts from its midnight, the end day counts through its last
instant, and a missing bound means "no limit on that side".
"""

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, TypeVar, Union
import calendar

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import ValidationError

T = TypeVar("T")

ALL_DATA_LABEL = "All data"


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """Map a zone name to tzinfo; UTC needs no tz database"""
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown timezone '{name}'")


def _as_date(value: Union[date, datetime, str, None], field_name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            raise ValidationError(f"{field_name} must be an ISO date (YYYY-MM-DD), got '{value}'")
    raise ValidationError(f"{field_name} must be a date")


@dataclass(frozen=True)
class DateWindow:
    """
    Inclusive [start, end] window over calendar days

    A single-day window (start == end) covers the whole day. With both
    bounds absent every timestamp passes ("all data" mode).
    """
    start: Optional[date] = None
    end: Optional[date] = None
    tz: str = "UTC"

    def __post_init__(self):
        object.__setattr__(self, 'start', _as_date(self.start, "start"))
        object.__setattr__(self, 'end', _as_date(self.end, "end"))
        resolve_timezone(self.tz)
        if self.start and self.end and self.start > self.end:
            raise ValidationError(
                f"Window start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )

    @classmethod
    def all_time(cls, tz: str = "UTC") -> 'DateWindow':
        return cls(None, None, tz)

    @classmethod
    def single_day(cls, day: date, tz: str = "UTC") -> 'DateWindow':
        return cls(day, day, tz)

    @classmethod
    def current_month(cls, today: Optional[date] = None, tz: str = "UTC") -> 'DateWindow':
        """First to last day of the month containing today"""
        if today is None:
            today = datetime.now(resolve_timezone(tz)).date()
        last_day = calendar.monthrange(today.year, today.month)[1]
        return cls(today.replace(day=1), today.replace(day=last_day), tz)

    @classmethod
    def from_strings(cls, start: Optional[str] = None, end: Optional[str] = None,
                     tz: str = "UTC") -> 'DateWindow':
        """Build from ISO date strings; empty strings mean no bound"""
        return cls(_as_date(start, "start"), _as_date(end, "end"), tz)

    @property
    def tzinfo(self) -> tzinfo:
        return resolve_timezone(self.tz)

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None

    def bounds(self) -> Tuple[Optional[datetime], Optional[datetime]]:
        """
        (inclusive lower, exclusive upper) instants

        The upper bound is midnight after the end day, so anything up to
        end 23:59:59.999999 is inside.
        """
        zone = self.tzinfo
        lower = datetime.combine(self.start, time.min, tzinfo=zone) if self.start else None
        upper = (
            datetime.combine(self.end + timedelta(days=1), time.min, tzinfo=zone)
            if self.end else None
        )
        return lower, upper

    def includes(self, timestamp: datetime) -> bool:
        """
        Check whether a timestamp falls inside the window

        A naive timestamp is wall-clock time in the window's timezone.
        """
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=self.tzinfo)
        lower, upper = self.bounds()
        if lower is not None and timestamp < lower:
            return False
        if upper is not None and timestamp >= upper:
            return False
        return True

    def filter(self, records: Iterable[T]) -> List[T]:
        """Keep records whose created_at falls inside the window"""
        if self.is_unbounded:
            return list(records)
        return [record for record in records if self.includes(record.created_at)]

    def label(self) -> str:
        """Human label; "All data" is distinct from any explicit window"""
        if self.is_unbounded:
            return ALL_DATA_LABEL
        start = self.start.isoformat() if self.start else "…"
        end = self.end.isoformat() if self.end else "…"
        return f"{start} → {end}"


def includes(timestamp: datetime, start: Optional[date] = None,
             end: Optional[date] = None, tz: str = "UTC") -> bool:
    """Functional form of DateWindow.includes"""
    return DateWindow(start, end, tz).includes(timestamp)
