"""Business calendar arithmetic for working-time and overtime accounting.

All functions are pure. Intervals are clamped per local calendar day against
the configured windows, so partial days, multi-day spans and non-working days
are handled by the same day-stepping loop.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

_ONE_MILLISECOND = timedelta(milliseconds=1)


@dataclass(frozen=True)
class BusinessCalendar:
    """Immutable weekly business calendar of one production facility.

    Attributes:
        timezone_name: IANA timezone used for wall-clock windows.
        work_start: Start of the morning working window.
        lunch_start: Start of the lunch exclusion.
        lunch_end: End of the lunch exclusion.
        break_start: Start of the afternoon break exclusion.
        break_end: End of the afternoon break exclusion.
        work_end: Regular end of the last working window.
        overtime_start: Start of the overtime window.
        overtime_end: Daily overtime cutoff.
        working_weekdays: Weekday numbers (Monday=0) with working and overtime windows.
    """

    timezone_name: str = "Asia/Bangkok"
    work_start: time = time(8, 30)
    lunch_start: time = time(12, 0)
    lunch_end: time = time(13, 0)
    break_start: time = time(15, 0)
    break_end: time = time(15, 10)
    work_end: time = time(16, 45)
    overtime_start: time = time(17, 30)
    overtime_end: time = time(22, 30)
    working_weekdays: frozenset[int] = frozenset({0, 1, 2, 3, 4, 5})

    @property
    def tzinfo(self) -> ZoneInfo:
        """Return the facility timezone."""

        return ZoneInfo(self.timezone_name)

    def calendar_working_windows(self, custom_work_end: time | None = None) -> tuple[tuple[time, time], ...]:
        """Return the daily working windows in chronological order.

        Args:
            custom_work_end: Optional replacement end of the last window.

        Returns:
            tuple[tuple[time, time], ...]: Morning, early afternoon and late afternoon windows.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        return (
            (self.work_start, self.lunch_start),
            (self.lunch_end, self.break_start),
            (self.break_end, custom_work_end or self.work_end),
        )

    def calendar_overtime_windows(self) -> tuple[tuple[time, time], ...]:
        """Return the daily overtime window."""

        return ((self.overtime_start, self.overtime_end),)


def domain_calendar_to_local(calendar: BusinessCalendar, moment: datetime) -> datetime:
    """Convert a timestamp to the calendar timezone.

    Naive timestamps are interpreted as facility wall-clock time.

    Args:
        calendar: Business calendar.
        moment: Timestamp to convert.

    Returns:
        datetime: Offset-aware timestamp in the calendar timezone.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if moment.tzinfo is None or moment.utcoffset() is None:
        return moment.replace(tzinfo=calendar.tzinfo)
    return moment.astimezone(calendar.tzinfo)


def domain_calendar_at(calendar: BusinessCalendar, day: date, clock: time) -> datetime:
    """Build the local timestamp for one wall-clock time on one calendar day."""

    return datetime.combine(day, clock, tzinfo=calendar.tzinfo)


def domain_calendar_working_time_ms(
    calendar: BusinessCalendar,
    start: datetime,
    end: datetime,
    custom_work_end: time | None = None,
) -> int:
    """Sum working-window overlap of one interval.

    Args:
        calendar: Business calendar.
        start: Interval start.
        end: Interval end.
        custom_work_end: Optional end of the last working window for extended shifts.

    Returns:
        int: Working milliseconds inside the interval, never negative.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return _domain_calendar_window_overlap_ms(
        calendar=calendar,
        start=start,
        end=end,
        windows=calendar.calendar_working_windows(custom_work_end),
    )


def domain_calendar_overtime_time_ms(calendar: BusinessCalendar, start: datetime, end: datetime) -> int:
    """Sum overtime-window overlap of one interval.

    Args:
        calendar: Business calendar.
        start: Interval start.
        end: Interval end.

    Returns:
        int: Overtime milliseconds inside the interval, never negative.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return _domain_calendar_window_overlap_ms(
        calendar=calendar,
        start=start,
        end=end,
        windows=calendar.calendar_overtime_windows(),
    )


def domain_calendar_overtime_cutoff(calendar: BusinessCalendar, moment: datetime) -> datetime:
    """Return the overtime cutoff on the local calendar day of `moment`."""

    local_moment = domain_calendar_to_local(calendar, moment)
    return domain_calendar_at(calendar, local_moment.date(), calendar.overtime_end)


def domain_calendar_overtime_start(calendar: BusinessCalendar, moment: datetime) -> datetime:
    """Return the overtime window start on the local calendar day of `moment`."""

    local_moment = domain_calendar_to_local(calendar, moment)
    return domain_calendar_at(calendar, local_moment.date(), calendar.overtime_start)


def domain_calendar_in_overtime_window(
    calendar: BusinessCalendar,
    moment: datetime,
    include_cutoff: bool = True,
) -> bool:
    """Return whether a timestamp falls inside the same-day overtime window.

    Args:
        calendar: Business calendar.
        moment: Timestamp to test.
        include_cutoff: Whether the cutoff instant itself counts as inside.

    Returns:
        bool: True when the timestamp is inside the overtime window.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    local_moment = domain_calendar_to_local(calendar, moment)
    window_start = domain_calendar_overtime_start(calendar, local_moment)
    window_end = domain_calendar_overtime_cutoff(calendar, local_moment)
    if include_cutoff:
        return window_start <= local_moment <= window_end
    return window_start <= local_moment < window_end


def domain_format_duration(duration_ms: int, placeholder: str = "-") -> str:
    """Render milliseconds as `H:MM:SS`.

    Args:
        duration_ms: Duration in milliseconds.
        placeholder: Text returned for a zero or negative duration.

    Returns:
        str: Rendered duration or placeholder.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if duration_ms <= 0:
        return placeholder
    total_seconds = duration_ms // 1000
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours}:{minutes:02d}:{seconds:02d}"


def domain_format_local_timestamp(calendar: BusinessCalendar, moment: datetime) -> str:
    """Render a timestamp as `M/D/YYYY H:MM:SS` facility wall-clock text."""

    local_moment = domain_calendar_to_local(calendar, moment)
    return (
        f"{local_moment.month}/{local_moment.day}/{local_moment.year} "
        f"{local_moment.hour}:{local_moment.minute:02d}:{local_moment.second:02d}"
    )


def _domain_calendar_window_overlap_ms(
    calendar: BusinessCalendar,
    start: datetime,
    end: datetime,
    windows: tuple[tuple[time, time], ...],
) -> int:
    local_start = domain_calendar_to_local(calendar, start)
    local_end = domain_calendar_to_local(calendar, end)
    if local_end <= local_start:
        return 0

    total_ms = 0
    current_day = local_start.date()
    last_day = local_end.date()
    while current_day <= last_day:
        if current_day.weekday() in calendar.working_weekdays:
            for window_start_clock, window_end_clock in windows:
                window_start = domain_calendar_at(calendar, current_day, window_start_clock)
                window_end = domain_calendar_at(calendar, current_day, window_end_clock)
                overlap_start = max(local_start, window_start)
                overlap_end = min(local_end, window_end)
                if overlap_end > overlap_start:
                    total_ms += (overlap_end - overlap_start) // _ONE_MILLISECOND
        current_day += timedelta(days=1)
    return total_ms


__all__ = [
    "BusinessCalendar",
    "domain_calendar_at",
    "domain_calendar_in_overtime_window",
    "domain_calendar_overtime_cutoff",
    "domain_calendar_overtime_start",
    "domain_calendar_overtime_time_ms",
    "domain_calendar_to_local",
    "domain_calendar_working_time_ms",
    "domain_format_duration",
    "domain_format_local_timestamp",
]
