from datetime import datetime, timedelta, timezone as dt_timezone
from zoneinfo import ZoneInfo

import pytest
from django.utils import timezone

from core.clock import FixedClock, SystemClock, get_clock


def test_fixed_clock_requires_aware_datetime():
    with pytest.raises(ValueError):
        FixedClock(datetime(2026, 1, 1, 12, 0))


def test_fixed_clock_advance():
    clock = FixedClock(datetime(2026, 1, 1, 12, 0, tzinfo=dt_timezone.utc))
    clock.advance(hours=1, minutes=30)
    assert clock.now() == datetime(2026, 1, 1, 13, 30, tzinfo=dt_timezone.utc)


def test_day_bounds_follow_current_timezone():
    # 02:00 UTC on Jan 2 is still Jan 1 in New York.
    clock = FixedClock(datetime(2026, 1, 2, 2, 0, tzinfo=dt_timezone.utc))
    with timezone.override(ZoneInfo("America/New_York")):
        start = clock.start_of_today()
        end = clock.end_of_today()
    assert start == datetime(2026, 1, 1, tzinfo=ZoneInfo("America/New_York"))
    assert end - start == timedelta(days=1) - timedelta(microseconds=1)


def test_get_clock():
    fixed = FixedClock(datetime(2026, 1, 1, tzinfo=dt_timezone.utc))
    assert get_clock(fixed) is fixed
    assert isinstance(get_clock(), SystemClock)
    assert timezone.is_aware(get_clock().now())
