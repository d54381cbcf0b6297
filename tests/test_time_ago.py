"""
Tests for Relative Time Formatting

Tests cover each calendar unit bucket, numeric versus worded singular
forms, the "Just now" fallback, and timestamps in the future.
"""

import pytest
from datetime import datetime, timedelta, timezone
from dateutil.relativedelta import relativedelta
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from utils.time_ago import (
    time_ago_since_date, time_ago_since_unix, calendar_components, JUST_NOW
)


# =============================================================================
# Plural Buckets
# =============================================================================

class TestPluralBuckets:
    """Counts of two or more always read "<n> <unit>s ago"."""

    @pytest.mark.parametrize("offset, expected", [
        (relativedelta(years=3), "3 years ago"),
        (relativedelta(years=2, months=11), "2 years ago"),
        (relativedelta(months=5), "5 months ago"),
        (relativedelta(months=11, days=20), "11 months ago"),
        (relativedelta(days=15), "2 weeks ago"),
        (relativedelta(days=27), "3 weeks ago"),
        (relativedelta(days=3), "3 days ago"),
        (relativedelta(days=6, hours=23), "6 days ago"),
        (relativedelta(hours=5), "5 hours ago"),
        (relativedelta(minutes=42), "42 minutes ago"),
    ])
    def test_plural(self, fixed_now, offset, expected):
        date = fixed_now - offset
        assert time_ago_since_date(date, numeric_dates=True, now=fixed_now) == expected
        assert time_ago_since_date(date, numeric_dates=False, now=fixed_now) == expected


# =============================================================================
# Singular Buckets
# =============================================================================

class TestSingularBuckets:
    """A count of exactly one depends on the numeric/worded toggle."""

    @pytest.mark.parametrize("offset, numeric, worded", [
        (relativedelta(years=1), "1 year ago", "Last year"),
        (relativedelta(months=1), "1 month ago", "Last month"),
        (relativedelta(days=10), "1 week ago", "Last week"),
        (relativedelta(days=1, hours=2), "1 day ago", "Yesterday"),
        (relativedelta(hours=1, minutes=30), "1 hour ago", "An hour ago"),
        (relativedelta(minutes=1, seconds=59), "1 minute ago", "A minute ago"),
    ])
    def test_singular(self, fixed_now, offset, numeric, worded):
        date = fixed_now - offset
        assert time_ago_since_date(date, numeric_dates=True, now=fixed_now) == numeric
        assert time_ago_since_date(date, numeric_dates=False, now=fixed_now) == worded

    def test_four_hundred_days_is_one_year(self, fixed_now):
        """Largest unit wins: 400 days is a year and a month, not 57 weeks."""
        date = fixed_now - timedelta(days=400)
        assert time_ago_since_date(date, numeric_dates=True, now=fixed_now) == "1 year ago"
        assert time_ago_since_date(date, numeric_dates=False, now=fixed_now) == "Last year"


# =============================================================================
# Just Now
# =============================================================================

class TestJustNow:
    """Spans under a minute have no seconds granularity."""

    @pytest.mark.parametrize("seconds", [0, 1, 30, 59])
    def test_under_a_minute(self, fixed_now, seconds):
        date = fixed_now - timedelta(seconds=seconds)
        assert time_ago_since_date(date, numeric_dates=True, now=fixed_now) == JUST_NOW

    def test_just_now_wording(self):
        assert JUST_NOW == "Just now"


# =============================================================================
# Edge Cases
# =============================================================================

class TestEdgeCases:
    """Ordering, time zones and the unix timestamp entry point."""

    def test_future_date_is_symmetric(self, fixed_now):
        """A date after now is measured the same way as one before it."""
        date = fixed_now + timedelta(hours=3)
        assert time_ago_since_date(date, numeric_dates=True, now=fixed_now) == "3 hours ago"

    def test_naive_datetimes_are_utc(self, fixed_now):
        naive_now = fixed_now.replace(tzinfo=None)
        date = naive_now - timedelta(days=2)
        assert time_ago_since_date(date, numeric_dates=True, now=naive_now) == "2 days ago"

    def test_mixed_time_zones(self, fixed_now):
        plus_two = timezone(timedelta(hours=2))
        date = (fixed_now - timedelta(hours=2)).astimezone(plus_two)
        assert time_ago_since_date(date, numeric_dates=True, now=fixed_now) == "2 hours ago"

    def test_unix_timestamp_uses_numeric_wording(self, fixed_now):
        unix = (fixed_now - timedelta(days=1, hours=1)).timestamp()
        assert time_ago_since_unix(unix, now=fixed_now) == "1 day ago"

    def test_unix_timestamp_defaults_to_current_time(self):
        unix = datetime.now(timezone.utc).timestamp() - 5 * 3600 - 60
        assert time_ago_since_unix(unix) == "5 hours ago"

    def test_weeks_are_carved_out_of_days(self, fixed_now):
        components = calendar_components(fixed_now - timedelta(days=17, hours=4), fixed_now)
        assert components["week"] == 2
        assert components["day"] == 3
        assert components["hour"] == 4
