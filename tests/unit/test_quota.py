"""Tests for the quota clock: local-day counting, clamping and reset time."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from dateutil import tz

from pipeline_jobs.quota import compute_remaining_credits, local_day, resolve_timezone

NY = tz.gettz("America/New_York")


def _user(tz_name: str | None = "America/New_York") -> SimpleNamespace:
    return SimpleNamespace(timezone=tz_name)


def _app(applied_at: datetime) -> SimpleNamespace:
    return SimpleNamespace(applied_at=applied_at)


def _ny(*args: int) -> datetime:
    return datetime(*args, tzinfo=NY)


# ---------------------------------------------------------------------------
# Counting
# ---------------------------------------------------------------------------


class TestRemaining:
    def test_full_quota_without_applications(self) -> None:
        window = compute_remaining_credits(_user(), [], _ny(2024, 1, 15, 12, 0))
        assert window.remaining == 10
        assert window.used == 0

    def test_decreases_by_one_after_apply(self) -> None:
        now = _ny(2024, 1, 15, 12, 0)
        earlier = [_app(_ny(2024, 1, 15, 9, 0)), _app(_ny(2024, 1, 15, 10, 0))]
        before = compute_remaining_credits(_user(), earlier, now)
        after = compute_remaining_credits(_user(), earlier + [_app(now)], now)
        assert before.remaining - after.remaining == 1

    def test_yesterday_does_not_count(self) -> None:
        yesterday = [_app(_ny(2024, 1, 14, 8, 0)) for _ in range(10)]
        window = compute_remaining_credits(_user(), yesterday, _ny(2024, 1, 15, 8, 0))
        assert window.remaining == 10

    def test_clamped_at_zero(self) -> None:
        today = [_app(_ny(2024, 1, 15, 8, i)) for i in range(12)]
        window = compute_remaining_credits(_user(), today, _ny(2024, 1, 15, 9, 0))
        assert window.used == 12
        assert window.remaining == 0

    def test_custom_limit(self) -> None:
        window = compute_remaining_credits(_user(), [_app(_ny(2024, 1, 15, 8))], _ny(2024, 1, 15, 9), limit=3)
        assert window.remaining == 2

    def test_naive_timestamps_are_utc(self) -> None:
        # 02:00 UTC on the 16th is 21:00 on the 15th in New York
        naive = datetime(2024, 1, 16, 2, 0)
        window = compute_remaining_credits(_user(), [_app(naive)], _ny(2024, 1, 15, 22, 0))
        assert window.used == 1


# ---------------------------------------------------------------------------
# Midnight rollover
# ---------------------------------------------------------------------------


class TestMidnightReset:
    def test_resets_at_local_midnight(self) -> None:
        day_before = [_app(_ny(2024, 1, 15, h)) for h in range(10, 20)]
        before = compute_remaining_credits(_user(), day_before, _ny(2024, 1, 15, 23, 59, 59))
        after = compute_remaining_credits(_user(), day_before, _ny(2024, 1, 16, 0, 0, 1))
        assert before.remaining == 0
        assert after.remaining == 10

    def test_applications_either_side_of_midnight_use_separate_days(self) -> None:
        first = _app(_ny(2024, 1, 15, 23, 59))
        second = _app(_ny(2024, 1, 16, 0, 1))

        on_15th = compute_remaining_credits(_user(), [first], first.applied_at)
        on_16th = compute_remaining_credits(_user(), [first, second], second.applied_at)

        assert on_15th.remaining == 9
        assert on_16th.remaining == 9

    def test_day_follows_user_timezone_not_utc(self) -> None:
        # 04:30 UTC on the 16th: already the 16th in UTC, still the 15th in New York
        now = datetime(2024, 1, 16, 4, 30, tzinfo=timezone.utc)
        # 18:00 New York is 23:00 UTC on the 15th, the day before "now" in UTC
        apps = [_app(_ny(2024, 1, 15, 18, 0))]
        assert compute_remaining_credits(_user(), apps, now).remaining == 9
        assert compute_remaining_credits(_user("UTC"), apps, now).remaining == 10


# ---------------------------------------------------------------------------
# Reset countdown
# ---------------------------------------------------------------------------


class TestResetIn:
    def test_time_to_next_midnight(self) -> None:
        window = compute_remaining_credits(_user(), [], _ny(2024, 1, 15, 22, 30))
        assert window.reset_in == timedelta(hours=1, minutes=30)
        assert window.reset_at.date().isoformat() == "2024-01-16"

    def test_dst_spring_forward_day_is_short(self) -> None:
        # 2024-03-10 has 23 hours in New York
        window = compute_remaining_credits(_user(), [], _ny(2024, 3, 10, 0, 0))
        assert window.reset_in == timedelta(hours=23)

    def test_dst_fall_back_day_is_long(self) -> None:
        window = compute_remaining_credits(_user(), [], _ny(2024, 11, 3, 0, 0))
        assert window.reset_in == timedelta(hours=25)


# ---------------------------------------------------------------------------
# Timezone resolution
# ---------------------------------------------------------------------------


class TestResolveTimezone:
    def test_named_zone(self) -> None:
        zone = resolve_timezone("Asia/Tokyo")
        assert datetime(2024, 1, 1, tzinfo=zone).utcoffset() == timedelta(hours=9)

    @pytest.mark.parametrize("name", [None, "", "Not/AZone"])
    def test_falls_back_to_server_zone(self, name) -> None:
        assert resolve_timezone(name) == tz.tzlocal()

    def test_local_day_converts_before_taking_date(self) -> None:
        moment = datetime(2024, 1, 16, 3, 0, tzinfo=timezone.utc)
        assert local_day(moment, NY).isoformat() == "2024-01-15"
