"""Tests for pm_common.enums and the injectable clock."""

from datetime import UTC, datetime, timedelta

from src.pm_common.datetime_utils import FixedClock, SystemClock
from src.pm_common.enums import PoolPhase, Side


class TestSide:
    def test_opposite(self) -> None:
        assert Side.YES.opposite is Side.NO
        assert Side.NO.opposite is Side.YES

    def test_string_value(self) -> None:
        assert Side("YES") is Side.YES
        assert Side.NO.value == "NO"


class TestPoolPhase:
    def test_members(self) -> None:
        assert set(PoolPhase.__members__) == {"FUNDING", "PROPOSED", "DISPUTED", "FINALIZED"}


class TestClock:
    def test_fixed_clock_only_moves_when_told(self) -> None:
        start = datetime(2026, 1, 1, tzinfo=UTC)
        clock = FixedClock(start)
        assert clock.now() == start
        assert clock.advance(90) == start + timedelta(seconds=90)
        clock.set(start)
        assert clock.now() == start

    def test_system_clock_is_utc(self) -> None:
        assert SystemClock().now().tzinfo is UTC
