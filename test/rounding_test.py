import pytest

from worklog.models.schema import RoundingSpec
from worklog.utils.rounding import round_duration

TIME_ACTUAL = 38160.12345  # ~10:36am in seconds
TIME_UP = 38700.0  # 10:45am
TIME_DOWN = 37800.0  # 10:30am


def test_round_up():
    assert round_duration(TIME_ACTUAL, RoundingSpec.up(900.0)) == TIME_UP
    assert round_duration(TIME_UP, RoundingSpec.up(900.0)) == TIME_UP
    assert round_duration(TIME_UP - 1.0, RoundingSpec.up(900.0)) == TIME_UP


def test_round_down():
    assert round_duration(TIME_ACTUAL, RoundingSpec.down(900.0)) == TIME_DOWN
    assert round_duration(TIME_DOWN, RoundingSpec.down(900.0)) == TIME_DOWN
    assert round_duration(TIME_DOWN + 1.0, RoundingSpec.down(900.0)) == TIME_DOWN


def test_round_half():
    assert round_duration(TIME_ACTUAL, RoundingSpec.half(900.0)) == TIME_DOWN
    assert round_duration(TIME_DOWN, RoundingSpec.half(900.0)) == TIME_DOWN


def test_fractional_granularity():
    assert round_duration(TIME_ACTUAL, RoundingSpec.up(0.25)) == 38160.25


def test_zero_granularity_returns_input():
    assert round_duration(TIME_ACTUAL, RoundingSpec.up(0.0)) == TIME_ACTUAL
    assert round_duration(TIME_ACTUAL, RoundingSpec.down(0.0)) == TIME_ACTUAL
    assert round_duration(TIME_ACTUAL, RoundingSpec.half(0.0)) == TIME_ACTUAL


def test_none_returns_input():
    assert round_duration(TIME_ACTUAL, RoundingSpec.none()) == TIME_ACTUAL
    assert round_duration(-12.5, RoundingSpec.none()) == -12.5


def test_jitter_is_snapped_before_rounding():
    assert round_duration(37800.000045, RoundingSpec.up(900.0)) == 37800.0
    assert round_duration(37799.99995, RoundingSpec.down(900.0)) == 37800.0


def test_half_ties_round_away_from_zero():
    assert round_duration(30.0, RoundingSpec.half(60.0)) == 60.0
    assert round_duration(90.0, RoundingSpec.half(60.0)) == 120.0
    assert round_duration(150.0, RoundingSpec.half(60.0)) == 180.0
    assert round_duration(-30.0, RoundingSpec.half(60.0)) == -60.0


def test_minute_rounding_is_not_snapped():
    assert round_duration(60.0, RoundingSpec.up(60.0)) == 60.0
    assert round_duration(61.0, RoundingSpec.up(60.0)) == 120.0


@pytest.mark.parametrize("spec", [
    RoundingSpec.up(900.0),
    RoundingSpec.down(900.0),
    RoundingSpec.half(900.0),
    RoundingSpec.up(60.0),
    RoundingSpec.down(50.0),
    RoundingSpec.half(3600.0),
    RoundingSpec.up(0.25),
    RoundingSpec.none(),
])
@pytest.mark.parametrize("seconds", [0.0, 72.0, 899.0, 1000.5, 38160.12345, 37800.000045, 86399.0])
def test_rounding_is_idempotent(spec, seconds):
    once = round_duration(seconds, spec)
    assert round_duration(once, spec) == once
