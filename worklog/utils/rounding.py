import math

from worklog.models.schema import RoundingMode, RoundingSpec

# 0.01 hours; durations are snapped to it to absorb floating-point jitter
SNAP_SECONDS = 36.0


def _half_away_from_zero(value: float) -> float:
    return math.copysign(math.floor(abs(value) + 0.5), value)


def _quantize(seconds: float, granularity: float, mode: RoundingMode) -> float:
    if granularity == 0:
        return seconds
    quotient = seconds / granularity
    if not math.isfinite(quotient):
        return seconds

    if mode is RoundingMode.UP:
        steps = math.ceil(quotient)
    elif mode is RoundingMode.DOWN:
        steps = math.floor(quotient)
    else:
        steps = _half_away_from_zero(quotient)
    return float(steps) * granularity


def round_duration(seconds: float, spec: RoundingSpec) -> float:
    """Quantize a duration in seconds according to ``spec``.

    Half mode resolves ties away from zero. A zero granularity returns the
    input unchanged. When the granularity is a whole number of 36 second
    steps the input is first snapped to the nearest 36 seconds, so a value
    such as 37800.000045 rounds exactly like 37800.0.
    """
    if spec.mode is RoundingMode.NONE:
        return seconds

    granularity = spec.granularity
    if granularity >= SNAP_SECONDS and granularity % SNAP_SECONDS == 0:
        seconds = _quantize(seconds, SNAP_SECONDS, RoundingMode.HALF)
    return _quantize(seconds, granularity, spec.mode)
