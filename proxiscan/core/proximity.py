"""RSSI to distance conversion."""

from __future__ import annotations

DEFAULT_REFERENCE_RSSI = -59
MIN_DISTANCE_M = 0.1
MAX_DISTANCE_M = 100.0
UNAVAILABLE_RSSI = 0

_QUALITY_BANDS = (
    (-50, "excellent"),
    (-60, "good"),
    (-70, "fair"),
    (-80, "poor"),
)


def estimate_distance(
    signal_strength: int,
    reference_strength_at_1m: int = DEFAULT_REFERENCE_RSSI,
) -> float | None:
    """Estimate distance in metres with the log-distance path-loss model.

    Uses a path-loss exponent of 2 (free space): ``10 ** ((ref - rssi) / 20)``.
    The result is clamped to ``[MIN_DISTANCE_M, MAX_DISTANCE_M]``.

    Returns None when ``signal_strength`` is the unavailable sentinel (0); the
    caller decides what to substitute.
    """
    if signal_strength == UNAVAILABLE_RSSI:
        return None
    ratio = (reference_strength_at_1m - signal_strength) / 20.0
    # 10 ** 10 is already far past the clamp; larger exponents only risk OverflowError.
    ratio = max(-10.0, min(10.0, ratio))
    distance = 10**ratio
    return max(MIN_DISTANCE_M, min(MAX_DISTANCE_M, distance))


def signal_quality(signal_strength: int) -> str:
    if signal_strength == UNAVAILABLE_RSSI:
        return "unavailable"
    for threshold, label in _QUALITY_BANDS:
        if signal_strength > threshold:
            return label
    return "very poor"
