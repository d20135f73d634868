"""Conversion from seconds to FCPXML rational time strings."""

from decimal import Decimal, ROUND_HALF_UP
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import FrameRate


def to_rational(seconds: float, frame_rate: "FrameRate") -> str:
    """
    Converts seconds to a rational time that lands exactly on a frame boundary.

    The frame count is rounded to the nearest frame with ties away from zero,
    then expressed in the rate's own timebase, e.g. 1.5s at 30 fps becomes
    "4500/3000s" and at 29.97 fps "45045/30000s".

    Args:
        seconds: Non-negative time in seconds.
        frame_rate: Target FrameRate.

    Returns:
        A "{ticks}/{denominator}s" string.

    Raises:
        ValueError: If seconds is negative.
    """
    if seconds < 0:
        raise ValueError(f"Cannot convert negative time to FCPXML: {seconds}")
    numerator = frame_rate.timebase_numerator
    denominator = frame_rate.timebase_denominator
    # str() keeps 1.5 as exactly 1.5 instead of its binary approximation.
    frames = (Decimal(str(seconds)) * denominator / numerator).to_integral_value(ROUND_HALF_UP)
    ticks = int(frames) * numerator
    return f"{ticks}/{denominator}s"

