"""
Timeline playback → forecast day.

The time slider moves continuously from 1.0 to the last day. Each day is
split into a fixed number of steps and the dataset shown is the whole
day the current step falls in; grid values are never interpolated
between days, only the label is fractional.
"""

import math

STEPS_PER_DAY = 5


def resolve_day(position: float, days_available: int, steps_per_day: int = STEPS_PER_DAY) -> int:
    """
    Discrete day index (1-based) for a slider position.

    Args:
        position: Continuous position in [1, days_available]
        days_available: Number of loaded days
        steps_per_day: Slider steps per day

    Returns:
        Day index clamped to [1, days_available]
    """
    if days_available < 1:
        raise ValueError(f"days_available must be >= 1, got {days_available}")
    if math.isnan(position):
        return 1

    step = math.floor((position - 1) * steps_per_day)
    last_step = (days_available - 1) * steps_per_day
    # The final slider step before the end belongs to the last day
    if step >= last_step - 1:
        return days_available

    day = math.floor(step / steps_per_day) + 1
    return max(1, min(days_available, day))


def day_label(position: float) -> str:
    """Display label for a slider position, e.g. 'Day 2.2'."""
    return f"Day {position:.1f}"
