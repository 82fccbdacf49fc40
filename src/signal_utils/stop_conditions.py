"""Define predicates deciding where an open-ended sampled range should end."""

from __future__ import annotations

from signal_utils.sampled_function import StopCondition


def stop_outside_range(low: float, high: float) -> StopCondition:
    """Create a predicate which stops the sampling once the function leaves [low, high).

    Note: A value exactly equal to `high` stops the sampling, so that value never becomes the
        upper edge of the sampled range.

    :param low: Smallest function value allowed in the range
    :param high: Function value (excluded) above which the range ends
    :return: Predicate `(x, y) -> bool` usable with SampledFunction.extended()
    """
    if high <= low:
        error_msg = f"Empty range of allowed values: [{low}, {high})."
        raise ValueError(error_msg)

    def stop_if(x: float, y: float) -> bool:
        return (y < low) or (y >= high)

    return stop_if


def stop_below_magnitude(threshold: float) -> StopCondition:
    """Create a predicate which stops the sampling once the function has decayed.

    This suits response functions with a long tail: sampling goes on as long as the absolute
    value of the function stays at or above `threshold`.

    :param threshold: Smallest absolute function value kept in the range (non-negative)
    :return: Predicate `(x, y) -> bool` usable with SampledFunction.extended()
    """
    if threshold < 0:
        error_msg = f"Magnitude threshold must be non-negative, got {threshold}."
        raise ValueError(error_msg)

    def stop_if(x: float, y: float) -> bool:
        return abs(y) < threshold

    return stop_if
