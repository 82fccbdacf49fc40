"""Define unit tests for the predicates ending open-ended sampled ranges."""

import math

import pytest

from signal_utils.sampled_function import SampledFunction
from signal_utils.stop_conditions import stop_below_magnitude, stop_outside_range


def test_stop_outside_range() -> None:
    """Verify that the range predicate fires below the low value and from the high value."""
    stop_if = stop_outside_range(0.0, 1.0)

    assert stop_if(0.0, -0.1)
    assert not stop_if(0.0, 0.0)
    assert not stop_if(0.0, 0.99)
    assert stop_if(0.0, 1.0)


def test_stop_below_magnitude() -> None:
    """Verify that the decay predicate fires once the absolute value drops below the threshold."""
    stop_if = stop_below_magnitude(0.01)

    assert not stop_if(0.0, -0.5)
    assert not stop_if(0.0, 0.01)
    assert stop_if(0.0, 0.005)
    assert stop_if(0.0, -0.005)


def test_invalid_stop_conditions_are_rejected() -> None:
    """Verify that empty value ranges and negative thresholds are rejected."""
    with pytest.raises(ValueError):
        stop_outside_range(1.0, 1.0)
    with pytest.raises(ValueError):
        stop_below_magnitude(-1.0)


def test_sample_decaying_response() -> None:
    """Verify that an exponential tail is sampled until it decays below the threshold."""
    # Arrange: A response decaying by a factor e every unit of time, peaking after x = 0
    def response(x: float) -> float:
        return math.exp(-x)

    threshold = math.exp(-4.5)

    # Act: Sample in steps of 1 until the response drops below the threshold
    sampled = SampledFunction.extended(
        response,
        0.0,
        1.0,
        stop_below_magnitude(threshold),
        n_subsamples=2,
    )

    # Assert: The value at x = 5 stops the range, whose upper bound is x = 4
    assert sampled.size == 4
    assert sampled.upper == pytest.approx(4.0)
    assert sampled.value(3, 1) == pytest.approx(math.exp(-3.5))
