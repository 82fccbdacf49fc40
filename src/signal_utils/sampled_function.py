"""Define a class storing a function sampled on a regular grid at several phases."""

from __future__ import annotations

import math
from typing import Any, Callable

import numpy as np

Function = Callable[[float], float]  # Real function of one real variable
StopCondition = Callable[[float, float], bool]  # Predicate (x, f(x)) ending an open-ended range

GRID_TOLERANCE = 1e-9  # Relative distance (in steps) within which a point is on the grid


class SampledFunction:
    """A function precomputed on a regular grid, with phase-shifted copies of that grid.

    The domain [lower, upper) is split into `size` steps of `step_size` each. Every step is
    further split into `n_subsamples` substeps; subsample `s` is the same grid shifted by
    `s * substep_size`, so sample `i` of subsample `s` holds `f(lower + s*substep + i*step)`.

    The table is computed once, on construction, and cannot be modified afterwards.
    """

    def __init__(
        self,
        function: Function,
        lower: float,
        upper: float,
        n_samples: int,
        n_subsamples: int = 1,
        dtype: type = np.float64,
    ) -> None:
        """Sample the function with a fixed number of samples covering [lower, upper).

        :param function: Function to be sampled
        :param lower: Lower bound of the sampled range (included)
        :param upper: Upper bound of the sampled range (excluded), larger than `lower`
        :param n_samples: Number of steps covering the range (positive)
        :param n_subsamples: Number of phase-shifted grids per step (positive)
        :param dtype: NumPy real type of the stored values
        :raises ValueError: If the range or the sample counts are invalid
        """
        if not (math.isfinite(lower) and math.isfinite(upper)):
            error_msg = f"Cannot sample over a non-finite range [{lower}, {upper})."
            raise ValueError(error_msg)
        if upper <= lower:
            error_msg = f"Upper bound {upper} must be larger than lower bound {lower}."
            raise ValueError(error_msg)
        _check_count("samples", n_samples)
        _check_count("subsamples", n_subsamples)

        self._lower = float(lower)
        self._n_subsamples = int(n_subsamples)
        self._step_size = (upper - lower) / n_samples
        self._substep_size = self._step_size / self._n_subsamples

        samples = np.empty((self._n_subsamples, int(n_samples)), dtype=dtype)
        for s in range(self._n_subsamples):
            for i in range(int(n_samples)):
                samples[s, i] = function(self.position(i, s))

        self._samples = samples
        self._samples.flags.writeable = False

    @classmethod
    def extended(
        cls,
        function: Function,
        lower: float,
        step_size: float,
        stop_if: StopCondition,
        n_subsamples: int = 1,
        at_least: float = 0.0,
        dtype: type = np.float64,
        max_samples: int | None = None,
    ) -> SampledFunction:
        """Sample the function from `lower` onward, one step at a time, until told to stop.

        Before a step is accepted, the function is evaluated at the right edge of that step and
        `stop_if(x, y)` is checked there. When it returns True, the step is rejected and that
        evaluation is discarded, so the range ends where the predicate last held False. The check
        is skipped until the right edge is at least `at_least` away from `lower`.

        Only the first subsample drives the growth; the other subsamples are then filled with
        the same number of samples.

        :param function: Function to be sampled
        :param lower: Lower bound of the sampled range (included)
        :param step_size: Size of each step (positive)
        :param stop_if: Predicate `(x, y) -> bool` telling when the range should end
        :param n_subsamples: Number of phase-shifted grids per step (positive)
        :param at_least: Minimum extent of the range before `stop_if` is honored
        :param dtype: NumPy real type of the stored values
        :param max_samples: Optional limit on the number of samples (None for no limit)
        :return: Constructed SampledFunction instance
        :raises ValueError: If the lower bound, step size, extent or subsample count is invalid
        :raises RuntimeError: If `max_samples` steps were accepted without `stop_if` firing
        """
        if not math.isfinite(lower):
            error_msg = f"Cannot sample from a non-finite lower bound ({lower})."
            raise ValueError(error_msg)
        if not (step_size > 0 and math.isfinite(step_size)):
            error_msg = f"Step size must be positive, got {step_size}."
            raise ValueError(error_msg)
        if not math.isfinite(at_least):
            error_msg = f"Minimum range extent must be finite, got {at_least}."
            raise ValueError(error_msg)
        _check_count("subsamples", n_subsamples)

        sampled = cls.__new__(cls)
        sampled._lower = float(lower)
        sampled._n_subsamples = int(n_subsamples)
        sampled._step_size = float(step_size)
        sampled._substep_size = sampled._step_size / sampled._n_subsamples

        # Grow the first subsample; `y` always holds the value at the left edge of step `i`
        first_samples: list[float] = []
        i = 0
        y = function(sampled.position(0))
        while True:
            next_x = sampled.position(i + 1)
            next_y = function(next_x)
            if (next_x - sampled._lower >= at_least) and stop_if(next_x, next_y):
                break

            if max_samples is not None and i >= max_samples:
                error_msg = f"Stop condition still unmet after {max_samples} samples."
                raise RuntimeError(error_msg)

            first_samples.append(y)
            y = next_y
            i += 1

        n_samples = len(first_samples)
        samples = np.empty((sampled._n_subsamples, n_samples), dtype=dtype)
        samples[0, :] = first_samples
        for s in range(1, sampled._n_subsamples):
            for i in range(n_samples):
                samples[s, i] = function(sampled.position(i, s))

        sampled._samples = samples
        sampled._samples.flags.writeable = False
        return sampled

    @property
    def size(self) -> int:
        """Return the number of samples (steps) in each subsample."""
        return self._samples.shape[1]

    def __len__(self) -> int:
        return self.size

    @property
    def n_subsamples(self) -> int:
        """Return the number of phase-shifted grids per step."""
        return self._n_subsamples

    @property
    def lower(self) -> float:
        """Return the lower bound of the sampled range."""
        return self._lower

    @property
    def upper(self) -> float:
        """Return the upper bound of the sampled range (excluded from the range)."""
        return self._lower + self.size * self._step_size

    @property
    def range_size(self) -> float:
        """Return the extent of the sampled range."""
        return self.upper - self.lower

    @property
    def step_size(self) -> float:
        return self._step_size

    @property
    def substep_size(self) -> float:
        return self._substep_size

    @property
    def dtype(self) -> np.dtype:
        return self._samples.dtype

    def subsample(self, s: int) -> np.ndarray:
        """Return the (read-only) sequence of samples in the specified subsample.

        :param s: Index of the subsample, in [0, n_subsamples)
        :return: NumPy array of `size` function values
        :raises IndexError: If `s` is not a valid subsample index
        """
        self._check_subsample_index(s)
        return self._samples[s]

    def value(self, i: int, s: int = 0) -> float:
        """Return the function value at the given step of the given subsample.

        :param i: Index of the step, in [0, size)
        :param s: Index of the subsample, in [0, n_subsamples)
        :return: Stored function value
        :raises IndexError: If either index is out of range
        """
        self._check_subsample_index(s)
        if not self.is_valid_step_index(i):
            error_msg = f"Step index {i} out of range for {self.size} samples."
            raise IndexError(error_msg)
        return self._samples[s, i].item()

    def position(self, i: int, s: int = 0) -> float:
        """Return the point of the domain where the given sample is evaluated.

        Note: Any step index is accepted, including ones outside [0, size).
        """
        return self._lower + s * self._substep_size + i * self._step_size

    def positions(self, s: int = 0) -> np.ndarray:
        """Return the points of the domain where the samples of subsample `s` are evaluated."""
        self._check_subsample_index(s)
        return self._lower + s * self._substep_size + np.arange(self.size) * self._step_size

    def step_index(self, x: float, s: int = 0) -> int:
        """Return the index of the step of subsample `s` which contains `x`.

        The step index is rounded toward negative infinity, so a point 1.25 steps before the
        start of the subsample is in step -2. The result may not be a valid step index.

        :param x: Point of the domain
        :param s: Index of the subsample whose grid is used
        :return: Index of the last sample of subsample `s` at or before `x`
        """
        steps = (x - self._lower - s * self._substep_size) / self._step_size

        # Points on the grid may land a rounding error below their step
        nearest = round(steps)
        tolerance = GRID_TOLERANCE * max(1.0, abs(steps))
        if math.isclose(steps, nearest, rel_tol=0.0, abs_tol=tolerance):
            return nearest
        return math.floor(steps)

    def is_valid_step_index(self, i: int) -> bool:
        """Check whether the given step index points to a stored sample."""
        return 0 <= i < self.size

    def closest_subsample_index(self, x: float) -> int:
        """Return the subsample whose grid passes closest to `x`.

        Distances are measured modulo the step size. A point exactly halfway between two
        subsample grids is assigned to the lower of the two (the last subsample and the
        next step's first subsample count as adjacent, the last subsample being the lower).

        :param x: Point of the domain
        :return: Index of the subsample, in [0, n_subsamples)
        """
        substeps = (x - self._lower) / self._substep_size
        return math.ceil(substeps - 0.5) % self._n_subsamples

    def to_yaml_dict(self) -> dict[str, Any]:
        """Convert the grid description and the sample table into a YAML-friendly dictionary."""
        return {
            "lower": self.lower,
            "upper": self.upper,
            "n_samples": self.size,
            "n_subsamples": self.n_subsamples,
            "step_size": self.step_size,
            "substep_size": self.substep_size,
            "subsamples": self._samples.tolist(),
        }

    def dump(self, indent: str = "", first_indent: str | None = None) -> str:
        """Describe the sampling and list all the samples in a human-readable text.

        :param indent: Prefix of every line but the first
        :param first_indent: Prefix of the first line (defaults to `indent`)
        :return: Multi-line description of the sampled function
        """
        if first_indent is None:
            first_indent = indent

        lines = [
            f"{first_indent}Function sampled in range [ {self.lower} ; {self.upper} ] "
            f"(extent: {self.range_size}) with {self.size} samples "
            f"(step size: {self.step_size}) and {self.n_subsamples} subsamples "
            f"(substep size: {self.substep_size}):",
        ]
        for s in range(self.n_subsamples):
            lines.append(f"{indent}  <subsample #{s}>:")
            for i, (x, y) in enumerate(zip(self.positions(s), self._samples[s])):
                lines.append(f"{indent}    [{i}] f({x}) = {y}")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"SampledFunction(lower={self.lower}, upper={self.upper}, "
            f"size={self.size}, n_subsamples={self.n_subsamples})"
        )

    def _check_subsample_index(self, s: int) -> None:
        if not (0 <= s < self._n_subsamples):
            error_msg = f"Subsample index {s} out of range for {self._n_subsamples} subsamples."
            raise IndexError(error_msg)


def _check_count(what: str, count: int) -> None:
    if isinstance(count, bool) or not isinstance(count, (int, np.integer)):
        error_msg = f"Number of {what} must be an integer, got {count!r}."
        raise ValueError(error_msg)
    if count < 1:
        error_msg = f"Number of {what} must be positive, got {count}."
        raise ValueError(error_msg)
