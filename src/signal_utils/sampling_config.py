"""Define a dataclass describing how a function should be sampled."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from signal_utils.filesystem.load_from_yaml import load_yaml_into_dict
from signal_utils.logging import log_error, log_info
from signal_utils.sampled_function import Function, SampledFunction, StopCondition

if TYPE_CHECKING:
    from pathlib import Path

FIXED_RANGE_KEYS = {"lower", "upper", "n_samples", "n_subsamples"}
EXTENDED_RANGE_KEYS = {"lower", "step_size", "at_least", "n_subsamples", "max_samples"}


@dataclass(frozen=True)
class SamplingConfig:
    """Settings of a sampling grid, either over a fixed range or over an open-ended one.

    A fixed range is given by `upper` and `n_samples`; an open-ended range is given by
    `step_size` (and optionally `at_least` and `max_samples`), and needs a stop condition.
    """

    lower: float
    n_subsamples: int = 1
    upper: float | None = None  # Upper bound of a fixed range
    n_samples: int | None = None  # Number of samples of a fixed range
    step_size: float | None = None  # Step size of an open-ended range
    at_least: float = 0.0  # Minimum extent of an open-ended range
    max_samples: int | None = None  # Limit on the length of an open-ended range

    def __post_init__(self) -> None:
        """Verify that the settings describe exactly one kind of range."""
        fixed = self.upper is not None and self.n_samples is not None
        extended = self.step_size is not None
        mixed = extended and (self.upper is not None or self.n_samples is not None)
        if fixed == extended or mixed:
            error_msg = (
                "Sampling settings need either 'upper' and 'n_samples' (fixed range) "
                f"or 'step_size' (open-ended range), got: {self}"
            )
            raise ValueError(error_msg)

    @property
    def is_extended(self) -> bool:
        """Check whether the settings describe an open-ended range."""
        return self.step_size is not None

    @classmethod
    def from_yaml_dict(cls, data: dict[str, Any]) -> SamplingConfig:
        """Construct a SamplingConfig from data imported from YAML.

        :param data: Dictionary mapping sampling setting names to their values
        :return: Constructed SamplingConfig instance
        :raises ValueError: If keys are missing or unknown, or the settings are inconsistent
        """
        if "lower" not in data:
            raise ValueError("Sampling settings need a 'lower' bound.")

        unknown_keys = set(data) - FIXED_RANGE_KEYS - EXTENDED_RANGE_KEYS
        if unknown_keys:
            error_msg = f"Unknown sampling settings: {sorted(unknown_keys)}"
            raise ValueError(error_msg)

        for key in ("n_samples", "n_subsamples", "max_samples"):
            count = data.get(key)
            if count is not None and (isinstance(count, bool) or not isinstance(count, int)):
                error_msg = f"Sampling setting '{key}' must be an integer, got {count!r}."
                raise ValueError(error_msg)

        def optional(key: str, kind: type) -> Any:
            return None if data.get(key) is None else kind(data[key])

        return cls(
            lower=float(data["lower"]),
            n_subsamples=data.get("n_subsamples", 1),
            upper=optional("upper", float),
            n_samples=data.get("n_samples"),
            step_size=optional("step_size", float),
            at_least=float(data.get("at_least", 0.0)),
            max_samples=data.get("max_samples"),
        )

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> SamplingConfig:
        """Construct a SamplingConfig from the 'sampling' key of a YAML file.

        :param yaml_path: Path to a YAML file containing sampling settings
        :return: Constructed SamplingConfig instance
        :raises ValueError: If the YAML file holds no valid sampling settings
        """
        yaml_data = load_yaml_into_dict(yaml_path)
        sampling_data = yaml_data.get("sampling", {})

        if not sampling_data:
            error_msg = f"Expected to find the key 'sampling' in YAML file: {yaml_path}"
            log_error(error_msg)
            raise ValueError(error_msg)

        return cls.from_yaml_dict(sampling_data)

    def to_yaml_dict(self) -> dict[str, Any]:
        """Convert the settings into a dictionary that from_yaml_dict() accepts."""
        data: dict[str, Any] = {"lower": self.lower, "n_subsamples": self.n_subsamples}
        if self.is_extended:
            data["step_size"] = self.step_size
            data["at_least"] = self.at_least
            if self.max_samples is not None:
                data["max_samples"] = self.max_samples
        else:
            data["upper"] = self.upper
            data["n_samples"] = self.n_samples
        return data

    def build(self, function: Function, stop_if: StopCondition | None = None) -> SampledFunction:
        """Sample the given function according to these settings.

        :param function: Function to be sampled
        :param stop_if: Predicate ending an open-ended range (ignored for a fixed range)
        :return: Constructed SampledFunction instance
        :raises ValueError: If an open-ended range is requested without a stop condition
        """
        if not self.is_extended:
            sampled = SampledFunction(
                function,
                lower=self.lower,
                upper=self.upper,
                n_samples=self.n_samples,
                n_subsamples=self.n_subsamples,
            )
        else:
            if stop_if is None:
                raise ValueError("An open-ended sampling range requires a stop condition.")
            sampled = SampledFunction.extended(
                function,
                lower=self.lower,
                step_size=self.step_size,
                stop_if=stop_if,
                n_subsamples=self.n_subsamples,
                at_least=self.at_least,
                max_samples=self.max_samples,
            )

        log_info(f"Sampled function: {sampled}")
        return sampled
