"""Define functions for exporting sampled functions to YAML."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import yaml

if TYPE_CHECKING:
    from pathlib import Path

    from signal_utils.sampled_function import SampledFunction


def output_samples_to_yaml(sampled: SampledFunction) -> str:
    """Convert the grid and the samples of the given sampled function into a YAML string.

    :param sampled: Sampled function to be exported
    :return: String representation of the sampled function in YAML
    """
    yaml_data = {"sampled_function": sampled.to_yaml_dict()}
    return yaml.dump(yaml_data, sort_keys=True, default_flow_style=None)


def output_yaml_data_to_path(data: dict[str, Any], yaml_path: Path) -> bool:
    """Output the given dictionary of YAML data to the given path.

    :param data: Dictionary of YAML data to be output to file
    :param yaml_path: Path to the created YAML file
    :return: True if output succeeded, else False
    """
    yaml_string = yaml.dump(data, sort_keys=True, default_flow_style=None)

    with yaml_path.open(mode="w") as yaml_file:
        yaml_file.write(yaml_string)

    return yaml_path.exists()
