"""Loads analyzer settings from a YAML file.

This module defines the `Config` dataclass, the single typed container for the
settings the command line and the analyzer need, and `load_config`, which
reads them from a `config.yaml` file and fills in defaults for anything the
file leaves out.
"""
from __future__ import annotations
from dataclasses import dataclass
import yaml

DEFAULT_MAX_AFFIX_LENGTH = 4


@dataclass
class Config:
    """
    Typed settings for feature extraction.

    Attributes:
        mapping_prefix: Directory holding `feature.mapping[.gz]` and
                        `label.mapping`.
        compress_features: When true, the feature mapping is saved as
                           `feature.mapping.gz`.
        show_progress: Enables tqdm progress bars for mapping load/save and
                       corpus analysis.
        max_affix_length: Longest prefix/suffix emitted by the default
                          current-word observation function.
    """
    mapping_prefix: str = "model"
    compress_features: bool = True
    show_progress: bool = True
    max_affix_length: int = DEFAULT_MAX_AFFIX_LENGTH


def _get_bool(y: dict, key: str, default: bool, path: str) -> bool:
    value = y.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"{key} in {path} must be true or false, got {value!r}.")
    return value


def load_config(path: str = "config.yaml") -> Config:
    """
    Reads a YAML configuration file into a `Config`.

    Keys missing from the file keep their defaults; unknown keys are ignored.
    An empty file yields the default configuration.

    Args:
        path: The path to the YAML file.

    Returns:
        A populated `Config` object.

    Raises:
        FileNotFoundError: If the file cannot be found.
        ValueError: If the file is not valid YAML or a value has the wrong type.
        TypeError: If the root of the YAML document is not a mapping.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            y = yaml.safe_load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found at: {path}")
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML file at {path}: {e}")

    if y is None:
        y = {}
    if not isinstance(y, dict):
        raise TypeError(f"Configuration file {path} must be a dictionary.")

    defaults = Config()
    try:
        max_affix_length = int(y.get("max_affix_length", defaults.max_affix_length))
    except (TypeError, ValueError):
        raise ValueError(f"max_affix_length in {path} must be an integer.")
    if max_affix_length < 0:
        raise ValueError(f"max_affix_length in {path} must not be negative.")

    return Config(
        mapping_prefix=str(y.get("mapping_prefix", defaults.mapping_prefix)),
        compress_features=_get_bool(y, "compress_features", defaults.compress_features, path),
        show_progress=_get_bool(y, "show_progress", defaults.show_progress, path),
        max_affix_length=max_affix_length,
    )
