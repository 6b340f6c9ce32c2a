"""
YAML configuration for environment settings records.

A file holds either the fields of one settings record:

    boundary_radius: 40
    agent_drag: 2.0

or several records keyed by environment name:

    BallPush:
      boundary_radius: 40
    CartPole:
      fail_angle: 1.2

Missing fields keep their defaults.
"""

import dataclasses
import logging
from pathlib import Path
from typing import Any, Dict, Type, TypeVar, Union

import yaml

from .errors import InvalidSettingsError

logger = logging.getLogger(__name__)

S = TypeVar("S")


def _convert_field(field: dataclasses.Field, value: Any) -> Any:
    """
    Convert one YAML value to the declared field type.

    YAML 1.1 reads exponent floats without a dot ('5e-1') as strings, so
    float fields also accept numeric strings. bool is an int subclass and is
    never accepted as a number.
    """
    if field.type is bool:
        if not isinstance(value, bool):
            raise InvalidSettingsError(f"{field.name} must be true or false, got {value!r}")
        return value
    if field.type is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidSettingsError(f"{field.name} must be an integer, got {value!r}")
        return value
    if field.type is float:
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise InvalidSettingsError(f"{field.name} must be a number, got {value!r}")
        try:
            return float(value)
        except ValueError:
            raise InvalidSettingsError(f"{field.name} must be a number, got {value!r}") from None
    return value


def settings_from_dict(settings_cls: Type[S], values: Dict[str, Any]) -> S:
    """Build a settings record, rejecting unknown keys and mistyped values."""
    fields = {f.name: f for f in dataclasses.fields(settings_cls)}
    unknown = sorted(set(values) - set(fields))
    if unknown:
        raise InvalidSettingsError(
            f"Unknown {settings_cls.__name__} field(s): {', '.join(unknown)}"
        )
    converted = {name: _convert_field(fields[name], value) for name, value in values.items()}
    return settings_cls(**converted)


def load_settings(path: Union[str, Path], settings_cls: Type[S]) -> S:
    """
    Load a settings record from a YAML file.

    Args:
        path: YAML file
        settings_cls: Settings dataclass to build (e.g. BallPushSettings)

    Returns:
        Settings instance
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise InvalidSettingsError(f"{path}: expected a mapping, got {type(data).__name__}")

    env_name = getattr(settings_cls, "ENV_NAME", None)
    if env_name is not None and env_name in data:
        data = data[env_name] or {}

    logger.debug("Loaded %s from %s: %s", settings_cls.__name__, path, data)
    return settings_from_dict(settings_cls, data)


def settings_to_dict(settings) -> Dict[str, Any]:
    return dataclasses.asdict(settings)


def dump_settings(settings, path: Union[str, Path]):
    """Write a settings record to YAML, keyed by its environment name."""
    data = settings_to_dict(settings)
    env_name = getattr(settings, "ENV_NAME", None)
    if env_name is not None:
        data = {env_name: data}
    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False)
