"""
Shared helpers for environments: action validation, observation clamping
and a few 2-D vector operations used by the particle simulations.
"""

import math
from typing import Optional, Sequence

import numpy as np

from .errors import InvalidActionError

X_AXIS = np.array([1.0, 0.0])


def validate_action(action, target_length: int) -> np.ndarray:
    """
    Check an action vector and return it as a float64 array.

    Args:
        action: Any 1-D sequence (list, numpy array, CPU torch tensor)
        target_length: Required number of components

    Returns:
        The action as a flat float64 numpy array

    Raises:
        InvalidActionError: Not a 1-D vector, wrong length, or a component
            outside [-1, 1]
    """
    try:
        values = np.asarray(action, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidActionError(f"Invalid action: not numeric ({action!r})") from e
    if values.ndim != 1:
        raise InvalidActionError(
            f"Invalid action: expected a 1-D vector, got shape {values.shape}"
        )
    if values.shape[0] != target_length:
        raise InvalidActionError(
            f"Invalid action: length mismatch (expected {target_length}, got {values.shape[0]})"
        )
    # NaN fails both comparisons, so test the accepted range instead
    in_range = (values >= -1.0) & (values <= 1.0)
    if not np.all(in_range):
        raise InvalidActionError(f"Invalid action: out of range -1 to 1 ({values.tolist()})")
    return values


def clamp_all(*values: float) -> np.ndarray:
    """Clamp every value to [-1, 1]."""
    return np.clip(np.array(values, dtype=np.float64), -1.0, 1.0)


def vec2(x: float, y: float) -> np.ndarray:
    return np.array([x, y], dtype=np.float64)


def length(v: np.ndarray) -> float:
    return float(math.hypot(v[0], v[1]))


def unit_vector(v: np.ndarray, fallback: Optional[Sequence[float]] = None) -> np.ndarray:
    """
    Normalise a 2-D vector.

    A zero-length vector has no direction: it maps to `fallback`, or to the
    zero vector when no fallback is given.
    """
    n = length(v)
    if n == 0.0:
        if fallback is None:
            return np.zeros(2)
        return np.array(fallback, dtype=np.float64)
    return v / n


def rotated(v: np.ndarray, angle: float) -> np.ndarray:
    """Rotate a 2-D vector counter-clockwise by `angle` radians."""
    c, s = math.cos(angle), math.sin(angle)
    return vec2(v[0] * c - v[1] * s, v[0] * s + v[1] * c)
