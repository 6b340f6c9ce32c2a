"""
Environment contract shared by every pocketgym simulation.

A driver constructs an environment once, then cycles through
reset -> step* -> terminated. Termination never destroys the instance; the
next reset reinitialises the physical state and the episode flags while the
settings record stays untouched.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, NamedTuple, Optional, Tuple

import numpy as np

from .errors import InvalidCategoricalActionError, UnsupportedCapabilityError


class StepResult(NamedTuple):
    """Output of `step`. Unpacks as (obs, reward, terminated, info)."""

    observation: np.ndarray
    reward: float
    terminated: bool
    info: Dict[str, Any]


class ResetResult(NamedTuple):
    """Output of `reset`. Unpacks as (obs, info)."""

    observation: np.ndarray
    info: Dict[str, Any]


class BaseEnv(ABC):
    """
    Abstract environment.

    Subclasses set `obs_dim` and `act_dim` and implement the simulation.
    Environments with a discrete action set list it in `CATEGORICAL_ACTIONS`;
    those that leave it as None only support continuous control.

    Attributes:
        rng: numpy Generator used for every randomised initial condition
        obs_dim: Observation vector length
        act_dim: Action vector length
    """

    CATEGORICAL_ACTIONS: Optional[Tuple[Tuple[float, ...], ...]] = None

    obs_dim: int
    act_dim: int

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng()

    def seed(self, value: Optional[int] = None):
        """Replace the random generator with one seeded from `value`."""
        self.rng = np.random.default_rng(value)

    @abstractmethod
    def name(self) -> str:
        """Stable identifier, e.g. 'CartPole'."""

    @abstractmethod
    def render_size(self) -> Tuple[float, float]:
        """Logical canvas (width, height) a renderer should use."""

    @abstractmethod
    def reset(self) -> ResetResult:
        """Reinitialise the simulation with randomised starting conditions."""

    @abstractmethod
    def step(self, action) -> StepResult:
        """Advance the simulation exactly one fixed timestep."""

    def action_length(self) -> int:
        return self.act_dim

    def observation_length(self) -> int:
        return self.obs_dim

    def num_categorical_actions(self) -> int:
        if self.CATEGORICAL_ACTIONS is None:
            raise UnsupportedCapabilityError(f"{self.name()} does not support categorical actions")
        return len(self.CATEGORICAL_ACTIONS)

    def convert_categorical_action(self, index: int) -> np.ndarray:
        """
        Map a discrete choice to a continuous action vector.

        Raises:
            UnsupportedCapabilityError: Environment is continuous-only
            InvalidCategoricalActionError: Index out of range
        """
        n = self.num_categorical_actions()
        if not 0 <= index < n:
            raise InvalidCategoricalActionError(
                f"Invalid categorical action {index} for {self.name()} (expected 0..{n - 1})"
            )
        return np.array(self.CATEGORICAL_ACTIONS[index], dtype=np.float64)
