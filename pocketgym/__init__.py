"""
pocketgym: small deterministic reinforcement-learning environments.

Environments:
- CartPole: analytic cart-pole kernel
- BallPush: two Verlet particles in a circular arena
- Walker Environment: biped on an external rigid-body engine

All share the BaseEnv contract (name, reset, step, shape queries,
categorical-action mapping, render size).
"""

from typing import Dict, Optional, Type

import numpy as np

from .base_env import BaseEnv, ResetResult, StepResult
from .ballpush import BallPushEnv, BallPushSettings
from .cartpole import CartPoleEnv, CartPoleSettings
from .errors import (
    GymError,
    InvalidActionError,
    InvalidCategoricalActionError,
    InvalidSettingsError,
    UnsupportedCapabilityError,
)
from .verlet import VerletParticle
from .walker import WalkerEnv, WalkerSettings

ENV_REGISTRY: Dict[str, Type[BaseEnv]] = {
    "CartPole": CartPoleEnv,
    "BallPush": BallPushEnv,
    "Walker Environment": WalkerEnv,
}


def make_env(name: str, settings=None, rng: Optional[np.random.Generator] = None) -> BaseEnv:
    """
    Construct a registered environment by name.

    Args:
        name: Environment name, e.g. 'BallPush'
        settings: Settings record for that environment (defaults if None)
        rng: Random generator (fresh generator if None)
    """
    try:
        env_cls = ENV_REGISTRY[name]
    except KeyError:
        raise KeyError(f"Unknown environment {name!r}; known: {sorted(ENV_REGISTRY)}") from None
    return env_cls(settings=settings, rng=rng)


__all__ = [
    "BaseEnv", "StepResult", "ResetResult",
    "CartPoleEnv", "CartPoleSettings",
    "BallPushEnv", "BallPushSettings",
    "WalkerEnv", "WalkerSettings",
    "VerletParticle",
    "GymError", "InvalidActionError", "InvalidCategoricalActionError",
    "InvalidSettingsError", "UnsupportedCapabilityError",
    "ENV_REGISTRY", "make_env",
]
