"""
Cart-Pole environment.

Closed-form explicit update of a cart on a normalised track with a hinged pole.
"""

from .cartpole_env import CartPoleEnv, CartPoleSettings

__all__ = ["CartPoleEnv", "CartPoleSettings"]
