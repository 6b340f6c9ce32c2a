"""
Ball-Push environment.

Two Verlet particles in a circular arena; the agent pushes the ball to the centre.
"""

from .ballpush_env import BallPushEnv, BallPushSettings

__all__ = ["BallPushEnv", "BallPushSettings"]
