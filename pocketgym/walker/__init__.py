"""
Walker environment.

Biped on motorised revolute joints. The rigid-body engine sits behind
`PhysicsWorld`; `PymunkWorld` is the bundled backend.
"""

from .physics import PhysicsWorld
from .pymunk_world import PymunkWorld
from .walker_env import Box, Player, WalkerEnv, WalkerSettings

__all__ = ["PhysicsWorld", "PymunkWorld", "Box", "Player", "WalkerEnv", "WalkerSettings"]
